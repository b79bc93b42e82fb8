"""Firebase Cloud Messaging: push notifications to a user's registered device."""
import asyncio
import logging
from typing import Iterable, Optional

import firebase_admin
from firebase_admin import credentials, exceptions, messaging

from internhub.config import settings
from internhub.models.user import User

logger = logging.getLogger(__name__)

_firebase_app = None


def _get_firebase_app():
    global _firebase_app
    if _firebase_app is not None:
        return _firebase_app

    if not settings.firebase_credentials_path:
        logger.warning("FIREBASE_CREDENTIALS_PATH not set. FCM will be disabled.")
        return None

    try:
        cred = credentials.Certificate(settings.firebase_credentials_path)
        _firebase_app = firebase_admin.initialize_app(cred)
        return _firebase_app
    except (ValueError, OSError) as e:
        logger.error(f"Failed to initialize Firebase app: {e}")
        return None


def _stringify(data: Optional[dict]) -> dict[str, str]:
    # FCM data payload values must be strings
    return {str(k): str(v) for k, v in (data or {}).items() if v is not None}


async def send_to_user(user: User, title: str, body: str, data: Optional[dict] = None) -> bool:
    """Push one notification to `user`. Returns False when nothing was delivered.

    Tokens that FCM reports as unregistered or invalid are cleared from the user.
    """
    if not user.device_token:
        return False
    app = _get_firebase_app()
    if not app:
        return False

    message = messaging.Message(
        notification=messaging.Notification(title=title, body=body),
        data=_stringify(data),
        token=user.device_token,
    )
    try:
        await asyncio.to_thread(messaging.send, message, app=app)
    except (messaging.UnregisteredError, exceptions.InvalidArgumentError) as e:
        logger.info(f"Clearing invalid FCM token for user {user.id}: {e}")
        user.device_token = None
        await user.save()
        return False
    except exceptions.FirebaseError as e:
        logger.error(f"FCM send to user {user.id} failed: {e}")
        return False
    return True


async def notify_users(users: Iterable[User], title: str, body: str, data: Optional[dict] = None) -> dict:
    """Best-effort fan-out; counts sent, failed and users without a token."""
    result = {"sent": 0, "failed": 0, "no_token": 0}
    for user in users:
        if not user.device_token:
            result["no_token"] += 1
            continue
        if await send_to_user(user, title, body, data):
            result["sent"] += 1
        else:
            result["failed"] += 1
    return result
