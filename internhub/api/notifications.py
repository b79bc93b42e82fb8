"""Device token registration and direct push sends."""
from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from internhub.api.deps import AdminOnly, CurrentUser
from internhub.models.user import User
from internhub.services import accounts, fcm
from internhub.services.lookups import get_or_404, safe_object_id

router = APIRouter()


class DeviceTokenRequest(BaseModel):
    token: str = Field(min_length=1)


class SendRequest(BaseModel):
    user_id: str
    title: str = Field(min_length=1, max_length=255)
    body: str = Field(min_length=1)
    data: Optional[dict[str, str]] = None


class BulkSendRequest(BaseModel):
    user_ids: list[str] = Field(min_length=1)
    title: str = Field(min_length=1, max_length=255)
    body: str = Field(min_length=1)
    data: Optional[dict[str, str]] = None


@router.post("/device-token")
async def register_device_token(req: DeviceTokenRequest, user: CurrentUser):
    await accounts.register_device_token(user, req.token)
    return {"status": "ok"}


@router.post("/send")
async def send_notification(req: SendRequest, admin: AdminOnly):
    target = await get_or_404(User, req.user_id, "User")
    if not target.device_token:
        raise HTTPException(status_code=400, detail="User has no registered device token")
    sent = await fcm.send_to_user(target, req.title, req.body, req.data)
    if not sent:
        raise HTTPException(status_code=502, detail="Notification could not be delivered")
    return {"message": "Notification sent"}


@router.post("/send-bulk")
async def send_bulk(req: BulkSendRequest, admin: AdminOnly):
    oids = [oid for oid in (safe_object_id(uid) for uid in req.user_ids) if oid]
    users = await User.find({"_id": {"$in": oids}}).to_list()
    result = await fcm.notify_users(users, req.title, req.body, req.data)
    return {"message": "Bulk notification processed", **result}
