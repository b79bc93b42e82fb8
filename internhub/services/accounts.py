"""Accounts: authentication, self-registration and admin-managed users."""
import logging
import secrets
import string
from datetime import datetime
from typing import Optional

from internhub import rbac
from internhub.api.deps import get_password_hash, verify_password
from internhub.errors import AuthenticationError, AuthorizationError, ConflictError, ValidationFailed
from internhub.models.profile import AdminUserCreate, Intern, Supervisor
from internhub.models.specialty import Specialty
from internhub.models.user import User, UserCreate, UserRole, UserUpdate
from internhub.services.activity import record_activity, recent_activities
from internhub.services.lookups import get_or_404, serialize, serialize_user
from internhub.services.mailer import send_credentials_email
from internhub.services.matric import next_matric_number

logger = logging.getLogger(__name__)

PASSWORD_LENGTH = 12
PASSWORD_SPECIALS = "!@#$%^&*"


def generate_password(length: int = PASSWORD_LENGTH) -> str:
    """Random password with at least one upper, lower, digit and special character."""
    pools = [string.ascii_uppercase, string.ascii_lowercase, string.digits, PASSWORD_SPECIALS]
    chars = [secrets.choice(pool) for pool in pools]
    alphabet = "".join(pools)
    chars += [secrets.choice(alphabet) for _ in range(length - len(chars))]
    secrets.SystemRandom().shuffle(chars)
    return "".join(chars)


async def authenticate(email: str, password: str, required_role: Optional[UserRole] = None) -> User:
    """Check credentials, stamp last_login and record the login."""
    user = await User.find_one(User.email == email.lower())
    if not user or not verify_password(password, user.hashed_password):
        raise AuthenticationError("Invalid credentials")
    if not user.is_active:
        raise AuthorizationError("Account is disabled")
    if required_role and user.role != required_role:
        raise AuthorizationError(f"Unauthorized: Not an {required_role.value}")
    user.last_login = datetime.utcnow()
    await user.save()
    await record_activity(str(user.id), "User logged in")
    return user


async def _ensure_email_free(email: str, exclude_id: Optional[str] = None) -> None:
    existing = await User.find_one(User.email == email.lower())
    if existing and str(existing.id) != exclude_id:
        raise ValidationFailed("Email already registered", {"email": ["The email has already been taken."]})


async def register_intern(payload: UserCreate) -> User:
    if payload.password != payload.password_confirmation:
        raise ValidationFailed(
            "Passwords do not match", {"password": ["The password confirmation does not match."]}
        )
    await _ensure_email_free(payload.email)
    user = User(
        email=payload.email.lower(),
        hashed_password=get_password_hash(payload.password),
        role=UserRole.INTERN,
        full_name=payload.full_name.strip(),
    )
    await user.insert()
    await Intern(user_id=str(user.id)).insert()
    await record_activity(str(user.id), "Registered")
    return user


async def create_user(principal: User, payload: AdminUserCreate) -> dict:
    """Create a user with a generated password and role profile, then email the credentials."""
    rbac.authorize(principal, "users.manage")
    await _ensure_email_free(payload.email)

    if payload.specialty_id:
        await get_or_404(Specialty, payload.specialty_id, "Specialty")

    matric_number = None
    if payload.role == UserRole.INTERN:
        matric_number = await next_matric_number(payload.hort_number, payload.specialty_id)

    password = generate_password()
    user = User(
        email=payload.email.lower(),
        hashed_password=get_password_hash(password),
        role=payload.role,
        full_name=payload.full_name.strip(),
        phone=payload.phone,
        location=payload.location,
        bio=payload.bio,
        permissions=payload.permissions if payload.role == UserRole.ADMIN else [],
    )
    await user.insert()

    profile = None
    if payload.role == UserRole.INTERN:
        profile = Intern(
            user_id=str(user.id),
            specialty_id=payload.specialty_id,
            institution=payload.institution,
            hort_number=payload.hort_number,
            matric_number=matric_number,
            start_date=payload.start_date,
            end_date=payload.end_date,
            level=payload.level,
            department=payload.department,
            option=payload.option,
        )
        await profile.insert()
    elif payload.role == UserRole.SUPERVISOR:
        profile = Supervisor(user_id=str(user.id), specialty_id=payload.specialty_id)
        await profile.insert()

    email_sent = True
    try:
        await send_credentials_email(user.email, user.full_name, password, user.role.value, matric_number)
    except Exception as e:
        email_sent = False
        logger.error(f"Failed to send credentials email to {user.email}: {e}")

    await record_activity(str(principal.id), f"Created new {user.role.value}: {user.full_name}")
    return {
        "user": serialize_user(user),
        "profile": serialize(profile) if profile else None,
        "matric_number": matric_number,
        "email_sent": email_sent,
    }


async def list_users(principal: User, role: Optional[UserRole] = None) -> list[User]:
    rbac.authorize(principal, "users.view")
    query = {"role": role.value} if role else {}
    return await User.find(query).sort(-User.created_at).to_list()


async def profile_for(user: User) -> Optional[Intern | Supervisor]:
    if user.role == UserRole.INTERN:
        return await Intern.find_one(Intern.user_id == str(user.id))
    if user.role == UserRole.SUPERVISOR:
        return await Supervisor.find_one(Supervisor.user_id == str(user.id))
    return None


async def user_detail(principal: User, user_id: str) -> dict:
    if str(principal.id) != user_id:
        rbac.authorize(principal, "users.view")
    user = await get_or_404(User, user_id, "User")
    profile = await profile_for(user)
    activities = await recent_activities(str(user.id), limit=10)
    return {
        **serialize_user(user),
        "profile": serialize(profile) if profile else None,
        "preferences": user.preferences.model_dump(),
        "recent_activities": [serialize(a) for a in activities],
    }


async def update_user(principal: User, user_id: str, payload: UserUpdate) -> User:
    rbac.authorize(principal, "users.manage")
    user = await get_or_404(User, user_id, "User")
    changes = payload.model_dump(exclude_unset=True)

    if changes.get("email"):
        await _ensure_email_free(changes["email"], exclude_id=str(user.id))
        changes["email"] = changes["email"].lower()

    institution = changes.pop("institution", None)
    specialty_id = changes.pop("specialty_id", None)
    for field, value in changes.items():
        if value is not None:
            setattr(user, field, value)
    user.updated_at = datetime.utcnow()
    await user.save()

    profile = await profile_for(user)
    if profile and (institution or specialty_id):
        if specialty_id:
            await get_or_404(Specialty, specialty_id, "Specialty")
            profile.specialty_id = specialty_id
        if institution and isinstance(profile, Intern):
            profile.institution = institution
        profile.updated_at = datetime.utcnow()
        await profile.save()

    await record_activity(str(principal.id), f"Updated user: {user.full_name}")
    return user


async def toggle_status(principal: User, user_id: str) -> User:
    rbac.authorize(principal, "users.manage")
    user = await get_or_404(User, user_id, "User")
    if user.id == principal.id:
        raise ConflictError("You cannot deactivate your own account")
    user.is_active = not user.is_active
    user.updated_at = datetime.utcnow()
    await user.save()
    state = "Activated" if user.is_active else "Deactivated"
    await record_activity(str(principal.id), f"{state} user: {user.full_name}")
    return user


async def register_device_token(user: User, token: str) -> None:
    user.device_token = token
    user.updated_at = datetime.utcnow()
    await user.save()
