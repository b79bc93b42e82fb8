"""RBAC: Admins, Supervisors, Interns."""
from datetime import datetime
from enum import Enum
from typing import Optional

from beanie import Document, Indexed
from pydantic import BaseModel, EmailStr, Field


class UserRole(str, Enum):
    ADMIN = "admin"
    SUPERVISOR = "supervisor"
    INTERN = "intern"


class AdminPermission(str, Enum):
    USER_MANAGEMENT = "user_management"
    CONTENT_MODERATION = "content_moderation"
    ANALYTICS = "analytics"
    SYSTEM_SETTINGS = "system_settings"


class UserPreferences(BaseModel):
    email_notifications: bool = True
    profile_public: bool = True
    two_factor_auth: bool = False


class User(Document):
    """User document for RBAC across Admin, Supervisor, Intern."""

    email: Indexed(EmailStr, unique=True)
    hashed_password: str
    role: UserRole
    full_name: str
    phone: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    avatar: Optional[str] = None
    is_active: bool = True
    last_login: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    # Admin-specific
    permissions: list[AdminPermission] = Field(default_factory=list)

    preferences: UserPreferences = Field(default_factory=UserPreferences)

    # FCM registration token for push notifications
    device_token: Optional[str] = None

    class Settings:
        name = "users"
        use_state_management = True


class UserCreate(BaseModel):
    """Self-registration payload; always creates an intern account."""

    email: EmailStr
    password: str = Field(min_length=6)
    password_confirmation: str
    full_name: str = Field(min_length=1, max_length=255)


class UserUpdate(BaseModel):
    full_name: Optional[str] = Field(default=None, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=20)
    location: Optional[str] = Field(default=None, max_length=255)
    bio: Optional[str] = None
    avatar: Optional[str] = None
    is_active: Optional[bool] = None
    institution: Optional[str] = Field(default=None, max_length=255)
    specialty_id: Optional[str] = None
