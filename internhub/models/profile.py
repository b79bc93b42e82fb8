"""Intern and supervisor profiles attached to a User."""
import re
from datetime import date, datetime
from typing import Optional

from beanie import Document, Indexed
from pydantic import BaseModel, EmailStr, Field, model_validator

from internhub.models.user import AdminPermission, UserRole

_HORT_RE = re.compile(r"^[A-Z0-9]+$")


class Intern(Document):
    """Intern program: specialty, cohort, matriculation number, program dates."""

    user_id: Indexed(str, unique=True)
    specialty_id: Optional[str] = None
    institution: Optional[str] = None
    hort_number: str = "500"
    matric_number: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    # Header fields of the weekly logbook sheet
    level: Optional[str] = None
    department: Optional[str] = None
    option: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "interns"
        use_state_management = True


class Supervisor(Document):
    user_id: Indexed(str, unique=True)
    specialty_id: Optional[str] = None
    department: Optional[str] = None
    position: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "supervisors"
        use_state_management = True


class AdminUserCreate(BaseModel):
    """Admin-created account; the password is generated and emailed."""

    full_name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    role: UserRole
    phone: Optional[str] = Field(default=None, max_length=20)
    location: Optional[str] = Field(default=None, max_length=255)
    bio: Optional[str] = Field(default=None, max_length=500)

    # intern / supervisor
    specialty_id: Optional[str] = None
    # intern
    institution: Optional[str] = Field(default=None, max_length=255)
    hort_number: Optional[str] = Field(default=None, max_length=10)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    level: Optional[str] = None
    department: Optional[str] = None
    option: Optional[str] = None
    # admin
    permissions: list[AdminPermission] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_role_fields(self):
        if self.role in (UserRole.INTERN, UserRole.SUPERVISOR) and not self.specialty_id:
            raise ValueError("Specialty is required for interns and supervisors.")

        if self.role == UserRole.INTERN:
            if not (self.institution or "").strip():
                raise ValueError("Institution is required for interns.")
            if not self.hort_number:
                raise ValueError("HORT number is required for interns.")
            if not _HORT_RE.match(self.hort_number):
                raise ValueError("Hort number must contain only letters and numbers")
            if not self.start_date:
                raise ValueError("Start date is required for interns.")
            if self.start_date < date.today():
                raise ValueError("Start date must be today or later.")
            if not self.end_date:
                raise ValueError("End date is required for interns.")
            if self.end_date <= self.start_date:
                raise ValueError("End date must be after the start date.")

        if self.role == UserRole.ADMIN and not self.permissions:
            raise ValueError("Permissions are required for admins.")
        return self
