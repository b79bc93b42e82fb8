"""Announcements - FCM push on publish."""
from datetime import datetime
from enum import Enum
from typing import Optional

from beanie import Document, Indexed
from pydantic import BaseModel, Field, model_validator


class AnnouncementTarget(str, Enum):
    ALL = "all"
    INTERN = "intern"
    SUPERVISOR = "supervisor"
    SPECIALTY = "specialty"


class AnnouncementPriority(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


class Announcement(Document):
    title: str
    content: str
    target: AnnouncementTarget = AnnouncementTarget.ALL
    specialty_id: Optional[str] = None  # only for target=specialty
    priority: AnnouncementPriority = AnnouncementPriority.NORMAL
    created_by: Indexed(str)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "announcements"
        use_state_management = True


class AnnouncementCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1)
    target: AnnouncementTarget = AnnouncementTarget.ALL
    specialty_id: Optional[str] = None
    priority: AnnouncementPriority = AnnouncementPriority.NORMAL

    @model_validator(mode="after")
    def validate_target(self):
        if self.target == AnnouncementTarget.SPECIALTY and not (self.specialty_id or "").strip():
            raise ValueError("specialty_id is required when target is 'specialty'")
        return self


class AnnouncementUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    content: Optional[str] = None
    target: Optional[AnnouncementTarget] = None
    specialty_id: Optional[str] = None
    priority: Optional[AnnouncementPriority] = None
