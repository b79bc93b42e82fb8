"""Internship specialties (tracks) shared by interns, supervisors and tasks."""
from datetime import datetime
from enum import Enum
from typing import Optional

from beanie import Document, Indexed
from pydantic import BaseModel, Field


class SpecialtyStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class Specialty(Document):
    name: Indexed(str, unique=True)
    category: str
    status: SpecialtyStatus = SpecialtyStatus.ACTIVE
    description: Optional[str] = None
    requirements: Optional[str] = None
    skills: list[str] = Field(default_factory=list)
    partner_companies: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "specialties"
        use_state_management = True


class SpecialtyCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    category: str = Field(min_length=1, max_length=255)
    status: SpecialtyStatus
    description: Optional[str] = None
    requirements: Optional[str] = None
    skills: list[str] = Field(default_factory=list)
    partner_companies: list[str] = Field(default_factory=list)
