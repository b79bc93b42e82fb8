"""Daily logbook entries and their reviews."""
import datetime
from enum import Enum
from typing import Optional

import pymongo
from beanie import Document, Indexed
from pydantic import BaseModel, Field, field_validator
from pymongo import IndexModel


class LogbookStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    NEEDS_REVISION = "needs_revision"


class LogbookEntry(Document):
    """One intern's entry for one calendar date; (intern_id, date) is unique."""

    intern_id: Indexed(str)
    date: datetime.date
    title: str
    content: str
    hours_worked: Optional[float] = None
    tasks_completed: list[str] = Field(default_factory=list)
    challenges: Optional[str] = None
    learnings: Optional[str] = None
    next_day_plan: Optional[str] = None
    status: LogbookStatus = LogbookStatus.PENDING
    week_number: Optional[int] = None
    submitted_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)
    reviewed_at: Optional[datetime.datetime] = None
    reviewed_by: Optional[str] = None  # user_id
    created_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)
    updated_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)

    class Settings:
        name = "logbooks"
        use_state_management = True
        indexes = [
            IndexModel(
                [("intern_id", pymongo.ASCENDING), ("date", pymongo.ASCENDING)],
                unique=True,
                name="intern_date_unique",
            ),
            IndexModel(
                [("intern_id", pymongo.ASCENDING), ("week_number", pymongo.ASCENDING)],
                name="intern_week",
            ),
        ]


class ReviewStatus(str, Enum):
    APPROVED = "approved"
    NEEDS_REVISION = "needs_revision"


class LogbookReview(Document):
    logbook_id: Indexed(str)
    reviewer_id: str
    status: ReviewStatus
    feedback: Optional[str] = None
    created_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)
    updated_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)

    class Settings:
        name = "logbook_reviews"


class LogbookEntryCreate(BaseModel):
    # Admins submit on behalf of an intern; interns leave this empty
    intern_id: Optional[str] = None
    date: datetime.date
    title: str = Field(max_length=255)
    content: str
    hours_worked: Optional[float] = Field(default=None, ge=0, le=24)
    tasks_completed: list[str] = Field(default_factory=list)
    challenges: Optional[str] = None
    learnings: Optional[str] = None
    next_day_plan: Optional[str] = None

    @field_validator("title", "content")
    @classmethod
    def not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            raise ValueError("must not be blank")
        return value


class LogbookEntryUpdate(BaseModel):
    date: Optional[datetime.date] = None
    title: Optional[str] = Field(default=None, max_length=255)
    content: Optional[str] = None
    hours_worked: Optional[float] = Field(default=None, ge=0, le=24)
    tasks_completed: Optional[list[str]] = None
    challenges: Optional[str] = None
    learnings: Optional[str] = None
    next_day_plan: Optional[str] = None

    @field_validator("title", "content")
    @classmethod
    def not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            raise ValueError("must not be blank")
        return value


class LogbookReviewCreate(BaseModel):
    status: ReviewStatus
    feedback: Optional[str] = Field(default=None, max_length=2000)
