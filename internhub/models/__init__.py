"""Beanie document models and Pydantic schemas."""
from internhub.models.user import User, UserRole, AdminPermission, UserPreferences, UserCreate, UserUpdate
from internhub.models.profile import Intern, Supervisor, AdminUserCreate
from internhub.models.specialty import Specialty, SpecialtyStatus, SpecialtyCreate
from internhub.models.activity import UserActivity
from internhub.models.logbook import (
    LogbookEntry,
    LogbookStatus,
    LogbookReview,
    ReviewStatus,
    LogbookEntryCreate,
    LogbookEntryUpdate,
    LogbookReviewCreate,
)
from internhub.models.task import Task, TaskAssignment, TaskStatus, TaskCreate, TaskUpdate, InternTaskStatusUpdate
from internhub.models.comment import Comment, CommentCreate, CommentUpdate
from internhub.models.attachment import Attachment, AttachmentUpdate, ALLOWED_EXTENSIONS
from internhub.models.announcement import (
    Announcement,
    AnnouncementTarget,
    AnnouncementPriority,
    AnnouncementCreate,
    AnnouncementUpdate,
)

__all__ = [
    "User",
    "UserRole",
    "AdminPermission",
    "UserPreferences",
    "UserCreate",
    "UserUpdate",
    "Intern",
    "Supervisor",
    "AdminUserCreate",
    "Specialty",
    "SpecialtyStatus",
    "SpecialtyCreate",
    "UserActivity",
    "LogbookEntry",
    "LogbookStatus",
    "LogbookReview",
    "ReviewStatus",
    "LogbookEntryCreate",
    "LogbookEntryUpdate",
    "LogbookReviewCreate",
    "Task",
    "TaskAssignment",
    "TaskStatus",
    "TaskCreate",
    "TaskUpdate",
    "InternTaskStatusUpdate",
    "Comment",
    "CommentCreate",
    "CommentUpdate",
    "Attachment",
    "AttachmentUpdate",
    "ALLOWED_EXTENSIONS",
    "Announcement",
    "AnnouncementTarget",
    "AnnouncementPriority",
    "AnnouncementCreate",
    "AnnouncementUpdate",
]
