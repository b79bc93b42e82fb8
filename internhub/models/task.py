"""Tasks assigned to interns, with individual progress per assignee."""
import datetime
from enum import Enum
from typing import Optional

from beanie import Document
from pydantic import BaseModel, Field


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    DONE = "done"


class TaskAssignment(BaseModel):
    intern_id: str
    status: TaskStatus = TaskStatus.PENDING
    started_at: Optional[datetime.datetime] = None
    completed_at: Optional[datetime.datetime] = None
    intern_notes: Optional[str] = None
    assigned_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)


class Task(Document):
    title: str
    description: Optional[str] = None
    due_date: Optional[datetime.date] = None
    status: TaskStatus = TaskStatus.PENDING
    assigned_by: Optional[str] = None  # user_id
    specialty_id: Optional[str] = None
    assignments: list[TaskAssignment] = Field(default_factory=list)
    created_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)
    updated_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)

    class Settings:
        name = "tasks"
        use_state_management = True

    def assignment_for(self, intern_id: str) -> Optional[TaskAssignment]:
        for assignment in self.assignments:
            if assignment.intern_id == intern_id:
                return assignment
        return None

    @property
    def intern_ids(self) -> list[str]:
        return [a.intern_id for a in self.assignments]


class TaskCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    due_date: Optional[datetime.date] = None
    status: TaskStatus = TaskStatus.PENDING
    specialty_id: Optional[str] = None
    intern_ids: Optional[list[str]] = None


class TaskUpdate(TaskCreate):
    status: Optional[TaskStatus] = None


class InternTaskStatusUpdate(BaseModel):
    status: TaskStatus
    notes: Optional[str] = Field(default=None, max_length=500)
