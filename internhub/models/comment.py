from datetime import datetime

from beanie import Document, Indexed
from pydantic import BaseModel, Field


class Comment(Document):
    task_id: Indexed(str)
    user_id: str
    body: str
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "comments"
        use_state_management = True


class CommentCreate(BaseModel):
    task_id: str
    body: str = Field(min_length=1, max_length=1000)


class CommentUpdate(BaseModel):
    body: str = Field(min_length=1, max_length=1000)
