"""Files uploaded against a task (submissions, briefs)."""
from datetime import datetime
from typing import Optional

from beanie import Document, Indexed
from pydantic import BaseModel, Field

ALLOWED_EXTENSIONS = {
    "pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx",
    "jpg", "jpeg", "png", "gif", "zip", "rar", "txt",
}


class Attachment(Document):
    task_id: Indexed(str)
    uploaded_by: str  # user_id
    path: str  # storage key
    original_name: str
    file_size: int
    mime_type: Optional[str] = None
    description: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "attachments"
        use_state_management = True


class AttachmentUpdate(BaseModel):
    description: Optional[str] = Field(default=None, max_length=255)
