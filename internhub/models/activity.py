"""Per-user audit trail ("Logbook filled", "User logged in", ...)."""
from datetime import datetime

from beanie import Document, Indexed
from pydantic import Field


class UserActivity(Document):
    user_id: Indexed(str)
    action: str
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "user_activities"
