"""MongoDB connection and Beanie document registration."""
from beanie import init_beanie
from motor.motor_asyncio import AsyncIOMotorClient

from internhub.config import settings
from internhub.models import (
    User,
    Intern,
    Supervisor,
    Specialty,
    UserActivity,
    LogbookEntry,
    LogbookReview,
    Task,
    Comment,
    Attachment,
    Announcement,
)

DOCUMENT_MODELS = [
    User,
    Intern,
    Supervisor,
    Specialty,
    UserActivity,
    LogbookEntry,
    LogbookReview,
    Task,
    Comment,
    Attachment,
    Announcement,
]

_client = None


async def db_startup():
    """Connect to MongoDB and initialize Beanie ODM."""
    global _client
    _client = AsyncIOMotorClient(settings.mongodb_url)
    await init_beanie(
        database=_client[settings.mongodb_db_name],
        document_models=DOCUMENT_MODELS,
    )


async def db_shutdown():
    """Close MongoDB connection."""
    global _client
    if _client:
        _client.close()
        _client = None
