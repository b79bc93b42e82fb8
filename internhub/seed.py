"""Seed default admin user if not present."""
import logging

from internhub.api.deps import get_password_hash
from internhub.config import settings
from internhub.models.user import AdminPermission, User, UserRole

logger = logging.getLogger(__name__)


async def seed_admin():
    existing = await User.find_one(User.email == settings.admin_email.lower())
    if existing:
        return
    await User(
        email=settings.admin_email.lower(),
        hashed_password=get_password_hash(settings.admin_password),
        role=UserRole.ADMIN,
        full_name=settings.admin_full_name,
        permissions=list(AdminPermission),
    ).insert()
    logger.info(f"Seeded admin account {settings.admin_email}")
