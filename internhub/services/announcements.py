"""Announcement targeting, visibility and serialization helpers."""
from __future__ import annotations

import logging
from datetime import datetime

from internhub import rbac
from internhub.errors import AuthorizationError
from internhub.models.announcement import (
    Announcement,
    AnnouncementCreate,
    AnnouncementTarget,
    AnnouncementUpdate,
)
from internhub.models.specialty import Specialty
from internhub.models.user import User, UserRole
from internhub.services import fcm
from internhub.services.lookups import (
    get_or_404,
    intern_for_user,
    serialize,
    supervisor_for_user,
    user_name_map,
    users_in_specialty,
)

logger = logging.getLogger(__name__)


async def recipients_for(announcement: Announcement) -> list[User]:
    """Active users addressed by the announcement's target."""
    if announcement.target == AnnouncementTarget.ALL:
        return await User.find({"is_active": True}).to_list()
    if announcement.target == AnnouncementTarget.SPECIALTY:
        interns = await users_in_specialty(announcement.specialty_id, UserRole.INTERN)
        supervisors = await users_in_specialty(announcement.specialty_id, UserRole.SUPERVISOR)
        return interns + supervisors
    return await User.find({"role": announcement.target.value, "is_active": True}).to_list()


def visible_targets(role: UserRole, specialty_id: str | None) -> dict:
    """Mongo filter for announcements a role (and its specialty) may read."""
    clauses: list[dict] = [{"target": AnnouncementTarget.ALL.value}, {"target": role.value}]
    if specialty_id:
        clauses.append({"target": AnnouncementTarget.SPECIALTY.value, "specialty_id": specialty_id})
    return {"$or": clauses}


async def serialize_announcements(items: list[Announcement]) -> list[dict]:
    names = await user_name_map([a.created_by for a in items])
    result = []
    for item in items:
        data = serialize(item)
        data["author_name"] = names.get(item.created_by, "Unknown")
        result.append(data)
    return result


async def create_announcement(principal: User, payload: AnnouncementCreate) -> tuple[Announcement, dict]:
    rbac.authorize(principal, "announcements.manage")
    if payload.target == AnnouncementTarget.SPECIALTY:
        await get_or_404(Specialty, payload.specialty_id, "Specialty")
    announcement = Announcement(
        title=payload.title.strip(),
        content=payload.content,
        target=payload.target,
        specialty_id=payload.specialty_id if payload.target == AnnouncementTarget.SPECIALTY else None,
        priority=payload.priority,
        created_by=str(principal.id),
    )
    await announcement.insert()

    delivery = {"sent": 0, "failed": 0, "no_token": 0}
    try:
        recipients = [u for u in await recipients_for(announcement) if u.id != principal.id]
        body = announcement.content[:100] + "..." if len(announcement.content) > 100 else announcement.content
        delivery = await fcm.notify_users(
            recipients,
            announcement.title,
            body,
            {"type": "announcement", "id": str(announcement.id), "priority": announcement.priority.value},
        )
        logger.info(f"Announcement {announcement.id} push: {delivery}")
    except Exception as e:
        logger.error(f"Announcement push failed for {announcement.id}: {e}")
    return announcement, delivery


async def list_announcements(principal: User, mine: bool = False) -> list[Announcement]:
    rbac.authorize(principal, "announcements.view")
    if mine:
        query: dict = {"created_by": str(principal.id)}
    elif principal.role == UserRole.ADMIN:
        query = {}
    elif principal.role == UserRole.INTERN:
        intern = await intern_for_user(principal)
        query = visible_targets(UserRole.INTERN, intern.specialty_id)
    else:
        supervisor = await supervisor_for_user(principal)
        query = visible_targets(UserRole.SUPERVISOR, supervisor.specialty_id)
    return await Announcement.find(query).sort(-Announcement.created_at).to_list()


async def _editable(principal: User, announcement_id: str) -> Announcement:
    rbac.authorize(principal, "announcements.manage")
    announcement = await get_or_404(Announcement, announcement_id, "Announcement")
    if principal.role != UserRole.ADMIN and announcement.created_by != str(principal.id):
        raise AuthorizationError("Only the creator or an admin can change this announcement.")
    return announcement


async def update_announcement(principal: User, announcement_id: str, payload: AnnouncementUpdate) -> Announcement:
    announcement = await _editable(principal, announcement_id)
    changes = payload.model_dump(exclude_unset=True)
    for field, value in changes.items():
        if value is not None:
            setattr(announcement, field, value)
    if announcement.target == AnnouncementTarget.SPECIALTY:
        await get_or_404(Specialty, announcement.specialty_id, "Specialty")
    else:
        announcement.specialty_id = None
    announcement.updated_at = datetime.utcnow()
    await announcement.save()
    return announcement


async def delete_announcement(principal: User, announcement_id: str) -> None:
    announcement = await _editable(principal, announcement_id)
    await announcement.delete()
