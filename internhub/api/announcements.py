"""Announcements with role/specialty targeting and push on publish."""
from fastapi import APIRouter

from internhub.api.deps import CurrentUser, StaffOnly
from internhub.models.announcement import AnnouncementCreate, AnnouncementUpdate
from internhub.services import announcements
from internhub.services.announcements import serialize_announcements

router = APIRouter()


@router.get("/")
async def list_announcements(user: CurrentUser):
    """Everything the caller may read: all for admins, otherwise by target."""
    return await serialize_announcements(await announcements.list_announcements(user))


@router.get("/mine")
async def my_announcements(user: StaffOnly):
    return await serialize_announcements(await announcements.list_announcements(user, mine=True))


@router.post("/", status_code=201)
async def create_announcement(data: AnnouncementCreate, user: StaffOnly):
    announcement, delivery = await announcements.create_announcement(user, data)
    items = await serialize_announcements([announcement])
    return {"message": "Announcement created", "announcement": items[0], "notifications": delivery}


@router.put("/{announcement_id}")
async def update_announcement(announcement_id: str, data: AnnouncementUpdate, user: StaffOnly):
    announcement = await announcements.update_announcement(user, announcement_id, data)
    return (await serialize_announcements([announcement]))[0]


@router.delete("/{announcement_id}")
async def delete_announcement(announcement_id: str, user: StaffOnly):
    await announcements.delete_announcement(user, announcement_id)
    return {"message": "Announcement deleted"}
