"""User administration: creation with generated credentials, listings, status."""
from typing import Optional

from fastapi import APIRouter

from internhub.api.deps import AdminOnly, CurrentUser, StaffOnly
from internhub.models.activity import UserActivity
from internhub.models.profile import AdminUserCreate, Intern, Supervisor
from internhub.models.user import UserRole, UserUpdate
from internhub.services import accounts
from internhub.services.lookups import serialize, serialize_user

router = APIRouter()


@router.post("/", status_code=201)
async def create_user(data: AdminUserCreate, admin: AdminOnly):
    result = await accounts.create_user(admin, data)
    return {"message": "User created successfully", **result}


@router.get("/")
async def list_users(user: StaffOnly, role: Optional[UserRole] = None):
    users = await accounts.list_users(user, role)
    return [serialize_user(u) for u in users]


@router.get("/interns")
async def list_interns(user: StaffOnly):
    users = await accounts.list_users(user, UserRole.INTERN)
    profiles = {i.user_id: i for i in await Intern.find_all().to_list()}
    return [
        {**serialize_user(u), "profile": serialize(profiles[str(u.id)]) if str(u.id) in profiles else None}
        for u in users
    ]


@router.get("/supervisors")
async def list_supervisors(user: StaffOnly):
    users = await accounts.list_users(user, UserRole.SUPERVISOR)
    profiles = {s.user_id: s for s in await Supervisor.find_all().to_list()}
    return [
        {**serialize_user(u), "profile": serialize(profiles[str(u.id)]) if str(u.id) in profiles else None}
        for u in users
    ]


@router.get("/admins")
async def list_admins(admin: AdminOnly):
    return [serialize_user(u) for u in await accounts.list_users(admin, UserRole.ADMIN)]


@router.get("/activities")
async def list_activities(admin: AdminOnly, user_id: Optional[str] = None, limit: int = 100):
    query = {"user_id": user_id} if user_id else {}
    activities = await UserActivity.find(query).sort(-UserActivity.created_at).limit(limit).to_list()
    return [serialize(a) for a in activities]


@router.get("/{user_id}")
async def show_user(user_id: str, user: CurrentUser):
    return await accounts.user_detail(user, user_id)


@router.put("/{user_id}")
async def update_user(user_id: str, data: UserUpdate, admin: AdminOnly):
    updated = await accounts.update_user(admin, user_id, data)
    return serialize_user(updated)


@router.patch("/{user_id}/toggle-status")
async def toggle_status(user_id: str, admin: AdminOnly):
    updated = await accounts.toggle_status(admin, user_id)
    return {"id": str(updated.id), "is_active": updated.is_active}
