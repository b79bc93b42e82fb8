"""Id parsing, document lookup and serialization helpers shared by services."""
from __future__ import annotations

from typing import Optional, Type, TypeVar

from beanie import Document, PydanticObjectId

from internhub.errors import NotFoundError
from internhub.models.profile import Intern, Supervisor
from internhub.models.specialty import Specialty
from internhub.models.user import User, UserRole

DocT = TypeVar("DocT", bound=Document)


def safe_object_id(value: str | None) -> PydanticObjectId | None:
    if not value:
        return None
    try:
        return PydanticObjectId(value)
    except Exception:
        return None


async def get_or_404(model: Type[DocT], doc_id: str | None, label: str) -> DocT:
    oid = safe_object_id(doc_id)
    doc = await model.get(oid) if oid else None
    if not doc:
        raise NotFoundError(f"{label} not found")
    return doc


def serialize(doc: Document) -> dict:
    data = doc.model_dump(mode="json", exclude={"revision_id"})
    data["id"] = str(doc.id) if doc.id else None
    return data


def serialize_user(user: User) -> dict:
    data = serialize(user)
    data.pop("hashed_password", None)
    data.pop("device_token", None)
    return data


async def intern_for_user(user: User) -> Intern:
    intern = await Intern.find_one(Intern.user_id == str(user.id))
    if not intern:
        raise NotFoundError("Intern profile not found")
    return intern


async def supervisor_for_user(user: User) -> Supervisor:
    supervisor = await Supervisor.find_one(Supervisor.user_id == str(user.id))
    if not supervisor:
        raise NotFoundError("Supervisor profile not found")
    return supervisor


async def user_name_map(user_ids: list[str]) -> dict[str, str]:
    oids = [oid for oid in (safe_object_id(uid) for uid in set(user_ids)) if oid]
    if not oids:
        return {}
    users = await User.find({"_id": {"$in": oids}}).to_list()
    return {str(u.id): u.full_name for u in users}


async def specialty_name(specialty_id: Optional[str]) -> Optional[str]:
    oid = safe_object_id(specialty_id)
    specialty = await Specialty.get(oid) if oid else None
    return specialty.name if specialty else None


async def users_in_specialty(specialty_id: Optional[str], role: UserRole) -> list[User]:
    """Active users of `role` whose intern/supervisor profile is in the specialty."""
    if not specialty_id:
        return []
    profile_model = Intern if role == UserRole.INTERN else Supervisor
    profiles = await profile_model.find(profile_model.specialty_id == specialty_id).to_list()
    oids = [oid for oid in (safe_object_id(p.user_id) for p in profiles) if oid]
    if not oids:
        return []
    return await User.find({"_id": {"$in": oids}, "is_active": True}).to_list()


async def user_for_profile(profile: Intern | Supervisor) -> Optional[User]:
    oid = safe_object_id(profile.user_id)
    return await User.get(oid) if oid else None


async def resolve_intern(intern_ref: Optional[str]) -> Intern:
    """Intern by profile id, or by the id of its user."""
    oid = safe_object_id(intern_ref)
    intern = await Intern.get(oid) if oid else None
    if not intern and intern_ref:
        intern = await Intern.find_one(Intern.user_id == intern_ref)
    if not intern:
        raise NotFoundError("Intern not found")
    return intern
