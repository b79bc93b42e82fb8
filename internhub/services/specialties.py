"""Specialty CRUD."""
from datetime import datetime

from internhub import rbac
from internhub.errors import ConflictError
from internhub.models.profile import Intern, Supervisor
from internhub.models.specialty import Specialty, SpecialtyCreate
from internhub.models.user import User, UserRole
from internhub.services.activity import record_activity
from internhub.services.lookups import get_or_404, intern_for_user, supervisor_for_user


async def _ensure_name_free(name: str, exclude_id: str | None = None) -> None:
    existing = await Specialty.find_one(Specialty.name == name)
    if existing and str(existing.id) != exclude_id:
        raise ConflictError("A specialty with this name already exists")


async def list_specialties(principal: User) -> list[Specialty]:
    rbac.authorize(principal, "specialties.view")
    return await Specialty.find_all().sort(+Specialty.name).to_list()


async def create_specialty(principal: User, payload: SpecialtyCreate) -> Specialty:
    rbac.authorize(principal, "specialties.manage")
    await _ensure_name_free(payload.name)
    specialty = Specialty(**payload.model_dump())
    await specialty.insert()
    await record_activity(str(principal.id), f"Created specialty: {specialty.name}")
    return specialty


async def update_specialty(principal: User, specialty_id: str, payload: SpecialtyCreate) -> Specialty:
    rbac.authorize(principal, "specialties.manage")
    specialty = await get_or_404(Specialty, specialty_id, "Specialty")
    await _ensure_name_free(payload.name, exclude_id=str(specialty.id))
    for field, value in payload.model_dump().items():
        setattr(specialty, field, value)
    specialty.updated_at = datetime.utcnow()
    await specialty.save()
    return specialty


async def delete_specialty(principal: User, specialty_id: str) -> None:
    rbac.authorize(principal, "specialties.manage")
    specialty = await get_or_404(Specialty, specialty_id, "Specialty")
    in_use = await Intern.find(Intern.specialty_id == str(specialty.id)).count()
    in_use += await Supervisor.find(Supervisor.specialty_id == str(specialty.id)).count()
    if in_use:
        raise ConflictError("Specialty is assigned to users and cannot be deleted")
    await specialty.delete()
    await record_activity(str(principal.id), f"Deleted specialty: {specialty.name}")


async def my_specialty(principal: User) -> dict:
    """The caller's specialty with member counts."""
    if principal.role == UserRole.INTERN:
        profile = await intern_for_user(principal)
    else:
        profile = await supervisor_for_user(principal)
    specialty = await get_or_404(Specialty, profile.specialty_id, "Specialty")
    return {
        "specialty": specialty,
        "intern_count": await Intern.find(Intern.specialty_id == str(specialty.id)).count(),
        "supervisor_count": await Supervisor.find(Supervisor.specialty_id == str(specialty.id)).count(),
    }
