"""Specialties (internship tracks)."""
from fastapi import APIRouter

from internhub.api.deps import AdminOnly, CurrentUser
from internhub.models.specialty import Specialty, SpecialtyCreate
from internhub.services import specialties
from internhub.services.lookups import get_or_404, serialize

router = APIRouter()


@router.get("/")
async def list_specialties(user: CurrentUser):
    return [serialize(s) for s in await specialties.list_specialties(user)]


@router.get("/my-specialty")
async def my_specialty(user: CurrentUser):
    result = await specialties.my_specialty(user)
    return {**result, "specialty": serialize(result["specialty"])}


@router.get("/{specialty_id}")
async def show_specialty(specialty_id: str, user: CurrentUser):
    return serialize(await get_or_404(Specialty, specialty_id, "Specialty"))


@router.post("/", status_code=201)
async def create_specialty(data: SpecialtyCreate, admin: AdminOnly):
    return serialize(await specialties.create_specialty(admin, data))


@router.put("/{specialty_id}")
async def update_specialty(specialty_id: str, data: SpecialtyCreate, admin: AdminOnly):
    return serialize(await specialties.update_specialty(admin, specialty_id, data))


@router.delete("/{specialty_id}")
async def delete_specialty(specialty_id: str, admin: AdminOnly):
    await specialties.delete_specialty(admin, specialty_id)
    return {"message": "Specialty deleted"}
