"""JWT-based stateless authentication."""
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from internhub.api.deps import (
    CurrentUser,
    create_access_token,
    create_refresh_token,
    decode_token,
)
from internhub.models.user import User, UserCreate, UserRole
from internhub.services import accounts
from internhub.services.lookups import safe_object_id, serialize, serialize_user

router = APIRouter()
admin_router = APIRouter()


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: dict


class LoginRequest(BaseModel):
    email: str
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


def _tokens(user: User) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token(str(user.id), user.role.value),
        refresh_token=create_refresh_token(str(user.id)),
        user=serialize_user(user),
    )


@router.post("/login", response_model=TokenResponse)
async def login(req: LoginRequest):
    user = await accounts.authenticate(req.email, req.password)
    return _tokens(user)


@router.post("/register", response_model=TokenResponse, status_code=201)
async def register(data: UserCreate):
    user = await accounts.register_intern(data)
    return _tokens(user)


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(req: RefreshRequest):
    user_id = decode_token(req.refresh_token, "refresh")
    oid = safe_object_id(user_id)
    user = await User.get(oid) if oid else None
    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail="User not found or inactive")
    return _tokens(user)


@router.get("/me")
async def me(user: CurrentUser):
    profile = await accounts.profile_for(user)
    return {**serialize_user(user), "profile": serialize(profile) if profile else None}


@admin_router.post("/login", response_model=TokenResponse)
async def admin_login(req: LoginRequest):
    user = await accounts.authenticate(req.email, req.password, required_role=UserRole.ADMIN)
    return _tokens(user)
