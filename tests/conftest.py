import datetime
import os

os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ["STORAGE_BACKEND"] = "local"
os.environ["FIREBASE_CREDENTIALS_PATH"] = ""
os.environ["SMTP_USER"] = ""

import pytest
from beanie import init_beanie
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from internhub.api.deps import create_access_token, get_password_hash
from internhub.config import settings
from internhub.db import DOCUMENT_MODELS
from internhub.models import AdminPermission, Intern, Specialty, Supervisor, User, UserRole

PASSWORD = "Secret123!"


@pytest.fixture
async def db():
    client = AsyncMongoMockClient()
    await init_beanie(database=client.get_database("internhub_test"), document_models=DOCUMENT_MODELS)
    yield client


@pytest.fixture
def storage(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "storage_backend", "local")
    monkeypatch.setattr(settings, "storage_root", str(tmp_path))
    return tmp_path


@pytest.fixture
async def client(db, storage):
    from internhub.main import app

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(str(user.id), user.role.value)}"}


async def make_user(email: str, role: UserRole, full_name: str = "Test User", **kwargs) -> User:
    user = User(
        email=email,
        hashed_password=get_password_hash(PASSWORD),
        role=role,
        full_name=full_name,
        **kwargs,
    )
    await user.insert()
    return user


@pytest.fixture
async def specialty(db):
    s = Specialty(name="Software Engineering", category="Engineering")
    await s.insert()
    return s


@pytest.fixture
async def admin(db):
    return await make_user("admin@example.com", UserRole.ADMIN, "Ada Admin", permissions=list(AdminPermission))


@pytest.fixture
async def supervisor(db, specialty):
    user = await make_user("sup@example.com", UserRole.SUPERVISOR, "Sam Supervisor", device_token="sup-token")
    await Supervisor(user_id=str(user.id), specialty_id=str(specialty.id)).insert()
    return user


@pytest.fixture
async def intern_user(db, specialty):
    user = await make_user("intern@example.com", UserRole.INTERN, "Ivy Intern", device_token="intern-token")
    await Intern(
        user_id=str(user.id),
        specialty_id=str(specialty.id),
        institution="State University",
        hort_number="500",
        matric_number="TT26H500SO001",
        start_date=datetime.date(2026, 1, 5),
        end_date=datetime.date(2026, 6, 30),
        level="400",
        department="Computer Science",
        option="Software",
    ).insert()
    return user


@pytest.fixture
async def intern(intern_user):
    return await Intern.find_one(Intern.user_id == str(intern_user.id))
