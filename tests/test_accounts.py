import datetime
import string
from unittest.mock import AsyncMock, patch

import pytest
from pydantic import ValidationError

from internhub.errors import AuthorizationError
from internhub.models import AdminUserCreate, Intern, Specialty, Supervisor, User, UserActivity, UserRole
from internhub.services import accounts
from internhub.services.matric import format_matric_number, next_matric_number

from conftest import PASSWORD, auth_headers

TOMORROW = datetime.date.today() + datetime.timedelta(days=1)


def intern_payload(specialty_id: str, **overrides) -> AdminUserCreate:
    data = {
        "full_name": "New Intern",
        "email": "new.intern@example.com",
        "role": "intern",
        "specialty_id": specialty_id,
        "institution": "Tech Institute",
        "hort_number": "500",
        "start_date": TOMORROW,
        "end_date": TOMORROW + datetime.timedelta(days=90),
    }
    data.update(overrides)
    return AdminUserCreate(**data)


class TestPasswordGeneration:
    @pytest.mark.parametrize("_", range(20))
    def test_has_every_character_class(self, _):
        password = accounts.generate_password()
        assert len(password) == 12
        assert any(c in string.ascii_uppercase for c in password)
        assert any(c in string.ascii_lowercase for c in password)
        assert any(c in string.digits for c in password)
        assert any(c in accounts.PASSWORD_SPECIALS for c in password)


class TestMatricNumber:
    def test_format(self):
        assert format_matric_number("TT", 2026, "500", "Software Engineering", 1) == "TT26H500SO001"
        assert format_matric_number("TT", 2031, "A12", "data science", 42) == "TT31HA12DA042"

    async def test_serial_counts_same_hort_and_specialty_this_year(self, db, specialty):
        sid = str(specialty.id)
        other = Specialty(name="Design", category="Creative")
        await other.insert()
        await Intern(user_id="u1", specialty_id=sid, hort_number="500").insert()
        await Intern(user_id="u2", specialty_id=sid, hort_number="500").insert()
        await Intern(user_id="u3", specialty_id=sid, hort_number="600").insert()
        await Intern(user_id="u4", specialty_id=str(other.id), hort_number="500").insert()
        await Intern(
            user_id="u5", specialty_id=sid, hort_number="500", created_at=datetime.datetime(2020, 5, 1)
        ).insert()

        number = await next_matric_number("500", sid)

        year = datetime.datetime.utcnow().year % 100
        assert number == f"TT{year:02d}H500SO003"


class TestAdminUserCreateValidation:
    def test_intern_needs_institution(self):
        with pytest.raises(ValidationError):
            intern_payload("abc", institution="  ")

    def test_hort_must_be_upper_alphanumeric(self):
        with pytest.raises(ValidationError):
            intern_payload("abc", hort_number="h-5")

    def test_start_date_not_in_past(self):
        with pytest.raises(ValidationError):
            intern_payload("abc", start_date=datetime.date.today() - datetime.timedelta(days=1))

    def test_end_after_start(self):
        with pytest.raises(ValidationError):
            intern_payload("abc", end_date=TOMORROW)

    def test_admin_needs_permissions(self):
        with pytest.raises(ValidationError):
            AdminUserCreate(full_name="A", email="a@example.com", role="admin")


class TestCreateUser:
    async def test_creates_intern_with_matric_and_emails_credentials(self, admin, specialty):
        with patch("internhub.services.accounts.send_credentials_email", new=AsyncMock()) as send:
            result = await accounts.create_user(admin, intern_payload(str(specialty.id)))

        year = datetime.datetime.utcnow().year % 100
        assert result["matric_number"] == f"TT{year:02d}H500SO001"
        assert result["email_sent"] is True
        assert "hashed_password" not in result["user"]
        intern = await Intern.find_one(Intern.matric_number == result["matric_number"])
        assert intern.institution == "Tech Institute"
        password = send.await_args.args[2]
        user = await accounts.authenticate("new.intern@example.com", password)
        assert user.role == UserRole.INTERN
        actions = [a.action for a in await UserActivity.find(UserActivity.user_id == str(admin.id)).to_list()]
        assert "Created new intern: New Intern" in actions

    async def test_email_failure_is_not_fatal(self, admin, specialty):
        with patch(
            "internhub.services.accounts.send_credentials_email", new=AsyncMock(side_effect=OSError("smtp down"))
        ):
            result = await accounts.create_user(
                admin,
                AdminUserCreate(
                    full_name="Sup", email="sup2@example.com", role="supervisor", specialty_id=str(specialty.id)
                ),
            )
        assert result["email_sent"] is False
        assert await Supervisor.find(Supervisor.specialty_id == str(specialty.id)).count() == 1

    async def test_only_admins(self, supervisor, specialty):
        with pytest.raises(AuthorizationError):
            await accounts.create_user(supervisor, intern_payload(str(specialty.id)))


class TestAuthApi:
    async def test_login_updates_last_login(self, client, intern_user):
        resp = await client.post("/api/auth/login", json={"email": "intern@example.com", "password": PASSWORD})
        assert resp.status_code == 200
        assert resp.json()["access_token"]
        user = await User.get(intern_user.id)
        assert user.last_login is not None

    async def test_bad_password(self, client, intern_user):
        resp = await client.post("/api/auth/login", json={"email": "intern@example.com", "password": "nope"})
        assert resp.status_code == 401

    async def test_admin_login_rejects_non_admin(self, client, intern_user):
        resp = await client.post("/api/admin/login", json={"email": "intern@example.com", "password": PASSWORD})
        assert resp.status_code == 403

    async def test_register_creates_intern(self, client):
        resp = await client.post(
            "/api/auth/register",
            json={
                "email": "self@example.com",
                "password": "abcdef",
                "password_confirmation": "abcdef",
                "full_name": "Self Starter",
            },
        )
        assert resp.status_code == 201
        assert resp.json()["user"]["role"] == "intern"

    async def test_refresh(self, client, intern_user):
        login = await client.post("/api/auth/login", json={"email": "intern@example.com", "password": PASSWORD})
        resp = await client.post("/api/auth/refresh", json={"refresh_token": login.json()["refresh_token"]})
        assert resp.status_code == 200

    async def test_access_token_is_not_a_refresh_token(self, client, intern_user):
        login = await client.post("/api/auth/login", json={"email": "intern@example.com", "password": PASSWORD})
        resp = await client.post("/api/auth/refresh", json={"refresh_token": login.json()["access_token"]})
        assert resp.status_code == 401

    async def test_toggle_status(self, client, admin, intern_user):
        resp = await client.patch(f"/api/users/{intern_user.id}/toggle-status", headers=auth_headers(admin))
        assert resp.json()["is_active"] is False
        me = await client.get("/api/auth/me", headers=auth_headers(intern_user))
        assert me.status_code == 401

    async def test_show_user_includes_recent_activity(self, client, admin, intern_user):
        await client.post("/api/auth/login", json={"email": "intern@example.com", "password": PASSWORD})
        resp = await client.get(f"/api/users/{intern_user.id}", headers=auth_headers(admin))
        data = resp.json()
        assert data["profile"]["matric_number"] == "TT26H500SO001"
        assert data["recent_activities"][0]["action"] == "User logged in"
