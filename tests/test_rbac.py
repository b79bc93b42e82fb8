import pytest

from internhub import rbac
from internhub.errors import AuthorizationError
from internhub.models import User, UserRole


class TestPermissions:
    @pytest.mark.parametrize(
        "role,permission,allowed",
        [
            (UserRole.INTERN, "logbooks.submit", True),
            (UserRole.ADMIN, "logbooks.submit", True),
            (UserRole.SUPERVISOR, "logbooks.submit", False),
            (UserRole.SUPERVISOR, "logbooks.review", True),
            (UserRole.INTERN, "logbooks.review", False),
            (UserRole.INTERN, "logbooks.view_all", False),
            (UserRole.ADMIN, "users.manage", True),
            (UserRole.SUPERVISOR, "users.manage", False),
            (UserRole.INTERN, "tasks.progress", True),
            (UserRole.SUPERVISOR, "tasks.progress", False),
            (UserRole.SUPERVISOR, "logbooks.sheets", True),
            (UserRole.SUPERVISOR, "logbooks.generate", False),
            (UserRole.INTERN, "logbooks.generate", True),
        ],
    )
    def test_table(self, role, permission, allowed):
        assert rbac.has_permission(role, permission) is allowed

    def test_every_role_is_covered(self):
        assert set(rbac.ROLE_PERMISSIONS) == set(UserRole)


@pytest.mark.usefixtures("db")
class TestAuthorize:
    async def test_denied(self):
        user = User(email="s@example.com", hashed_password="x", role=UserRole.SUPERVISOR, full_name="S")
        with pytest.raises(AuthorizationError):
            rbac.authorize(user, "logbooks.submit")

    async def test_inactive_user_denied(self):
        user = User(email="a@example.com", hashed_password="x", role=UserRole.ADMIN, full_name="A", is_active=False)
        with pytest.raises(AuthorizationError):
            rbac.authorize(user, "users.manage")

    async def test_allowed(self):
        user = User(email="a@example.com", hashed_password="x", role=UserRole.ADMIN, full_name="A")
        rbac.authorize(user, "users.manage")
