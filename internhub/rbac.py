"""Closed role -> permission registry.

Every workflow calls `authorize(principal, permission)` once before touching
data. Ownership and specialty scoping are checked by the workflow itself.
"""
from __future__ import annotations

from typing import Literal

from internhub.errors import AuthorizationError
from internhub.models.user import User, UserRole

Permission = Literal[
    "users.manage",
    "users.view",
    "specialties.manage",
    "specialties.view",
    "tasks.manage",
    "tasks.view",
    "tasks.progress",
    "comments.write",
    "attachments.write",
    "announcements.manage",
    "announcements.view",
    "logbooks.submit",
    "logbooks.view_all",
    "logbooks.view_own",
    "logbooks.edit",
    "logbooks.review",
    "logbooks.delete",
    "logbooks.maintain",
    "logbooks.sheets",
    "logbooks.generate",
    "logbooks.export",
    "notifications.send",
    "supervisor.dashboard",
]

ROLE_PERMISSIONS: dict[UserRole, frozenset[str]] = {
    UserRole.ADMIN: frozenset(
        {
            "users.manage",
            "users.view",
            "specialties.manage",
            "specialties.view",
            "tasks.manage",
            "tasks.view",
            "comments.write",
            "attachments.write",
            "announcements.manage",
            "announcements.view",
            "logbooks.submit",
            "logbooks.view_all",
            "logbooks.edit",
            "logbooks.review",
            "logbooks.delete",
            "logbooks.maintain",
            "logbooks.sheets",
            "logbooks.generate",
            "logbooks.export",
            "notifications.send",
        }
    ),
    UserRole.SUPERVISOR: frozenset(
        {
            "users.view",
            "specialties.view",
            "tasks.manage",
            "tasks.view",
            "comments.write",
            "attachments.write",
            "announcements.manage",
            "announcements.view",
            "logbooks.view_all",
            "logbooks.review",
            "logbooks.sheets",
            "logbooks.export",
            "supervisor.dashboard",
        }
    ),
    UserRole.INTERN: frozenset(
        {
            "specialties.view",
            "tasks.view",
            "tasks.progress",
            "comments.write",
            "attachments.write",
            "announcements.view",
            "logbooks.submit",
            "logbooks.view_own",
            "logbooks.edit",
            "logbooks.delete",
            "logbooks.sheets",
            "logbooks.generate",
        }
    ),
}


def has_permission(role: UserRole, permission: Permission) -> bool:
    return permission in ROLE_PERMISSIONS.get(role, frozenset())


def authorize(principal: User, permission: Permission) -> None:
    """Raise AuthorizationError unless the principal's role grants `permission`."""
    if not principal.is_active or not has_permission(principal.role, permission):
        raise AuthorizationError("You are not allowed to perform this action.")
