"""Domain error hierarchy.

Services raise these instead of HTTP exceptions so they stay usable outside a
request. Each class carries the HTTP status it maps to; `main.py` registers a
single handler that renders `{"message": ..., **extra}`.
"""
from typing import Any, Optional


class InternHubError(Exception):
    """Base exception for all domain errors."""

    status_code = 500

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_dict(self) -> dict:
        return {"message": self.message, **self.extra}


class ValidationFailed(InternHubError):
    """Input was well-formed JSON but violates a business rule."""

    status_code = 422

    def __init__(self, message: str, errors: Optional[dict[str, list[str]]] = None):
        super().__init__(message, errors=errors or {})


class NotFoundError(InternHubError):
    status_code = 404


class AuthenticationError(InternHubError):
    status_code = 401


class AuthorizationError(InternHubError):
    status_code = 403


class ConflictError(InternHubError):
    status_code = 409


class DuplicateEntryError(ConflictError):
    """A logbook entry already exists for this intern and date.

    `existing` is the stored entry, serialized for the client.
    """

    def __init__(self, existing: dict):
        super().__init__("A logbook entry already exists for this date.", existing_logbook=existing)
        self.existing = existing


class InsufficientEntriesError(InternHubError):
    """A weekly sheet was requested for a week without all five weekdays."""

    status_code = 422

    def __init__(self, week_number: int, missing_days: list[str]):
        super().__init__(
            f"Not enough entries for week {week_number}",
            week_number=week_number,
            missing_days=missing_days,
        )
        self.week_number = week_number
        self.missing_days = missing_days


class StorageError(InternHubError):
    status_code = 500
