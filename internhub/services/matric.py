"""Matriculation numbers: {prefix}{yy}H{hort}{SP}{serial:03d}."""
from datetime import datetime
from typing import Optional

from internhub.config import settings
from internhub.errors import NotFoundError
from internhub.models.profile import Intern
from internhub.services.lookups import specialty_name


def format_matric_number(prefix: str, year: int, hort_number: str, specialty: str, serial: int) -> str:
    """E.g. ("TT", 2026, "500", "Software", 1) -> "TT26H500SO001"."""
    return f"{prefix}{year % 100:02d}H{hort_number}{specialty[:2].upper()}{serial:03d}"


async def next_matric_number(hort_number: str, specialty_id: str, now: Optional[datetime] = None) -> str:
    """Number for a new intern; serial counts this year's interns of the same hort and specialty."""
    now = now or datetime.utcnow()
    name = await specialty_name(specialty_id)
    if not name:
        raise NotFoundError("Specialty not found")
    year_start = datetime(now.year, 1, 1)
    existing = await Intern.find(
        Intern.hort_number == hort_number,
        Intern.specialty_id == specialty_id,
        Intern.created_at >= year_start,
    ).count()
    return format_matric_number(settings.matric_prefix, now.year, hort_number, name, existing + 1)
