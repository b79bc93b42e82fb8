"""Create-entry workflow for daily logbooks.

Order of effects: week number, insert, activity record, weekly sheet (only
when this entry completes the week), notifications. Steps after the insert
never undo it; a sheet failure is reported back as `pdf_error`.
"""
import logging
from typing import Optional

from pymongo.errors import DuplicateKeyError

from internhub import rbac
from internhub.errors import AuthorizationError, DuplicateEntryError, InternHubError, ValidationFailed
from internhub.models.logbook import LogbookEntry, LogbookEntryCreate
from internhub.models.profile import Intern
from internhub.models.user import User, UserRole
from internhub.services import fcm
from internhub.services.activity import record_activity
from internhub.services.logbook_pdf import generate_weekly_pdf, intern_sheet_key
from internhub.services.lookups import (
    intern_for_user,
    resolve_intern,
    serialize,
    user_for_profile,
    users_in_specialty,
)
from internhub.services.storage import get_storage
from internhub.services.week_tracker import calculate_week_number, is_week_complete

logger = logging.getLogger(__name__)


async def _target_intern(principal: User, intern_ref: Optional[str]) -> Intern:
    if principal.role == UserRole.INTERN:
        return await intern_for_user(principal)
    if principal.role == UserRole.ADMIN:
        if not intern_ref:
            raise ValidationFailed("intern_id is required", {"intern_id": ["intern_id is required"]})
        return await resolve_intern(intern_ref)
    raise AuthorizationError("Only interns and admins can submit logbook entries.")


async def find_entry_for_date(intern_id: str, entry_date) -> Optional[LogbookEntry]:
    return await LogbookEntry.find_one(
        LogbookEntry.intern_id == intern_id,
        LogbookEntry.date == entry_date,
    )


async def notify_submission(intern: Intern, entry: LogbookEntry) -> None:
    """Tell the intern and the supervisors of their specialty. Failures are logged only."""
    data = {"type": "logbook", "logbook_id": str(entry.id), "week_number": entry.week_number}
    try:
        intern_user = await user_for_profile(intern)
        if intern_user:
            await fcm.send_to_user(
                intern_user, "Logbook Submitted", f"Your logbook for {entry.date:%d %b %Y} was submitted.", data
            )
        supervisors = await users_in_specialty(intern.specialty_id, UserRole.SUPERVISOR)
        name = intern_user.full_name if intern_user else "An intern"
        await fcm.notify_users(
            supervisors, "New Logbook Entry", f"{name} submitted a logbook for {entry.date:%d %b %Y}.", data
        )
    except Exception as e:
        logger.error(f"Logbook notifications failed for entry {entry.id}: {e}")


async def submit(principal: User, payload: LogbookEntryCreate) -> dict:
    """Create one entry; raises DuplicateEntryError if the date is already taken."""
    rbac.authorize(principal, "logbooks.submit")
    intern = await _target_intern(principal, payload.intern_id)
    intern_id = str(intern.id)

    existing = await find_entry_for_date(intern_id, payload.date)
    if existing:
        raise DuplicateEntryError(serialize(existing))

    week_number = calculate_week_number(payload.date, intern.start_date)
    logger.info(f"Logbook for intern {intern_id} on {payload.date} falls in week {week_number}")
    was_complete = await is_week_complete(intern_id, week_number)

    entry = LogbookEntry(
        intern_id=intern_id,
        week_number=week_number,
        **payload.model_dump(exclude={"intern_id"}),
    )
    try:
        await entry.insert()
    except DuplicateKeyError:
        existing = await find_entry_for_date(intern_id, payload.date)
        raise DuplicateEntryError(serialize(existing) if existing else {})

    await record_activity(intern.user_id, "Logbook filled")

    pdf_generated = False
    pdf_error = None
    key = intern_sheet_key(intern, week_number)
    if not was_complete and await is_week_complete(intern_id, week_number):
        try:
            key = await generate_weekly_pdf(intern_id, week_number)
            pdf_generated = True
        except InternHubError as e:
            pdf_error = e.message
            logger.error(f"Weekly logbook generation failed for intern {intern_id} week {week_number}: {e}")
        except Exception as e:
            pdf_error = "Weekly logbook PDF could not be generated"
            logger.exception(f"Weekly logbook rendering failed for intern {intern_id} week {week_number}: {e}")

    storage = get_storage()
    has_sheet = pdf_generated or await storage.exists(key)

    await notify_submission(intern, entry)

    return {
        "message": "Logbook entry created successfully",
        "logbook": serialize(entry),
        "week_number": week_number,
        "pdf_generated": pdf_generated,
        "pdf_filename": key.rsplit("/", 1)[-1] if has_sheet else None,
        "pdf_url": storage.url(key) if has_sheet else None,
        "pdf_error": pdf_error,
    }
