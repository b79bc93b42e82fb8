"""Logbook maintenance: listing, edits, deletion, reviews, week repair and exports."""
import datetime
import logging
from typing import Optional

import pandas as pd
from pymongo.errors import DuplicateKeyError

from internhub import rbac
from internhub.errors import AuthorizationError, DuplicateEntryError, NotFoundError
from internhub.models.logbook import (
    LogbookEntry,
    LogbookEntryUpdate,
    LogbookReview,
    LogbookReviewCreate,
    LogbookStatus,
)
from internhub.models.profile import Intern
from internhub.models.user import User, UserRole
from internhub.services import fcm
from internhub.services.activity import record_activity
from internhub.services.logbook_ingestion import find_entry_for_date
from internhub.services.logbook_pdf import generate_weekly_pdf, intern_sheet_key
from internhub.services.lookups import (
    get_or_404,
    intern_for_user,
    resolve_intern,
    safe_object_id,
    serialize,
    supervisor_for_user,
    user_for_profile,
    user_name_map,
)
from internhub.services.storage import get_storage
from internhub.services.week_tracker import (
    WEEKDAYS,
    calculate_week_number,
    covered_weekdays,
    missing_weekdays,
    week_entries,
)

logger = logging.getLogger(__name__)


async def _visible_intern_ids(principal: User) -> Optional[list[str]]:
    """Intern ids the principal may see; None means all."""
    if principal.role == UserRole.ADMIN:
        return None
    if principal.role == UserRole.SUPERVISOR:
        supervisor = await supervisor_for_user(principal)
        interns = await Intern.find(Intern.specialty_id == supervisor.specialty_id).to_list()
        return [str(i.id) for i in interns]
    intern = await intern_for_user(principal)
    return [str(intern.id)]


async def ensure_can_access_intern(principal: User, intern: Intern) -> None:
    visible = await _visible_intern_ids(principal)
    if visible is not None and str(intern.id) not in visible:
        raise AuthorizationError("You are not allowed to access this intern's logbooks.")


async def _target_intern(principal: User, intern_ref: Optional[str]) -> Intern:
    """The principal's own profile for interns, otherwise the referenced intern."""
    if principal.role == UserRole.INTERN:
        return await intern_for_user(principal)
    intern = await resolve_intern(intern_ref)
    await ensure_can_access_intern(principal, intern)
    return intern


async def list_entries(
    principal: User,
    intern_id: Optional[str] = None,
    status: Optional[LogbookStatus] = None,
    week_number: Optional[int] = None,
    date_from: Optional[datetime.date] = None,
    date_to: Optional[datetime.date] = None,
) -> list[LogbookEntry]:
    rbac.authorize(principal, "logbooks.view_all")
    query: dict = {}
    visible = await _visible_intern_ids(principal)
    if intern_id:
        intern = await resolve_intern(intern_id)
        if visible is not None and str(intern.id) not in visible:
            raise AuthorizationError("You are not allowed to access this intern's logbooks.")
        query["intern_id"] = str(intern.id)
    elif visible is not None:
        query["intern_id"] = {"$in": visible}
    if status:
        query["status"] = status.value
    if week_number:
        query["week_number"] = week_number
    if date_from or date_to:
        date_query = {}
        if date_from:
            date_query["$gte"] = datetime.datetime.combine(date_from, datetime.time.min)
        if date_to:
            date_query["$lte"] = datetime.datetime.combine(date_to, datetime.time.min)
        query["date"] = date_query
    return await LogbookEntry.find(query).sort(-LogbookEntry.date).to_list()


async def list_mine(principal: User) -> list[LogbookEntry]:
    rbac.authorize(principal, "logbooks.view_own")
    intern = await intern_for_user(principal)
    return await LogbookEntry.find(LogbookEntry.intern_id == str(intern.id)).sort(-LogbookEntry.date).to_list()


async def get_entry(principal: User, entry_id: str) -> LogbookEntry:
    entry = await get_or_404(LogbookEntry, entry_id, "Logbook entry")
    intern = await get_or_404(Intern, entry.intern_id, "Intern")
    await ensure_can_access_intern(principal, intern)
    return entry


async def entry_reviews(entry: LogbookEntry) -> list[LogbookReview]:
    return await LogbookReview.find(LogbookReview.logbook_id == str(entry.id)).sort(-LogbookReview.created_at).to_list()


async def update_entry(principal: User, entry_id: str, payload: LogbookEntryUpdate) -> LogbookEntry:
    """Owner intern or admin. A new date re-checks duplicates and recomputes the week."""
    rbac.authorize(principal, "logbooks.edit")
    entry = await get_entry(principal, entry_id)
    intern = await get_or_404(Intern, entry.intern_id, "Intern")

    changes = payload.model_dump(exclude_unset=True)
    new_date = changes.get("date")
    if new_date and new_date != entry.date:
        clash = await find_entry_for_date(entry.intern_id, new_date)
        if clash and clash.id != entry.id:
            raise DuplicateEntryError(serialize(clash))
        entry.week_number = calculate_week_number(new_date, intern.start_date)

    for field, value in changes.items():
        if value is not None or field in ("hours_worked", "challenges", "learnings", "next_day_plan"):
            setattr(entry, field, value)
    entry.updated_at = datetime.datetime.utcnow()
    try:
        await entry.save()
    except DuplicateKeyError:
        clash = await find_entry_for_date(entry.intern_id, entry.date)
        raise DuplicateEntryError(serialize(clash) if clash else {})
    await record_activity(str(principal.id), "Logbook updated")
    return entry


async def delete_entry(principal: User, entry_id: str) -> None:
    """Reviews go first; there is no transaction spanning both collections."""
    rbac.authorize(principal, "logbooks.delete")
    entry = await get_entry(principal, entry_id)
    await LogbookReview.find(LogbookReview.logbook_id == str(entry.id)).delete()
    intern = await get_or_404(Intern, entry.intern_id, "Intern")
    await record_activity(intern.user_id, "Logbook deleted")
    await entry.delete()


async def review_entry(principal: User, entry_id: str, payload: LogbookReviewCreate) -> LogbookReview:
    rbac.authorize(principal, "logbooks.review")
    entry = await get_entry(principal, entry_id)

    review = LogbookReview(
        logbook_id=str(entry.id),
        reviewer_id=str(principal.id),
        status=payload.status,
        feedback=payload.feedback,
    )
    await review.insert()

    entry.status = LogbookStatus(payload.status.value)
    entry.reviewed_by = str(principal.id)
    entry.reviewed_at = datetime.datetime.utcnow()
    entry.updated_at = entry.reviewed_at
    await entry.save()
    await record_activity(str(principal.id), f"Reviewed logbook {entry.id}")

    try:
        intern = await get_or_404(Intern, entry.intern_id, "Intern")
        intern_user = await user_for_profile(intern)
        if intern_user:
            status_text = payload.status.value.replace("_", " ")
            await fcm.send_to_user(
                intern_user,
                "Logbook Reviewed",
                f"Your logbook for {entry.date:%d %b %Y} was marked {status_text}.",
                {"type": "logbook_review", "logbook_id": str(entry.id), "status": payload.status.value},
            )
    except Exception as e:
        logger.error(f"Review notification failed for logbook {entry.id}: {e}")
    return review


async def week_status(principal: User, week_number: int, intern_ref: Optional[str] = None) -> dict:
    rbac.authorize(principal, "logbooks.sheets")
    intern = await _target_intern(principal, intern_ref)
    entries = await week_entries(str(intern.id), week_number)
    dates = [e.date for e in entries]
    days = covered_weekdays(dates)
    key = intern_sheet_key(intern, week_number)
    storage = get_storage()
    has_sheet = await storage.exists(key)
    return {
        "intern_id": str(intern.id),
        "week_number": week_number,
        "entries_count": len(entries),
        "days_filled": [d for d in WEEKDAYS if d in days],
        "missing_days": missing_weekdays(dates),
        "is_complete": not missing_weekdays(dates),
        "pdf_url": storage.url(key) if has_sheet else None,
    }


async def recompute_week_numbers(principal: User, intern_ref: Optional[str] = None) -> int:
    """Fix entries whose stored week number is missing or stale; returns how many changed."""
    rbac.authorize(principal, "logbooks.maintain")
    if intern_ref:
        interns = [await resolve_intern(intern_ref)]
    else:
        interns = await Intern.find_all().to_list()

    updated = 0
    for intern in interns:
        entries = await LogbookEntry.find(LogbookEntry.intern_id == str(intern.id)).to_list()
        for entry in entries:
            expected = calculate_week_number(entry.date, intern.start_date)
            if entry.week_number != expected:
                entry.week_number = expected
                entry.updated_at = datetime.datetime.utcnow()
                await entry.save()
                updated += 1
    logger.info(f"Recomputed week numbers: {updated} entries updated")
    return updated


async def generate_week_pdf(principal: User, week_number: int, intern_ref: Optional[str] = None) -> dict:
    """Raises InsufficientEntriesError for an incomplete week."""
    rbac.authorize(principal, "logbooks.generate")
    intern = await _target_intern(principal, intern_ref)
    key = await generate_weekly_pdf(str(intern.id), week_number)
    return {
        "message": "Weekly logbook generated",
        "week_number": week_number,
        "pdf_filename": key.rsplit("/", 1)[-1],
        "pdf_url": get_storage().url(key),
    }


async def download_week_pdf(principal: User, week_number: int, intern_ref: Optional[str] = None) -> tuple[str, bytes]:
    rbac.authorize(principal, "logbooks.sheets")
    intern = await _target_intern(principal, intern_ref)
    key = intern_sheet_key(intern, week_number)
    body = await get_storage().read(key)
    if body is None:
        raise NotFoundError(f"No weekly logbook found for week {week_number}")
    return key.rsplit("/", 1)[-1], body


async def export_frame(principal: User, **filters) -> pd.DataFrame:
    rbac.authorize(principal, "logbooks.export")
    entries = await list_entries(principal, **filters)

    intern_oids = [oid for oid in (safe_object_id(i) for i in {e.intern_id for e in entries}) if oid]
    interns = {str(i.id): i for i in await Intern.find({"_id": {"$in": intern_oids}}).to_list()}
    names = await user_name_map([i.user_id for i in interns.values()])

    rows = []
    for entry in entries:
        intern = interns.get(entry.intern_id)
        rows.append(
            {
                "Date": entry.date,
                "Week": entry.week_number,
                "Intern": names.get(intern.user_id, "Unknown") if intern else "Unknown",
                "Matric Number": (intern.matric_number if intern else "") or "",
                "Title": entry.title,
                "Content": entry.content,
                "Hours Worked": entry.hours_worked,
                "Status": entry.status.value,
                "Submitted At": entry.submitted_at,
            }
        )
    return pd.DataFrame(rows)
