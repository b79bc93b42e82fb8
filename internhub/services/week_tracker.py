"""Week numbering and week completeness for logbook entries.

Weeks are fixed 7-day blocks anchored at the intern's program start date, not
calendar weeks. A week is complete once Monday to Friday each have an entry;
weekend entries and repeated weekdays do not change the verdict.
"""
import datetime
import logging
from typing import Iterable, Optional, Union

from internhub.models.logbook import LogbookEntry

logger = logging.getLogger(__name__)

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday")
_DAY_NAMES = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

DateLike = Union[datetime.date, datetime.datetime]


def _as_date(value: DateLike) -> datetime.date:
    if isinstance(value, datetime.datetime):
        return value.date()
    return value


def weekday_name(value: DateLike) -> str:
    return _DAY_NAMES[_as_date(value).weekday()]


def calculate_week_number(entry_date: DateLike, program_start_date: Optional[DateLike]) -> int:
    """1-based week of `entry_date` relative to `program_start_date`.

    No start date, or an entry dated before the start, falls into week 1.
    """
    if program_start_date is None:
        return 1
    start = _as_date(program_start_date)
    entry = _as_date(entry_date)
    if entry < start:
        return 1
    return (entry - start).days // 7 + 1


def covered_weekdays(dates: Iterable[DateLike]) -> set[str]:
    return {weekday_name(d) for d in dates}


def missing_weekdays(dates: Iterable[DateLike]) -> list[str]:
    covered = covered_weekdays(dates)
    return [day for day in WEEKDAYS if day not in covered]


def week_is_complete(dates: Iterable[DateLike]) -> bool:
    return not missing_weekdays(dates)


async def week_entries(intern_id: str, week_number: int) -> list[LogbookEntry]:
    return await LogbookEntry.find(
        LogbookEntry.intern_id == intern_id,
        LogbookEntry.week_number == week_number,
    ).to_list()


async def is_week_complete(intern_id: str, week_number: int) -> bool:
    entries = await week_entries(intern_id, week_number)
    days = covered_weekdays(e.date for e in entries)
    complete = week_is_complete(e.date for e in entries)
    logger.info(
        f"Week {week_number} for intern {intern_id}: days found {sorted(days)}, complete={complete}"
    )
    return complete
