import datetime

import pytest

from internhub.models import LogbookEntry
from internhub.services.week_tracker import (
    calculate_week_number,
    covered_weekdays,
    is_week_complete,
    missing_weekdays,
    week_is_complete,
)

START = datetime.date(2026, 1, 5)  # a Monday


class TestCalculateWeekNumber:
    def test_no_start_date_is_week_one(self):
        assert calculate_week_number(datetime.date(2026, 3, 1), None) == 1

    def test_before_start_is_week_one(self):
        assert calculate_week_number(datetime.date(2025, 12, 20), START) == 1

    @pytest.mark.parametrize("offset", range(7))
    def test_first_seven_days_are_week_one(self, offset):
        assert calculate_week_number(START + datetime.timedelta(days=offset), START) == 1

    @pytest.mark.parametrize("offset,week", [(7, 2), (13, 2), (14, 3), (21, 4)])
    def test_seven_day_blocks(self, offset, week):
        assert calculate_week_number(START + datetime.timedelta(days=offset), START) == week

    def test_time_of_day_is_ignored(self):
        entry = datetime.datetime(2026, 1, 11, 23, 59)
        start = datetime.datetime(2026, 1, 5, 18, 0)
        assert calculate_week_number(entry, start) == 1

    def test_blocks_anchor_on_start_not_calendar_week(self):
        wednesday = datetime.date(2026, 1, 7)
        assert calculate_week_number(datetime.date(2026, 1, 13), wednesday) == 1
        assert calculate_week_number(datetime.date(2026, 1, 14), wednesday) == 2


class TestCompleteness:
    def weekdays(self):
        return [START + datetime.timedelta(days=i) for i in range(5)]

    def test_monday_to_friday_is_complete(self):
        assert week_is_complete(self.weekdays())

    def test_missing_day_is_incomplete(self):
        dates = self.weekdays()[:4]
        assert not week_is_complete(dates)
        assert missing_weekdays(dates) == ["friday"]

    def test_weekend_entries_do_not_count(self):
        dates = self.weekdays()[:4] + [datetime.date(2026, 1, 10), datetime.date(2026, 1, 11)]
        assert not week_is_complete(dates)

    def test_duplicate_weekdays_count_once(self):
        dates = self.weekdays() + [datetime.date(2026, 1, 12)]
        assert covered_weekdays(dates) == {"monday", "tuesday", "wednesday", "thursday", "friday"}
        assert week_is_complete(dates)

    def test_no_entries_is_incomplete(self):
        assert not week_is_complete([])


async def test_is_week_complete_reads_stored_entries(db):
    for i in range(5):
        await LogbookEntry(
            intern_id="intern-1",
            date=START + datetime.timedelta(days=i),
            title="Day",
            content="Work",
            week_number=1,
        ).insert()

    assert await is_week_complete("intern-1", 1)
    assert not await is_week_complete("intern-1", 2)
    assert not await is_week_complete("someone-else", 1)
