from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from src.student_inactivity.student_inactivity.workdays.business_days import (
    MAX_ABSENCE_DAYS,
    add_business_days,
    business_days_since,
    count_business_days_between,
)


def _count_by_walking(start: date, end: date) -> int:
    count = 0
    day = start + timedelta(days=1)
    while day <= end:
        if day.weekday() < 5:
            count += 1
        day += timedelta(days=1)
    return count


def test_friday_to_monday_is_one_business_day():
    assert count_business_days_between(date(2024, 1, 5), date(2024, 1, 8)) == 1


def test_same_day_and_reversed_range_are_zero():
    assert count_business_days_between(date(2024, 1, 8), date(2024, 1, 8)) == 0
    assert count_business_days_between(date(2024, 1, 10), date(2024, 1, 8)) == 0


@pytest.mark.parametrize(
    "start,end,expected",
    [
        (date(2024, 1, 5), date(2024, 1, 6), 0),  # Fri -> Sat
        (date(2024, 1, 5), date(2024, 1, 7), 0),  # Fri -> Sun
        (date(2024, 1, 4), date(2024, 1, 7), 1),  # Thu -> Sun
        (date(2024, 1, 6), date(2024, 1, 13), 5),  # Sat -> Sat
    ],
)
def test_weekend_end_dates_exclude_saturday_and_sunday(start, end, expected):
    assert count_business_days_between(start, end) == expected


def test_full_year_counts_every_weekday_after_start():
    # 2024 has 262 weekdays; Jan 1 (Mon) itself is not counted.
    assert count_business_days_between(date(2024, 1, 1), date(2024, 12, 31)) == 261


def test_matches_day_by_day_count_over_many_ranges():
    base = date(2023, 12, 25)
    for i in range(14):
        for span in range(0, 40, 3):
            start = base + timedelta(days=i)
            end = start + timedelta(days=span)
            assert count_business_days_between(start, end) == _count_by_walking(start, end)


def test_time_of_day_is_ignored():
    start = datetime(2024, 1, 5, 23, 59)
    end = datetime(2024, 1, 8, 0, 1)
    assert count_business_days_between(start, end) == 1


def test_aware_timestamps_are_normalized_to_local_day():
    # 22:00 UTC on Sunday is already Monday in Nairobi (UTC+3).
    sunday_night_utc = datetime(2024, 1, 7, 22, 0, tzinfo=timezone.utc)

    assert count_business_days_between(date(2024, 1, 5), sunday_night_utc) == 0
    assert count_business_days_between(date(2024, 1, 5), sunday_night_utc, tz_name="Africa/Nairobi") == 1


def test_missing_start_maps_to_maximum_absence():
    assert business_days_since(None, date(2024, 1, 22)) == MAX_ABSENCE_DAYS
    assert business_days_since(date(2024, 1, 19), date(2024, 1, 22)) == 1


def test_add_business_days_skips_weekends():
    assert add_business_days(date(2024, 1, 5), 1) == date(2024, 1, 8)
    assert add_business_days(date(2024, 1, 22), 5) == date(2024, 1, 29)
    assert add_business_days(date(2024, 1, 22), 0) == date(2024, 1, 22)

    with pytest.raises(ValueError):
        add_business_days(date(2024, 1, 22), -1)
