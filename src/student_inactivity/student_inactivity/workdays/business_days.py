"""Business-day arithmetic (Monday to Friday).

Pure functions: no state, no I/O. Every input is normalized to its calendar
day before counting, so timestamps with a time-of-day component never skew
the result.
"""

from __future__ import annotations

import sys
from datetime import date, datetime, timedelta
from typing import Optional

from ..common.datetime_utils import to_calendar_date

# Stand-in for "never attended": larger than any configurable threshold.
MAX_ABSENCE_DAYS = sys.maxsize


def is_business_day(day: date) -> bool:
    return day.weekday() < 5


def count_business_days_between(
    from_day: date | datetime,
    to_day: date | datetime,
    *,
    tz_name: Optional[str] = None,
) -> int:
    """Business days strictly after ``from_day`` up to and including ``to_day``.

    Returns 0 when ``from_day >= to_day``. Friday -> Monday is 1.
    """

    start = to_calendar_date(from_day, tz_name)
    end = to_calendar_date(to_day, tz_name)
    if start >= end:
        return 0

    first = start + timedelta(days=1)
    span = (end - first).days + 1
    full_weeks, remainder = divmod(span, 7)

    count = full_weeks * 5
    weekday = first.weekday()
    for offset in range(remainder):
        if (weekday + offset) % 7 < 5:
            count += 1
    return count


def business_days_since(
    last_day: date | datetime | None,
    today: date | datetime,
    *,
    tz_name: Optional[str] = None,
) -> int:
    """Like :func:`count_business_days_between` but maps a missing start to MAX_ABSENCE_DAYS."""

    if last_day is None:
        return MAX_ABSENCE_DAYS
    return count_business_days_between(last_day, today, tz_name=tz_name)


def add_business_days(start: date | datetime, days: int) -> date:
    """Calendar date that is ``days`` business days after ``start``."""

    if days < 0:
        raise ValueError("days must be >= 0")

    current = to_calendar_date(start)
    remaining = int(days)
    while remaining > 0:
        current += timedelta(days=1)
        if is_business_day(current):
            remaining -= 1
    return current
