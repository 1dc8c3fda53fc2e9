from __future__ import annotations

from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..core.exceptions import ConfigurationError


def resolve_timezone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ConfigurationError(f"Unknown timezone: {name!r}")


def now_local(tz_name: str) -> datetime:
    """Current time in the given timezone.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(resolve_timezone(tz_name))


def today_in(tz_name: str) -> date:
    return now_local(tz_name).date()


def to_calendar_date(value: date | datetime, tz_name: Optional[str] = None) -> date:
    """Normalize a date or timestamp to its calendar day (midnight local).

    Aware datetimes are converted to ``tz_name`` first when given, so a
    record stored as 23:30 UTC lands on the correct local day.
    """

    if isinstance(value, datetime):
        if value.tzinfo is not None and tz_name:
            value = value.astimezone(resolve_timezone(tz_name))
        return value.date()
    if isinstance(value, date):
        return value
    raise TypeError(f"Unsupported date value type: {type(value)!r}")
