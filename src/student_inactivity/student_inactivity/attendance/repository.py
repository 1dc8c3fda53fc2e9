from __future__ import annotations

from datetime import date
from typing import Optional, Protocol

from .model import PersonKey


class AttendanceRepository(Protocol):
    """Read-only view of attendance history.

    Implementations must honour a caller-imposed timeout and raise
    StoreUnavailableError when the store cannot be reached.
    """

    def last_present_date(self, *, tenant_id: int, person: PersonKey) -> Optional[date]:
        """Most recent calendar_date with a present/late/half-day record, or None."""

        raise NotImplementedError
