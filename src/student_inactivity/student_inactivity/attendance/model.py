from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import PRESENT_EQUIVALENT_STATES, PresenceState


@dataclass(frozen=True)
class PersonKey:
    """Identifiers an attendance record may be filed under.

    Ingestion stores either the linked user id (biometric sync) or the
    student id (manual marking), so lookups match on whichever is known.
    """

    student_id: Optional[int] = None
    user_id: Optional[int] = None

    @property
    def is_empty(self) -> bool:
        return self.student_id is None and self.user_id is None


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one normalized attendance record per person per day."""

    attendance_id: int
    tenant_id: int
    calendar_date: date
    presence_state: PresenceState
    student_id: Optional[int] = None
    user_id: Optional[int] = None

    @property
    def counts_as_present(self) -> bool:
        return self.presence_state in PRESENT_EQUIVALENT_STATES
