from __future__ import annotations

from datetime import date
from typing import Optional

from .model import PersonKey
from .repository import AttendanceRepository


class AttendanceLookbackReader:
    """Finds the last day a student was physically at school.

    Pure read: no writes, and "no record ever" is a valid answer (None).
    """

    def __init__(self, attendance: AttendanceRepository):
        self._attendance = attendance

    def last_present_date(
        self,
        student_id: Optional[int],
        person_id: Optional[int],
        tenant_id: int,
    ) -> Optional[date]:
        key = PersonKey(student_id=student_id, user_id=person_id)
        if key.is_empty:
            return None
        return self._attendance.last_present_date(tenant_id=int(tenant_id), person=key)
