from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import LifecycleStatus


@dataclass(frozen=True)
class StatusHistoryEntry:
    """One append-only audit entry of a lifecycle change."""

    previous_status: LifecycleStatus
    new_status: LifecycleStatus
    changed_by: int
    changed_at: datetime
    reason: str


@dataclass(frozen=True)
class Student:
    """Domain entity: the slice of a student the inactivity engine works with.

    Note: ``person_id`` is the linked user account (may be missing for
    students imported without a login).
    """

    student_id: int
    tenant_id: int
    display_code: str
    lifecycle_status: LifecycleStatus
    person_id: Optional[int] = None
    person_name: Optional[str] = None

    @property
    def label(self) -> str:
        return self.person_name or self.display_code or str(self.student_id)
