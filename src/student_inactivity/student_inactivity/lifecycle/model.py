from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional, Union

from ..core.enums import LifecycleStatus, NoOpReason, TransitionKind
from ..students.model import StatusHistoryEntry


@dataclass(frozen=True)
class Transition:
    """A decided (not yet applied) lifecycle change for one student."""

    student_id: int
    tenant_id: int
    kind: TransitionKind
    previous_status: LifecycleStatus
    new_status: LifecycleStatus
    reason: str
    last_present_date: Optional[date] = None
    days_absent: Optional[int] = None


@dataclass(frozen=True)
class NoOp:
    student_id: int
    reason: NoOpReason
    days_absent: Optional[int] = None

    @property
    def at_risk(self) -> bool:
        return self.reason == NoOpReason.WARNING_BAND


Decision = Union[Transition, NoOp]


@dataclass(frozen=True)
class ApplyResult:
    """Outcome of the conditional write.

    ``applied`` is False when another writer changed the status first; in that
    case nothing was written and ``entry`` is None.
    """

    transition: Transition
    applied: bool
    entry: Optional[StatusHistoryEntry] = None
