from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import LifecycleStatus
from .model import StatusHistoryEntry, Student


class StudentRepository(Protocol):
    """Repository interface for students and their status history.

    Note (DIP): services depend on this interface, never on MySQL directly.
    """

    def get_by_id(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def list_by_tenant_and_status(self, *, tenant_id: int, status: LifecycleStatus) -> Sequence[Student]:
        raise NotImplementedError

    def compare_and_set_status(self, *, student_id: int, expected: LifecycleStatus, entry: StatusHistoryEntry) -> bool:
        """Atomically set ``entry.new_status`` and append ``entry`` if the status is still ``expected``.

        Returns False (and writes nothing) when the current status differs.
        """

        raise NotImplementedError

    def recent_history(self, student_id: int, *, limit: int) -> Sequence[StatusHistoryEntry]:
        """Newest-first slice of the status history."""

        raise NotImplementedError
