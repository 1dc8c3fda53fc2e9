from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import LifecycleStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import StatusHistoryEntry, Student
from .repository import StudentRepository

_STUDENT_COLUMNS = """
    s.student_id, s.branch_id, s.user_id, s.admission_number, s.lifecycle_status,
    u.full_name
"""


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_student(r: dict) -> Student:
        return Student(
            student_id=int(r["student_id"]),
            tenant_id=int(r["branch_id"]),
            display_code=r.get("admission_number") or "",
            lifecycle_status=LifecycleStatus(r["lifecycle_status"]),
            person_id=int(r["user_id"]) if r.get("user_id") is not None else None,
            person_name=r.get("full_name"),
        )

    @staticmethod
    def _to_entry(r: dict) -> StatusHistoryEntry:
        return StatusHistoryEntry(
            previous_status=LifecycleStatus(r["previous_status"]),
            new_status=LifecycleStatus(r["new_status"]),
            changed_by=int(r["changed_by"]),
            changed_at=r["changed_at"],
            reason=r.get("reason") or "",
        )

    def get_by_id(self, student_id: int) -> Optional[Student]:
        # Called on every attendance write; one indexed row, no history.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_STUDENT_COLUMNS}
                FROM students s
                LEFT JOIN users u ON u.user_id = s.user_id
                WHERE s.student_id=%s
                """,
                (int(student_id),),
            )
            r = fetchone(cur)
            return self._to_student(r) if r else None

    def list_by_tenant_and_status(self, *, tenant_id: int, status: LifecycleStatus) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_STUDENT_COLUMNS}
                FROM students s
                LEFT JOIN users u ON u.user_id = s.user_id
                WHERE s.branch_id=%s AND s.lifecycle_status=%s
                ORDER BY s.student_id ASC
                """,
                (int(tenant_id), status.value),
            )
            return [self._to_student(r) for r in fetchall(cur)]

    def compare_and_set_status(self, *, student_id: int, expected: LifecycleStatus, entry: StatusHistoryEntry) -> bool:
        # Status update and history row share one transaction; a lost race writes neither.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE students
                SET lifecycle_status=%s
                WHERE student_id=%s AND lifecycle_status=%s
                """,
                (entry.new_status.value, int(student_id), expected.value),
            )
            if cur.rowcount != 1:
                return False

            cur.execute(
                """
                INSERT INTO student_status_history(student_id, previous_status, new_status, changed_by, changed_at, reason)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(student_id),
                    entry.previous_status.value,
                    entry.new_status.value,
                    int(entry.changed_by),
                    entry.changed_at,
                    entry.reason,
                ),
            )
            return True

    def recent_history(self, student_id: int, *, limit: int) -> Sequence[StatusHistoryEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT previous_status, new_status, changed_by, changed_at, reason
                FROM student_status_history
                WHERE student_id=%s
                ORDER BY history_id DESC
                LIMIT %s
                """,
                (int(student_id), int(limit)),
            )
            return [self._to_entry(h) for h in fetchall(cur)]
