from __future__ import annotations

from datetime import date
from typing import Optional

from ..core.enums import PRESENT_EQUIVALENT_STATES
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import PersonKey
from .repository import AttendanceRepository


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def last_present_date(self, *, tenant_id: int, person: PersonKey) -> Optional[date]:
        if person.is_empty:
            return None

        # Match whichever identifier the record was filed under.
        matches: list[str] = []
        params: list[object] = [int(tenant_id)]
        if person.student_id is not None:
            matches.append("student_id=%s")
            params.append(int(person.student_id))
        if person.user_id is not None:
            matches.append("user_id=%s")
            params.append(int(person.user_id))

        states = sorted(s.value for s in PRESENT_EQUIVALENT_STATES)
        params.extend(states)
        placeholders = ",".join(["%s"] * len(states))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT MAX(calendar_date) AS last_present
                FROM attendance_records
                WHERE branch_id=%s
                  AND ({" OR ".join(matches)})
                  AND presence_state IN ({placeholders})
                """,
                tuple(params),
            )
            r = fetchone(cur)
            if not r or r.get("last_present") is None:
                return None
            return r["last_present"]
