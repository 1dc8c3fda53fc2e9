from __future__ import annotations

import json
from datetime import datetime

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor
from .model import NotificationRecord
from .repository import NoticeRepository


class MySQLNoticeRepository(NoticeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, notice: NotificationRecord) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO notices(branch_id, category, title, content, priority, recipient_ids,
                                    expiry_date, payload, is_active, published_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,1,%s)
                """,
                (
                    notice.tenant_id,
                    notice.category.value,
                    notice.title,
                    notice.content,
                    notice.priority,
                    json.dumps(list(notice.recipient_person_ids)),
                    notice.expiry,
                    json.dumps(notice.payload, default=str),
                    datetime.now(),
                ),
            )
            return int(cur.lastrowid)
