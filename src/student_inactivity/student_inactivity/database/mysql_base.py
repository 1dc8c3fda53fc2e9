from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector

from ..core.exceptions import StoreUnavailableError
from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """One connection, one transaction: commit on success, rollback on any error."""

    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            timeout_ms = conn_factory.statement_timeout_ms
            if timeout_ms:
                # Caps SELECTs only; DML is bounded by innodb_lock_wait_timeout.
                cur.execute("SET SESSION MAX_EXECUTION_TIME=%s", (int(timeout_ms),))
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except (mysql.connector.errors.InterfaceError, mysql.connector.errors.OperationalError) as exc:
        _safe_rollback(conn)
        raise StoreUnavailableError(str(exc))
    except Exception:
        _safe_rollback(conn)
        raise
    finally:
        conn.close()


def _safe_rollback(conn) -> None:
    try:
        conn.rollback()
    except mysql.connector.Error:
        # Connection already gone; nothing was committed.
        pass


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])
