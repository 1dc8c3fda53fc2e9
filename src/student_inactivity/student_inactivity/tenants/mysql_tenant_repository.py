from __future__ import annotations

import secrets
from typing import Optional, Sequence

from werkzeug.security import generate_password_hash

from ..core.enums import TenantStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AutomatedActor, Tenant
from .repository import ActorRepository, TenantRepository


class MySQLTenantRepository(TenantRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_tenant(r: dict) -> Tenant:
        return Tenant(
            tenant_id=int(r["branch_id"]),
            name=r["name"],
            operational_status=TenantStatus(r["status"]),
            timezone=r.get("timezone"),
        )

    def list_active(self) -> Sequence[Tenant]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT branch_id, name, status, timezone FROM branches WHERE status=%s ORDER BY branch_id ASC",
                (TenantStatus.ACTIVE.value,),
            )
            return [self._to_tenant(r) for r in fetchall(cur)]

    def get_by_id(self, tenant_id: int) -> Optional[Tenant]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT branch_id, name, status, timezone FROM branches WHERE branch_id=%s",
                (int(tenant_id),),
            )
            r = fetchone(cur)
            return self._to_tenant(r) if r else None


class MySQLActorRepository(ActorRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_or_create_automated_actor(self, *, tenant_id: int, email: str, display_name: str) -> AutomatedActor:
        with db_cursor(self._conn_factory) as (_, cur):
            # UNIQUE(branch_id, email) makes concurrent first runs converge on one row.
            cur.execute(
                """
                INSERT IGNORE INTO users(branch_id, email, full_name, password_hash, role, status)
                VALUES(%s,%s,%s,%s,'system','active')
                """,
                (int(tenant_id), email, display_name, generate_password_hash(secrets.token_hex(32))),
            )
            cur.execute(
                "SELECT user_id FROM users WHERE branch_id=%s AND email=%s",
                (int(tenant_id), email),
            )
            r = fetchone(cur)
            return AutomatedActor(actor_id=int(r["user_id"]), tenant_id=int(tenant_id), email=email)

    def list_admin_user_ids(self) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT user_id FROM users WHERE role='admin' AND status='active' ORDER BY user_id ASC")
            return [int(r["user_id"]) for r in fetchall(cur)]
