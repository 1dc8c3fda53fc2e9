from __future__ import annotations

from typing import Protocol, Sequence

from .model import AutomatedActor, Tenant


class TenantRepository(Protocol):
    def list_active(self) -> Sequence[Tenant]:
        raise NotImplementedError

    def get_by_id(self, tenant_id: int) -> Tenant | None:
        raise NotImplementedError


class ActorRepository(Protocol):
    def get_or_create_automated_actor(self, *, tenant_id: int, email: str, display_name: str) -> AutomatedActor:
        """Idempotent lookup-or-create of the tenant's system user."""

        raise NotImplementedError

    def list_admin_user_ids(self) -> Sequence[int]:
        raise NotImplementedError
