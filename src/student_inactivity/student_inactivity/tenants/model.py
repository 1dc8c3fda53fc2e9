from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import TenantStatus


@dataclass(frozen=True)
class Tenant:
    """A branch (school campus). Only active branches are swept."""

    tenant_id: int
    name: str
    operational_status: TenantStatus = TenantStatus.ACTIVE
    timezone: Optional[str] = None


@dataclass(frozen=True)
class AutomatedActor:
    """System identity recorded as ``changed_by`` for automated transitions."""

    actor_id: int
    tenant_id: int
    email: str
