from __future__ import annotations

import logging
import threading
from datetime import date
from typing import Optional

from ..common.datetime_utils import today_in
from ..core.constants import SYSTEM_ACTOR_EMAIL, SYSTEM_ACTOR_NAME
from .model import AutomatedActor, Tenant
from .repository import ActorRepository

logger = logging.getLogger(__name__)


def local_today(tenant: Optional[Tenant], default_timezone: str) -> date:
    """'Today' as seen by the branch (its own timezone, else the configured default)."""

    tz_name = (tenant.timezone if tenant else None) or default_timezone
    return today_in(tz_name)


class AutomatedActorResolver:
    """Lookup-or-create of the per-tenant system user, cached for the process lifetime."""

    def __init__(
        self,
        actors: ActorRepository,
        *,
        email: str = SYSTEM_ACTOR_EMAIL,
        display_name: str = SYSTEM_ACTOR_NAME,
    ):
        self._actors = actors
        self._email = email
        self._display_name = display_name
        self._cache: dict[int, AutomatedActor] = {}
        self._lock = threading.Lock()

    def resolve(self, tenant_id: int) -> AutomatedActor:
        tenant_id = int(tenant_id)
        with self._lock:
            cached = self._cache.get(tenant_id)
        if cached:
            return cached

        actor = self._actors.get_or_create_automated_actor(
            tenant_id=tenant_id,
            email=self._email,
            display_name=self._display_name,
        )
        with self._lock:
            self._cache.setdefault(tenant_id, actor)
        logger.debug("Resolved automated actor %s for tenant %s", actor.actor_id, tenant_id)
        return actor
