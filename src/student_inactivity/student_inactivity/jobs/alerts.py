from __future__ import annotations

import logging
from typing import Protocol

from ..core.enums import NoticeCategory
from ..notices.model import NotificationRecord
from ..notices.repository import NoticeRepository
from ..tenants.repository import ActorRepository
from .registry import JobRecord

logger = logging.getLogger(__name__)


class AlertSink(Protocol):
    def alert(self, record: JobRecord) -> None:
        raise NotImplementedError


class AdminNoticeAlerter:
    """Raises an operator alert as an urgent notice addressed to all admins."""

    def __init__(self, notices: NoticeRepository, actors: ActorRepository):
        self._notices = notices
        self._actors = actors

    def alert(self, record: JobRecord) -> None:
        admin_ids = tuple(int(i) for i in self._actors.list_admin_user_ids())
        if not admin_ids:
            logger.warning("Job %s is failing but no admin users exist to alert", record.name)
            return

        self._notices.create(
            NotificationRecord(
                category=NoticeCategory.JOB_FAILURE_ALERT,
                title=f"Scheduled job failing: {record.name}",
                content=(
                    f"The scheduled job '{record.name}' has failed {record.consecutive_failures} "
                    f"time(s) in a row after retries.\n\nLast error: {record.last_error}"
                ),
                tenant_id=None,
                recipient_person_ids=admin_ids,
                expiry=None,
                priority="urgent",
                payload={
                    "job_name": record.name,
                    "consecutive_failures": record.consecutive_failures,
                    "last_error": record.last_error,
                },
            )
        )
        logger.error("Alerted %s admin(s): job %s failed %s time(s) in a row", len(admin_ids), record.name, record.consecutive_failures)
