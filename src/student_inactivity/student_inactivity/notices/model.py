from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

from ..core.enums import NoticeCategory


@dataclass(frozen=True)
class NotificationRecord:
    """Notice to be stored for recipients; delivery (e-mail, push) happens elsewhere.

    ``expiry`` is the day the warning stops being relevant (for inactivity
    warnings: the day the student would be deactivated).
    """

    category: NoticeCategory
    title: str
    content: str
    tenant_id: Optional[int]
    recipient_person_ids: tuple[int, ...]
    expiry: Optional[date]
    priority: str = "high"
    payload: dict[str, Any] = field(default_factory=dict)
