from __future__ import annotations

from typing import Protocol

from .model import NotificationRecord


class NoticeRepository(Protocol):
    def create(self, notice: NotificationRecord) -> int:
        raise NotImplementedError
