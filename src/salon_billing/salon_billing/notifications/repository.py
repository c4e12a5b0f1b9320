from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import NotificationType, StaffRole
from .model import Notification


class NotificationRepository(Protocol):
    def insert_many(self, notifications: Sequence[Notification]) -> int:
        """Bulk insert; returns how many documents were written."""

        raise NotImplementedError

    def insert_one(self, notification: Notification) -> Notification:
        raise NotImplementedError

    def list_for_recipient(
        self,
        *,
        recipient_id: str,
        role: Optional[StaffRole],
        now: datetime,
        type: Optional[NotificationType] = None,
        is_read: Optional[bool] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[Sequence[Notification], int, int]:
        """Return (page, total, unread) of active, already-due notifications."""

        raise NotImplementedError

    def find_for_recipient(
        self, *, notification_id: str, recipient_id: str, role: Optional[StaffRole]
    ) -> Optional[Notification]:
        """The recipient's own notification, or one addressed to the recipient's whole role."""

        raise NotImplementedError

    def set_flags(self, notification_id: str, *, is_read: Optional[bool] = None, is_active: Optional[bool] = None) -> bool:
        raise NotImplementedError

    def mark_all_read(self, *, recipient_id: str, role: Optional[StaffRole]) -> int:
        raise NotImplementedError

    def count_unread(self, *, recipient_id: str, now: datetime) -> int:
        raise NotImplementedError

    def upcoming_reminders(self, *, recipient_id: str, start: datetime, end: datetime) -> Sequence[Notification]:
        raise NotImplementedError
