from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Callable, Mapping, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.pagination import Page
from ..common.validators import optional_datetime, parse_page, require_choice, require_non_empty
from ..core.constants import DEFAULT_NOTIFICATION_PAGE_SIZE, REMINDER_WINDOW_HOURS
from ..core.enums import (
    NotificationPriority,
    NotificationType,
    RecipientModel,
    RecipientType,
    StaffRole,
)
from ..core.exceptions import DependencyError, NotFoundError, ValidationError
from ..users.model import Actor, StaffMember
from ..users.repository import StaffRepository
from .model import Notification, NotificationDraft
from .repository import NotificationRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationDispatch:
    message: str
    notification: Optional[Notification] = None


class NotificationService:
    """Stores notifications and fans one event out to every admin and/or manager.

    Recipients come from two places per role: the dedicated credential collection
    (Admin / Manager) and the shared Employee collection (face-auth accounts). Each
    notification is tagged with the collection its recipient came from.
    """

    def __init__(
        self,
        notifications: NotificationRepository,
        staff: StaffRepository,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._notifications = notifications
        self._staff = staff
        self._clock = clock

    # -------- Fan-out --------
    def _fan_out(self, draft: NotificationDraft, recipient_type: RecipientType, recipients: Sequence[StaffMember]) -> bool:
        now = self._clock()
        batch = [
            Notification.for_recipient(
                draft,
                recipient_type=recipient_type,
                recipient_model=member.source,
                recipient_id=member.member_id,
                created_at=now,
            )
            for member in recipients
        ]
        if not batch:
            logger.warning("No %s found to send notification %r", recipient_type.value, draft.title)
            return False
        written = self._notifications.insert_many(batch)
        logger.info("Created %d %s notification(s) for %r", written, recipient_type.value, draft.title)
        return True

    def notify_all_admins(self, draft: NotificationDraft) -> bool:
        """Never raises; returns False when nothing was written."""
        try:
            recipients = list(self._staff.list_admins())
            recipients.extend(self._staff.list_active_employees(StaffRole.ADMIN))
            return self._fan_out(draft, RecipientType.ADMIN, recipients)
        except Exception:
            logger.exception("Error creating admin notifications")
            return False

    def notify_all_managers(self, draft: NotificationDraft) -> bool:
        """Never raises; returns False when nothing was written."""
        try:
            recipients = list(self._staff.list_managers())
            recipients.extend(self._staff.list_active_employees(StaffRole.MANAGER))
            return self._fan_out(draft, RecipientType.MANAGER, recipients)
        except Exception:
            logger.exception("Error creating manager notifications")
            return False

    def notify_admins_and_managers(self, draft: NotificationDraft) -> bool:
        """Run both fan-outs concurrently; True if either wrote anything."""
        with ThreadPoolExecutor(max_workers=2) as pool:
            admins = pool.submit(self.notify_all_admins, draft)
            managers = pool.submit(self.notify_all_managers, draft)
            return admins.result() or managers.result()

    # -------- Creation --------
    def create_notification(self, data: Mapping) -> NotificationDispatch:
        title = require_non_empty(data.get("title"), "title")
        message = require_non_empty(data.get("message"), "message")
        if not data.get("type") or not data.get("recipientType"):
            raise ValidationError("Title, message, type, and recipientType are required")
        ntype = require_choice(data.get("type"), NotificationType, "type")
        recipient_type = require_choice(data.get("recipientType"), RecipientType, "recipientType")
        priority = require_choice(data.get("priority") or "medium", NotificationPriority, "priority")

        draft = NotificationDraft(
            title=title,
            message=message,
            type=ntype,
            priority=priority,
            related_entity_type=data.get("relatedEntityType") or "none",
            related_entity_id=data.get("relatedEntityId"),
            scheduled_for=optional_datetime(data.get("scheduledFor"), "scheduledFor"),
        )

        recipient_id = data.get("recipientId")
        if not recipient_id:
            return self._broadcast(draft, recipient_type)

        if data.get("recipientModel"):
            model = require_choice(data.get("recipientModel"), RecipientModel, "recipientModel")
        else:
            model = RecipientModel.ADMIN if recipient_type == RecipientType.ADMIN else RecipientModel.MANAGER

        notification = Notification.for_recipient(
            draft,
            recipient_type=recipient_type,
            recipient_model=model,
            recipient_id=str(recipient_id),
            created_at=self._clock(),
        )
        return NotificationDispatch("Notification created successfully", self._notifications.insert_one(notification))

    def _broadcast(self, draft: NotificationDraft, recipient_type: RecipientType) -> NotificationDispatch:
        if recipient_type == RecipientType.ADMIN:
            ok, audience = self.notify_all_admins(draft), "all admins"
        elif recipient_type == RecipientType.MANAGER:
            ok, audience = self.notify_all_managers(draft), "all managers"
        else:
            ok, audience = self.notify_admins_and_managers(draft), "admins and managers"

        if not ok:
            raise DependencyError(f"Failed to send notifications to {audience}")
        return NotificationDispatch(f"Notifications sent to {audience} successfully")

    # -------- Inbox --------
    def list_for_user(
        self,
        actor: Actor,
        *,
        page=None,
        limit=None,
        type: Optional[str] = None,
        is_read: Optional[str] = None,
    ) -> tuple[Page[Notification], int]:
        page_i, limit_i = parse_page(page, limit, default_limit=DEFAULT_NOTIFICATION_PAGE_SIZE)
        ntype = require_choice(type, NotificationType, "type") if type else None
        read_flag = None if is_read in (None, "") else str(is_read).lower() == "true"

        items, total, unread = self._notifications.list_for_recipient(
            recipient_id=actor.user_id,
            role=actor.role,
            now=self._clock(),
            type=ntype,
            is_read=read_flag,
            skip=(page_i - 1) * limit_i,
            limit=limit_i,
        )
        return Page(items=items, page=page_i, limit=limit_i, total=total), unread

    def _require_own(self, actor: Actor, notification_id: str) -> Notification:
        notification = self._notifications.find_for_recipient(
            notification_id=notification_id, recipient_id=actor.user_id, role=actor.role
        )
        if not notification:
            raise NotFoundError("Notification not found")
        return notification

    def mark_as_read(self, actor: Actor, notification_id: str) -> Notification:
        notification = self._require_own(actor, notification_id)
        self._notifications.set_flags(notification_id, is_read=True)
        return replace(notification, is_read=True)

    def mark_all_as_read(self, actor: Actor) -> int:
        return self._notifications.mark_all_read(recipient_id=actor.user_id, role=actor.role)

    def delete(self, actor: Actor, notification_id: str) -> None:
        self._require_own(actor, notification_id)
        self._notifications.set_flags(notification_id, is_active=False)

    def unread_count(self, actor: Actor) -> int:
        return self._notifications.count_unread(recipient_id=actor.user_id, now=self._clock())

    def upcoming_reminders(self, actor: Actor) -> Sequence[Notification]:
        now = self._clock()
        return self._notifications.upcoming_reminders(
            recipient_id=actor.user_id, start=now, end=now + timedelta(hours=REMINDER_WINDOW_HOURS)
        )
