from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import iso
from ..core.enums import NotificationPriority, NotificationType, RecipientModel, RecipientType


@dataclass(frozen=True)
class NotificationDraft:
    """Payload of a notification before recipients are resolved."""

    title: str
    message: str
    type: NotificationType
    priority: NotificationPriority = NotificationPriority.MEDIUM
    related_entity_type: str = "none"
    related_entity_id: Optional[str] = None
    scheduled_for: Optional[datetime] = None


@dataclass(frozen=True)
class Notification:
    title: str
    message: str
    type: NotificationType
    recipient_type: RecipientType
    recipient_model: RecipientModel
    recipient_id: Optional[str] = None
    priority: NotificationPriority = NotificationPriority.MEDIUM
    related_entity_type: str = "none"
    related_entity_id: Optional[str] = None
    is_read: bool = False
    is_active: bool = True
    scheduled_for: Optional[datetime] = None
    sent_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    notification_id: Optional[str] = None

    @classmethod
    def for_recipient(
        cls,
        draft: NotificationDraft,
        *,
        recipient_type: RecipientType,
        recipient_model: RecipientModel,
        recipient_id: Optional[str],
        created_at: datetime,
    ) -> "Notification":
        return cls(
            title=draft.title,
            message=draft.message,
            type=draft.type,
            recipient_type=recipient_type,
            recipient_model=recipient_model,
            recipient_id=recipient_id,
            priority=draft.priority,
            related_entity_type=draft.related_entity_type,
            related_entity_id=draft.related_entity_id,
            scheduled_for=draft.scheduled_for,
            created_at=created_at,
        )

    def with_id(self, notification_id: str) -> "Notification":
        return replace(self, notification_id=notification_id)

    def to_dict(self) -> dict:
        return {
            "id": self.notification_id,
            "title": self.title,
            "message": self.message,
            "type": self.type.value,
            "recipientType": self.recipient_type.value,
            "recipientId": self.recipient_id,
            "recipientModel": self.recipient_model.value,
            "priority": self.priority.value,
            "relatedEntityType": self.related_entity_type,
            "relatedEntityId": self.related_entity_id,
            "isRead": self.is_read,
            "isActive": self.is_active,
            "scheduledFor": iso(self.scheduled_for),
            "sentAt": iso(self.sent_at),
            "createdAt": iso(self.created_at),
        }
