from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from pymongo import ASCENDING, DESCENDING

from ..core.enums import NotificationPriority, NotificationType, RecipientModel, RecipientType, StaffRole
from ..database.connection import MongoConnection
from ..database.mongo_base import as_datetime, id_str, maybe_object_id, opt_str
from .model import Notification
from .repository import NotificationRepository


def _recipient_value(recipient_id: Optional[str]) -> Any:
    return maybe_object_id(recipient_id) or recipient_id


def _due_clause(now: datetime) -> dict:
    return {
        "$or": [
            {"scheduledFor": {"$exists": False}},
            {"scheduledFor": None},
            {"scheduledFor": {"$lte": now}},
            {"sentAt": {"$ne": None}},
        ]
    }


def _audience_clause(recipient_id: str, role: Optional[StaffRole]) -> dict:
    """Addressed to the user, or to the user's whole role without a specific recipient."""
    rid = _recipient_value(recipient_id)
    if role in (StaffRole.ADMIN, StaffRole.MANAGER):
        return {
            "$or": [
                {"recipientId": rid},
                {"recipientId": None, "recipientType": {"$in": [role.value, RecipientType.BOTH.value]}},
            ]
        }
    return {"recipientId": rid}


def _to_doc(n: Notification) -> Dict[str, Any]:
    return {
        "title": n.title,
        "message": n.message,
        "type": n.type.value,
        "recipientType": n.recipient_type.value,
        "recipientId": _recipient_value(n.recipient_id),
        "recipientModel": n.recipient_model.value,
        "priority": n.priority.value,
        "relatedEntityType": n.related_entity_type,
        "relatedEntityId": _recipient_value(n.related_entity_id),
        "isRead": n.is_read,
        "isActive": n.is_active,
        "scheduledFor": n.scheduled_for,
        "sentAt": n.sent_at,
        "createdAt": n.created_at,
        "updatedAt": n.created_at,
    }


def _from_doc(d: Dict[str, Any]) -> Notification:
    return Notification(
        notification_id=id_str(d),
        title=d["title"],
        message=d["message"],
        type=NotificationType(d["type"]),
        recipient_type=RecipientType(d["recipientType"]),
        recipient_model=RecipientModel(d["recipientModel"]),
        recipient_id=opt_str(d.get("recipientId")),
        priority=NotificationPriority(d.get("priority") or "medium"),
        related_entity_type=d.get("relatedEntityType") or "none",
        related_entity_id=opt_str(d.get("relatedEntityId")),
        is_read=bool(d.get("isRead", False)),
        is_active=bool(d.get("isActive", True)),
        scheduled_for=as_datetime(d.get("scheduledFor")),
        sent_at=as_datetime(d.get("sentAt")),
        created_at=as_datetime(d.get("createdAt")),
    )


class MongoNotificationRepository(NotificationRepository):
    def __init__(self, conn: MongoConnection):
        self._conn = conn

    @property
    def _col(self):
        return self._conn.db["notifications"]

    def insert_many(self, notifications: Sequence[Notification]) -> int:
        if not notifications:
            return 0
        result = self._col.insert_many([_to_doc(n) for n in notifications])
        return len(result.inserted_ids)

    def insert_one(self, notification: Notification) -> Notification:
        result = self._col.insert_one(_to_doc(notification))
        return notification.with_id(str(result.inserted_id))

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
        query: Dict[str, Any] = {
            "isActive": True,
            "$and": [_due_clause(now), _audience_clause(recipient_id, role)],
        }
        if type is not None:
            query["type"] = type.value
        if is_read is not None:
            query["isRead"] = is_read

        cursor = self._col.find(query).sort("createdAt", DESCENDING).skip(int(skip)).limit(int(limit))
        items = [_from_doc(d) for d in cursor]
        total = self._col.count_documents(query)
        unread = self._col.count_documents({**query, "isRead": False})
        return items, total, unread

    def find_for_recipient(
        self, *, notification_id: str, recipient_id: str, role: Optional[StaffRole]
    ) -> Optional[Notification]:
        oid = maybe_object_id(notification_id)
        if oid is None:
            return None
        doc = self._col.find_one({"_id": oid, "isActive": True, **_audience_clause(recipient_id, role)})
        return _from_doc(doc) if doc else None

    def set_flags(self, notification_id: str, *, is_read: Optional[bool] = None, is_active: Optional[bool] = None) -> bool:
        oid = maybe_object_id(notification_id)
        if oid is None:
            return False
        changes: Dict[str, Any] = {"updatedAt": datetime.now()}
        if is_read is not None:
            changes["isRead"] = is_read
        if is_active is not None:
            changes["isActive"] = is_active
        return self._col.update_one({"_id": oid}, {"$set": changes}).matched_count > 0

    def mark_all_read(self, *, recipient_id: str, role: Optional[StaffRole]) -> int:
        query = {"isRead": False, "isActive": True, **_audience_clause(recipient_id, role)}
        return self._col.update_many(query, {"$set": {"isRead": True}}).modified_count

    def count_unread(self, *, recipient_id: str, now: datetime) -> int:
        query = {"recipientId": _recipient_value(recipient_id), "isRead": False, "isActive": True, **_due_clause(now)}
        return self._col.count_documents(query)

    def upcoming_reminders(self, *, recipient_id: str, start: datetime, end: datetime) -> Sequence[Notification]:
        cursor = self._col.find(
            {
                "recipientId": _recipient_value(recipient_id),
                "type": NotificationType.ADVANCE_BOOKING_REMINDER.value,
                "scheduledFor": {"$gte": start, "$lte": end},
                "isActive": True,
            }
        ).sort("scheduledFor", ASCENDING)
        return [_from_doc(d) for d in cursor]
