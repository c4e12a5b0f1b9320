from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pymongo import ReturnDocument

from ..core.enums import GSTScope
from ..database.connection import MongoConnection
from ..database.mongo_base import as_datetime, id_str, maybe_object_id
from .model import GSTConfig
from .repository import GSTConfigRepository

# Fixed key keeps the configuration a singleton document.
_CURRENT_KEY = "current"


def _from_doc(d: Dict[str, Any]) -> GSTConfig:
    return GSTConfig(
        config_id=id_str(d),
        gst_percentage=float(d.get("gstPercentage", 0)),
        is_active=bool(d.get("isActive", True)),
        applied_to=GSTScope(d.get("appliedTo") or "all"),
        updated_by=str(d.get("updatedBy") or ""),
        updated_by_name=d.get("updatedByName") or "",
        created_at=as_datetime(d.get("createdAt")),
        updated_at=as_datetime(d.get("updatedAt")),
    )


class MongoGSTConfigRepository(GSTConfigRepository):
    def __init__(self, conn: MongoConnection):
        self._conn = conn

    @property
    def _current(self):
        return self._conn.db["gst_config"]

    @property
    def _history(self):
        return self._conn.db["gst_config_history"]

    def get_current(self) -> Optional[GSTConfig]:
        doc = self._current.find_one({"key": _CURRENT_KEY})
        return _from_doc(doc) if doc else None

    def save(
        self,
        *,
        gst_percentage: float,
        is_active: bool,
        applied_to: GSTScope,
        updated_by: str,
        updated_by_name: str,
        now: datetime,
    ) -> GSTConfig:
        values = {
            "gstPercentage": gst_percentage,
            "isActive": is_active,
            "appliedTo": applied_to.value,
            "updatedBy": maybe_object_id(updated_by) or updated_by,
            "updatedByName": updated_by_name,
            "updatedAt": now,
        }
        doc = self._current.find_one_and_update(
            {"key": _CURRENT_KEY},
            {"$set": values, "$setOnInsert": {"key": _CURRENT_KEY, "createdAt": now}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        self._history.insert_one({**values, "configId": doc["_id"], "changedAt": now})
        return _from_doc(doc)
