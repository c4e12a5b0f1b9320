from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from bson import ObjectId


def maybe_object_id(id_str: Any) -> Optional[ObjectId]:
    """ObjectId for valid hex strings, None otherwise (used where ids can also be codes)."""
    if isinstance(id_str, ObjectId):
        return id_str
    if id_str and ObjectId.is_valid(str(id_str)):
        return ObjectId(str(id_str))
    return None


def id_str(doc: Dict[str, Any]) -> str:
    return str(doc["_id"])


def opt_str(value: Any) -> Optional[str]:
    return str(value) if value is not None else None


def as_float(value: Any, default: float = 0.0) -> float:
    if value is None:
        return default
    return float(value)


def as_datetime(value: Any) -> Optional[datetime]:
    return value if isinstance(value, datetime) else None
