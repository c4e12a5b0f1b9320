from __future__ import annotations

import math
import re
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Type, TypeVar

from ..core.exceptions import ValidationError
from .datetime_utils import parse_iso_datetime

E = TypeVar("E", bound=Enum)

_PHONE_NOISE = re.compile(r"[\s\-()+]")


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_number(value: Any, field_name: str, *, minimum: Optional[float] = None) -> float:
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field_name} is required")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if not math.isfinite(number):
        raise ValidationError(f"{field_name} must be a number")
    if minimum is not None and number < minimum:
        raise ValidationError(f"{field_name} must be >= {minimum:g}")
    return number


def require_choice(value: Any, enum_cls: Type[E], field_name: str, *, error=ValidationError) -> E:
    try:
        return enum_cls(value)
    except ValueError:
        options = ", ".join(member.value for member in enum_cls)
        raise error(f"Invalid {field_name}. Valid options: {options}")


def optional_datetime(value: Any, field_name: str) -> Optional[datetime]:
    try:
        return parse_iso_datetime(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an ISO date")


def normalize_phone(phone: str) -> str:
    """Strip spaces, dashes, parentheses and the plus sign from a phone number."""
    return _PHONE_NOISE.sub("", phone or "")


def parse_page(page: Any, limit: Any, *, default_limit: int) -> tuple[int, int]:
    try:
        page_i = int(page) if page not in (None, "") else 1
        limit_i = int(limit) if limit not in (None, "") else default_limit
    except (TypeError, ValueError):
        raise ValidationError("page and limit must be integers")
    if page_i < 1 or limit_i < 1:
        raise ValidationError("page and limit must be positive")
    return page_i, limit_i
