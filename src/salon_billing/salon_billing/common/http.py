from __future__ import annotations

import logging
from functools import wraps
from typing import Any

from flask import jsonify, request

from ..core.enums import StaffRole
from ..core.exceptions import DomainError, ValidationError
from ..users.model import Actor

logger = logging.getLogger(__name__)


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def current_actor() -> Actor:
    user_id = (request.headers.get("X-User-Id") or "").strip()
    if not user_id:
        raise ValidationError("X-User-Id header is required")
    raw_role = (request.headers.get("X-User-Role") or "").strip().lower()
    try:
        role = StaffRole(raw_role) if raw_role else None
    except ValueError:
        role = None
    return Actor(user_id=user_id, role=role)


def success(message: str, data: Any = None, status: int = 200):
    return jsonify({"success": True, "message": message, "data": data}), status


def failure(message: str, error: str, status: int):
    return jsonify({"success": False, "message": message, "error": error}), status


def json_endpoint(failure_message: str):
    """Wrap a view returning (message, data[, status]) into the standard envelope.

    DomainError subclasses map to their status code; anything else is a 500.
    """

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                result = view(*args, **kwargs)
            except DomainError as e:
                if e.status_code >= 500:
                    logger.error("%s: %s", failure_message, e)
                return failure(str(e), str(e), e.status_code)
            except Exception as e:
                logger.exception(failure_message)
                return failure(failure_message, str(e), 500)

            if len(result) == 3:
                message, data, status = result
            else:
                message, data = result
                status = 200
            return success(message, data, status)

        return wrapper

    return decorator
