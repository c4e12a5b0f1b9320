from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..core.constants import BILL_NUMBER_PREFIX, CLIENT_ID_PREFIX, CLIENT_ID_WIDTH, VISIT_ID_PREFIX


def _millis(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def bill_number(moment: datetime) -> str:
    # Millisecond resolution: two saves in the same millisecond collide.
    return f"{BILL_NUMBER_PREFIX}{_millis(moment)}"


def visit_id(moment: datetime) -> str:
    return f"{VISIT_ID_PREFIX}{_millis(moment)}"


def format_client_id(sequence: int) -> str:
    return f"{CLIENT_ID_PREFIX}{int(sequence):0{CLIENT_ID_WIDTH}d}"


def parse_client_sequence(client_id: Optional[str]) -> int:
    """Numeric part of a CLT### id, 0 when missing or malformed."""
    if not client_id or not client_id.startswith(CLIENT_ID_PREFIX):
        return 0
    digits = client_id[len(CLIENT_ID_PREFIX):]
    return int(digits) if digits.isdigit() else 0
