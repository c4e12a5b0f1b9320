from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from ..core.enums import GSTScope
from .model import GSTConfig


class GSTConfigRepository(Protocol):
    def get_current(self) -> Optional[GSTConfig]:
        raise NotImplementedError

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
        """Replace the current configuration and record the change in the history log."""

        raise NotImplementedError
