from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import iso
from ..core.enums import GSTScope


@dataclass(frozen=True)
class GSTConfig:
    """The single tax-rate record. Bills copy the effective rate when they are created."""

    config_id: str
    gst_percentage: float
    is_active: bool
    applied_to: GSTScope
    updated_by: str
    updated_by_name: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def effective_percentage(self) -> float:
        return float(self.gst_percentage) if self.is_active else 0.0

    def to_dict(self) -> dict:
        return {
            "id": self.config_id,
            "gstPercentage": self.gst_percentage,
            "isActive": self.is_active,
            "appliedTo": self.applied_to.value,
            "updatedBy": self.updated_by,
            "updatedByName": self.updated_by_name,
            "createdAt": iso(self.created_at),
            "updatedAt": iso(self.updated_at),
        }
