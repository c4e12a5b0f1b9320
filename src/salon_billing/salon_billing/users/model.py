from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import RecipientModel, StaffRole


@dataclass(frozen=True)
class StaffMember:
    """A person who can receive notifications or change settings.

    `source` records which collection the record lives in, since admins and managers
    exist both as credential accounts and as face-auth employees.
    """

    member_id: str
    name: str
    role: StaffRole
    source: RecipientModel
    email: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None

    @property
    def display_name(self) -> str:
        return self.name or self.email or self.member_id


@dataclass(frozen=True)
class Actor:
    """Caller identity forwarded by the upstream auth layer."""

    user_id: str
    role: Optional[StaffRole]
