from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import StaffRole
from .model import StaffMember


class StaffRepository(Protocol):
    """Read-only view over the Admin, Manager and Employee collections."""

    def get_admin(self, admin_id: str) -> Optional[StaffMember]:
        raise NotImplementedError

    def latest_admin(self) -> Optional[StaffMember]:
        raise NotImplementedError

    def list_admins(self) -> Sequence[StaffMember]:
        raise NotImplementedError

    def list_managers(self) -> Sequence[StaffMember]:
        raise NotImplementedError

    def list_active_employees(self, role: StaffRole) -> Sequence[StaffMember]:
        """Employees (face-auth accounts) holding `role` with isActive != false."""

        raise NotImplementedError
