from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from pymongo import DESCENDING

from ..core.enums import RecipientModel, StaffRole
from ..database.connection import MongoConnection
from ..database.mongo_base import as_datetime, id_str, maybe_object_id
from .model import StaffMember
from .repository import StaffRepository


def _to_member(doc: Dict[str, Any], *, role: StaffRole, source: RecipientModel) -> StaffMember:
    return StaffMember(
        member_id=id_str(doc),
        name=doc.get("name") or "",
        email=doc.get("email"),
        role=role,
        source=source,
        is_active=bool(doc.get("isActive", True)),
        created_at=as_datetime(doc.get("createdAt")),
    )


class MongoStaffRepository(StaffRepository):
    def __init__(self, conn: MongoConnection):
        self._conn = conn

    @property
    def _admins(self):
        return self._conn.db["admins"]

    @property
    def _managers(self):
        return self._conn.db["managers"]

    @property
    def _employees(self):
        return self._conn.db["employees"]

    def get_admin(self, admin_id: str) -> Optional[StaffMember]:
        oid = maybe_object_id(admin_id)
        doc = self._admins.find_one({"_id": oid}) if oid else self._admins.find_one({"adminId": admin_id})
        if not doc:
            return None
        return _to_member(doc, role=StaffRole.ADMIN, source=RecipientModel.ADMIN)

    def latest_admin(self) -> Optional[StaffMember]:
        doc = self._admins.find_one({}, sort=[("createdAt", DESCENDING)])
        if not doc:
            return None
        return _to_member(doc, role=StaffRole.ADMIN, source=RecipientModel.ADMIN)

    def list_admins(self) -> Sequence[StaffMember]:
        return [
            _to_member(d, role=StaffRole.ADMIN, source=RecipientModel.ADMIN)
            for d in self._admins.find({}).sort("createdAt", DESCENDING)
        ]

    def list_managers(self) -> Sequence[StaffMember]:
        return [
            _to_member(d, role=StaffRole.MANAGER, source=RecipientModel.MANAGER)
            for d in self._managers.find({})
        ]

    def list_active_employees(self, role: StaffRole) -> Sequence[StaffMember]:
        cursor = self._employees.find({"role": role.value, "isActive": {"$ne": False}})
        return [_to_member(d, role=role, source=RecipientModel.EMPLOYEE) for d in cursor]
