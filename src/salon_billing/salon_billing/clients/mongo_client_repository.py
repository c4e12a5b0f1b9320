from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from pymongo import DESCENDING, ReturnDocument

from ..billing.model import ServiceLineItem
from ..common.identifiers import format_client_id, parse_client_sequence
from ..core.enums import PaymentStatus
from ..database.connection import MongoConnection
from ..database.mongo_base import as_datetime, as_float, id_str, maybe_object_id, opt_str
from .model import Client, Visit
from .repository import ClientRepository

_COUNTER_KEY = "clientId"


def _ref_filter(ref: str) -> Dict[str, Any]:
    oid = maybe_object_id(ref)
    return {"_id": oid} if oid else {"clientId": ref}


def _visit_from_doc(d: Dict[str, Any]) -> Visit:
    final_amount = d.get("finalAmount")
    total_amount = as_float(d.get("totalAmount"))
    return Visit(
        visit_id=d.get("visitId") or "",
        date=as_datetime(d.get("date")) or datetime.min,
        services=tuple(
            ServiceLineItem(name=s.get("name") or "", price=as_float(s.get("price"))) for s in d.get("services") or []
        ),
        total_amount=total_amount,
        final_amount=as_float(final_amount, total_amount),
        payment_status=PaymentStatus(d.get("paymentStatus") or "pending"),
        bill_number=d.get("billNumber"),
        bill_id=opt_str(d.get("billId")),
        subtotal=d.get("subtotal"),
        discount=as_float(d.get("discount")),
        gst_amount=d.get("gstAmount"),
        notes=d.get("notes") or "",
        specialist=d.get("specialist") or "",
    )


def _visit_to_doc(v: Visit) -> Dict[str, Any]:
    return {
        "visitId": v.visit_id,
        "date": v.date,
        "services": [{"name": s.name, "price": s.price} for s in v.services],
        "totalAmount": v.total_amount,
        "billNumber": v.bill_number,
        "billId": maybe_object_id(v.bill_id) or v.bill_id,
        "subtotal": v.subtotal,
        "discount": v.discount,
        "gstAmount": v.gst_amount,
        "finalAmount": v.final_amount,
        "paymentStatus": v.payment_status.value,
        "notes": v.notes,
        "specialist": v.specialist,
    }


def _from_doc(d: Dict[str, Any]) -> Client:
    return Client(
        id=id_str(d),
        client_id=d.get("clientId") or "",
        name=d.get("name") or "",
        phone_number=d.get("phoneNumber") or "",
        total_visits=int(d.get("totalVisits") or 0),
        total_spent=as_float(d.get("totalSpent")),
        last_visit=as_datetime(d.get("lastVisit")),
        visits=tuple(_visit_from_doc(v) for v in d.get("visits") or []),
        created_at=as_datetime(d.get("createdAt")),
        updated_at=as_datetime(d.get("updatedAt")),
    )


class MongoClientRepository(ClientRepository):
    def __init__(self, conn: MongoConnection):
        self._conn = conn

    @property
    def _col(self):
        return self._conn.db["clients"]

    @property
    def _counters(self):
        return self._conn.db["counters"]

    def get(self, ref: str) -> Optional[Client]:
        doc = self._col.find_one(_ref_filter(ref))
        return _from_doc(doc) if doc else None

    def find_by_phone(self, phone_number: str) -> Optional[Client]:
        doc = self._col.find_one({"phoneNumber": {"$regex": f"^{re.escape(phone_number)}$", "$options": "i"}})
        return _from_doc(doc) if doc else None

    def phone_taken(self, phone_number: str, *, exclude_ref: Optional[str] = None) -> bool:
        query: Dict[str, Any] = {"phoneNumber": phone_number}
        if exclude_ref:
            current = self._col.find_one(_ref_filter(exclude_ref), {"_id": 1})
            if current:
                query["_id"] = {"$ne": current["_id"]}
        return self._col.count_documents(query, limit=1) > 0

    def _highest_existing_sequence(self) -> int:
        highest = 0
        for doc in self._col.find({"clientId": {"$regex": "^CLT"}}, {"clientId": 1}):
            highest = max(highest, parse_client_sequence(doc.get("clientId")))
        return highest

    def next_client_id(self) -> str:
        # Atomic $inc; the counter is seeded once from existing ids so numbering continues.
        if self._counters.find_one({"_id": _COUNTER_KEY}) is None:
            self._counters.update_one(
                {"_id": _COUNTER_KEY}, {"$max": {"seq": self._highest_existing_sequence()}}, upsert=True
            )
        doc = self._counters.find_one_and_update(
            {"_id": _COUNTER_KEY}, {"$inc": {"seq": 1}}, upsert=True, return_document=ReturnDocument.AFTER
        )
        return format_client_id(int(doc["seq"]))

    def create(self, *, client_id: str, name: str, phone_number: str, now: datetime) -> Client:
        doc = {
            "clientId": client_id,
            "name": name,
            "phoneNumber": phone_number,
            "totalVisits": 0,
            "totalSpent": 0,
            "lastVisit": None,
            "visits": [],
            "createdAt": now,
            "updatedAt": now,
        }
        result = self._col.insert_one(doc)
        doc["_id"] = result.inserted_id
        return _from_doc(doc)

    def append_visit(self, ref: str, visit: Visit, *, amount: float, at: datetime) -> Optional[Client]:
        doc = self._col.find_one_and_update(
            _ref_filter(ref),
            {
                "$push": {"visits": _visit_to_doc(visit)},
                "$inc": {"totalVisits": 1, "totalSpent": amount},
                "$set": {"lastVisit": at, "updatedAt": at},
            },
            return_document=ReturnDocument.AFTER,
        )
        return _from_doc(doc) if doc else None

    def list(self, *, skip: int = 0, limit: int = 10) -> tuple[Sequence[Client], int]:
        cursor = self._col.find({}, {"visits": 0}).sort("createdAt", DESCENDING).skip(int(skip)).limit(int(limit))
        return [_from_doc(d) for d in cursor], self._col.count_documents({})

    def update(self, ref: str, *, name: Optional[str] = None, phone_number: Optional[str] = None, now: datetime) -> Optional[Client]:
        changes: Dict[str, Any] = {"updatedAt": now}
        if name is not None:
            changes["name"] = name
        if phone_number is not None:
            changes["phoneNumber"] = phone_number
        doc = self._col.find_one_and_update(_ref_filter(ref), {"$set": changes}, return_document=ReturnDocument.AFTER)
        return _from_doc(doc) if doc else None

    def delete(self, ref: str) -> Optional[Client]:
        doc = self._col.find_one_and_delete(_ref_filter(ref))
        return _from_doc(doc) if doc else None

    def search(self, text: str) -> Sequence[Client]:
        pattern = {"$regex": re.escape(text), "$options": "i"}
        cursor = self._col.find(
            {"$or": [{"name": pattern}, {"phoneNumber": pattern}, {"clientId": pattern}]}, {"visits": 0}
        )
        return [_from_doc(d) for d in cursor]

    def count(self, *, created_from: Optional[datetime] = None) -> int:
        return self._col.count_documents({"createdAt": {"$gte": created_from}} if created_from else {})

    def monthly_created(self, *, year: int) -> dict[int, int]:
        rows = self._col.aggregate(
            [
                {"$match": {"createdAt": {"$gte": datetime(year, 1, 1), "$lt": datetime(year + 1, 1, 1)}}},
                {"$group": {"_id": {"$month": "$createdAt"}, "count": {"$sum": 1}}},
            ]
        )
        return {int(r["_id"]): int(r["count"]) for r in rows}

    def recent(self, *, limit: int) -> Sequence[Client]:
        cursor = self._col.find({}, {"visits": 0}).sort("createdAt", DESCENDING).limit(int(limit))
        return [_from_doc(d) for d in cursor]
