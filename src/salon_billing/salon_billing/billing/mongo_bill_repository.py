from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from pymongo import DESCENDING, ReturnDocument

from ..common.identifiers import bill_number
from ..core.enums import PaymentMethod, PaymentStatus
from ..database.connection import MongoConnection
from ..database.mongo_base import as_datetime, as_float, id_str, maybe_object_id
from .model import Bill, BillQuery, NewBill, ServiceLineItem
from .repository import BillRepository


def _service_from_doc(d: Dict[str, Any]) -> ServiceLineItem:
    return ServiceLineItem(
        name=d.get("name") or "",
        price=as_float(d.get("price")),
        duration=d.get("duration"),
        description=d.get("description"),
    )


def _from_doc(d: Dict[str, Any]) -> Bill:
    return Bill(
        bill_id=id_str(d),
        bill_number=d["billNumber"],
        client_id=str(d["clientId"]),
        client_name=d["clientName"],
        client_phone=d.get("clientPhone"),
        services=tuple(_service_from_doc(s) for s in d.get("services") or []),
        subtotal=as_float(d.get("subtotal")),
        discount=as_float(d.get("discount")),
        amount_before_gst=as_float(d.get("amountBeforeGST")),
        gst_percentage=as_float(d.get("gstPercentage")),
        gst_amount=as_float(d.get("gstAmount")),
        total_amount=as_float(d.get("totalAmount")),
        final_amount=as_float(d.get("finalAmount")),
        payment_method=PaymentMethod(d.get("paymentMethod") or "cash"),
        payment_status=PaymentStatus(d.get("paymentStatus") or "pending"),
        appointment_date=as_datetime(d.get("appointmentDate")),
        start_time=d.get("startTime"),
        specialist=d.get("specialist"),
        total_duration=d.get("totalDuration"),
        notes=d.get("notes"),
        paid_at=as_datetime(d.get("paidAt")),
        created_at=as_datetime(d.get("createdAt")),
        updated_at=as_datetime(d.get("updatedAt")),
    )


def _filter(query: BillQuery) -> Dict[str, Any]:
    f: Dict[str, Any] = {}
    if query.client_id:
        f["clientId"] = maybe_object_id(query.client_id) or query.client_id
    if query.text:
        pattern = {"$regex": re.escape(query.text), "$options": "i"}
        f["$or"] = [{"clientName": pattern}, {"clientPhone": pattern}]
    if query.status is not None:
        f["paymentStatus"] = query.status.value
    if query.created_from or query.created_to:
        f["createdAt"] = {}
        if query.created_from:
            f["createdAt"]["$gte"] = query.created_from
        if query.created_to:
            f["createdAt"]["$lte"] = query.created_to
    return f


def _created_range(created_from: Optional[datetime], created_to: Optional[datetime]) -> Dict[str, Any]:
    if not created_from and not created_to:
        return {}
    rng: Dict[str, Any] = {}
    if created_from:
        rng["$gte"] = created_from
    if created_to:
        rng["$lt"] = created_to
    return {"createdAt": rng}


class MongoBillRepository(BillRepository):
    def __init__(self, conn: MongoConnection):
        self._conn = conn

    @property
    def _col(self):
        return self._conn.db["bills"]

    def _sum(self, match: Dict[str, Any]) -> float:
        rows = list(self._col.aggregate([{"$match": match}, {"$group": {"_id": None, "total": {"$sum": "$finalAmount"}}}]))
        return float(rows[0]["total"]) if rows else 0.0

    def create(self, bill: NewBill) -> Bill:
        now = datetime.now()
        a = bill.amounts
        doc = {
            "clientId": maybe_object_id(bill.client_id) or bill.client_id,
            "clientName": bill.client_name,
            "clientPhone": bill.client_phone,
            "services": [s.to_dict() for s in bill.services],
            "appointmentDate": bill.appointment_date,
            "startTime": bill.start_time,
            "specialist": bill.specialist,
            "totalDuration": bill.total_duration,
            "subtotal": a.subtotal,
            "discount": a.discount,
            "amountBeforeGST": a.amount_before_gst,
            "gstPercentage": a.gst_percentage,
            "gstAmount": a.gst_amount,
            "totalAmount": a.total_amount,
            "finalAmount": a.final_amount,
            "paymentMethod": bill.payment_method.value,
            "paymentStatus": bill.payment_status.value,
            "notes": bill.notes,
            "billNumber": bill.bill_number or bill_number(now),
            "createdAt": now,
            "updatedAt": now,
        }
        result = self._col.insert_one(doc)
        doc["_id"] = result.inserted_id
        return _from_doc(doc)

    def get_by_id(self, bill_id: str) -> Optional[Bill]:
        oid = maybe_object_id(bill_id)
        if oid is None:
            return None
        doc = self._col.find_one({"_id": oid})
        return _from_doc(doc) if doc else None

    def get_by_number(self, bill_number: str) -> Optional[Bill]:
        doc = self._col.find_one({"billNumber": bill_number})
        return _from_doc(doc) if doc else None

    def update_payment(
        self,
        bill_id: str,
        *,
        payment_status: Optional[PaymentStatus] = None,
        payment_method: Optional[PaymentMethod] = None,
        notes: Optional[str] = None,
        paid_at: Optional[datetime] = None,
        now: datetime,
    ) -> Optional[Bill]:
        oid = maybe_object_id(bill_id)
        if oid is None:
            return None
        changes: Dict[str, Any] = {"updatedAt": now}
        if payment_status is not None:
            changes["paymentStatus"] = payment_status.value
        if payment_method is not None:
            changes["paymentMethod"] = payment_method.value
        if notes is not None:
            changes["notes"] = notes
        if paid_at is not None:
            changes["paidAt"] = paid_at
        doc = self._col.find_one_and_update({"_id": oid}, {"$set": changes}, return_document=ReturnDocument.AFTER)
        return _from_doc(doc) if doc else None

    def find(self, query: BillQuery, *, skip: int = 0, limit: int = 10) -> tuple[Sequence[Bill], int]:
        f = _filter(query)
        cursor = self._col.find(f).sort("createdAt", DESCENDING).skip(int(skip)).limit(int(limit))
        return [_from_doc(d) for d in cursor], self._col.count_documents(f)

    def sum_final_amount(self, query: BillQuery) -> float:
        return self._sum(_filter(query))

    def count(self, *, created_from: Optional[datetime] = None, created_to: Optional[datetime] = None) -> int:
        return self._col.count_documents(_created_range(created_from, created_to))

    def paid_revenue(self, *, created_from: datetime, created_to: Optional[datetime] = None) -> float:
        return self._sum({**_created_range(created_from, created_to), "paymentStatus": PaymentStatus.PAID.value})

    def totals_by_status(self) -> Sequence[dict]:
        rows = self._col.aggregate(
            [{"$group": {"_id": "$paymentStatus", "count": {"$sum": 1}, "totalAmount": {"$sum": "$finalAmount"}}}]
        )
        return [{"status": r["_id"], "count": r["count"], "totalAmount": r["totalAmount"]} for r in rows]

    def top_services(self, *, limit: int) -> Sequence[dict]:
        rows = self._col.aggregate(
            [
                {"$unwind": "$services"},
                {
                    "$group": {
                        "_id": "$services.name",
                        "count": {"$sum": 1},
                        "totalRevenue": {"$sum": "$services.price"},
                    }
                },
                {"$sort": {"count": -1}},
                {"$limit": int(limit)},
            ]
        )
        return [{"name": r["_id"], "count": r["count"], "totalRevenue": r["totalRevenue"]} for r in rows]

    def monthly_paid_revenue(self, *, since: datetime) -> Sequence[dict]:
        rows = self._col.aggregate(
            [
                {"$match": {"createdAt": {"$gte": since}, "paymentStatus": PaymentStatus.PAID.value}},
                {
                    "$group": {
                        "_id": {"year": {"$year": "$createdAt"}, "month": {"$month": "$createdAt"}},
                        "revenue": {"$sum": "$finalAmount"},
                        "billCount": {"$sum": 1},
                    }
                },
                {"$sort": {"_id.year": 1, "_id.month": 1}},
            ]
        )
        return [
            {"year": r["_id"]["year"], "month": r["_id"]["month"], "revenue": r["revenue"], "billCount": r["billCount"]}
            for r in rows
        ]

    def recent(self, *, limit: int) -> Sequence[Bill]:
        return [_from_doc(d) for d in self._col.find({}).sort("createdAt", DESCENDING).limit(int(limit))]
