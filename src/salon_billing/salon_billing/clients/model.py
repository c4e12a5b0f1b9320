from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..billing.model import ServiceLineItem
from ..common.datetime_utils import iso
from ..core.enums import PaymentStatus


@dataclass(frozen=True)
class Visit:
    """Denormalized copy of one billing transaction, embedded in the client record.

    When `bill_id` is set the bill ledger is authoritative; this copy may drift.
    """

    visit_id: str
    date: datetime
    services: tuple[ServiceLineItem, ...]
    total_amount: float
    final_amount: float
    payment_status: PaymentStatus = PaymentStatus.PENDING
    bill_number: Optional[str] = None
    bill_id: Optional[str] = None
    subtotal: Optional[float] = None
    discount: float = 0.0
    gst_amount: Optional[float] = None
    notes: str = ""
    specialist: str = ""

    def to_dict(self) -> dict:
        return {
            "visitId": self.visit_id,
            "date": iso(self.date),
            "services": [s.to_dict() for s in self.services],
            "billNumber": self.bill_number,
            "billId": self.bill_id,
            "subtotal": self.subtotal,
            "discount": self.discount,
            "gstAmount": self.gst_amount,
            "finalAmount": self.final_amount,
            "totalAmount": self.total_amount,
            "paymentStatus": self.payment_status.value,
            "notes": self.notes,
            "specialist": self.specialist,
        }


@dataclass(frozen=True)
class Client:
    id: str
    client_id: str
    name: str
    phone_number: str
    total_visits: int = 0
    total_spent: float = 0.0
    last_visit: Optional[datetime] = None
    visits: tuple[Visit, ...] = ()
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self, *, with_visits: bool = False) -> dict:
        out = {
            "id": self.id,
            "clientId": self.client_id,
            "name": self.name,
            "phoneNumber": self.phone_number,
            "totalVisits": self.total_visits,
            "totalSpent": self.total_spent,
            "lastVisit": iso(self.last_visit),
            "createdAt": iso(self.created_at),
        }
        if with_visits:
            out["visits"] = [v.to_dict() for v in self.visits]
        return out
