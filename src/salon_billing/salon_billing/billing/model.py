from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..common.datetime_utils import iso
from ..common.validators import require_non_empty, require_number
from ..core.enums import PaymentMethod, PaymentStatus
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class ServiceLineItem:
    name: str
    price: float
    duration: Optional[str] = None
    description: Optional[str] = None

    def to_dict(self) -> dict:
        out: dict = {"name": self.name, "price": self.price}
        if self.duration is not None:
            out["duration"] = self.duration
        if self.description is not None:
            out["description"] = self.description
        return out

    @classmethod
    def from_dict(cls, data: Any) -> "ServiceLineItem":
        if not isinstance(data, dict):
            raise ValidationError("Each service must have name and price")
        if data.get("price") is None or not str(data.get("name") or "").strip():
            raise ValidationError("Each service must have name and price")
        return cls(
            name=require_non_empty(data.get("name"), "Service name"),
            price=require_number(data.get("price"), "Service price", minimum=0),
            duration=data.get("duration"),
            description=data.get("description"),
        )


def parse_services(raw: Any, field_name: str = "services") -> tuple[ServiceLineItem, ...]:
    if not isinstance(raw, list) or not raw:
        raise ValidationError(f"{field_name} must be a non-empty array")
    return tuple(ServiceLineItem.from_dict(item) for item in raw)


@dataclass(frozen=True)
class BillAmounts:
    subtotal: float
    discount: float
    amount_before_gst: float
    gst_percentage: float
    gst_amount: float
    final_amount: float

    @property
    def total_amount(self) -> float:
        # Pre-tax reference kept for older consumers; not the amount charged.
        return self.subtotal


@dataclass(frozen=True)
class NewBill:
    client_id: str
    client_name: str
    client_phone: Optional[str]
    services: tuple[ServiceLineItem, ...]
    amounts: BillAmounts
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    appointment_date: datetime
    start_time: Optional[str] = None
    specialist: Optional[str] = None
    total_duration: Optional[str] = None
    notes: Optional[str] = None
    bill_number: Optional[str] = None


@dataclass(frozen=True)
class Bill:
    bill_id: str
    bill_number: str
    client_id: str
    client_name: str
    client_phone: Optional[str]
    services: tuple[ServiceLineItem, ...]
    subtotal: float
    discount: float
    amount_before_gst: float
    gst_percentage: float
    gst_amount: float
    total_amount: float
    final_amount: float
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    appointment_date: Optional[datetime] = None
    start_time: Optional[str] = None
    specialist: Optional[str] = None
    total_duration: Optional[str] = None
    notes: Optional[str] = None
    paid_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.bill_id,
            "billNumber": self.bill_number,
            "clientId": self.client_id,
            "clientName": self.client_name,
            "clientPhone": self.client_phone,
            "services": [s.to_dict() for s in self.services],
            "appointmentDate": iso(self.appointment_date),
            "startTime": self.start_time,
            "specialist": self.specialist,
            "totalDuration": self.total_duration,
            "subtotal": self.subtotal,
            "discount": self.discount,
            "amountBeforeGST": self.amount_before_gst,
            "gstPercentage": self.gst_percentage,
            "gstAmount": self.gst_amount,
            "totalAmount": self.total_amount,
            "finalAmount": self.final_amount,
            "paymentMethod": self.payment_method.value,
            "paymentStatus": self.payment_status.value,
            "paidAt": iso(self.paid_at),
            "notes": self.notes,
            "createdAt": iso(self.created_at),
            "updatedAt": iso(self.updated_at),
        }

    def to_printable(self) -> dict:
        return {
            "billNumber": self.bill_number,
            "date": iso(self.appointment_date),
            "startTime": self.start_time,
            "specialist": self.specialist,
            "duration": self.total_duration,
            "clientName": self.client_name,
            "clientPhone": self.client_phone,
            "services": [s.to_dict() for s in self.services],
            "subtotal": self.subtotal,
            "discount": self.discount,
            "amountBeforeGST": self.amount_before_gst,
            "gstPercentage": self.gst_percentage,
            "gstAmount": self.gst_amount,
            "total": self.final_amount,
            "paymentMethod": self.payment_method.value,
            "paymentStatus": self.payment_status.value,
            "notes": self.notes,
            "createdAt": iso(self.created_at),
        }

    def summary(self) -> dict:
        return {
            "id": self.bill_id,
            "billNumber": self.bill_number,
            "clientName": self.client_name,
            "finalAmount": self.final_amount,
            "paymentStatus": self.payment_status.value,
            "createdAt": iso(self.created_at),
        }


@dataclass(frozen=True)
class BillQuery:
    """Filter for bill listings. `text` matches clientName/clientPhone case-insensitively."""

    client_id: Optional[str] = None
    text: Optional[str] = None
    status: Optional[PaymentStatus] = None
    created_from: Optional[datetime] = None
    created_to: Optional[datetime] = None
