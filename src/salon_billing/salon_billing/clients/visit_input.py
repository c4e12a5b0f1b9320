"""Normalizes visit payloads.

Clients have sent the same concept under several names over time; every alias is
resolved here so the rest of the code only sees one field per concept.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional

from ..billing.model import ServiceLineItem
from ..common.identifiers import visit_id
from ..common.validators import require_choice, require_number
from ..core.enums import PaymentStatus
from ..core.exceptions import ValidationError
from .model import Visit

FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "services": ("services",),
    "total_amount": ("totalAmount", "totalBill", "totalPrice"),
    "final_amount": ("finalAmount",),
    "subtotal": ("subtotal",),
    "discount": ("discount",),
    "gst_amount": ("gstAmount", "gst"),
    "bill_number": ("billNumber",),
    "bill_id": ("billId",),
    "payment_status": ("paymentStatus",),
    "notes": ("notes",),
    "specialist": ("specialist",),
}


def resolve_aliases(data: Mapping[str, Any]) -> dict[str, Any]:
    """First non-null value among each field's aliases."""
    resolved: dict[str, Any] = {}
    for field, aliases in FIELD_ALIASES.items():
        resolved[field] = next((data[a] for a in aliases if data.get(a) is not None), None)
    return resolved


def _optional_number(value: Any, field_name: str) -> Optional[float]:
    return None if value is None else require_number(value, field_name)


def build_visit(data: Mapping[str, Any], *, now: datetime) -> Visit:
    if not isinstance(data, Mapping):
        raise ValidationError("visitData must be an object")
    fields = resolve_aliases(data)

    raw_services = fields["services"] or []
    if not isinstance(raw_services, list):
        raise ValidationError("services must be an array")

    total = _optional_number(fields["total_amount"], "totalAmount") or 0.0
    final = _optional_number(fields["final_amount"], "finalAmount")
    status = require_choice(fields["payment_status"] or "pending", PaymentStatus, "paymentStatus")

    return Visit(
        visit_id=visit_id(now),
        date=now,
        services=tuple(ServiceLineItem.from_dict(s) for s in raw_services),
        total_amount=total,
        final_amount=final if final is not None else total,
        payment_status=status,
        bill_number=fields["bill_number"],
        bill_id=str(fields["bill_id"]) if fields["bill_id"] is not None else None,
        subtotal=_optional_number(fields["subtotal"], "subtotal"),
        discount=_optional_number(fields["discount"], "discount") or 0.0,
        gst_amount=_optional_number(fields["gst_amount"], "gstAmount"),
        notes=str(fields["notes"] or ""),
        specialist=str(fields["specialist"] or ""),
    )
