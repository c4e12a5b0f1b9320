from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Mapping, Optional

from ..billing.model import Bill
from ..billing.repository import BillRepository
from ..common.datetime_utils import iso, now_local, start_of_month, start_of_week
from ..common.outcomes import Outcome, run_side_effect
from ..common.pagination import Page
from ..common.validators import normalize_phone, parse_page, require_non_empty
from ..core.constants import DEFAULT_PAGE_SIZE, RECENT_CLIENTS_LIMIT
from ..core.enums import NotificationType
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..notifications.model import NotificationDraft
from ..notifications.service import NotificationService
from .model import Client, Visit
from .repository import ClientRepository
from .visit_input import build_visit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClientRegistration:
    client: Client
    created: bool


@dataclass(frozen=True)
class VisitRecorded:
    visit: Visit
    client: Client


class ClientService:
    def __init__(
        self,
        clients: ClientRepository,
        bills: BillRepository,
        notifier: Optional[NotificationService] = None,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._clients = clients
        self._bills = bills
        self._notifier = notifier
        self._clock = clock

    def get_client(self, ref: str) -> Client:
        client = self._clients.get(str(ref))
        if not client:
            raise NotFoundError("Client not found")
        return client

    def add_client(self, *, name: Any, phone_number: Any) -> ClientRegistration:
        """Register a client, or return the existing one for the same phone number.

        An existing client is returned untouched (no visit is recorded).
        """
        if not name or not phone_number:
            raise ValidationError("Name and phone number are required")
        clean_name = require_non_empty(name, "Name")
        phone = normalize_phone(str(phone_number))
        if not phone:
            raise ValidationError("Name and phone number are required")

        existing = self._clients.find_by_phone(phone)
        if existing:
            return ClientRegistration(client=existing, created=False)

        client = self._clients.create(
            client_id=self._clients.next_client_id(),
            name=clean_name,
            phone_number=phone,
            now=self._clock(),
        )
        logger.info("Registered client %s (%s)", client.client_id, client.name)
        return ClientRegistration(client=client, created=True)

    def list_clients(self, *, page=None, limit=None) -> Page[Client]:
        page_i, limit_i = parse_page(page, limit, default_limit=DEFAULT_PAGE_SIZE)
        items, total = self._clients.list(skip=(page_i - 1) * limit_i, limit=limit_i)
        return Page(items=items, page=page_i, limit=limit_i, total=total)

    def update_client(self, ref: str, *, name: Any = None, phone_number: Any = None) -> Client:
        clean_name = require_non_empty(name, "Name") if name is not None else None
        phone = None
        if phone_number is not None:
            phone = normalize_phone(str(phone_number))
            if not phone:
                raise ValidationError("Phone number cannot be empty")
            if self._clients.phone_taken(phone, exclude_ref=str(ref)):
                raise ConflictError("Phone number already exists with another client")

        client = self._clients.update(str(ref), name=clean_name, phone_number=phone, now=self._clock())
        if not client:
            raise NotFoundError("Client not found")
        return client

    def delete_client(self, ref: str) -> Client:
        client = self._clients.delete(str(ref))
        if not client:
            raise NotFoundError("Client not found")
        return client

    def search_clients(self, query: Optional[str]):
        if not query or not query.strip():
            raise ValidationError("Search query is required")
        return self._clients.search(query.strip())

    def check_phone(self, phone_number: Optional[str]) -> Optional[Client]:
        if not phone_number:
            raise ValidationError("Phone number is required")
        return self._clients.find_by_phone(normalize_phone(phone_number))

    def client_stats(self) -> dict:
        now = self._clock()
        monthly = self._clients.monthly_created(year=now.year)
        return {
            "totalClients": self._clients.count(),
            "clientsThisMonth": self._clients.count(created_from=start_of_month(now)),
            "clientsThisWeek": self._clients.count(created_from=start_of_week(now)),
            "monthlyBreakdown": [
                {"month": calendar.month_abbr[m], "count": monthly.get(m, 0)} for m in range(1, 13)
            ],
            "recentClients": [c.to_dict() for c in self._clients.recent(limit=RECENT_CLIENTS_LIMIT)],
        }

    # -------- Visit ledger --------
    def add_visit(self, ref: str, visit_data: Mapping[str, Any]) -> Outcome[VisitRecorded]:
        """Append a visit and update the running totals.

        The "Bill Generated" fan-out afterwards is best-effort and reported in the outcome.
        """
        if not ref or visit_data is None:
            raise ValidationError("Client ID and visit data are required")
        client = self.get_client(ref)

        now = self._clock()
        visit = build_visit(visit_data, now=now)
        updated = self._clients.append_visit(client.id, visit, amount=visit.total_amount, at=now)
        if not updated:
            raise NotFoundError("Client not found")
        logger.info("Visit %s added to client %s", visit.visit_id, updated.client_id)

        outcome = Outcome(primary=VisitRecorded(visit=visit, client=updated))
        if self._notifier is not None:
            draft = NotificationDraft(
                title="Bill Generated",
                message=(
                    f"Bill {visit.bill_number or visit.visit_id} generated for {updated.name} "
                    f"({updated.phone_number}) - total {visit.final_amount:.2f}"
                ),
                type=NotificationType.BILL_GENERATED,
                related_entity_type="bill" if visit.bill_id else "none",
                related_entity_id=visit.bill_id,
            )
            outcome.side_effects.append(
                run_side_effect("notify_bill_generated", lambda: self._notifier.notify_admins_and_managers(draft))
            )
        return outcome

    def get_history(self, ref: str) -> dict:
        """Client with visits newest first; bill ledger values win over the embedded copy."""
        client = self.get_client(ref)
        visits = [self._reconcile(v) for v in client.visits]
        visits.sort(key=lambda v: v["date"] or "", reverse=True)
        out = client.to_dict()
        out["visits"] = visits
        return out

    def _reconcile(self, visit: Visit) -> dict:
        bill: Optional[Bill] = None
        if visit.bill_id:
            try:
                bill = self._bills.get_by_id(visit.bill_id)
            except Exception:
                logger.exception("Error fetching bill data for visit %s", visit.visit_id)
        if bill is None:
            out = visit.to_dict()
            out.update({"gstPercentage": 0, "source": "visit"})
            return out

        return {
            "visitId": visit.visit_id,
            "date": iso(visit.date),
            "billNumber": visit.bill_number or bill.bill_number,
            "billId": visit.bill_id,
            "services": [s.to_dict() for s in bill.services] or [s.to_dict() for s in visit.services],
            "subtotal": bill.subtotal,
            "discount": bill.discount,
            "amountBeforeGST": bill.amount_before_gst,
            "gstPercentage": bill.gst_percentage,
            "gstAmount": bill.gst_amount,
            "finalAmount": bill.final_amount,
            "totalAmount": bill.final_amount,
            "notes": bill.notes or visit.notes,
            "specialist": bill.specialist or visit.specialist,
            "appointmentDate": iso(bill.appointment_date),
            "startTime": bill.start_time,
            "totalDuration": bill.total_duration,
            "paymentMethod": bill.payment_method.value,
            "paymentStatus": bill.payment_status.value,
            "createdAt": iso(bill.created_at),
            "source": "bill",
        }
