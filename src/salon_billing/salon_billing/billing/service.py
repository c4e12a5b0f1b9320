from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Mapping, Optional

from ..clients.model import Client
from ..clients.service import ClientService
from ..common.datetime_utils import add_months, now_local, start_of_day, start_of_month
from ..common.outcomes import Outcome, SideEffectOutcome
from ..common.pagination import Page
from ..common.validators import (
    optional_datetime,
    parse_page,
    require_choice,
    require_non_empty,
    require_number,
)
from ..core.constants import DEFAULT_PAGE_SIZE, RECENT_BILLS_LIMIT, REVENUE_TREND_MONTHS, TOP_SERVICES_LIMIT
from ..core.enums import PaymentMethod, PaymentStatus
from ..core.exceptions import InvalidStatusError, NotFoundError, ValidationError
from ..gst.service import GSTService
from .calculator.base import BillCalculator
from .calculator.standard_calculator import StandardBillCalculator
from .model import Bill, BillQuery, NewBill, parse_services
from .repository import BillRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BillCreated:
    bill: Bill
    client: Client


class BillingService:
    """Bill ledger use cases.

    Creating a bill snapshots the current GST rate, persists the bill, then appends a
    visit to the client. The visit append is best-effort: its failure is logged and
    reported as a side effect, never as a failed bill.
    """

    def __init__(
        self,
        bills: BillRepository,
        clients: ClientService,
        gst: GSTService,
        *,
        calculator: Optional[BillCalculator] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._bills = bills
        self._clients = clients
        self._gst = gst
        self._calculator = calculator or StandardBillCalculator()
        self._clock = clock

    # -------- Creation --------
    def create_bill(self, data: Mapping[str, Any]) -> Outcome[BillCreated]:
        client_ref = data.get("clientId")
        if (
            not data.get("clientName")
            or not data.get("services")
            or data.get("subtotal") is None
            or not data.get("paymentMethod")
        ):
            raise ValidationError("Required fields: clientId, clientName, services, subtotal, paymentMethod")
        client_name = require_non_empty(data.get("clientName"), "clientName")
        services = parse_services(data.get("services"))
        subtotal = require_number(data.get("subtotal"), "subtotal")
        discount = require_number(data.get("discount", 0) or 0, "discount", minimum=0)
        method = require_choice(data.get("paymentMethod"), PaymentMethod, "paymentMethod")
        status = require_choice(data.get("paymentStatus") or "pending", PaymentStatus, "paymentStatus", error=InvalidStatusError)
        appointment = optional_datetime(data.get("appointmentDate"), "appointmentDate")

        if client_ref:
            client = self._clients.get_client(str(client_ref))
        elif data.get("clientPhone"):
            client = self._clients.add_client(name=client_name, phone_number=data.get("clientPhone")).client
        else:
            raise ValidationError("clientId or clientPhone is required")

        amounts = self._calculator.compute_from_subtotal(subtotal, discount, self._gst.effective_percentage())
        bill = self._bills.create(
            NewBill(
                client_id=client.id,
                client_name=client_name,
                client_phone=data.get("clientPhone") or client.phone_number,
                services=services,
                amounts=amounts,
                payment_method=method,
                payment_status=status,
                appointment_date=appointment or self._clock(),
                start_time=data.get("startTime"),
                specialist=data.get("specialist"),
                total_duration=data.get("totalDuration"),
                notes=data.get("notes"),
            )
        )
        logger.info("Created bill %s for client %s (final %.2f)", bill.bill_number, client.client_id, bill.final_amount)
        return self._record_visit(bill, client)

    def create_bill_from_services(self, data: Mapping[str, Any]) -> Outcome[BillCreated]:
        """Home-screen flow: the client is looked up (or registered) by phone number."""
        selected = data.get("selectedServices")
        if not data.get("clientName") or not isinstance(selected, list) or not selected:
            raise ValidationError("Client name and selected services are required")
        client_name = require_non_empty(data.get("clientName"), "clientName")
        services = parse_services(selected, "selectedServices")
        discount = require_number(data.get("discount", 0) or 0, "discount", minimum=0)
        method = require_choice(data.get("paymentMethod") or "cash", PaymentMethod, "paymentMethod")
        appointment = optional_datetime(data.get("appointmentDate"), "appointmentDate")

        registration = self._clients.add_client(name=client_name, phone_number=data.get("clientPhone"))
        client = registration.client

        amounts = self._calculator.compute(services, discount, self._gst.effective_percentage())
        bill = self._bills.create(
            NewBill(
                client_id=client.id,
                client_name=client_name,
                client_phone=client.phone_number,
                services=services,
                amounts=amounts,
                payment_method=method,
                payment_status=PaymentStatus.PENDING,
                appointment_date=appointment or self._clock(),
                start_time=data.get("startTime"),
                specialist=data.get("specialist"),
                total_duration=data.get("totalDuration"),
                notes=data.get("notes"),
            )
        )
        logger.info("Created bill %s from service selection for %s", bill.bill_number, client.client_id)
        return self._record_visit(bill, client)

    def _record_visit(self, bill: Bill, client: Client) -> Outcome[BillCreated]:
        visit_data = {
            "services": [{"name": s.name, "price": s.price} for s in bill.services],
            "totalAmount": bill.final_amount,
            "billNumber": bill.bill_number,
            "billId": bill.bill_id,
            "subtotal": bill.subtotal,
            "discount": bill.discount,
            "gstAmount": bill.gst_amount,
            "finalAmount": bill.final_amount,
            "paymentStatus": bill.payment_status.value,
            "notes": bill.notes,
            "specialist": bill.specialist,
        }
        outcome: Outcome[BillCreated] = Outcome(primary=BillCreated(bill=bill, client=client))
        try:
            recorded = self._clients.add_visit(client.id, visit_data)
        except Exception as e:
            logger.exception("Error adding visit to client %s for bill %s", client.client_id, bill.bill_number)
            outcome.side_effects.append(SideEffectOutcome(name="record_visit", ok=False, error=str(e)))
            return outcome

        outcome.primary = BillCreated(bill=bill, client=recorded.primary.client)
        outcome.side_effects.append(SideEffectOutcome(name="record_visit", ok=True))
        outcome.side_effects.extend(recorded.side_effects)
        return outcome

    # -------- Lookup --------
    def get_bill(self, bill_id: str) -> Bill:
        bill = self._bills.get_by_id(str(bill_id))
        if not bill:
            raise NotFoundError("Bill not found")
        return bill

    def get_bill_by_number(self, bill_number: str) -> Bill:
        if not bill_number:
            raise ValidationError("billNumber is required")
        bill = self._bills.get_by_number(bill_number)
        if not bill:
            raise NotFoundError("Bill not found")
        return bill

    def printable_bill(self, bill_id: str) -> dict:
        return self.get_bill(bill_id).to_printable()

    # -------- Payment lifecycle --------
    def update_payment(
        self,
        bill_id: str,
        *,
        payment_status: Any = None,
        payment_method: Any = None,
        notes: Optional[str] = None,
    ) -> Bill:
        status = None
        if payment_status:
            status = require_choice(payment_status, PaymentStatus, "payment status", error=InvalidStatusError)
        method = require_choice(payment_method, PaymentMethod, "paymentMethod") if payment_method else None

        now = self._clock()
        bill = self._bills.update_payment(
            str(bill_id),
            payment_status=status,
            payment_method=method,
            notes=notes or None,
            paid_at=now if status == PaymentStatus.PAID else None,
            now=now,
        )
        if not bill:
            raise NotFoundError("Bill not found")
        return bill

    def cancel_bill(self, bill_id: str, reason: Optional[str] = None) -> Bill:
        """Move to CANCELLED from any status; calling it again is harmless."""
        current = self.get_bill(bill_id)
        note = f"Cancelled: {reason}" if reason else "Bill cancelled"
        notes = f"{current.notes}\n{note}" if current.notes else note

        bill = self._bills.update_payment(
            current.bill_id, payment_status=PaymentStatus.CANCELLED, notes=notes, now=self._clock()
        )
        if not bill:
            raise NotFoundError("Bill not found")
        logger.info("Cancelled bill %s", bill.bill_number)
        return bill

    # -------- Listings --------
    def client_billing_history(self, client_ref: str, *, page=None, limit=None, status: Optional[str] = None) -> dict:
        page_i, limit_i = parse_page(page, limit, default_limit=DEFAULT_PAGE_SIZE)
        client = self._clients.get_client(client_ref)
        query = BillQuery(
            client_id=client.id,
            status=require_choice(status, PaymentStatus, "status", error=InvalidStatusError) if status else None,
        )
        items, total = self._bills.find(query, skip=(page_i - 1) * limit_i, limit=limit_i)
        result = Page(items=items, page=page_i, limit=limit_i, total=total).to_dict("bills", Bill.to_dict)
        result["summary"] = {
            "totalAmount": self._bills.sum_final_amount(query),
            "paidAmount": self._bills.sum_final_amount(BillQuery(client_id=client.id, status=PaymentStatus.PAID)),
        }
        return result

    def search_by_client(
        self,
        query: Optional[str],
        *,
        status: Optional[str] = None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        page=None,
        limit=None,
    ) -> Page[Bill]:
        if not query or not query.strip():
            raise ValidationError("Search query is required")
        page_i, limit_i = parse_page(page, limit, default_limit=DEFAULT_PAGE_SIZE)
        bill_query = BillQuery(
            text=query.strip(),
            status=require_choice(status, PaymentStatus, "status", error=InvalidStatusError) if status else None,
            created_from=optional_datetime(date_from, "dateFrom"),
            created_to=optional_datetime(date_to, "dateTo"),
        )
        items, total = self._bills.find(bill_query, skip=(page_i - 1) * limit_i, limit=limit_i)
        return Page(items=items, page=page_i, limit=limit_i, total=total)

    # -------- Reporting --------
    def billing_stats(self) -> dict:
        """Dashboard numbers. Revenue figures only count paid bills."""
        today = start_of_day(self._clock())
        tomorrow = today + timedelta(days=1)
        month_start = start_of_month(today)

        return {
            "totalBills": self._bills.count(),
            "todayBills": self._bills.count(created_from=today, created_to=tomorrow),
            "monthlyBills": self._bills.count(created_from=month_start),
            "todayRevenue": self._bills.paid_revenue(created_from=today, created_to=tomorrow),
            "monthlyRevenue": self._bills.paid_revenue(created_from=month_start),
            "billsByStatus": list(self._bills.totals_by_status()),
            "topServices": list(self._bills.top_services(limit=TOP_SERVICES_LIMIT)),
            "monthlyTrend": list(self._bills.monthly_paid_revenue(since=add_months(today, -REVENUE_TREND_MONTHS))),
            "recentBills": [b.summary() for b in self._bills.recent(limit=RECENT_BILLS_LIMIT)],
        }
