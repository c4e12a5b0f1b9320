from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import PaymentMethod, PaymentStatus
from .model import Bill, BillQuery, NewBill


class BillRepository(Protocol):
    def create(self, bill: NewBill) -> Bill:
        """Persist a bill, generating `BILL<epoch millis>` when it has no number yet."""

        raise NotImplementedError

    def get_by_id(self, bill_id: str) -> Optional[Bill]:
        raise NotImplementedError

    def get_by_number(self, bill_number: str) -> Optional[Bill]:
        raise NotImplementedError

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
        """Set only the given fields; returns the updated bill or None when missing."""

        raise NotImplementedError

    def find(self, query: BillQuery, *, skip: int = 0, limit: int = 10) -> tuple[Sequence[Bill], int]:
        """Newest first page plus total count."""

        raise NotImplementedError

    def sum_final_amount(self, query: BillQuery) -> float:
        raise NotImplementedError

    # Reporting
    def count(self, *, created_from: Optional[datetime] = None, created_to: Optional[datetime] = None) -> int:
        raise NotImplementedError

    def paid_revenue(self, *, created_from: datetime, created_to: Optional[datetime] = None) -> float:
        raise NotImplementedError

    def totals_by_status(self) -> Sequence[dict]:
        """[{status, count, totalAmount}]"""

        raise NotImplementedError

    def top_services(self, *, limit: int) -> Sequence[dict]:
        """[{name, count, totalRevenue}] ordered by count desc."""

        raise NotImplementedError

    def monthly_paid_revenue(self, *, since: datetime) -> Sequence[dict]:
        """[{year, month, revenue, billCount}] ordered by (year, month)."""

        raise NotImplementedError

    def recent(self, *, limit: int) -> Sequence[Bill]:
        raise NotImplementedError
