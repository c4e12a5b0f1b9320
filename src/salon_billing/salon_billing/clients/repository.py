from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import Client, Visit


class ClientRepository(Protocol):
    """`ref` arguments accept either the document id or the CLT### client id."""

    def get(self, ref: str) -> Optional[Client]:
        raise NotImplementedError

    def find_by_phone(self, phone_number: str) -> Optional[Client]:
        """Case-insensitive exact match on the stored (normalized) phone number."""

        raise NotImplementedError

    def phone_taken(self, phone_number: str, *, exclude_ref: Optional[str] = None) -> bool:
        raise NotImplementedError

    def next_client_id(self) -> str:
        raise NotImplementedError

    def create(self, *, client_id: str, name: str, phone_number: str, now: datetime) -> Client:
        raise NotImplementedError

    def append_visit(self, ref: str, visit: Visit, *, amount: float, at: datetime) -> Optional[Client]:
        """Push the visit, add 1 to totalVisits, `amount` to totalSpent and set lastVisit."""

        raise NotImplementedError

    def list(self, *, skip: int = 0, limit: int = 10) -> tuple[Sequence[Client], int]:
        raise NotImplementedError

    def update(self, ref: str, *, name: Optional[str] = None, phone_number: Optional[str] = None, now: datetime) -> Optional[Client]:
        raise NotImplementedError

    def delete(self, ref: str) -> Optional[Client]:
        raise NotImplementedError

    def search(self, text: str) -> Sequence[Client]:
        """Substring match on name, phone number or client id."""

        raise NotImplementedError

    # Reporting
    def count(self, *, created_from: Optional[datetime] = None) -> int:
        raise NotImplementedError

    def monthly_created(self, *, year: int) -> dict[int, int]:
        """{month number: clients created} for the given year."""

        raise NotImplementedError

    def recent(self, *, limit: int) -> Sequence[Client]:
        raise NotImplementedError
