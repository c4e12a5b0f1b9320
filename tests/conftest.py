from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta
from typing import Optional

import pytest

from src.salon_billing.salon_billing.billing.model import Bill, NewBill
from src.salon_billing.salon_billing.billing.service import BillingService
from src.salon_billing.salon_billing.clients.model import Client
from src.salon_billing.salon_billing.clients.service import ClientService
from src.salon_billing.salon_billing.common.identifiers import bill_number, format_client_id, parse_client_sequence
from src.salon_billing.salon_billing.core.enums import PaymentStatus, RecipientModel, StaffRole
from src.salon_billing.salon_billing.gst.model import GSTConfig
from src.salon_billing.salon_billing.gst.service import GSTService
from src.salon_billing.salon_billing.notifications.service import NotificationService
from src.salon_billing.salon_billing.users.model import StaffMember


class TickingClock:
    """Returns a fixed start time, one second later on every call."""

    def __init__(self, start: datetime = datetime(2026, 3, 15, 10, 0, 0)):
        self._next = start

    def __call__(self) -> datetime:
        now = self._next
        self._next = now + timedelta(seconds=1)
        return now


class FakeStaffRepo:
    def __init__(self, members=()):
        self.members = list(members)

    def _of(self, source):
        return [m for m in self.members if m.source == source]

    def get_admin(self, admin_id):
        return next((m for m in self._of(RecipientModel.ADMIN) if m.member_id == admin_id), None)

    def latest_admin(self):
        admins = self._of(RecipientModel.ADMIN)
        return max(admins, key=lambda m: m.created_at or datetime.min) if admins else None

    def list_admins(self):
        return self._of(RecipientModel.ADMIN)

    def list_managers(self):
        return self._of(RecipientModel.MANAGER)

    def list_active_employees(self, role):
        return [m for m in self._of(RecipientModel.EMPLOYEE) if m.role == role and m.is_active]


class FakeNotificationRepo:
    def __init__(self):
        self.items = []
        self.fail = False

    def insert_many(self, notifications):
        if self.fail:
            raise RuntimeError("store unavailable")
        for n in notifications:
            self.insert_one(n)
        return len(notifications)

    def insert_one(self, notification):
        if self.fail:
            raise RuntimeError("store unavailable")
        saved = notification.with_id(f"n{len(self.items) + 1}")
        self.items.append(saved)
        return saved

    def _visible(self, n, recipient_id, role):
        if not n.is_active:
            return False
        if n.recipient_id == recipient_id:
            return True
        return n.recipient_id is None and role is not None and n.recipient_type.value in (role.value, "both")

    def list_for_recipient(self, *, recipient_id, role, now, type=None, is_read=None, skip=0, limit=20):
        rows = [
            n
            for n in self.items
            if self._visible(n, recipient_id, role)
            and (n.scheduled_for is None or n.scheduled_for <= now)
            and (type is None or n.type == type)
            and (is_read is None or n.is_read == is_read)
        ]
        rows.sort(key=lambda n: n.created_at, reverse=True)
        unread = sum(1 for n in rows if not n.is_read)
        return rows[skip : skip + limit], len(rows), unread

    def find_for_recipient(self, *, notification_id, recipient_id, role):
        for n in self.items:
            if n.notification_id == notification_id and self._visible(n, recipient_id, role):
                return n
        return None

    def set_flags(self, notification_id, *, is_read=None, is_active=None):
        for i, n in enumerate(self.items):
            if n.notification_id == notification_id:
                changes = {}
                if is_read is not None:
                    changes["is_read"] = is_read
                if is_active is not None:
                    changes["is_active"] = is_active
                self.items[i] = replace(n, **changes)
                return True
        return False

    def mark_all_read(self, *, recipient_id, role):
        count = 0
        for i, n in enumerate(self.items):
            if self._visible(n, recipient_id, role) and not n.is_read:
                self.items[i] = replace(n, is_read=True)
                count += 1
        return count

    def count_unread(self, *, recipient_id, now):
        return sum(1 for n in self.items if n.recipient_id == recipient_id and n.is_active and not n.is_read)

    def upcoming_reminders(self, *, recipient_id, start, end):
        return [
            n
            for n in self.items
            if n.recipient_id == recipient_id and n.scheduled_for is not None and start <= n.scheduled_for <= end
        ]


class FakeGSTRepo:
    def __init__(self, current: Optional[GSTConfig] = None):
        self.current = current
        self.history = []
        self.broken = False

    def get_current(self):
        if self.broken:
            raise RuntimeError("store unavailable")
        return self.current

    def save(self, *, gst_percentage, is_active, applied_to, updated_by, updated_by_name, now):
        self.current = GSTConfig(
            config_id="gst1",
            gst_percentage=gst_percentage,
            is_active=is_active,
            applied_to=applied_to,
            updated_by=updated_by,
            updated_by_name=updated_by_name,
            created_at=self.current.created_at if self.current else now,
            updated_at=now,
        )
        self.history.append(self.current)
        return self.current


class FakeBillRepo:
    def __init__(self, clock):
        self._clock = clock
        self.bills: dict[str, Bill] = {}
        self.fail_reads = False

    def create(self, bill: NewBill):
        now = self._clock()
        a = bill.amounts
        bill_id = f"b{len(self.bills) + 1}"
        saved = Bill(
            bill_id=bill_id,
            bill_number=bill.bill_number or bill_number(now),
            client_id=bill.client_id,
            client_name=bill.client_name,
            client_phone=bill.client_phone,
            services=bill.services,
            subtotal=a.subtotal,
            discount=a.discount,
            amount_before_gst=a.amount_before_gst,
            gst_percentage=a.gst_percentage,
            gst_amount=a.gst_amount,
            total_amount=a.total_amount,
            final_amount=a.final_amount,
            payment_method=bill.payment_method,
            payment_status=bill.payment_status,
            appointment_date=bill.appointment_date,
            start_time=bill.start_time,
            specialist=bill.specialist,
            total_duration=bill.total_duration,
            notes=bill.notes,
            created_at=now,
            updated_at=now,
        )
        self.bills[bill_id] = saved
        return saved

    def get_by_id(self, bill_id):
        if self.fail_reads:
            raise RuntimeError("store unavailable")
        return self.bills.get(bill_id)

    def get_by_number(self, number):
        return next((b for b in self.bills.values() if b.bill_number == number), None)

    def update_payment(self, bill_id, *, payment_status=None, payment_method=None, notes=None, paid_at=None, now):
        bill = self.bills.get(bill_id)
        if not bill:
            return None
        changes = {"updated_at": now}
        if payment_status is not None:
            changes["payment_status"] = payment_status
        if payment_method is not None:
            changes["payment_method"] = payment_method
        if notes is not None:
            changes["notes"] = notes
        if paid_at is not None:
            changes["paid_at"] = paid_at
        self.bills[bill_id] = replace(bill, **changes)
        return self.bills[bill_id]

    def _matching(self, query):
        rows = []
        for b in self.bills.values():
            if query.client_id and b.client_id != query.client_id:
                continue
            if query.text:
                needle = query.text.lower()
                if needle not in b.client_name.lower() and needle not in (b.client_phone or "").lower():
                    continue
            if query.status is not None and b.payment_status != query.status:
                continue
            if query.created_from and b.created_at < query.created_from:
                continue
            if query.created_to and b.created_at > query.created_to:
                continue
            rows.append(b)
        return sorted(rows, key=lambda b: b.created_at, reverse=True)

    def find(self, query, *, skip=0, limit=10):
        rows = self._matching(query)
        return rows[skip : skip + limit], len(rows)

    def sum_final_amount(self, query):
        return sum(b.final_amount for b in self._matching(query))

    def _in_range(self, created_from, created_to):
        return [
            b
            for b in self.bills.values()
            if (created_from is None or b.created_at >= created_from)
            and (created_to is None or b.created_at < created_to)
        ]

    def count(self, *, created_from=None, created_to=None):
        return len(self._in_range(created_from, created_to))

    def paid_revenue(self, *, created_from, created_to=None):
        return sum(
            b.final_amount for b in self._in_range(created_from, created_to) if b.payment_status == PaymentStatus.PAID
        )

    def totals_by_status(self):
        out: dict[str, dict] = {}
        for b in self.bills.values():
            row = out.setdefault(b.payment_status.value, {"status": b.payment_status.value, "count": 0, "totalAmount": 0.0})
            row["count"] += 1
            row["totalAmount"] += b.final_amount
        return list(out.values())

    def top_services(self, *, limit):
        out: dict[str, dict] = {}
        for b in self.bills.values():
            for s in b.services:
                row = out.setdefault(s.name, {"name": s.name, "count": 0, "totalRevenue": 0.0})
                row["count"] += 1
                row["totalRevenue"] += s.price
        return sorted(out.values(), key=lambda r: r["count"], reverse=True)[:limit]

    def monthly_paid_revenue(self, *, since):
        out: dict[tuple, dict] = {}
        for b in self.bills.values():
            if b.payment_status != PaymentStatus.PAID or b.created_at < since:
                continue
            key = (b.created_at.year, b.created_at.month)
            row = out.setdefault(key, {"year": key[0], "month": key[1], "revenue": 0.0, "billCount": 0})
            row["revenue"] += b.final_amount
            row["billCount"] += 1
        return [out[k] for k in sorted(out)]

    def recent(self, *, limit):
        return sorted(self.bills.values(), key=lambda b: b.created_at, reverse=True)[:limit]


class FakeClientRepo:
    def __init__(self):
        self.clients: dict[str, Client] = {}
        self.fail_append = False

    def get(self, ref):
        if ref in self.clients:
            return self.clients[ref]
        return next((c for c in self.clients.values() if c.client_id == ref), None)

    def find_by_phone(self, phone_number):
        return next((c for c in self.clients.values() if c.phone_number.lower() == phone_number.lower()), None)

    def phone_taken(self, phone_number, *, exclude_ref=None):
        existing = self.find_by_phone(phone_number)
        excluded = self.get(exclude_ref) if exclude_ref else None
        return existing is not None and (excluded is None or existing.id != excluded.id)

    def next_client_id(self):
        highest = max((parse_client_sequence(c.client_id) for c in self.clients.values()), default=0)
        return format_client_id(highest + 1)

    def create(self, *, client_id, name, phone_number, now):
        client = Client(
            id=f"c{len(self.clients) + 1}",
            client_id=client_id,
            name=name,
            phone_number=phone_number,
            created_at=now,
            updated_at=now,
        )
        self.clients[client.id] = client
        return client

    def append_visit(self, ref, visit, *, amount, at):
        if self.fail_append:
            raise RuntimeError("store unavailable")
        client = self.get(ref)
        if not client:
            return None
        updated = replace(
            client,
            visits=client.visits + (visit,),
            total_visits=client.total_visits + 1,
            total_spent=client.total_spent + amount,
            last_visit=at,
        )
        self.clients[client.id] = updated
        return updated

    def list(self, *, skip=0, limit=10):
        rows = sorted(self.clients.values(), key=lambda c: c.created_at, reverse=True)
        return rows[skip : skip + limit], len(rows)

    def update(self, ref, *, name=None, phone_number=None, now):
        client = self.get(ref)
        if not client:
            return None
        changes = {"updated_at": now}
        if name is not None:
            changes["name"] = name
        if phone_number is not None:
            changes["phone_number"] = phone_number
        self.clients[client.id] = replace(client, **changes)
        return self.clients[client.id]

    def delete(self, ref):
        client = self.get(ref)
        if client:
            del self.clients[client.id]
        return client

    def search(self, text):
        needle = text.lower()
        return [
            c
            for c in self.clients.values()
            if needle in c.name.lower() or needle in c.phone_number.lower() or needle in c.client_id.lower()
        ]

    def count(self, *, created_from=None):
        return sum(1 for c in self.clients.values() if created_from is None or c.created_at >= created_from)

    def monthly_created(self, *, year):
        out: dict[int, int] = {}
        for c in self.clients.values():
            if c.created_at.year == year:
                out[c.created_at.month] = out.get(c.created_at.month, 0) + 1
        return out

    def recent(self, *, limit):
        return sorted(self.clients.values(), key=lambda c: c.created_at, reverse=True)[:limit]


def staff_member(member_id, role, source, *, is_active=True, created_at=None):
    return StaffMember(
        member_id=member_id,
        name=member_id.title(),
        role=role,
        source=source,
        is_active=is_active,
        created_at=created_at,
    )


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def staff_repo():
    return FakeStaffRepo(
        [
            staff_member("admin1", StaffRole.ADMIN, RecipientModel.ADMIN, created_at=datetime(2025, 1, 1)),
            staff_member("admin2", StaffRole.ADMIN, RecipientModel.ADMIN, created_at=datetime(2025, 6, 1)),
            staff_member("manager1", StaffRole.MANAGER, RecipientModel.MANAGER),
            staff_member("emp-admin", StaffRole.ADMIN, RecipientModel.EMPLOYEE),
            staff_member("emp-manager", StaffRole.MANAGER, RecipientModel.EMPLOYEE),
            staff_member("emp-retired", StaffRole.MANAGER, RecipientModel.EMPLOYEE, is_active=False),
            staff_member("stylist", StaffRole.EMPLOYEE, RecipientModel.EMPLOYEE),
        ]
    )


@pytest.fixture
def notification_repo():
    return FakeNotificationRepo()


@pytest.fixture
def gst_repo():
    return FakeGSTRepo()


@pytest.fixture
def bill_repo(clock):
    return FakeBillRepo(clock)


@pytest.fixture
def client_repo():
    return FakeClientRepo()


@pytest.fixture
def notification_service(notification_repo, staff_repo, clock):
    return NotificationService(notification_repo, staff_repo, clock=clock)


@pytest.fixture
def gst_service(gst_repo, staff_repo, clock):
    return GSTService(gst_repo, staff_repo, clock=clock)


@pytest.fixture
def client_service(client_repo, bill_repo, notification_service, clock):
    return ClientService(client_repo, bill_repo, notification_service, clock=clock)


@pytest.fixture
def billing_service(bill_repo, client_service, gst_service, clock):
    return BillingService(bill_repo, client_service, gst_service, clock=clock)
