from __future__ import annotations

import pytest

from src.salon_billing.salon_billing.core.enums import PaymentStatus
from src.salon_billing.salon_billing.core.exceptions import InvalidStatusError, NotFoundError, ValidationError


def _bill_input(**overrides):
    data = {
        "clientName": "Jane",
        "clientPhone": "+92 300-1234567",
        "services": [{"name": "Haircut", "price": 1000}],
        "subtotal": 1000,
        "discount": 0,
        "paymentMethod": "cash",
    }
    data.update(overrides)
    return data


@pytest.fixture
def gst_at_seven(gst_service):
    gst_service.update_config(actor_id="admin1", gst_percentage=7, is_active=True)


def test_create_bill_computes_amounts_and_bill_number(billing_service, gst_at_seven):
    outcome = billing_service.create_bill(_bill_input())
    bill = outcome.primary.bill

    assert bill.bill_number.startswith("BILL")
    assert bill.bill_number[len("BILL"):].isdigit()
    assert bill.gst_percentage == 7
    assert bill.gst_amount == 70.0
    assert bill.final_amount == 1070.0
    assert bill.payment_status == PaymentStatus.PENDING
    assert outcome.side_effects_ok


def test_create_bill_records_visit_on_client(billing_service, client_repo, gst_at_seven):
    first = billing_service.create_bill(_bill_input()).primary
    second = billing_service.create_bill(_bill_input(clientId=first.client.client_id, subtotal=500, discount=100)).primary

    client = client_repo.get(first.client.id)
    assert client.total_visits == 2
    assert client.total_spent == pytest.approx(first.bill.final_amount + second.bill.final_amount)
    assert [v.bill_id for v in client.visits] == [first.bill.bill_id, second.bill.bill_id]
    assert client.visits[1].total_amount == second.bill.final_amount


def test_visit_failure_does_not_fail_bill(billing_service, bill_repo, client_repo):
    client_repo.fail_append = True

    outcome = billing_service.create_bill(_bill_input())

    assert outcome.primary.bill.bill_id in bill_repo.bills
    assert not outcome.side_effects_ok
    assert outcome.side_effects[0].name == "record_visit"
    assert "store unavailable" in outcome.side_effects[0].error


def test_bill_keeps_gst_rate_from_creation_time(billing_service, gst_service, bill_repo, gst_at_seven):
    bill = billing_service.create_bill(_bill_input()).primary.bill
    gst_service.update_config(actor_id="admin1", gst_percentage=18)

    assert bill_repo.get_by_id(bill.bill_id).gst_percentage == 7
    assert billing_service.create_bill(_bill_input()).primary.bill.gst_percentage == 18


def test_inactive_gst_means_zero_tax(billing_service, gst_service):
    gst_service.update_config(actor_id="admin1", gst_percentage=7, is_active=False)

    bill = billing_service.create_bill(_bill_input()).primary.bill

    assert bill.gst_amount == 0
    assert bill.final_amount == 1000


@pytest.mark.parametrize(
    "overrides",
    [
        {"clientName": ""},
        {"services": []},
        {"subtotal": None},
        {"paymentMethod": None},
        {"paymentMethod": "cheque"},
        {"discount": -5},
        {"services": [{"name": "Haircut"}]},
        {"clientPhone": None},
        {"subtotal": "nan"},
        {"subtotal": float("inf")},
        {"appointmentDate": "next week"},
    ],
)
def test_create_bill_rejects_bad_input_before_saving(billing_service, bill_repo, overrides):
    with pytest.raises(ValidationError):
        billing_service.create_bill(_bill_input(**overrides))
    assert bill_repo.bills == {}


def test_create_bill_for_unknown_client_id(billing_service):
    with pytest.raises(NotFoundError):
        billing_service.create_bill(_bill_input(clientId="CLT999"))


def test_create_bill_from_services_sums_selected_services(billing_service, client_repo, gst_at_seven):
    outcome = billing_service.create_bill_from_services(
        {
            "clientName": "Ali",
            "clientPhone": "0300 555 1234",
            "selectedServices": [{"name": "Facial", "price": 1500}, {"name": "Manicure", "price": 500}],
            "discount": 200,
            "paymentMethod": "card",
        }
    )
    bill = outcome.primary.bill

    assert bill.subtotal == 2000
    assert bill.amount_before_gst == 1800
    assert bill.final_amount == 1926.0
    assert bill.payment_status == PaymentStatus.PENDING
    assert outcome.primary.client.client_id == "CLT001"
    assert client_repo.get("CLT001").total_visits == 1


def test_create_bill_from_services_requires_selection(billing_service):
    with pytest.raises(ValidationError):
        billing_service.create_bill_from_services({"clientName": "Ali", "clientPhone": "1", "selectedServices": []})


def test_update_payment_to_paid_stamps_paid_at(billing_service):
    bill = billing_service.create_bill(_bill_input()).primary.bill

    updated = billing_service.update_payment(bill.bill_id, payment_status="paid", payment_method="card")

    assert updated.payment_status == PaymentStatus.PAID
    assert updated.paid_at is not None
    assert updated.payment_method.value == "card"


def test_update_payment_leaves_unlisted_fields_alone(billing_service):
    bill = billing_service.create_bill(_bill_input(notes="VIP")).primary.bill

    updated = billing_service.update_payment(bill.bill_id, payment_status="overdue")

    assert updated.notes == "VIP"
    assert updated.paid_at is None
    assert updated.final_amount == bill.final_amount


def test_update_payment_rejects_unknown_status(billing_service):
    bill = billing_service.create_bill(_bill_input()).primary.bill

    with pytest.raises(InvalidStatusError):
        billing_service.update_payment(bill.bill_id, payment_status="refunded")


def test_update_payment_unknown_bill(billing_service):
    with pytest.raises(NotFoundError):
        billing_service.update_payment("missing", payment_status="paid")


def test_cancel_bill_twice_is_allowed(billing_service):
    bill = billing_service.create_bill(_bill_input()).primary.bill
    billing_service.update_payment(bill.bill_id, payment_status="paid")

    first = billing_service.cancel_bill(bill.bill_id, "No show")
    second = billing_service.cancel_bill(bill.bill_id)

    assert first.payment_status == PaymentStatus.CANCELLED
    assert second.payment_status == PaymentStatus.CANCELLED
    assert second.notes == "Cancelled: No show\nBill cancelled"


def test_bill_lookup_by_id_and_number(billing_service):
    bill = billing_service.create_bill(_bill_input()).primary.bill

    assert billing_service.get_bill(bill.bill_id) == bill
    assert billing_service.get_bill_by_number(bill.bill_number) == bill
    assert billing_service.printable_bill(bill.bill_id)["total"] == bill.final_amount
    with pytest.raises(NotFoundError):
        billing_service.get_bill_by_number("BILL0")


def test_client_billing_history_summary(billing_service, gst_at_seven):
    first = billing_service.create_bill(_bill_input()).primary
    client_ref = first.client.client_id
    second = billing_service.create_bill(_bill_input(clientId=client_ref, subtotal=100)).primary.bill
    billing_service.update_payment(second.bill_id, payment_status="paid")

    history = billing_service.client_billing_history(client_ref, page=1, limit=1)

    assert len(history["bills"]) == 1
    assert history["bills"][0]["id"] == second.bill_id
    assert history["pagination"]["total"] == 2
    assert history["pagination"]["hasNext"] is True
    assert history["summary"]["totalAmount"] == pytest.approx(1070 + 107)
    assert history["summary"]["paidAmount"] == pytest.approx(107)


def test_search_by_client_is_case_insensitive(billing_service):
    billing_service.create_bill(_bill_input(clientName="Jane Doe"))
    billing_service.create_bill(_bill_input(clientName="Maria", clientPhone="0311 222 3333"))

    page = billing_service.search_by_client("jane")

    assert page.total == 1
    assert page.items[0].client_name == "Jane Doe"
    assert billing_service.search_by_client("0311", status="pending").total == 1
    assert billing_service.search_by_client("jane", status="paid").total == 0


def test_search_by_client_requires_query(billing_service):
    with pytest.raises(ValidationError):
        billing_service.search_by_client("  ")


def test_billing_stats_count_only_paid_revenue(billing_service, gst_at_seven):
    paid = billing_service.create_bill(_bill_input()).primary.bill
    billing_service.create_bill(_bill_input(services=[{"name": "Wax", "price": 100}], subtotal=100))
    billing_service.update_payment(paid.bill_id, payment_status="paid")

    stats = billing_service.billing_stats()

    assert stats["totalBills"] == 2
    assert stats["todayBills"] == 2
    assert stats["monthlyBills"] == 2
    assert stats["todayRevenue"] == 1070.0
    assert stats["monthlyRevenue"] == 1070.0
    assert {r["status"]: r["count"] for r in stats["billsByStatus"]} == {"paid": 1, "pending": 1}
    assert stats["topServices"][0]["name"] in {"Haircut", "Wax"}
    assert stats["monthlyTrend"] == [{"year": 2026, "month": 3, "revenue": 1070.0, "billCount": 1}]
    assert len(stats["recentBills"]) == 2
