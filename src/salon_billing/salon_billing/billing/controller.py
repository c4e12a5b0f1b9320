from __future__ import annotations

from flask import Flask, request

from ..common.http import json_body, json_endpoint
from ..common.outcomes import Outcome
from ..container import Container
from .model import Bill
from .service import BillCreated


def _created_payload(outcome: Outcome[BillCreated]) -> dict:
    return {
        "bill": outcome.primary.bill.to_dict(),
        "client": outcome.primary.client.to_dict(),
        "sideEffects": [s.to_dict() for s in outcome.side_effects],
    }


def register(app: Flask, container: Container) -> None:
    billing = container.billing_service

    @app.route("/bills/create", methods=["POST"], endpoint="create_bill")
    @json_endpoint("Error creating bill")
    def create_bill():
        outcome = billing.create_bill(json_body())
        return "Bill created successfully", _created_payload(outcome), 201

    @app.route("/bills/create-from-services", methods=["POST"], endpoint="create_bill_from_services")
    @json_endpoint("Error creating bill")
    def create_bill_from_services():
        outcome = billing.create_bill_from_services(json_body())
        return "Bill created successfully", _created_payload(outcome), 201

    @app.route("/bills/stats", methods=["GET"], endpoint="billing_stats")
    @json_endpoint("Error fetching billing statistics")
    def billing_stats():
        return "Billing statistics retrieved successfully", billing.billing_stats()

    @app.route("/bills/search/client", methods=["GET"], endpoint="search_bills_by_client")
    @json_endpoint("Error searching bills")
    def search_bills_by_client():
        args = request.args
        page = billing.search_by_client(
            args.get("query"),
            status=args.get("status"),
            date_from=args.get("dateFrom"),
            date_to=args.get("dateTo"),
            page=args.get("page"),
            limit=args.get("limit"),
        )
        return "Bills retrieved successfully", page.to_dict("bills", Bill.to_dict)

    @app.route("/bills/number/<bill_number>", methods=["GET"], endpoint="get_bill_by_number")
    @json_endpoint("Error fetching bill")
    def get_bill_by_number(bill_number: str):
        return "Bill retrieved successfully", billing.get_bill_by_number(bill_number).to_dict()

    @app.route("/bills/client/<client_id>/history", methods=["GET"], endpoint="client_billing_history")
    @json_endpoint("Error fetching billing history")
    def client_billing_history(client_id: str):
        data = billing.client_billing_history(
            client_id,
            page=request.args.get("page"),
            limit=request.args.get("limit"),
            status=request.args.get("status"),
        )
        return "Billing history retrieved successfully", data

    @app.route("/bills/<bill_id>", methods=["GET"], endpoint="get_bill")
    @json_endpoint("Error fetching bill")
    def get_bill(bill_id: str):
        return "Bill retrieved successfully", billing.get_bill(bill_id).to_dict()

    @app.route("/bills/<bill_id>/print", methods=["GET"], endpoint="print_bill")
    @json_endpoint("Error generating printable bill")
    def print_bill(bill_id: str):
        return "Printable bill generated successfully", billing.printable_bill(bill_id)

    @app.route("/bills/<bill_id>/payment", methods=["PUT"], endpoint="update_bill_payment")
    @json_endpoint("Error updating payment status")
    def update_bill_payment(bill_id: str):
        data = json_body()
        bill = billing.update_payment(
            bill_id,
            payment_status=data.get("paymentStatus"),
            payment_method=data.get("paymentMethod"),
            notes=data.get("notes"),
        )
        return "Payment status updated successfully", bill.to_dict()

    @app.route("/bills/<bill_id>/cancel", methods=["PUT"], endpoint="cancel_bill")
    @json_endpoint("Error cancelling bill")
    def cancel_bill(bill_id: str):
        bill = billing.cancel_bill(bill_id, json_body().get("reason"))
        return "Bill cancelled successfully", bill.to_dict()
