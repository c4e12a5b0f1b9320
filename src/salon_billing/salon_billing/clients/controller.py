from __future__ import annotations

from flask import Flask, request

from ..common.http import json_body, json_endpoint
from ..container import Container
from .model import Client


def register(app: Flask, container: Container) -> None:
    clients = container.client_service

    @app.route("/clients/add", methods=["POST"], endpoint="add_client")
    @json_endpoint("Error adding client")
    def add_client():
        data = json_body()
        registration = clients.add_client(name=data.get("name"), phone_number=data.get("phoneNumber"))
        if not registration.created:
            return "Client already exists", {"existingClient": registration.client.to_dict()}
        return "Client added successfully", {"client": registration.client.to_dict()}, 201

    @app.route("/clients", methods=["GET"], endpoint="list_clients")
    @json_endpoint("Error fetching clients")
    def list_clients():
        page = clients.list_clients(page=request.args.get("page"), limit=request.args.get("limit"))
        return "Clients retrieved successfully", page.to_dict("clients", Client.to_dict)

    @app.route("/clients/search", methods=["GET"], endpoint="search_clients")
    @json_endpoint("Error searching clients")
    def search_clients():
        found = clients.search_clients(request.args.get("query"))
        return "Clients retrieved successfully", [c.to_dict() for c in found]

    @app.route("/clients/check-phone", methods=["GET"], endpoint="check_client_phone")
    @json_endpoint("Error checking phone number")
    def check_client_phone():
        client = clients.check_phone(request.args.get("phoneNumber"))
        data = {"exists": client is not None, "client": client.to_dict() if client else None}
        return ("Phone number already registered" if client else "Phone number available"), data

    @app.route("/clients/stats", methods=["GET"], endpoint="client_stats")
    @json_endpoint("Error fetching client statistics")
    def client_stats():
        return "Client statistics retrieved successfully", clients.client_stats()

    @app.route("/clients/<client_id>", methods=["GET"], endpoint="get_client")
    @json_endpoint("Error fetching client")
    def get_client(client_id: str):
        return "Client retrieved successfully", clients.get_client(client_id).to_dict(with_visits=True)

    @app.route("/clients/<client_id>", methods=["PUT"], endpoint="update_client")
    @json_endpoint("Error updating client")
    def update_client(client_id: str):
        data = json_body()
        client = clients.update_client(client_id, name=data.get("name"), phone_number=data.get("phoneNumber"))
        return "Client updated successfully", client.to_dict()

    @app.route("/clients/<client_id>", methods=["DELETE"], endpoint="delete_client")
    @json_endpoint("Error deleting client")
    def delete_client(client_id: str):
        clients.delete_client(client_id)
        return "Client deleted successfully", None

    @app.route("/clients/<client_id>/history", methods=["GET"], endpoint="client_history")
    @json_endpoint("Error fetching client history")
    def client_history(client_id: str):
        return "Client history retrieved successfully", clients.get_history(client_id)

    @app.route("/clients/<client_id>/visits", methods=["POST"], endpoint="add_client_visit")
    @json_endpoint("Error adding visit")
    def add_client_visit(client_id: str):
        body = json_body()
        outcome = clients.add_visit(client_id, body.get("visitData", body))
        data = {
            "visit": outcome.primary.visit.to_dict(),
            "client": outcome.primary.client.to_dict(),
            "sideEffects": [s.to_dict() for s in outcome.side_effects],
        }
        return "Visit added successfully", data, 201
