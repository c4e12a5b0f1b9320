from __future__ import annotations

from flask import Flask

from ..common.http import current_actor, json_body, json_endpoint
from ..container import Container


def register(app: Flask, container: Container) -> None:
    gst = container.gst_service

    @app.route("/gst/config", methods=["GET"], endpoint="get_gst_config")
    @json_endpoint("Error fetching GST configuration")
    def get_gst_config():
        return "GST configuration retrieved successfully", gst.get_config().to_dict()

    @app.route("/gst/config", methods=["PUT"], endpoint="update_gst_config")
    @json_endpoint("Error updating GST configuration")
    def update_gst_config():
        data = json_body()
        config = gst.update_config(
            actor_id=current_actor().user_id,
            gst_percentage=data.get("gstPercentage"),
            is_active=data.get("isActive"),
            applied_to=data.get("appliedTo"),
        )
        return "GST configuration updated successfully", config.to_dict()

    @app.route("/gst/billing", methods=["GET"], endpoint="gst_for_billing")
    @json_endpoint("Error fetching GST for billing")
    def gst_for_billing():
        return "GST for billing retrieved successfully", gst.billing_view()

    @app.route("/gst/calculate", methods=["POST"], endpoint="calculate_gst")
    @json_endpoint("Error calculating GST")
    def calculate_gst():
        return "GST calculated successfully", gst.calculate(json_body().get("amount"))
