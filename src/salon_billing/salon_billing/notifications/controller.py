from __future__ import annotations

from flask import Flask, request

from ..common.http import current_actor, json_body, json_endpoint
from ..container import Container
from .model import Notification


def register(app: Flask, container: Container) -> None:
    notifications = container.notification_service

    @app.route("/notifications", methods=["GET"], endpoint="list_notifications")
    @json_endpoint("Error fetching notifications")
    def list_notifications():
        args = request.args
        page, unread = notifications.list_for_user(
            current_actor(),
            page=args.get("page"),
            limit=args.get("limit"),
            type=args.get("type"),
            is_read=args.get("isRead"),
        )
        data = page.to_dict("notifications", Notification.to_dict)
        data["unreadCount"] = unread
        return "Notifications retrieved successfully", data

    @app.route("/notifications/count", methods=["GET"], endpoint="notification_count")
    @json_endpoint("Error fetching notification count")
    def notification_count():
        return "Notification count retrieved successfully", {"unreadCount": notifications.unread_count(current_actor())}

    @app.route("/notifications/reminders", methods=["GET"], endpoint="upcoming_reminders")
    @json_endpoint("Error fetching reminders")
    def upcoming_reminders():
        items = notifications.upcoming_reminders(current_actor())
        return "Upcoming reminders retrieved successfully", [n.to_dict() for n in items]

    @app.route("/notifications/mark-all-read", methods=["PUT"], endpoint="mark_all_notifications_read")
    @json_endpoint("Error marking notifications as read")
    def mark_all_notifications_read():
        count = notifications.mark_all_as_read(current_actor())
        return "All notifications marked as read", {"modifiedCount": count}

    @app.route("/notifications/<notification_id>/read", methods=["PUT"], endpoint="mark_notification_read")
    @json_endpoint("Error marking notification as read")
    def mark_notification_read(notification_id: str):
        notification = notifications.mark_as_read(current_actor(), notification_id)
        return "Notification marked as read", notification.to_dict()

    @app.route("/notifications/<notification_id>", methods=["DELETE"], endpoint="delete_notification")
    @json_endpoint("Error deleting notification")
    def delete_notification(notification_id: str):
        notifications.delete(current_actor(), notification_id)
        return "Notification deleted successfully", None

    @app.route("/notifications/create", methods=["POST"], endpoint="create_notification")
    @json_endpoint("Error creating notification")
    def create_notification():
        dispatch = notifications.create_notification(json_body())
        data = dispatch.notification.to_dict() if dispatch.notification else None
        return dispatch.message, data, 201
