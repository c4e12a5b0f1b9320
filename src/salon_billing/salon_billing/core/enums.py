from __future__ import annotations

from enum import Enum


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"
    ONLINE = "online"
    OTHER = "other"


class PaymentStatus(str, Enum):
    """Bill payment lifecycle. Bills are never deleted, only moved to CANCELLED."""

    PENDING = "pending"
    PAID = "paid"
    PARTIALLY_PAID = "partially_paid"
    CANCELLED = "cancelled"
    OVERDUE = "overdue"


class GSTScope(str, Enum):
    ALL = "all"
    SERVICES = "services"
    PRODUCTS = "products"
    DEALS = "deals"


class StaffRole(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    EMPLOYEE = "employee"


class RecipientType(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    BOTH = "both"


class RecipientModel(str, Enum):
    """Which collection a notification recipient id points into."""

    ADMIN = "Admin"
    MANAGER = "Manager"
    EMPLOYEE = "Employee"
    USER = "User"


class NotificationType(str, Enum):
    ADVANCE_BOOKING_REMINDER = "advance_booking_reminder"
    ATTENDANCE_REQUEST = "attendance_request"
    EXPENSE_REQUEST = "expense_request"
    ADVANCE_SALARY_REQUEST = "advance_salary_request"
    BILL_GENERATED = "bill_generated"
    SYSTEM_ALERT = "system_alert"
    GENERAL = "general"


class NotificationPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"
