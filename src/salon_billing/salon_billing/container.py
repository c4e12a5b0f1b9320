from __future__ import annotations

from dataclasses import dataclass

from .billing.calculator.standard_calculator import StandardBillCalculator
from .billing.mongo_bill_repository import MongoBillRepository
from .billing.service import BillingService
from .clients.mongo_client_repository import MongoClientRepository
from .clients.service import ClientService
from .database.connection import DBConfig, MongoConnection
from .gst.mongo_gst_repository import MongoGSTConfigRepository
from .gst.service import GSTService
from .notifications.mongo_notification_repository import MongoNotificationRepository
from .notifications.service import NotificationService
from .users.mongo_staff_repository import MongoStaffRepository


@dataclass(frozen=True)
class Container:
    conn: MongoConnection

    staff_repo: MongoStaffRepository
    gst_repo: MongoGSTConfigRepository
    bills_repo: MongoBillRepository
    clients_repo: MongoClientRepository
    notifications_repo: MongoNotificationRepository

    notification_service: NotificationService
    gst_service: GSTService
    client_service: ClientService
    billing_service: BillingService


def build_container(*, mongo_config: dict) -> Container:
    config = DBConfig(
        uri=str(mongo_config["uri"]),
        database=str(mongo_config["database"]),
        timeout_ms=int(mongo_config.get("timeout_ms", 5000)),
    )
    conn = MongoConnection.get_instance(config)

    staff_repo = MongoStaffRepository(conn)
    gst_repo = MongoGSTConfigRepository(conn)
    bills_repo = MongoBillRepository(conn)
    clients_repo = MongoClientRepository(conn)
    notifications_repo = MongoNotificationRepository(conn)

    calculator = StandardBillCalculator()
    notification_service = NotificationService(notifications_repo, staff_repo)
    gst_service = GSTService(gst_repo, staff_repo, calculator=calculator)
    client_service = ClientService(clients_repo, bills_repo, notification_service)
    billing_service = BillingService(bills_repo, client_service, gst_service, calculator=calculator)

    return Container(
        conn=conn,
        staff_repo=staff_repo,
        gst_repo=gst_repo,
        bills_repo=bills_repo,
        clients_repo=clients_repo,
        notifications_repo=notifications_repo,
        notification_service=notification_service,
        gst_service=gst_service,
        client_service=client_service,
        billing_service=billing_service,
    )
