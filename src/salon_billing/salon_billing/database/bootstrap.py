from __future__ import annotations

import logging

from pymongo import ASCENDING, DESCENDING
from pymongo.database import Database

logger = logging.getLogger(__name__)

# collection -> [(keys, options)]
INDEXES = {
    "bills": [
        ([("clientId", ASCENDING)], {}),
        ([("billNumber", ASCENDING)], {"unique": True}),
        ([("appointmentDate", ASCENDING)], {}),
        ([("paymentStatus", ASCENDING)], {}),
        ([("createdAt", DESCENDING)], {}),
    ],
    "clients": [
        ([("clientId", ASCENDING)], {"unique": True}),
        ([("phoneNumber", ASCENDING)], {"unique": True}),
    ],
    "notifications": [
        ([("recipientId", ASCENDING), ("isRead", ASCENDING)], {}),
        ([("type", ASCENDING), ("isActive", ASCENDING)], {}),
        ([("scheduledFor", ASCENDING), ("isActive", ASCENDING)], {}),
        ([("createdAt", DESCENDING)], {}),
    ],
    "gst_config": [
        ([("key", ASCENDING)], {"unique": True}),
    ],
    "gst_config_history": [
        ([("createdAt", DESCENDING)], {}),
    ],
}


def ensure_indexes(db: Database) -> int:
    """Create the indexes the repositories rely on. Safe to call on every start."""
    created = 0
    for collection, specs in INDEXES.items():
        for keys, options in specs:
            db[collection].create_index(keys, **options)
            created += 1
    logger.info("Ensured %d indexes on database %s", created, db.name)
    return created
