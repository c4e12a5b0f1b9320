"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_GST_PERCENTAGE = 7

BILL_NUMBER_PREFIX = "BILL"
VISIT_ID_PREFIX = "VISIT"
CLIENT_ID_PREFIX = "CLT"
CLIENT_ID_WIDTH = 3

DEFAULT_PAGE_SIZE = 10
DEFAULT_NOTIFICATION_PAGE_SIZE = 20
TOP_SERVICES_LIMIT = 10
RECENT_BILLS_LIMIT = 10
RECENT_CLIENTS_LIMIT = 10
REVENUE_TREND_MONTHS = 6
REMINDER_WINDOW_HOURS = 24
