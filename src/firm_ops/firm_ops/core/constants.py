"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

MONEY_QUANTUM = Decimal("0.01")
RATE_QUANTUM = Decimal("0.0001")

STANDARD_DAILY_HOURS = Decimal("8")
DEFAULT_INVOICE_DUE_DAYS = 30

CLOCK_WINDOW_START_HOUR = 7
CLOCK_IN_LAST_HOUR = 22
CLOCK_OUT_LAST_HOUR = 23
MIN_MINUTES_BETWEEN_ENTRIES = 1

DEFAULT_ORG_CODE = "ORG"
ORG_CODE_LENGTH = 4
INVOICE_SEQUENCE_WIDTH = 3
PAYSLIP_SEQUENCE_WIDTH = 4
