from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for authorization."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class EntryType(str, Enum):
    """Kind of clock event stored in the attendance ledger."""

    CLOCK_IN = "CLOCK_IN"
    CLOCK_OUT = "CLOCK_OUT"


class PayslipStatus(str, Enum):
    DRAFT = "DRAFT"
    GENERATED = "GENERATED"
    APPROVED = "APPROVED"
    PAID = "PAID"
    CANCELLED = "CANCELLED"


class InvoiceStatus(str, Enum):
    DRAFT = "DRAFT"
    SENT = "SENT"
    VIEWED = "VIEWED"
    PAID = "PAID"
    OVERDUE = "OVERDUE"
    CANCELLED = "CANCELLED"


class InvoiceItemType(str, Enum):
    FIXED_PRICE = "FIXED_PRICE"
    TIME_BASED = "TIME_BASED"
    EXPENSE = "EXPENSE"
    DISCOUNT = "DISCOUNT"


class ParseErrorPolicy(str, Enum):
    """What to do with an optional numeric input that does not parse."""

    ZERO = "zero"
    REJECT = "reject"
