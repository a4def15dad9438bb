from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, List, Optional

from ..common.money import ZERO, money
from ..core.constants import RATE_QUANTUM
from ..core.enums import InvoiceItemType, InvoiceStatus

_SETTLED = (InvoiceStatus.PAID, InvoiceStatus.CANCELLED)


@dataclass(frozen=True)
class InvoiceItem:
    """One invoice line, owned by value by its invoice (identified by position)."""

    description: str
    unit_price: Decimal
    quantity: Decimal = Decimal("1")
    item_type: InvoiceItemType = InvoiceItemType.FIXED_PRICE
    time_log_reference: Optional[str] = None

    @property
    def amount(self) -> Decimal:
        return money(self.quantity * self.unit_price)

    def to_dict(self, position: int) -> dict:
        return {
            "position": position,
            "description": self.description,
            "item_type": self.item_type.value,
            "quantity": str(self.quantity),
            "unit_price": str(self.unit_price),
            "amount": str(self.amount),
            "time_log_reference": self.time_log_reference,
        }


@dataclass(frozen=True)
class InvoiceDraft:
    """Raw invoice fields from a caller; blanks are filled in by the service."""

    client_name: Optional[str] = None
    client_email: Optional[str] = None
    client_address: Optional[str] = None
    client_phone: Optional[str] = None
    invoice_number: Optional[str] = None
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    status: Optional[InvoiceStatus] = None
    tax_rate: Any = None
    notes: Optional[str] = None
    terms_and_conditions: Optional[str] = None
    items: Optional[tuple] = None


@dataclass
class Invoice:
    """Invoice aggregate.

    Call recalculate() after changing items, tax_rate or paid_amount:

        subtotal       = sum(item.amount)
        tax_amount     = subtotal * (tax_rate / 100, rounded to 4 places)
        total_amount   = subtotal + tax_amount
        balance_amount = total_amount - paid_amount
    """

    organization_id: int
    invoice_number: str
    client_name: str
    issue_date: date
    due_date: date
    invoice_id: Optional[int] = None
    project_id: Optional[int] = None
    created_by: Optional[int] = None
    client_email: Optional[str] = None
    client_address: Optional[str] = None
    client_phone: Optional[str] = None
    status: InvoiceStatus = InvoiceStatus.DRAFT
    tax_rate: Decimal = ZERO
    paid_amount: Decimal = ZERO
    last_payment_date: Optional[date] = None
    notes: Optional[str] = None
    terms_and_conditions: Optional[str] = None
    items: List[InvoiceItem] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    subtotal: Decimal = ZERO
    tax_amount: Decimal = ZERO
    total_amount: Decimal = ZERO
    balance_amount: Decimal = ZERO

    def recalculate(self) -> "Invoice":
        self.subtotal = money(sum((item.amount for item in self.items), ZERO))
        rate = (self.tax_rate / Decimal(100)).quantize(RATE_QUANTUM, rounding=ROUND_HALF_UP)
        self.tax_amount = money(self.subtotal * rate)
        self.total_amount = self.subtotal + self.tax_amount
        self.balance_amount = self.total_amount - self.paid_amount
        return self

    def add_item(self, item: InvoiceItem) -> int:
        """Append an item and return its position."""
        self.items.append(item)
        self.recalculate()
        return len(self.items) - 1

    def remove_item(self, position: int) -> InvoiceItem:
        item = self.items.pop(position)
        self.recalculate()
        return item

    def replace_items(self, items) -> None:
        self.items = list(items)
        self.recalculate()

    def is_overdue(self, today: date) -> bool:
        return self.due_date < today and self.status not in _SETTLED

    def effective_status(self, today: date) -> InvoiceStatus:
        return InvoiceStatus.OVERDUE if self.is_overdue(today) else self.status

    def to_dict(self, *, today: Optional[date] = None) -> dict:
        data = {
            "invoice_id": self.invoice_id,
            "invoice_number": self.invoice_number,
            "organization_id": self.organization_id,
            "project_id": self.project_id,
            "created_by": self.created_by,
            "client_name": self.client_name,
            "client_email": self.client_email,
            "client_address": self.client_address,
            "client_phone": self.client_phone,
            "issue_date": self.issue_date.isoformat(),
            "due_date": self.due_date.isoformat(),
            "status": self.status.value,
            "subtotal": str(self.subtotal),
            "tax_rate": str(self.tax_rate),
            "tax_amount": str(self.tax_amount),
            "total_amount": str(self.total_amount),
            "paid_amount": str(self.paid_amount),
            "balance_amount": str(self.balance_amount),
            "last_payment_date": self.last_payment_date.isoformat() if self.last_payment_date else None,
            "notes": self.notes,
            "terms_and_conditions": self.terms_and_conditions,
            "items": [item.to_dict(i) for i, item in enumerate(self.items)],
        }
        if today is not None:
            data["effective_status"] = self.effective_status(today).value
        return data


@dataclass(frozen=True)
class InvoiceStatistics:
    total_invoices: int
    draft_invoices: int
    paid_invoices: int
    overdue_invoices: int
    total_outstanding: Decimal
    yearly_revenue: Decimal

    def to_dict(self) -> dict:
        return {
            "total_invoices": self.total_invoices,
            "draft_invoices": self.draft_invoices,
            "paid_invoices": self.paid_invoices,
            "overdue_invoices": self.overdue_invoices,
            "total_outstanding": str(self.total_outstanding),
            "yearly_revenue": str(self.yearly_revenue),
        }
