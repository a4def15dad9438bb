from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import InvoiceStatus
from .model import Invoice


class InvoiceRepository(Protocol):
    def next_sequence(self, organization_id: int, prefix: str) -> int:
        """Atomically reserve the next sequence number for (organization, prefix).

        The counter starts from the highest sequence already used by an invoice
        number with this prefix and only ever moves forward, so numbers of
        deleted invoices are never handed out again.
        """

        raise NotImplementedError

    def max_sequence_for_prefix(self, organization_id: int, prefix: str) -> int:
        """Highest numeric suffix among invoice numbers starting with prefix (0 when none)."""

        raise NotImplementedError

    def create(self, invoice: Invoice) -> int:
        raise NotImplementedError

    def get_by_id_and_organization(self, invoice_id: int, organization_id: int) -> Optional[Invoice]:
        raise NotImplementedError

    def update(self, invoice: Invoice) -> bool:
        """Overwrite the invoice row and replace all of its items."""

        raise NotImplementedError

    def delete(self, invoice_id: int) -> bool:
        raise NotImplementedError

    def list_by_organization(
        self,
        organization_id: int,
        *,
        status: Optional[InvoiceStatus] = None,
        client_search: Optional[str] = None,
    ) -> Sequence[Invoice]:
        raise NotImplementedError

    def list_overdue(self, organization_id: int, *, today: date) -> Sequence[Invoice]:
        raise NotImplementedError

    def count_by_status(self, organization_id: int, *, status: Optional[InvoiceStatus] = None) -> int:
        raise NotImplementedError

    def total_outstanding(self, organization_id: int) -> Decimal:
        """Sum of balance_amount over invoices not PAID or CANCELLED."""

        raise NotImplementedError

    def revenue_between(self, organization_id: int, *, start: date, end: date) -> Decimal:
        """Sum of total_amount of PAID invoices issued in [start, end]."""

        raise NotImplementedError
