"""Collaborator interfaces for document output.

PDF layout and email delivery are provided by the hosting application; the
services only hand finished aggregates to these interfaces.
"""

from __future__ import annotations

from typing import Protocol

from ..invoices.model import Invoice
from ..payroll.model import Payslip


class DocumentRenderer(Protocol):
    def render_payslip(self, payslip: Payslip) -> bytes:
        raise NotImplementedError

    def render_invoice(self, invoice: Invoice) -> bytes:
        raise NotImplementedError


class NotificationGateway(Protocol):
    def send_payslip(self, *, to_email: str, payslip: Payslip, pdf: bytes) -> None:
        raise NotImplementedError

    def send_invoice(self, *, to_email: str, invoice: Invoice, pdf: bytes) -> None:
        raise NotImplementedError
