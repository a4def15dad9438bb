from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import PayslipStatus
from .model import Payslip


class PayslipRepository(Protocol):
    def exists_overlapping(self, *, employee_id: int, organization_id: int, start: date, end: date) -> bool:
        raise NotImplementedError

    def create(self, payslip: Payslip) -> Optional[int]:
        """Insert the payslip and assign its sequential number in one transaction.

        Returns the new id, or None when a payslip overlapping the same period
        for the same employee+organization already exists. The overlap check
        and the insert must be atomic with respect to concurrent calls.
        """

        raise NotImplementedError

    def get_by_id(self, payslip_id: int) -> Optional[Payslip]:
        raise NotImplementedError

    def update(self, payslip: Payslip) -> bool:
        raise NotImplementedError

    def delete(self, payslip_id: int) -> bool:
        raise NotImplementedError

    def list_for_employee(self, employee_id: int, *, status: Optional[PayslipStatus] = None) -> Sequence[Payslip]:
        raise NotImplementedError

    def list_for_organization(
        self,
        organization_id: int,
        *,
        status: Optional[PayslipStatus] = None,
    ) -> Sequence[Payslip]:
        raise NotImplementedError

    def count_by_organization(self, organization_id: int, *, status: Optional[PayslipStatus] = None) -> int:
        raise NotImplementedError

    def total_paid_net(self, organization_id: int, *, start: date, end: date) -> Decimal:
        """Sum of net salary of PAID payslips with pay_date in [start, end]."""

        raise NotImplementedError
