from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Employee:
    """Domain entity: an employee of one organization.

    Pay settings (overtime rate, tax rate, insurance) are the defaults used
    when a payslip request does not override them.
    """

    employee_id: int
    organization_id: int
    full_name: str
    username: str
    role: Role
    email: Optional[str] = None
    monthly_salary: Optional[Decimal] = None
    overtime_rate: Optional[Decimal] = None
    tax_rate: Optional[Decimal] = None
    insurance_deduction: Optional[Decimal] = None
    is_active: bool = True


@dataclass(frozen=True)
class Actor:
    """The authenticated caller, passed explicitly into every service operation."""

    user_id: int
    organization_id: int
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
