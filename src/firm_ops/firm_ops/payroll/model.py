from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from ..common.money import ZERO, money
from ..core.constants import PAYSLIP_SEQUENCE_WIDTH
from ..core.enums import PayslipStatus


@dataclass(frozen=True)
class WorkDayResult:
    """Derived, never stored: hours worked on one calendar day."""

    work_date: Optional[date]
    worked_hours: Decimal
    overtime_hours: Decimal
    worked: bool


@dataclass(frozen=True)
class PayPeriodCalculationResult:
    days_worked: int
    total_overtime_hours: Decimal


@dataclass(frozen=True)
class PayslipRequest:
    """Raw payslip inputs as received from a caller.

    Numeric fields may be strings, numbers or None; the service parses them
    according to the configured ParseErrorPolicy. Omitted pay settings fall
    back to the employee record.
    """

    employee_id: int
    organization_id: int
    pay_period_start: date
    pay_period_end: date
    monthly_salary: Any = None
    allowances: Any = None
    bonuses: Any = None
    other_deductions: Any = None
    overtime_rate: Any = None
    tax_rate: Any = None
    insurance_deduction: Any = None
    notes: Optional[str] = None


@dataclass
class Payslip:
    """Payslip aggregate.

    Input fields may be changed freely; call recalculate() after a batch of
    changes to bring the derived amounts back in line:

        basic_salary     = daily_salary * days_worked
        overtime_amount  = overtime_hours * overtime_rate
        gross_salary     = basic_salary + overtime_amount + allowances + bonuses
        total_deductions = tax_deduction + insurance_deduction + other_deductions
        net_salary       = gross_salary - total_deductions
    """

    employee_id: int
    organization_id: int
    pay_period_start: date
    pay_period_end: date
    pay_date: date
    payslip_id: Optional[int] = None
    payslip_number: Optional[str] = None
    daily_salary: Decimal = ZERO
    days_worked: int = 0
    overtime_hours: Decimal = ZERO
    overtime_rate: Decimal = ZERO
    allowances: Decimal = ZERO
    bonuses: Decimal = ZERO
    tax_deduction: Decimal = ZERO
    insurance_deduction: Decimal = ZERO
    other_deductions: Decimal = ZERO
    status: PayslipStatus = PayslipStatus.DRAFT
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    basic_salary: Decimal = ZERO
    overtime_amount: Decimal = ZERO
    gross_salary: Decimal = ZERO
    total_deductions: Decimal = ZERO
    net_salary: Decimal = ZERO

    def recalculate(self) -> "Payslip":
        self.basic_salary = money(self.daily_salary * self.days_worked)
        self.overtime_amount = money(self.overtime_hours * self.overtime_rate)
        self.gross_salary = self.basic_salary + self.overtime_amount + self.allowances + self.bonuses
        self.total_deductions = self.tax_deduction + self.insurance_deduction + self.other_deductions
        self.net_salary = self.gross_salary - self.total_deductions
        return self

    @staticmethod
    def sequential_number(pay_period_start: date, sequence: int) -> str:
        return f"PS{pay_period_start.year}{pay_period_start.month:02d}{int(sequence):0{PAYSLIP_SEQUENCE_WIDTH}d}"

    @staticmethod
    def preview_number(now: datetime) -> str:
        return f"PSL-{int(now.timestamp() * 1000)}"

    def to_dict(self) -> dict:
        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, Decimal):
                data[key] = str(value)
            elif isinstance(value, (date, datetime)):
                data[key] = value.isoformat()
        data["status"] = self.status.value
        return data


@dataclass(frozen=True)
class PayslipStatistics:
    total_payslips: int
    paid_payslips: int
    total_paid_amount: Decimal

    def to_dict(self) -> dict:
        return {
            "total_payslips": self.total_payslips,
            "paid_payslips": self.paid_payslips,
            "total_paid_amount": str(self.total_paid_amount),
        }
