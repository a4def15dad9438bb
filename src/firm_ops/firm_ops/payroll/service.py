from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional, Sequence

from ..common.datetime_utils import count_weekdays, now_local
from ..common.money import ZERO, money, parse_optional_decimal
from ..common.validators import optional_text, parse_enum, require_period
from ..core.enums import ParseErrorPolicy, PayslipStatus
from ..core.exceptions import AuthorizationError, ConfigurationError, ConflictError, NotFoundError
from ..documents.gateways import DocumentRenderer, NotificationGateway
from ..employees.model import Actor, Employee
from ..employees.repository import EmployeeRepository
from ..organizations.model import Organization
from ..organizations.repository import OrganizationRepository
from .model import Payslip, PayslipRequest, PayslipStatistics
from .repository import PayslipRepository
from .work_period import WorkPeriodCalculator

logger = logging.getLogger(__name__)

_EDITABLE_AMOUNTS = ("allowances", "bonuses", "other_deductions")


class PayrollService:
    """Derives payslips from attendance and manages their lifecycle."""

    def __init__(
        self,
        payslips: PayslipRepository,
        employees: EmployeeRepository,
        organizations: OrganizationRepository,
        work_periods: WorkPeriodCalculator,
        *,
        parse_policy: ParseErrorPolicy = ParseErrorPolicy.ZERO,
        renderer: Optional[DocumentRenderer] = None,
        notifier: Optional[NotificationGateway] = None,
    ):
        self._payslips = payslips
        self._employees = employees
        self._organizations = organizations
        self._work_periods = work_periods
        self._parse_policy = parse_policy
        self._renderer = renderer
        self._notifier = notifier

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------
    def generate(self, actor: Actor, request: PayslipRequest, *, now: datetime | None = None) -> Payslip:
        """Compute and persist a payslip; refuses a period overlapping an existing one."""
        employee, organization = self._resolve(actor, request)

        if self._payslips.exists_overlapping(
            employee_id=employee.employee_id,
            organization_id=organization.organization_id,
            start=request.pay_period_start,
            end=request.pay_period_end,
        ):
            raise ConflictError("Payslip already exists for this period")

        payslip = self._compute(employee, organization, request, now=now or now_local())
        payslip_id = self._payslips.create(payslip)
        if payslip_id is None:
            raise ConflictError("Payslip already exists for this period")

        payslip.payslip_id = payslip_id
        payslip.payslip_number = Payslip.sequential_number(payslip.pay_period_start, payslip_id)
        logger.info(
            "Generated payslip %s for employee %s for period %s to %s",
            payslip.payslip_number,
            employee.username,
            request.pay_period_start,
            request.pay_period_end,
        )
        return payslip

    def generate_preview(self, actor: Actor, request: PayslipRequest, *, now: datetime | None = None) -> Payslip:
        """Same computation as generate() but nothing is checked against or written to storage."""
        employee, organization = self._resolve(actor, request)
        now = now or now_local()
        payslip = self._compute(employee, organization, request, now=now)
        payslip.payslip_number = Payslip.preview_number(now)
        logger.info(
            "Generated payslip preview for employee %s: basic=%s gross=%s net=%s",
            employee.username,
            payslip.basic_salary,
            payslip.gross_salary,
            payslip.net_salary,
        )
        return payslip

    def _resolve(self, actor: Actor, request: PayslipRequest) -> tuple[Employee, Organization]:
        require_period(request.pay_period_start, request.pay_period_end)

        employee = self._employees.get_by_id(request.employee_id)
        if not employee:
            raise NotFoundError("Employee not found")
        organization = self._organizations.get_by_id(request.organization_id)
        if not organization:
            raise NotFoundError("Organization not found")
        if employee.organization_id != organization.organization_id:
            raise NotFoundError("Employee not found in this organization")

        self._authorize(actor, organization.organization_id, employee_id=employee.employee_id)
        return employee, organization

    def _decimal(self, value: Any, field_name: str, *, default: Optional[Decimal] = None) -> Decimal:
        return parse_optional_decimal(value, field_name, policy=self._parse_policy, default=default)

    def _compute(self, employee: Employee, organization: Organization, request: PayslipRequest, *, now: datetime) -> Payslip:
        start, end = request.pay_period_start, request.pay_period_end

        calc = self._work_periods.compute_period(employee.employee_id, start, end)

        monthly_salary = self._decimal(request.monthly_salary, "monthly salary", default=employee.monthly_salary)
        allowances = money(self._decimal(request.allowances, "allowances"))
        bonuses = money(self._decimal(request.bonuses, "bonuses"))
        other_deductions = money(self._decimal(request.other_deductions, "other deductions"))
        overtime_rate = self._decimal(request.overtime_rate, "overtime rate", default=employee.overtime_rate)
        tax_rate = self._decimal(request.tax_rate, "tax rate", default=employee.tax_rate)
        insurance = money(
            self._decimal(request.insurance_deduction, "insurance deduction", default=employee.insurance_deduction)
        )

        working_days = count_weekdays(start, end)
        daily_salary = money(monthly_salary / working_days) if working_days > 0 else ZERO
        logger.info(
            "Pay period %s..%s: %s working days, %s days worked, daily rate %s",
            start,
            end,
            working_days,
            calc.days_worked,
            daily_salary,
        )

        payslip = Payslip(
            employee_id=employee.employee_id,
            organization_id=organization.organization_id,
            pay_period_start=start,
            pay_period_end=end,
            pay_date=now.date(),
            daily_salary=daily_salary,
            days_worked=calc.days_worked,
            overtime_hours=calc.total_overtime_hours,
            overtime_rate=money(overtime_rate),
            allowances=allowances,
            bonuses=bonuses,
            insurance_deduction=insurance,
            other_deductions=other_deductions,
            status=PayslipStatus.GENERATED,
            notes=optional_text(request.notes),
            created_at=now,
            updated_at=now,
        ).recalculate()

        # Tax depends on gross, which recalculate() has just produced.
        payslip.tax_deduction = money(payslip.gross_salary * tax_rate / Decimal(100))
        return payslip.recalculate()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def get_payslip(self, actor: Actor, payslip_id: int) -> Payslip:
        payslip = self._payslips.get_by_id(payslip_id)
        if not payslip or payslip.organization_id != actor.organization_id:
            raise NotFoundError("Payslip not found")
        self._authorize(actor, payslip.organization_id, employee_id=payslip.employee_id)
        return payslip

    def list_for_employee(self, actor: Actor, employee_id: int, *, status: PayslipStatus | None = None) -> Sequence[Payslip]:
        employee = self._employees.get_by_id(employee_id)
        if not employee or employee.organization_id != actor.organization_id:
            raise NotFoundError("Employee not found")
        self._authorize(actor, employee.organization_id, employee_id=employee.employee_id)
        return self._payslips.list_for_employee(employee_id, status=status)

    def list_for_organization(self, actor: Actor, *, status: PayslipStatus | None = None) -> Sequence[Payslip]:
        self._require_admin(actor)
        return self._payslips.list_for_organization(actor.organization_id, status=status)

    def statistics(self, actor: Actor, *, start: date, end: date) -> PayslipStatistics:
        self._require_admin(actor)
        if not self._organizations.get_by_id(actor.organization_id):
            raise NotFoundError("Organization not found")
        return PayslipStatistics(
            total_payslips=self._payslips.count_by_organization(actor.organization_id),
            paid_payslips=self._payslips.count_by_organization(actor.organization_id, status=PayslipStatus.PAID),
            total_paid_amount=self._payslips.total_paid_net(actor.organization_id, start=start, end=end),
        )

    # ------------------------------------------------------------------
    # Changes
    # ------------------------------------------------------------------
    def update_status(self, actor: Actor, payslip_id: int, status: PayslipStatus, *, now: datetime | None = None) -> Payslip:
        # Any status may follow any other; callers decide which moves make sense.
        self._require_admin(actor)
        payslip = self.get_payslip(actor, payslip_id)
        payslip.status = status
        payslip.updated_at = now or now_local()
        self._payslips.update(payslip)
        logger.info("Payslip %s status updated to %s", payslip.payslip_number, status.value)
        return payslip

    def update_payslip(self, actor: Actor, payslip_id: int, changes: dict, *, now: datetime | None = None) -> Payslip:
        """Apply allowances/bonuses/other_deductions/notes/status changes, then recalculate once."""
        self._require_admin(actor)
        payslip = self.get_payslip(actor, payslip_id)

        for name in _EDITABLE_AMOUNTS:
            if changes.get(name) is not None and str(changes[name]).strip():
                setattr(payslip, name, money(self._decimal(changes[name], name.replace("_", " "))))
        if "notes" in changes and changes["notes"] is not None:
            payslip.notes = str(changes["notes"])
        if changes.get("status"):
            payslip.status = parse_enum(PayslipStatus, changes["status"], "status")

        payslip.recalculate()
        payslip.updated_at = now or now_local()
        self._payslips.update(payslip)
        logger.info("Payslip %s updated", payslip.payslip_number)
        return payslip

    def delete_payslip(self, actor: Actor, payslip_id: int) -> None:
        self._require_admin(actor)
        payslip = self.get_payslip(actor, payslip_id)
        self._payslips.delete(payslip_id)
        logger.info("Payslip %s deleted", payslip.payslip_number)

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------
    def render_pdf(self, payslip: Payslip) -> bytes:
        if self._renderer is None:
            raise ConfigurationError("PDF rendering is not configured")
        return self._renderer.render_payslip(payslip)

    def send_payslip(self, actor: Actor, payslip_id: int) -> Payslip:
        self._require_admin(actor)
        if self._notifier is None:
            raise ConfigurationError("Email delivery is not configured")
        payslip = self.get_payslip(actor, payslip_id)
        employee = self._employees.get_by_id(payslip.employee_id)
        if not employee or not employee.email:
            raise NotFoundError("Employee email not found")
        self._notifier.send_payslip(to_email=employee.email, payslip=payslip, pdf=self.render_pdf(payslip))
        logger.info("Payslip %s sent to %s", payslip.payslip_number, employee.email)
        return payslip

    # ------------------------------------------------------------------
    # Authorization
    # ------------------------------------------------------------------
    @staticmethod
    def _require_admin(actor: Actor) -> None:
        if not actor.is_admin:
            raise AuthorizationError("Only administrators can manage payslips")

    @staticmethod
    def _authorize(actor: Actor, organization_id: int, *, employee_id: int) -> None:
        if actor.organization_id != organization_id:
            raise AuthorizationError("Access denied for this organization")
        if not actor.is_admin and actor.user_id != employee_id:
            raise AuthorizationError("You can only access your own payslips")
