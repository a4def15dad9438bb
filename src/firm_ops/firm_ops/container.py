from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from .attendance.factory import ClockRuleFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import (
    CLOCK_IN_LAST_HOUR,
    CLOCK_OUT_LAST_HOUR,
    CLOCK_WINDOW_START_HOUR,
    DEFAULT_INVOICE_DUE_DAYS,
    STANDARD_DAILY_HOURS,
)
from .core.enums import ParseErrorPolicy
from .database.connection import DBConfig, DatabaseConnection
from .documents.gateways import DocumentRenderer, NotificationGateway
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .invoices.mysql_invoice_repository import MySQLInvoiceRepository
from .invoices.service import InvoiceService
from .organizations.mysql_organization_repository import MySQLOrganizationRepository, MySQLProjectRepository
from .payroll.calculator.standard_calculator import StandardWorkDayCalculator
from .payroll.mysql_payslip_repository import MySQLPayslipRepository
from .payroll.service import PayrollService
from .payroll.work_period import WorkPeriodCalculator


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection
    parse_policy: ParseErrorPolicy

    organizations_repo: MySQLOrganizationRepository
    projects_repo: MySQLProjectRepository
    employees_repo: MySQLEmployeeRepository
    attendance_repo: MySQLAttendanceRepository
    payslips_repo: MySQLPayslipRepository
    invoices_repo: MySQLInvoiceRepository

    attendance_service: AttendanceService
    payroll_service: PayrollService
    invoice_service: InvoiceService


def build_container(
    *,
    db_config: dict,
    parse_policy: ParseErrorPolicy = ParseErrorPolicy.ZERO,
    standard_daily_hours: Decimal = STANDARD_DAILY_HOURS,
    invoice_due_days: int = DEFAULT_INVOICE_DUE_DAYS,
    clock_window_start_hour: int = CLOCK_WINDOW_START_HOUR,
    clock_in_last_hour: int = CLOCK_IN_LAST_HOUR,
    clock_out_last_hour: int = CLOCK_OUT_LAST_HOUR,
    allow_weekend_clocking: bool = False,
    renderer: Optional[DocumentRenderer] = None,
    notifier: Optional[NotificationGateway] = None,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    organizations_repo = MySQLOrganizationRepository(conn)
    projects_repo = MySQLProjectRepository(conn)
    employees_repo = MySQLEmployeeRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    payslips_repo = MySQLPayslipRepository(conn)
    invoices_repo = MySQLInvoiceRepository(conn)

    attendance_service = AttendanceService(
        attendance_repo,
        employees_repo,
        rule_factory=ClockRuleFactory(
            first_hour=clock_window_start_hour,
            clock_in_last_hour=clock_in_last_hour,
            clock_out_last_hour=clock_out_last_hour,
            allow_weekends=allow_weekend_clocking,
        ),
    )
    payroll_service = PayrollService(
        payslips_repo,
        employees_repo,
        organizations_repo,
        WorkPeriodCalculator(
            attendance_repo,
            calculator=StandardWorkDayCalculator(threshold_hours=standard_daily_hours),
        ),
        parse_policy=parse_policy,
        renderer=renderer,
        notifier=notifier,
    )
    invoice_service = InvoiceService(
        invoices_repo,
        organizations_repo,
        employees_repo,
        projects_repo,
        parse_policy=parse_policy,
        due_days=invoice_due_days,
        renderer=renderer,
        notifier=notifier,
    )

    return Container(
        conn=conn,
        parse_policy=parse_policy,
        organizations_repo=organizations_repo,
        projects_repo=projects_repo,
        employees_repo=employees_repo,
        attendance_repo=attendance_repo,
        payslips_repo=payslips_repo,
        invoices_repo=invoices_repo,
        attendance_service=attendance_service,
        payroll_service=payroll_service,
        invoice_service=invoice_service,
    )
