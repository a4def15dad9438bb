"""In-memory stand-ins for the MySQL repositories."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from src.firm_ops.firm_ops.attendance.model import AttendanceEntry
from src.firm_ops.firm_ops.core.enums import EntryType, InvoiceStatus, PayslipStatus, Role
from src.firm_ops.firm_ops.employees.model import Actor, Employee
from src.firm_ops.firm_ops.invoices.model import Invoice
from src.firm_ops.firm_ops.invoices.numbering import sequence_of
from src.firm_ops.firm_ops.organizations.model import Organization, Project
from src.firm_ops.firm_ops.payroll.model import Payslip

ORG_ID = 1
ADMIN_ID = 10
EMPLOYEE_ID = 20


def admin(org_id: int = ORG_ID) -> Actor:
    return Actor(user_id=ADMIN_ID, organization_id=org_id, role=Role.ADMIN)


def staff(user_id: int = EMPLOYEE_ID, org_id: int = ORG_ID) -> Actor:
    return Actor(user_id=user_id, organization_id=org_id, role=Role.EMPLOYEE)


@dataclass
class InMemoryOrganizations:
    orgs: dict[int, Organization] = field(
        default_factory=lambda: {ORG_ID: Organization(organization_id=ORG_ID, name="Demo Architects")}
    )

    def get_by_id(self, organization_id: int) -> Optional[Organization]:
        return self.orgs.get(int(organization_id))


@dataclass
class InMemoryProjects:
    projects: dict[int, Project] = field(default_factory=dict)

    def get_by_id(self, project_id: int) -> Optional[Project]:
        return self.projects.get(int(project_id))


@dataclass
class InMemoryEmployees:
    employees: dict[int, Employee] = field(
        default_factory=lambda: {
            ADMIN_ID: Employee(
                employee_id=ADMIN_ID,
                organization_id=ORG_ID,
                full_name="Admin",
                username="admin",
                role=Role.ADMIN,
                email="admin@example.test",
            ),
            EMPLOYEE_ID: Employee(
                employee_id=EMPLOYEE_ID,
                organization_id=ORG_ID,
                full_name="Jane Drafter",
                username="jdrafter",
                role=Role.EMPLOYEE,
                email="jane@example.test",
                monthly_salary=Decimal("30000"),
            ),
        }
    )

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self.employees.get(int(employee_id))


class InMemoryAttendance:
    def __init__(self):
        self.entries: list[AttendanceEntry] = []

    def add_entry(self, *, employee_id, entry_type, timestamp, notes=None) -> int:
        entry_id = len(self.entries) + 1
        self.entries.append(
            AttendanceEntry(
                entry_id=entry_id,
                employee_id=int(employee_id),
                entry_type=entry_type,
                timestamp=timestamp,
                notes=notes,
            )
        )
        return entry_id

    def add(self, employee_id: int, entry_type: EntryType, timestamp: datetime) -> None:
        self.add_entry(employee_id=employee_id, entry_type=entry_type, timestamp=timestamp)

    def add_day(self, employee_id: int, clock_in: datetime, clock_out: datetime) -> None:
        self.add(employee_id, EntryType.CLOCK_IN, clock_in)
        self.add(employee_id, EntryType.CLOCK_OUT, clock_out)

    def get_latest_for_employee(self, employee_id: int) -> Optional[AttendanceEntry]:
        mine = [e for e in self.entries if e.employee_id == employee_id]
        return max(mine, key=lambda e: (e.timestamp, e.entry_id)) if mine else None

    def find_by_employee_and_range(self, employee_id: int, start: datetime, end_exclusive: datetime):
        mine = [e for e in self.entries if e.employee_id == employee_id and start <= e.timestamp < end_exclusive]
        return sorted(mine, key=lambda e: e.timestamp)


class InMemoryPayslips:
    def __init__(self):
        self.rows: dict[int, Payslip] = {}
        self._next_id = 1

    def _overlaps(self, p: Payslip, employee_id, organization_id, start, end) -> bool:
        return (
            p.employee_id == employee_id
            and p.organization_id == organization_id
            and p.pay_period_start <= end
            and p.pay_period_end >= start
        )

    def exists_overlapping(self, *, employee_id, organization_id, start, end) -> bool:
        return any(self._overlaps(p, employee_id, organization_id, start, end) for p in self.rows.values())

    def create(self, payslip: Payslip) -> Optional[int]:
        if self.exists_overlapping(
            employee_id=payslip.employee_id,
            organization_id=payslip.organization_id,
            start=payslip.pay_period_start,
            end=payslip.pay_period_end,
        ):
            return None
        payslip_id = self._next_id
        self._next_id += 1
        self.rows[payslip_id] = replace(
            payslip,
            payslip_id=payslip_id,
            payslip_number=Payslip.sequential_number(payslip.pay_period_start, payslip_id),
        )
        return payslip_id

    def get_by_id(self, payslip_id: int) -> Optional[Payslip]:
        row = self.rows.get(int(payslip_id))
        return replace(row) if row else None

    def update(self, payslip: Payslip) -> bool:
        self.rows[payslip.payslip_id] = replace(payslip)
        return True

    def delete(self, payslip_id: int) -> bool:
        return self.rows.pop(int(payslip_id), None) is not None

    def list_for_employee(self, employee_id, *, status=None):
        return [p for p in self.rows.values() if p.employee_id == employee_id and (status is None or p.status == status)]

    def list_for_organization(self, organization_id, *, status=None):
        return [
            p for p in self.rows.values() if p.organization_id == organization_id and (status is None or p.status == status)
        ]

    def count_by_organization(self, organization_id, *, status=None) -> int:
        return len(self.list_for_organization(organization_id, status=status))

    def total_paid_net(self, organization_id, *, start: date, end: date) -> Decimal:
        return sum(
            (
                p.net_salary
                for p in self.rows.values()
                if p.organization_id == organization_id and p.status == PayslipStatus.PAID and start <= p.pay_date <= end
            ),
            Decimal("0"),
        )


class InMemoryInvoices:
    def __init__(self):
        self.rows: dict[int, Invoice] = {}
        self.counters: dict[tuple[int, str], int] = {}
        self._next_id = 1

    def max_sequence_for_prefix(self, organization_id: int, prefix: str) -> int:
        seqs = [
            sequence_of(inv.invoice_number, prefix)
            for inv in self.rows.values()
            if inv.organization_id == organization_id
        ]
        return max([s for s in seqs if s is not None], default=0)

    def next_sequence(self, organization_id: int, prefix: str) -> int:
        key = (organization_id, prefix)
        self.counters[key] = max(self.counters.get(key, 0), self.max_sequence_for_prefix(organization_id, prefix)) + 1
        return self.counters[key]

    def create(self, invoice: Invoice) -> int:
        invoice_id = self._next_id
        self._next_id += 1
        self.rows[invoice_id] = replace(invoice, invoice_id=invoice_id, items=list(invoice.items))
        return invoice_id

    def get_by_id_and_organization(self, invoice_id: int, organization_id: int) -> Optional[Invoice]:
        row = self.rows.get(int(invoice_id))
        if not row or row.organization_id != organization_id:
            return None
        return replace(row, items=list(row.items))

    def update(self, invoice: Invoice) -> bool:
        self.rows[invoice.invoice_id] = replace(invoice, items=list(invoice.items))
        return True

    def delete(self, invoice_id: int) -> bool:
        return self.rows.pop(int(invoice_id), None) is not None

    def list_by_organization(self, organization_id, *, status=None, client_search=None):
        return [
            inv
            for inv in self.rows.values()
            if inv.organization_id == organization_id
            and (status is None or inv.status == status)
            and (not client_search or client_search.lower() in inv.client_name.lower())
        ]

    def list_overdue(self, organization_id, *, today: date):
        return [inv for inv in self.rows.values() if inv.organization_id == organization_id and inv.is_overdue(today)]

    def count_by_status(self, organization_id, *, status=None) -> int:
        return len(self.list_by_organization(organization_id, status=status))

    def total_outstanding(self, organization_id) -> Decimal:
        return sum(
            (
                inv.balance_amount
                for inv in self.rows.values()
                if inv.organization_id == organization_id
                and inv.status not in (InvoiceStatus.PAID, InvoiceStatus.CANCELLED)
            ),
            Decimal("0"),
        )

    def revenue_between(self, organization_id, *, start: date, end: date) -> Decimal:
        return sum(
            (
                inv.total_amount
                for inv in self.rows.values()
                if inv.organization_id == organization_id
                and inv.status == InvoiceStatus.PAID
                and start <= inv.issue_date <= end
            ),
            Decimal("0"),
        )


class FakeRenderer:
    def render_payslip(self, payslip) -> bytes:
        return f"%PDF payslip {payslip.payslip_number}".encode()

    def render_invoice(self, invoice) -> bytes:
        return f"%PDF invoice {invoice.invoice_number}".encode()


class FakeNotifier:
    def __init__(self):
        self.sent: list[tuple[str, str, bytes]] = []

    def send_payslip(self, *, to_email, payslip, pdf) -> None:
        self.sent.append((to_email, payslip.payslip_number, pdf))

    def send_invoice(self, *, to_email, invoice, pdf) -> None:
        self.sent.append((to_email, invoice.invoice_number, pdf))
