from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import PayslipStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchall, fetchone
from .model import Payslip
from .repository import PayslipRepository

_COLUMNS = """
    payslip_id, payslip_number, employee_id, organization_id, pay_period_start, pay_period_end,
    pay_date, daily_salary, days_worked, basic_salary, overtime_hours, overtime_rate,
    overtime_amount, allowances, bonuses, gross_salary, tax_deduction, insurance_deduction,
    other_deductions, total_deductions, net_salary, status, notes, created_at, updated_at
"""

_MONEY_FIELDS = (
    "daily_salary", "basic_salary", "overtime_hours", "overtime_rate", "overtime_amount",
    "allowances", "bonuses", "gross_salary", "tax_deduction", "insurance_deduction",
    "other_deductions", "total_deductions", "net_salary",
)

_OVERLAP_WHERE = "employee_id=%s AND organization_id=%s AND pay_period_start <= %s AND pay_period_end >= %s"


def _row_to_payslip(r: dict) -> Payslip:
    payslip = Payslip(
        payslip_id=int(r["payslip_id"]),
        payslip_number=r.get("payslip_number"),
        employee_id=int(r["employee_id"]),
        organization_id=int(r["organization_id"]),
        pay_period_start=r["pay_period_start"],
        pay_period_end=r["pay_period_end"],
        pay_date=r["pay_date"],
        days_worked=int(r["days_worked"]),
        status=PayslipStatus(r["status"]),
        notes=r.get("notes"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )
    for name in _MONEY_FIELDS:
        setattr(payslip, name, as_decimal(r.get(name)))
    return payslip


def _values(p: Payslip) -> tuple:
    return (
        p.employee_id, p.organization_id, p.pay_period_start, p.pay_period_end, p.pay_date,
        p.daily_salary, p.days_worked, p.basic_salary, p.overtime_hours, p.overtime_rate,
        p.overtime_amount, p.allowances, p.bonuses, p.gross_salary, p.tax_deduction,
        p.insurance_deduction, p.other_deductions, p.total_deductions, p.net_salary,
        p.status.value, p.notes, p.created_at, p.updated_at,
    )


class MySQLPayslipRepository(PayslipRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def exists_overlapping(self, *, employee_id: int, organization_id: int, start: date, end: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT COUNT(*) AS n FROM payslips WHERE {_OVERLAP_WHERE}",
                (int(employee_id), int(organization_id), end, start),
            )
            return int(fetchone(cur)["n"]) > 0

    def create(self, payslip: Payslip) -> Optional[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            # Serialize generation per employee so the overlap check below stays valid until commit.
            cur.execute("SELECT employee_id FROM employees WHERE employee_id=%s FOR UPDATE", (payslip.employee_id,))
            fetchall(cur)
            cur.execute(
                f"SELECT COUNT(*) AS n FROM payslips WHERE {_OVERLAP_WHERE}",
                (payslip.employee_id, payslip.organization_id, payslip.pay_period_end, payslip.pay_period_start),
            )
            if int(fetchone(cur)["n"]) > 0:
                return None

            cur.execute(
                """
                INSERT INTO payslips(
                    employee_id, organization_id, pay_period_start, pay_period_end, pay_date,
                    daily_salary, days_worked, basic_salary, overtime_hours, overtime_rate,
                    overtime_amount, allowances, bonuses, gross_salary, tax_deduction,
                    insurance_deduction, other_deductions, total_deductions, net_salary,
                    status, notes, created_at, updated_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                _values(payslip),
            )
            payslip_id = int(cur.lastrowid)
            cur.execute(
                "UPDATE payslips SET payslip_number=%s WHERE payslip_id=%s",
                (Payslip.sequential_number(payslip.pay_period_start, payslip_id), payslip_id),
            )
            return payslip_id

    def get_by_id(self, payslip_id: int) -> Optional[Payslip]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM payslips WHERE payslip_id=%s", (int(payslip_id),))
            r = fetchone(cur)
            return _row_to_payslip(r) if r else None

    def update(self, payslip: Payslip) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE payslips
                SET employee_id=%s, organization_id=%s, pay_period_start=%s, pay_period_end=%s, pay_date=%s,
                    daily_salary=%s, days_worked=%s, basic_salary=%s, overtime_hours=%s, overtime_rate=%s,
                    overtime_amount=%s, allowances=%s, bonuses=%s, gross_salary=%s, tax_deduction=%s,
                    insurance_deduction=%s, other_deductions=%s, total_deductions=%s, net_salary=%s,
                    status=%s, notes=%s, created_at=%s, updated_at=%s
                WHERE payslip_id=%s
                """,
                _values(payslip) + (int(payslip.payslip_id),),
            )
            return cur.rowcount > 0

    def delete(self, payslip_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM payslips WHERE payslip_id=%s", (int(payslip_id),))
            return cur.rowcount > 0

    def _list(self, column: str, value: int, status: Optional[PayslipStatus]) -> Sequence[Payslip]:
        clauses = [f"{column}=%s"]
        params: list[object] = [int(value)]
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM payslips
                WHERE {where}
                ORDER BY pay_period_start DESC, payslip_id DESC
                """,
                tuple(params),
            )
            return [_row_to_payslip(r) for r in fetchall(cur)]

    def list_for_employee(self, employee_id: int, *, status: Optional[PayslipStatus] = None) -> Sequence[Payslip]:
        return self._list("employee_id", employee_id, status)

    def list_for_organization(
        self,
        organization_id: int,
        *,
        status: Optional[PayslipStatus] = None,
    ) -> Sequence[Payslip]:
        return self._list("organization_id", organization_id, status)

    def count_by_organization(self, organization_id: int, *, status: Optional[PayslipStatus] = None) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COUNT(*) AS n FROM payslips WHERE organization_id=%s AND (%s IS NULL OR status=%s)",
                (int(organization_id), status.value if status else None, status.value if status else None),
            )
            return int(fetchone(cur)["n"])

    def total_paid_net(self, organization_id: int, *, start: date, end: date) -> Decimal:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT SUM(net_salary) AS total
                FROM payslips
                WHERE organization_id=%s AND status=%s AND pay_date BETWEEN %s AND %s
                """,
                (int(organization_id), PayslipStatus.PAID.value, start, end),
            )
            return as_decimal(fetchone(cur)["total"])
