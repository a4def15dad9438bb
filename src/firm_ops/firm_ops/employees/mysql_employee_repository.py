from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Employee
from .repository import EmployeeRepository

_COLUMNS = """
    employee_id, organization_id, full_name, username, email, role,
    monthly_salary, overtime_rate, tax_rate, insurance_deduction, is_active
"""


def _opt_decimal(value: Any) -> Optional[Decimal]:
    return None if value is None else Decimal(str(value))


def _row_to_employee(r: dict) -> Employee:
    return Employee(
        employee_id=int(r["employee_id"]),
        organization_id=int(r["organization_id"]),
        full_name=r["full_name"],
        username=r["username"],
        email=r.get("email"),
        role=Role(r["role"]),
        monthly_salary=_opt_decimal(r.get("monthly_salary")),
        overtime_rate=_opt_decimal(r.get("overtime_rate")),
        tax_rate=_opt_decimal(r.get("tax_rate")),
        insurance_deduction=_opt_decimal(r.get("insurance_deduction")),
        is_active=bool(r.get("is_active", True)),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE employee_id=%s", (int(employee_id),))
            row = fetchone(cur)
            return _row_to_employee(row) if row else None
