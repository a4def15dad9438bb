from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from ..core.enums import InvoiceItemType, InvoiceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchall, fetchone, in_clause
from .model import Invoice, InvoiceItem
from .numbering import sequence_of
from .repository import InvoiceRepository

_COLUMNS = """
    invoice_id, invoice_number, organization_id, project_id, created_by, client_name,
    client_email, client_address, client_phone, issue_date, due_date, status, subtotal,
    tax_rate, tax_amount, total_amount, paid_amount, balance_amount, last_payment_date,
    notes, terms_and_conditions, created_at, updated_at
"""

_UNSETTLED = "status NOT IN ('PAID', 'CANCELLED')"


def _row_to_invoice(r: dict, items: List[InvoiceItem]) -> Invoice:
    return Invoice(
        invoice_id=int(r["invoice_id"]),
        invoice_number=r["invoice_number"],
        organization_id=int(r["organization_id"]),
        project_id=int(r["project_id"]) if r.get("project_id") is not None else None,
        created_by=int(r["created_by"]) if r.get("created_by") is not None else None,
        client_name=r["client_name"],
        client_email=r.get("client_email"),
        client_address=r.get("client_address"),
        client_phone=r.get("client_phone"),
        issue_date=r["issue_date"],
        due_date=r["due_date"],
        status=InvoiceStatus(r["status"]),
        tax_rate=as_decimal(r.get("tax_rate")),
        paid_amount=as_decimal(r.get("paid_amount")),
        last_payment_date=r.get("last_payment_date"),
        notes=r.get("notes"),
        terms_and_conditions=r.get("terms_and_conditions"),
        items=items,
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
        subtotal=as_decimal(r.get("subtotal")),
        tax_amount=as_decimal(r.get("tax_amount")),
        total_amount=as_decimal(r.get("total_amount")),
        balance_amount=as_decimal(r.get("balance_amount")),
    )


def _row_to_item(r: dict) -> InvoiceItem:
    return InvoiceItem(
        description=r["description"],
        item_type=InvoiceItemType(r["item_type"]),
        quantity=as_decimal(r.get("quantity")),
        unit_price=as_decimal(r.get("unit_price")),
        time_log_reference=r.get("time_log_reference"),
    )


def _values(inv: Invoice) -> tuple:
    return (
        inv.invoice_number, inv.organization_id, inv.project_id, inv.created_by, inv.client_name,
        inv.client_email, inv.client_address, inv.client_phone, inv.issue_date, inv.due_date,
        inv.status.value, inv.subtotal, inv.tax_rate, inv.tax_amount, inv.total_amount,
        inv.paid_amount, inv.balance_amount, inv.last_payment_date, inv.notes,
        inv.terms_and_conditions, inv.created_at, inv.updated_at,
    )


def _insert_items(cur, invoice_id: int, items: Sequence[InvoiceItem]) -> None:
    for position, item in enumerate(items):
        cur.execute(
            """
            INSERT INTO invoice_items(
                invoice_id, position, description, item_type, quantity, unit_price, amount, time_log_reference
            )
            VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
            """,
            (
                invoice_id, position, item.description, item.item_type.value,
                item.quantity, item.unit_price, item.amount, item.time_log_reference,
            ),
        )


def _load_items(cur, invoice_ids: Sequence[int]) -> Dict[int, List[InvoiceItem]]:
    items: Dict[int, List[InvoiceItem]] = {i: [] for i in invoice_ids}
    if not invoice_ids:
        return items
    cur.execute(
        f"""
        SELECT invoice_id, description, item_type, quantity, unit_price, time_log_reference
        FROM invoice_items
        WHERE invoice_id IN ({in_clause(invoice_ids)})
        ORDER BY invoice_id, position
        """,
        tuple(invoice_ids),
    )
    for r in fetchall(cur):
        items[int(r["invoice_id"])].append(_row_to_item(r))
    return items


class MySQLInvoiceRepository(InvoiceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _max_sequence(self, cur, organization_id: int, prefix: str) -> int:
        cur.execute(
            "SELECT invoice_number FROM invoices WHERE organization_id=%s AND invoice_number LIKE %s",
            (int(organization_id), prefix + "%"),
        )
        sequences = [sequence_of(r["invoice_number"], prefix) for r in fetchall(cur)]
        return max([s for s in sequences if s is not None], default=0)

    def max_sequence_for_prefix(self, organization_id: int, prefix: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._max_sequence(cur, organization_id, prefix)

    def next_sequence(self, organization_id: int, prefix: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            # Seed the counter once from existing numbers; the primary key makes this race-free.
            # Hand-entered numbers can pass the counter later, so the max is read on every call.
            seed = self._max_sequence(cur, organization_id, prefix)
            cur.execute(
                "INSERT IGNORE INTO invoice_sequences(organization_id, prefix, last_value) VALUES(%s,%s,%s)",
                (int(organization_id), prefix, seed),
            )
            cur.execute(
                "SELECT last_value FROM invoice_sequences WHERE organization_id=%s AND prefix=%s FOR UPDATE",
                (int(organization_id), prefix),
            )
            value = max(int(fetchone(cur)["last_value"]), seed) + 1
            cur.execute(
                "UPDATE invoice_sequences SET last_value=%s WHERE organization_id=%s AND prefix=%s",
                (value, int(organization_id), prefix),
            )
            return value

    def create(self, invoice: Invoice) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO invoices(
                    invoice_number, organization_id, project_id, created_by, client_name,
                    client_email, client_address, client_phone, issue_date, due_date,
                    status, subtotal, tax_rate, tax_amount, total_amount,
                    paid_amount, balance_amount, last_payment_date, notes,
                    terms_and_conditions, created_at, updated_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                _values(invoice),
            )
            invoice_id = int(cur.lastrowid)
            _insert_items(cur, invoice_id, invoice.items)
            return invoice_id

    def get_by_id_and_organization(self, invoice_id: int, organization_id: int) -> Optional[Invoice]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM invoices WHERE invoice_id=%s AND organization_id=%s",
                (int(invoice_id), int(organization_id)),
            )
            r = fetchone(cur)
            if not r:
                return None
            items = _load_items(cur, [int(r["invoice_id"])])
            return _row_to_invoice(r, items[int(r["invoice_id"])])

    def update(self, invoice: Invoice) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE invoices
                SET invoice_number=%s, organization_id=%s, project_id=%s, created_by=%s, client_name=%s,
                    client_email=%s, client_address=%s, client_phone=%s, issue_date=%s, due_date=%s,
                    status=%s, subtotal=%s, tax_rate=%s, tax_amount=%s, total_amount=%s,
                    paid_amount=%s, balance_amount=%s, last_payment_date=%s, notes=%s,
                    terms_and_conditions=%s, created_at=%s, updated_at=%s
                WHERE invoice_id=%s
                """,
                _values(invoice) + (int(invoice.invoice_id),),
            )
            updated = cur.rowcount > 0
            cur.execute("DELETE FROM invoice_items WHERE invoice_id=%s", (int(invoice.invoice_id),))
            _insert_items(cur, int(invoice.invoice_id), invoice.items)
            return updated

    def delete(self, invoice_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM invoices WHERE invoice_id=%s", (int(invoice_id),))
            return cur.rowcount > 0

    def _select(self, where: str, params: tuple, order_by: str) -> Sequence[Invoice]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM invoices WHERE {where} ORDER BY {order_by}", params)
            rows = fetchall(cur)
            items = _load_items(cur, [int(r["invoice_id"]) for r in rows])
            return [_row_to_invoice(r, items[int(r["invoice_id"])]) for r in rows]

    def list_by_organization(
        self,
        organization_id: int,
        *,
        status: Optional[InvoiceStatus] = None,
        client_search: Optional[str] = None,
    ) -> Sequence[Invoice]:
        clauses = ["organization_id=%s"]
        params: list[object] = [int(organization_id)]
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        if client_search:
            clauses.append("LOWER(client_name) LIKE %s")
            params.append(f"%{client_search.lower()}%")
        return self._select(" AND ".join(clauses), tuple(params), "created_at DESC, invoice_id DESC")

    def list_overdue(self, organization_id: int, *, today: date) -> Sequence[Invoice]:
        return self._select(
            f"organization_id=%s AND due_date < %s AND {_UNSETTLED}",
            (int(organization_id), today),
            "due_date ASC, invoice_id ASC",
        )

    def count_by_status(self, organization_id: int, *, status: Optional[InvoiceStatus] = None) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COUNT(*) AS n FROM invoices WHERE organization_id=%s AND (%s IS NULL OR status=%s)",
                (int(organization_id), status.value if status else None, status.value if status else None),
            )
            return int(fetchone(cur)["n"])

    def total_outstanding(self, organization_id: int) -> Decimal:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT SUM(balance_amount) AS total FROM invoices WHERE organization_id=%s AND {_UNSETTLED}",
                (int(organization_id),),
            )
            return as_decimal(fetchone(cur)["total"])

    def revenue_between(self, organization_id: int, *, start: date, end: date) -> Decimal:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT SUM(total_amount) AS total
                FROM invoices
                WHERE organization_id=%s AND status=%s AND issue_date BETWEEN %s AND %s
                """,
                (int(organization_id), InvoiceStatus.PAID.value, start, end),
            )
            return as_decimal(fetchone(cur)["total"])
