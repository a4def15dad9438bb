from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

from .connection import DBConfig, DatabaseConnection
from .mysql_base import db_cursor, fetchone

logger = logging.getLogger(__name__)


def _strip_create_db_and_use(sql: str) -> str:
    # schema.sql may name its own database; the configured one wins.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?m)^\s*--.*$", "", sql)
    return sql


def iter_sql_statements(sql: str) -> Iterable[str]:
    """Split a script on ';' outside of quoted strings."""
    buf: list[str] = []
    quote = None
    escape = False

    for ch in sql:
        buf.append(ch)
        if escape:
            escape = False
        elif ch == "\\":
            escape = True
        elif quote:
            if ch == quote:
                quote = None
        elif ch in ("'", '"', "`"):
            quote = ch
        elif ch == ";":
            stmt = "".join(buf[:-1]).strip()
            buf.clear()
            if stmt:
                yield stmt

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(db_config: dict) -> None:
    conn_factory = DatabaseConnection(DBConfig.from_mapping(db_config))
    conn = conn_factory.connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{conn_factory.database}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    sql = _strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8"))

    conn_factory = DatabaseConnection(DBConfig.from_mapping(db_config))
    with db_cursor(conn_factory, dictionary=False) as (_, cur):
        for stmt in iter_sql_statements(sql):
            cur.execute(stmt)
    logger.info("Applied schema %s to database %s", schema_path, conn_factory.database)


def ensure_demo_data(db_config: dict) -> int:
    """Create a demo organization with one admin and one employee. Returns the organization id."""
    conn_factory = DatabaseConnection(DBConfig.from_mapping(db_config))
    with db_cursor(conn_factory) as (_, cur):
        cur.execute("SELECT organization_id FROM organizations WHERE name=%s", ("Demo Architects",))
        row = fetchone(cur)
        if row:
            org_id = int(row["organization_id"])
        else:
            cur.execute(
                "INSERT INTO organizations(name, email) VALUES(%s,%s)",
                ("Demo Architects", "office@demo-architects.test"),
            )
            org_id = int(cur.lastrowid)

        demo_employees = [
            ("Admin Demo", "admin", "admin@demo-architects.test", "admin", "60000.00", "0", "0", "0"),
            ("Jane Drafter", "jdrafter", "jane@demo-architects.test", "employee", "30000.00", "250.00", "18", "500.00"),
        ]
        for full_name, username, email, role, salary, ot_rate, tax_rate, insurance in demo_employees:
            cur.execute(
                """
                INSERT INTO employees(organization_id, full_name, username, email, role,
                                      monthly_salary, overtime_rate, tax_rate, insurance_deduction)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE full_name=VALUES(full_name), role=VALUES(role), is_active=1
                """,
                (org_id, full_name, username, email, role, salary, ot_rate, tax_rate, insurance),
            )
    logger.info("Demo data ready (organization_id=%s)", org_id)
    return org_id


def list_tables(db_config: dict) -> list[str]:
    conn_factory = DatabaseConnection(DBConfig.from_mapping(db_config))
    with db_cursor(conn_factory, dictionary=False) as (_, cur):
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
