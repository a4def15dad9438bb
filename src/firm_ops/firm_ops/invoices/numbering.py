"""Invoice number format: {ORGCODE}-{year}-{sequence:03}."""

from __future__ import annotations

import re

from ..core.constants import DEFAULT_ORG_CODE, INVOICE_SEQUENCE_WIDTH, ORG_CODE_LENGTH

_NON_ALNUM = re.compile(r"[^A-Z0-9]")


def org_code(organization_name: str | None) -> str:
    """First four alphanumerics of the name, uppercased; short codes are padded from "ORG"."""
    code = _NON_ALNUM.sub("", (organization_name or "").strip().upper())
    if not code:
        return DEFAULT_ORG_CODE
    if len(code) >= ORG_CODE_LENGTH:
        return code[:ORG_CODE_LENGTH]
    return code + DEFAULT_ORG_CODE[: ORG_CODE_LENGTH - len(code)]


def invoice_prefix(organization_name: str | None, year: int) -> str:
    return f"{org_code(organization_name)}-{year}-"


def format_invoice_number(prefix: str, sequence: int) -> str:
    return f"{prefix}{int(sequence):0{INVOICE_SEQUENCE_WIDTH}d}"


def sequence_of(invoice_number: str, prefix: str) -> int | None:
    """Numeric suffix of an invoice number carrying `prefix`, or None."""
    if not invoice_number.startswith(prefix):
        return None
    suffix = invoice_number[len(prefix):]
    return int(suffix) if suffix.isdigit() else None
