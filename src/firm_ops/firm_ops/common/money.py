"""Decimal helpers for monetary values.

Money never goes through float: inputs are converted from their string form
and every computed amount is quantized to cents, rounding half-up.
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional

from ..core.constants import MONEY_QUANTUM
from ..core.enums import ParseErrorPolicy
from ..core.exceptions import ValidationError

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def money(value: Decimal) -> Decimal:
    return value.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def to_decimal(value: Any) -> Decimal:
    """Strict conversion for required values."""
    try:
        parsed = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Invalid number: {value!r}")
    if not parsed.is_finite():
        raise ValidationError(f"Invalid number: {value!r}")
    return parsed


def parse_optional_decimal(
    value: Any,
    field_name: str,
    *,
    policy: ParseErrorPolicy = ParseErrorPolicy.ZERO,
    default: Optional[Decimal] = None,
) -> Decimal:
    """Parse an optional numeric input.

    Missing or blank values give `default` (zero when not provided). A value
    that does not parse is logged and becomes zero under ParseErrorPolicy.ZERO,
    or raises ValidationError under ParseErrorPolicy.REJECT.
    """
    fallback = ZERO if default is None else default
    if value is None:
        return fallback
    if isinstance(value, Decimal):
        return value
    text = str(value).strip()
    if not text:
        return fallback
    try:
        parsed = Decimal(text)
    except InvalidOperation:
        parsed = None
    if parsed is None or not parsed.is_finite():
        if policy == ParseErrorPolicy.REJECT:
            raise ValidationError(f"Invalid {field_name}: {value!r}")
        logger.warning("Invalid %s format: %r, using 0", field_name, value)
        return ZERO
    return parsed
