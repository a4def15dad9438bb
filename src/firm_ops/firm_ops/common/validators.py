from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Optional, Type, TypeVar

from ..core.exceptions import ValidationError

E = TypeVar("E", bound=Enum)


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def optional_text(value) -> Optional[str]:
    text = str(value).strip() if value is not None else ""
    return text or None


def require_period(start: date, end: date) -> None:
    if start > end:
        raise ValidationError("Pay period start must not be after pay period end")


def parse_enum(enum_cls: Type[E], value, field_name: str) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value or "").strip().upper())
    except ValueError:
        raise ValidationError(f"Invalid {field_name}: {value!r}")
