from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping, Optional
from uuid import UUID

from ..core.exceptions import ValidationError


def _require_str(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be text")
    return value


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if value is None or not _require_str(value, field_name).strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def optional_text(value: Optional[str], field_name: str, max_len: int) -> Optional[str]:
    if value is None:
        return None
    value = _require_str(value, field_name).strip()
    if not value:
        return None
    if len(value) > max_len:
        raise ValidationError(f"{field_name} must be at most {max_len} characters")
    return value


def require_date_range(start: date, end: date, *, start_name: str = "Start date", end_name: str = "End date") -> None:
    if end < start:
        raise ValidationError(f"{end_name} must be on or after {start_name.lower()}")


def require_uuid(value: Any, field_name: str) -> UUID:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is not a valid id")


def optional_uuid(value: Any, field_name: str) -> Optional[UUID]:
    if value is None or value == "":
        return None
    return require_uuid(value, field_name)


def require_money(value: Any, field_name: str) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} is not a valid amount")
    if not amount.is_finite():
        raise ValidationError(f"{field_name} is not a valid amount")
    if amount < 0:
        raise ValidationError(f"{field_name} cannot be negative")
    return amount


def optional_money(value: Any, field_name: str) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    return require_money(value, field_name)


def require_known_fields(changes: Mapping[str, Any], allowed: Iterable[str]) -> None:
    unknown = sorted(set(changes) - set(allowed))
    if unknown:
        raise ValidationError(f"Unsupported field(s): {', '.join(unknown)}")
