from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional

from ..core.exceptions import ValidationError


def now_utc() -> datetime:
    """Current UTC instant.

    Note: Wrapped so tests can patch/mock easier.
    """
    return datetime.now(timezone.utc)


def today_utc() -> date:
    return now_utc().date()


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes, convert aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD (a trailing time part is ignored)."""
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        raise ValidationError(f"Invalid date: {value!r}")


def parse_iso_datetime(value: str) -> datetime:
    v = str(value).strip()
    if v.endswith("Z"):
        v = v[:-1] + "+00:00"
    try:
        return as_utc(datetime.fromisoformat(v))
    except ValueError:
        raise ValidationError(f"Invalid timestamp: {value!r}")


def format_date(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


def format_datetime(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return as_utc(value).isoformat().replace("+00:00", "Z")
