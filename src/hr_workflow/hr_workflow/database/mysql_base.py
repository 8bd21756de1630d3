from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

from mysql.connector import errorcode

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def db_id(value: Optional[UUID]) -> Optional[str]:
    """UUIDs are stored as CHAR(36)."""
    return str(value) if value is not None else None


def as_uuid(value: Any) -> Optional[UUID]:
    if value is None or value == "":
        return None
    if isinstance(value, UUID):
        return value
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("ascii")
    return UUID(str(value))


def normalize_mysql_datetime(value: Any) -> Optional[datetime]:
    """DATETIME columns hold UTC but come back naive from the connector."""

    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, str):
        return normalize_mysql_datetime(datetime.fromisoformat(value))
    raise TypeError(f"Unsupported MySQL DATETIME value type: {type(value)!r}")


def to_mysql_datetime(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.replace(tzinfo=None)


def as_decimal(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    return value if isinstance(value, Decimal) else Decimal(str(value))


def is_duplicate_key(err: Exception) -> bool:
    """True for an IntegrityError raised by a UNIQUE key (not a foreign key)."""
    return getattr(err, "errno", None) == errorcode.ER_DUP_ENTRY
