from __future__ import annotations

from typing import Iterable, Optional, Sequence
from uuid import UUID

from ..core.enums import EmploymentType, JobOpeningStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    as_decimal,
    as_uuid,
    db_cursor,
    db_id,
    fetchall,
    fetchone,
    normalize_mysql_datetime,
    to_mysql_datetime,
)
from .model import JobOpening
from .repository import JobOpeningRepository

_COLUMNS = """
    opening_id, title, department_id, location, employment_type, status,
    description, requirements, salary_min, salary_max, closing_date,
    created_at, updated_at
"""


def _row_to_opening(r: dict) -> JobOpening:
    return JobOpening(
        opening_id=as_uuid(r["opening_id"]),
        title=r["title"],
        department_id=as_uuid(r.get("department_id")),
        location=r.get("location"),
        employment_type=EmploymentType(r["employment_type"]),
        status=JobOpeningStatus(r["status"]),
        description=r.get("description"),
        requirements=r.get("requirements"),
        salary_min=as_decimal(r.get("salary_min")),
        salary_max=as_decimal(r.get("salary_max")),
        closing_date=r.get("closing_date"),
        created_at=normalize_mysql_datetime(r["created_at"]),
        updated_at=normalize_mysql_datetime(r.get("updated_at")),
    )


def _params(o: JobOpening) -> tuple:
    return (
        o.title,
        db_id(o.department_id),
        o.location,
        o.employment_type.value,
        o.status.value,
        o.description,
        o.requirements,
        o.salary_min,
        o.salary_max,
        o.closing_date,
    )


class MySQLJobOpeningRepository(JobOpeningRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, opening_id: UUID) -> Optional[JobOpening]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM job_openings WHERE opening_id=%s", (db_id(opening_id),))
            r = fetchone(cur)
            return _row_to_opening(r) if r else None

    def list_all(self, *, department_id: Optional[UUID] = None) -> Sequence[JobOpening]:
        with db_cursor(self._conn_factory) as (_, cur):
            if department_id is None:
                cur.execute(f"SELECT {_COLUMNS} FROM job_openings ORDER BY created_at DESC")
            else:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM job_openings WHERE department_id=%s ORDER BY created_at DESC",
                    (db_id(department_id),),
                )
            return [_row_to_opening(r) for r in fetchall(cur)]

    def titles_by_ids(self, opening_ids: Iterable[UUID]) -> dict[UUID, str]:
        ids = sorted({db_id(i) for i in opening_ids if i is not None})
        if not ids:
            return {}
        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT opening_id, title FROM job_openings WHERE opening_id IN ({placeholders})", tuple(ids))
            return {as_uuid(r["opening_id"]): r["title"] for r in fetchall(cur)}

    def add(self, opening: JobOpening) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO job_openings({_COLUMNS})
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (db_id(opening.opening_id),)
                + _params(opening)
                + (to_mysql_datetime(opening.created_at), to_mysql_datetime(opening.updated_at)),
            )

    def update(self, opening: JobOpening) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE job_openings
                SET title=%s, department_id=%s, location=%s, employment_type=%s, status=%s,
                    description=%s, requirements=%s, salary_min=%s, salary_max=%s,
                    closing_date=%s, updated_at=%s
                WHERE opening_id=%s
                """,
                _params(opening) + (to_mysql_datetime(opening.updated_at), db_id(opening.opening_id)),
            )
            return cur.rowcount > 0

    def delete(self, opening_id: UUID) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM job_openings WHERE opening_id=%s", (db_id(opening_id),))
            return cur.rowcount > 0
