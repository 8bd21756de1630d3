from __future__ import annotations

from typing import Iterable, Optional, Sequence
from uuid import UUID

from ..core.enums import ApplicationStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    as_uuid,
    db_cursor,
    db_id,
    fetchall,
    fetchone,
    normalize_mysql_datetime,
    to_mysql_datetime,
)
from .model import JobApplication
from .repository import JobApplicationRepository

_COLUMNS = """
    application_id, job_opening_id, candidate_name, candidate_email,
    candidate_phone, resume_url, cover_letter, status, applied_at, updated_at
"""


def _row_to_application(r: dict) -> JobApplication:
    return JobApplication(
        application_id=as_uuid(r["application_id"]),
        job_opening_id=as_uuid(r["job_opening_id"]),
        candidate_name=r["candidate_name"],
        candidate_email=r["candidate_email"],
        candidate_phone=r.get("candidate_phone"),
        resume_url=r.get("resume_url"),
        cover_letter=r.get("cover_letter"),
        status=ApplicationStatus(r["status"]),
        applied_at=normalize_mysql_datetime(r["applied_at"]),
        updated_at=normalize_mysql_datetime(r.get("updated_at")),
    )


def _in_clause(ids: Iterable[UUID]) -> tuple[str, tuple]:
    values = tuple(sorted({db_id(i) for i in ids if i is not None}))
    return ",".join(["%s"] * len(values)), values


class MySQLJobApplicationRepository(JobApplicationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, application_id: UUID) -> Optional[JobApplication]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM job_applications WHERE application_id=%s",
                (db_id(application_id),),
            )
            r = fetchone(cur)
            return _row_to_application(r) if r else None

    def list_all(self, *, job_opening_id: Optional[UUID] = None) -> Sequence[JobApplication]:
        with db_cursor(self._conn_factory) as (_, cur):
            if job_opening_id is None:
                cur.execute(f"SELECT {_COLUMNS} FROM job_applications ORDER BY applied_at DESC")
            else:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM job_applications WHERE job_opening_id=%s ORDER BY applied_at DESC",
                    (db_id(job_opening_id),),
                )
            return [_row_to_application(r) for r in fetchall(cur)]

    def get_many(self, application_ids: Iterable[UUID]) -> dict[UUID, JobApplication]:
        placeholders, values = _in_clause(application_ids)
        if not values:
            return {}
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM job_applications WHERE application_id IN ({placeholders})",
                values,
            )
            rows = [_row_to_application(r) for r in fetchall(cur)]
            return {a.application_id: a for a in rows}

    def count_by_opening(self, opening_ids: Iterable[UUID]) -> dict[UUID, int]:
        placeholders, values = _in_clause(opening_ids)
        if not values:
            return {}
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT job_opening_id, COUNT(*) AS n
                FROM job_applications
                WHERE job_opening_id IN ({placeholders})
                GROUP BY job_opening_id
                """,
                values,
            )
            return {as_uuid(r["job_opening_id"]): int(r["n"]) for r in fetchall(cur)}

    def add(self, application: JobApplication) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO job_applications({_COLUMNS})
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    db_id(application.application_id),
                    db_id(application.job_opening_id),
                    application.candidate_name,
                    application.candidate_email,
                    application.candidate_phone,
                    application.resume_url,
                    application.cover_letter,
                    application.status.value,
                    to_mysql_datetime(application.applied_at),
                    to_mysql_datetime(application.updated_at),
                ),
            )

    def update(self, application: JobApplication) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE job_applications
                SET job_opening_id=%s, candidate_name=%s, candidate_email=%s, candidate_phone=%s,
                    resume_url=%s, cover_letter=%s, status=%s, updated_at=%s
                WHERE application_id=%s
                """,
                (
                    db_id(application.job_opening_id),
                    application.candidate_name,
                    application.candidate_email,
                    application.candidate_phone,
                    application.resume_url,
                    application.cover_letter,
                    application.status.value,
                    to_mysql_datetime(application.updated_at),
                    db_id(application.application_id),
                ),
            )
            return cur.rowcount > 0

    def delete(self, application_id: UUID) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM job_applications WHERE application_id=%s", (db_id(application_id),))
            return cur.rowcount > 0
