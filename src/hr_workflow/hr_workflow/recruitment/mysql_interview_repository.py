from __future__ import annotations

from typing import Optional, Sequence
from uuid import UUID

from ..core.enums import InterviewMode, InterviewStatus
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
from .model import Interview
from .repository import InterviewRepository

_COLUMNS = """
    interview_id, job_application_id, interviewer_id, scheduled_at, mode,
    status, location, notes, created_at, updated_at
"""


def _row_to_interview(r: dict) -> Interview:
    return Interview(
        interview_id=as_uuid(r["interview_id"]),
        job_application_id=as_uuid(r["job_application_id"]),
        interviewer_id=as_uuid(r.get("interviewer_id")),
        scheduled_at=normalize_mysql_datetime(r["scheduled_at"]),
        mode=InterviewMode(r["mode"]),
        status=InterviewStatus(r["status"]),
        location=r.get("location"),
        notes=r.get("notes"),
        created_at=normalize_mysql_datetime(r["created_at"]),
        updated_at=normalize_mysql_datetime(r.get("updated_at")),
    )


class MySQLInterviewRepository(InterviewRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, interview_id: UUID) -> Optional[Interview]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM interviews WHERE interview_id=%s", (db_id(interview_id),))
            r = fetchone(cur)
            return _row_to_interview(r) if r else None

    def list_all(self, *, job_application_id: Optional[UUID] = None) -> Sequence[Interview]:
        with db_cursor(self._conn_factory) as (_, cur):
            if job_application_id is None:
                cur.execute(f"SELECT {_COLUMNS} FROM interviews ORDER BY scheduled_at")
            else:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM interviews WHERE job_application_id=%s ORDER BY scheduled_at",
                    (db_id(job_application_id),),
                )
            return [_row_to_interview(r) for r in fetchall(cur)]

    def count_for_application(self, application_id: UUID) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COUNT(*) AS n FROM interviews WHERE job_application_id=%s",
                (db_id(application_id),),
            )
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def add(self, interview: Interview) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO interviews({_COLUMNS})
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    db_id(interview.interview_id),
                    db_id(interview.job_application_id),
                    db_id(interview.interviewer_id),
                    to_mysql_datetime(interview.scheduled_at),
                    interview.mode.value,
                    interview.status.value,
                    interview.location,
                    interview.notes,
                    to_mysql_datetime(interview.created_at),
                    to_mysql_datetime(interview.updated_at),
                ),
            )

    def update(self, interview: Interview) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE interviews
                SET job_application_id=%s, interviewer_id=%s, scheduled_at=%s, mode=%s,
                    status=%s, location=%s, notes=%s, updated_at=%s
                WHERE interview_id=%s
                """,
                (
                    db_id(interview.job_application_id),
                    db_id(interview.interviewer_id),
                    to_mysql_datetime(interview.scheduled_at),
                    interview.mode.value,
                    interview.status.value,
                    interview.location,
                    interview.notes,
                    to_mysql_datetime(interview.updated_at),
                    db_id(interview.interview_id),
                ),
            )
            return cur.rowcount > 0

    def delete(self, interview_id: UUID) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM interviews WHERE interview_id=%s", (db_id(interview_id),))
            return cur.rowcount > 0
