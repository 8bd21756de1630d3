from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence
from uuid import UUID

from mysql.connector import errors

from ..core.enums import ResignationStatus
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    as_uuid,
    db_cursor,
    db_id,
    fetchall,
    fetchone,
    is_duplicate_key,
    normalize_mysql_datetime,
    to_mysql_datetime,
)
from .model import ResignationRequest
from .repository import PENDING_RESIGNATION_MESSAGE, ResignationRepository

_COLUMNS = """
    resignation_id, employee_id, effective_date, reason, status, submitted_at,
    decision_notes, decided_by_id, decided_at, eligible_for_rehire, updated_at
"""


def _row_to_resignation(r: dict) -> ResignationRequest:
    rehire = r.get("eligible_for_rehire")
    return ResignationRequest(
        resignation_id=as_uuid(r["resignation_id"]),
        employee_id=as_uuid(r["employee_id"]),
        effective_date=r["effective_date"],
        reason=r.get("reason"),
        status=ResignationStatus(r["status"]),
        submitted_at=normalize_mysql_datetime(r["submitted_at"]),
        decision_notes=r.get("decision_notes"),
        decided_by_id=as_uuid(r.get("decided_by_id")),
        decided_at=normalize_mysql_datetime(r.get("decided_at")),
        eligible_for_rehire=None if rehire is None else bool(rehire),
        updated_at=normalize_mysql_datetime(r.get("updated_at")),
    )


class MySQLResignationRepository(ResignationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, resignation_id: UUID) -> Optional[ResignationRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM resignation_requests WHERE resignation_id=%s",
                (db_id(resignation_id),),
            )
            r = fetchone(cur)
            return _row_to_resignation(r) if r else None

    def list_requests(
        self,
        *,
        status: Optional[ResignationStatus] = None,
        employee_id: Optional[UUID] = None,
        limit: int = 500,
    ) -> Sequence[ResignationRequest]:
        clauses = ["1=1"]
        params: list[object] = []

        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(db_id(employee_id))

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM resignation_requests
                WHERE {where}
                ORDER BY submitted_at DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [_row_to_resignation(r) for r in fetchall(cur)]

    def count(self, *, status: Optional[ResignationStatus] = None) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            if status is None:
                cur.execute("SELECT COUNT(*) AS n FROM resignation_requests")
            else:
                cur.execute("SELECT COUNT(*) AS n FROM resignation_requests WHERE status=%s", (status.value,))
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def has_pending(self, employee_id: UUID) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS x FROM resignation_requests WHERE employee_id=%s AND status=%s LIMIT 1",
                (db_id(employee_id), ResignationStatus.PENDING.value),
            )
            return fetchone(cur) is not None

    def add(self, request: ResignationRequest) -> None:
        try:
            self._insert(request)
        except errors.IntegrityError as e:
            if not is_duplicate_key(e):
                raise
            raise ConflictError(PENDING_RESIGNATION_MESSAGE) from e

    def _insert(self, request: ResignationRequest) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO resignation_requests({_COLUMNS})
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    db_id(request.resignation_id),
                    db_id(request.employee_id),
                    request.effective_date,
                    request.reason,
                    request.status.value,
                    to_mysql_datetime(request.submitted_at),
                    request.decision_notes,
                    db_id(request.decided_by_id),
                    to_mysql_datetime(request.decided_at),
                    request.eligible_for_rehire,
                    to_mysql_datetime(request.updated_at),
                ),
            )

    def update_details(
        self,
        *,
        resignation_id: UUID,
        expected: ResignationStatus,
        effective_date: date,
        reason: Optional[str],
        updated_at: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE resignation_requests
                SET effective_date=%s, reason=%s, updated_at=%s
                WHERE resignation_id=%s AND status=%s
                """,
                (effective_date, reason, to_mysql_datetime(updated_at), db_id(resignation_id), expected.value),
            )
            return cur.rowcount > 0

    def decide(
        self,
        *,
        resignation_id: UUID,
        expected: ResignationStatus,
        status: ResignationStatus,
        decision_notes: Optional[str],
        decided_by_id: Optional[UUID],
        eligible_for_rehire: Optional[bool],
        decided_at: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE resignation_requests
                SET status=%s, decision_notes=%s, decided_by_id=%s, eligible_for_rehire=%s,
                    decided_at=%s, updated_at=%s
                WHERE resignation_id=%s AND status=%s
                """,
                (
                    status.value,
                    decision_notes,
                    db_id(decided_by_id),
                    eligible_for_rehire,
                    to_mysql_datetime(decided_at),
                    to_mysql_datetime(decided_at),
                    db_id(resignation_id),
                    expected.value,
                ),
            )
            return cur.rowcount > 0
