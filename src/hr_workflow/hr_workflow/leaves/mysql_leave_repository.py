from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence
from uuid import UUID

from ..core.enums import LeaveStatus, LeaveType
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
from .model import LeaveRequest
from .repository import LeaveRepository

_COLUMNS = """
    request_id, employee_id, leave_type, start_date, end_date, reason,
    status, approver_id, requested_at, decided_at, updated_at
"""


def _row_to_leave(r: dict) -> LeaveRequest:
    return LeaveRequest(
        request_id=as_uuid(r["request_id"]),
        employee_id=as_uuid(r["employee_id"]),
        leave_type=LeaveType(r["leave_type"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        reason=r.get("reason"),
        status=LeaveStatus(r["status"]),
        approver_id=as_uuid(r.get("approver_id")),
        requested_at=normalize_mysql_datetime(r["requested_at"]),
        decided_at=normalize_mysql_datetime(r.get("decided_at")),
        updated_at=normalize_mysql_datetime(r.get("updated_at")),
    )


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, request_id: UUID) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leave_requests WHERE request_id=%s", (db_id(request_id),))
            r = fetchone(cur)
            return _row_to_leave(r) if r else None

    def list_requests(
        self,
        *,
        employee_id: Optional[UUID] = None,
        status: Optional[LeaveStatus] = None,
        limit: int = 500,
    ) -> Sequence[LeaveRequest]:
        clauses = ["1=1"]
        params: list[object] = []

        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(db_id(employee_id))
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests
                WHERE {where}
                ORDER BY requested_at DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [_row_to_leave(r) for r in fetchall(cur)]

    def add(self, request: LeaveRequest) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO leave_requests({_COLUMNS})
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    db_id(request.request_id),
                    db_id(request.employee_id),
                    request.leave_type.value,
                    request.start_date,
                    request.end_date,
                    request.reason,
                    request.status.value,
                    db_id(request.approver_id),
                    to_mysql_datetime(request.requested_at),
                    to_mysql_datetime(request.decided_at),
                    to_mysql_datetime(request.updated_at),
                ),
            )

    def update_details(
        self,
        *,
        request_id: UUID,
        expected: LeaveStatus,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        reason: Optional[str],
        updated_at: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET leave_type=%s, start_date=%s, end_date=%s, reason=%s, updated_at=%s
                WHERE request_id=%s AND status=%s
                """,
                (
                    leave_type.value,
                    start_date,
                    end_date,
                    reason,
                    to_mysql_datetime(updated_at),
                    db_id(request_id),
                    expected.value,
                ),
            )
            return cur.rowcount > 0

    def transition(
        self,
        *,
        request_id: UUID,
        expected: LeaveStatus,
        status: LeaveStatus,
        approver_id: Optional[UUID],
        decided_at: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, approver_id=%s, decided_at=%s, updated_at=%s
                WHERE request_id=%s AND status=%s
                """,
                (
                    status.value,
                    db_id(approver_id),
                    to_mysql_datetime(decided_at),
                    to_mysql_datetime(decided_at),
                    db_id(request_id),
                    expected.value,
                ),
            )
            return cur.rowcount > 0

    def delete(self, request_id: UUID) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM leave_requests WHERE request_id=%s", (db_id(request_id),))
            return cur.rowcount > 0
