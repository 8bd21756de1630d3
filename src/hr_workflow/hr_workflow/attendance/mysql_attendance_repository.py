from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence
from uuid import UUID

from ..core.enums import AttendanceStatus
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
from .model import AttendanceRecord
from .repository import AttendanceRepository


def _row_to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=as_uuid(r["record_id"]),
        employee_id=as_uuid(r["employee_id"]),
        work_date=r["work_date"],
        check_in=normalize_mysql_datetime(r["check_in_time"]),
        check_out=normalize_mysql_datetime(r.get("check_out_time")),
        status=AttendanceStatus(r["status"]),
        notes=r.get("notes"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, record_id: UUID) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT record_id, employee_id, work_date, check_in_time, check_out_time, status, notes
                FROM attendance_records
                WHERE record_id=%s
                """,
                (db_id(record_id),),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def list_records(
        self,
        *,
        employee_id: Optional[UUID] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int = 500,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["1=1"]
        params: list[object] = []

        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(db_id(employee_id))
        if start_date is not None:
            clauses.append("work_date>=%s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("work_date<=%s")
            params.append(end_date)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT record_id, employee_id, work_date, check_in_time, check_out_time, status, notes
                FROM attendance_records
                WHERE {where}
                ORDER BY work_date DESC, check_in_time DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def add(self, record: AttendanceRecord) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(record_id, employee_id, work_date, check_in_time, check_out_time, status, notes)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    db_id(record.record_id),
                    db_id(record.employee_id),
                    record.work_date,
                    to_mysql_datetime(record.check_in),
                    to_mysql_datetime(record.check_out),
                    record.status.value,
                    record.notes,
                ),
            )

    def update_checkout(self, *, record_id: UUID, check_out: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE attendance_records SET check_out_time=%s WHERE record_id=%s",
                (to_mysql_datetime(check_out), db_id(record_id)),
            )
            return cur.rowcount > 0
