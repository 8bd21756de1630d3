from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Sequence
from uuid import UUID

from mysql.connector import errors

from ..core.enums import EmploymentStatus
from ..core.exceptions import ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    as_decimal,
    as_uuid,
    db_cursor,
    db_id,
    fetchall,
    fetchone,
    is_duplicate_key,
    normalize_mysql_datetime,
    to_mysql_datetime,
)
from .model import Employee
from .repository import DUPLICATE_EMAIL_MESSAGE, EmployeeRepository

_COLUMNS = """
    employee_id, full_name, work_email, personal_email, position, phone_number,
    salary, hire_date, status, department_id, user_id,
    exit_date, exit_reason, eligible_for_rehire, created_at, updated_at
"""


def _row_to_employee(r: dict) -> Employee:
    rehire = r.get("eligible_for_rehire")
    return Employee(
        employee_id=as_uuid(r["employee_id"]),
        full_name=r["full_name"],
        work_email=r["work_email"],
        personal_email=r["personal_email"],
        position=r["position"],
        phone_number=r.get("phone_number"),
        salary=as_decimal(r["salary"]),
        hire_date=r["hire_date"],
        status=EmploymentStatus(r["status"]),
        department_id=as_uuid(r["department_id"]),
        user_id=as_uuid(r.get("user_id")),
        exit_date=r.get("exit_date"),
        exit_reason=r.get("exit_reason"),
        eligible_for_rehire=None if rehire is None else bool(rehire),
        created_at=normalize_mysql_datetime(r["created_at"]),
        updated_at=normalize_mysql_datetime(r.get("updated_at")),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: UUID) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE employee_id=%s", (db_id(employee_id),))
            r = fetchone(cur)
            return _row_to_employee(r) if r else None

    def list_all(
        self,
        *,
        department_id: Optional[UUID] = None,
        status: Optional[EmploymentStatus] = None,
    ) -> Sequence[Employee]:
        clauses = ["1=1"]
        params: list[object] = []

        if department_id is not None:
            clauses.append("department_id=%s")
            params.append(db_id(department_id))
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM employees WHERE {where} ORDER BY full_name",
                tuple(params),
            )
            return [_row_to_employee(r) for r in fetchall(cur)]

    def names_by_ids(self, employee_ids: Iterable[UUID]) -> dict[UUID, str]:
        ids = sorted({db_id(i) for i in employee_ids if i is not None})
        if not ids:
            return {}
        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT employee_id, full_name FROM employees WHERE employee_id IN ({placeholders})",
                tuple(ids),
            )
            return {as_uuid(r["employee_id"]): r["full_name"] for r in fetchall(cur)}

    def get_many(self, employee_ids: Iterable[UUID]) -> dict[UUID, Employee]:
        ids = sorted({db_id(i) for i in employee_ids if i is not None})
        if not ids:
            return {}
        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE employee_id IN ({placeholders})", tuple(ids))
            return {e.employee_id: e for e in map(_row_to_employee, fetchall(cur))}

    def email_in_use(self, work_email: str, *, exclude_id: Optional[UUID] = None) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 FROM employees WHERE work_email=%s AND employee_id<>%s LIMIT 1",
                (work_email, db_id(exclude_id) or ""),
            )
            return fetchone(cur) is not None

    def count(self, *, status: Optional[EmploymentStatus] = None) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            if status is None:
                cur.execute("SELECT COUNT(*) AS n FROM employees")
            else:
                cur.execute("SELECT COUNT(*) AS n FROM employees WHERE status=%s", (status.value,))
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def add(self, employee: Employee) -> None:
        try:
            self._insert(employee)
        except errors.IntegrityError as e:
            if not is_duplicate_key(e):
                raise
            raise ValidationError(DUPLICATE_EMAIL_MESSAGE) from e

    def _insert(self, employee: Employee) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO employees({_COLUMNS})
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    db_id(employee.employee_id),
                    employee.full_name,
                    employee.work_email,
                    employee.personal_email,
                    employee.position,
                    employee.phone_number,
                    employee.salary,
                    employee.hire_date,
                    employee.status.value,
                    db_id(employee.department_id),
                    db_id(employee.user_id),
                    employee.exit_date,
                    employee.exit_reason,
                    employee.eligible_for_rehire,
                    to_mysql_datetime(employee.created_at),
                    to_mysql_datetime(employee.updated_at),
                ),
            )

    def update_profile(self, employee: Employee, *, previous_department_id: Optional[UUID] = None) -> bool:
        try:
            return self._update_profile(employee, previous_department_id)
        except errors.IntegrityError as e:
            if not is_duplicate_key(e):
                raise
            raise ValidationError(DUPLICATE_EMAIL_MESSAGE) from e

    def _update_profile(self, employee: Employee, previous_department_id: Optional[UUID]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE employees
                SET full_name=%s, work_email=%s, personal_email=%s, position=%s,
                    phone_number=%s, salary=%s, hire_date=%s, department_id=%s,
                    user_id=%s, updated_at=%s
                WHERE employee_id=%s
                """,
                (
                    employee.full_name,
                    employee.work_email,
                    employee.personal_email,
                    employee.position,
                    employee.phone_number,
                    employee.salary,
                    employee.hire_date,
                    db_id(employee.department_id),
                    db_id(employee.user_id),
                    to_mysql_datetime(employee.updated_at),
                    db_id(employee.employee_id),
                ),
            )
            if cur.rowcount == 0:
                return False
            if previous_department_id is not None and previous_department_id != employee.department_id:
                # Managers must belong to the department they manage.
                cur.execute(
                    "UPDATE departments SET manager_id=NULL, updated_at=%s WHERE department_id=%s AND manager_id=%s",
                    (
                        to_mysql_datetime(employee.updated_at),
                        db_id(previous_department_id),
                        db_id(employee.employee_id),
                    ),
                )
            return True

    def update_status(
        self,
        *,
        employee_id: UUID,
        expected: EmploymentStatus,
        status: EmploymentStatus,
        exit_date: Optional[date],
        exit_reason: Optional[str],
        eligible_for_rehire: Optional[bool],
        updated_at: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE employees
                SET status=%s, exit_date=%s, exit_reason=%s, eligible_for_rehire=%s, updated_at=%s
                WHERE employee_id=%s AND status=%s
                """,
                (
                    status.value,
                    exit_date,
                    exit_reason,
                    eligible_for_rehire,
                    to_mysql_datetime(updated_at),
                    db_id(employee_id),
                    expected.value,
                ),
            )
            return cur.rowcount > 0
