from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Sequence
from uuid import UUID

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_uuid, db_cursor, db_id, fetchall, fetchone, normalize_mysql_datetime, to_mysql_datetime
from .model import Department
from .repository import DepartmentRepository


def _row_to_department(r: dict) -> Department:
    return Department(
        department_id=as_uuid(r["department_id"]),
        name=r["department_name"],
        description=r.get("description"),
        manager_id=as_uuid(r.get("manager_id")),
        created_at=normalize_mysql_datetime(r["created_at"]),
        updated_at=normalize_mysql_datetime(r.get("updated_at")),
    )


class MySQLDepartmentRepository(DepartmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, department_id: UUID) -> Optional[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT department_id, department_name, description, manager_id, created_at, updated_at
                FROM departments
                WHERE department_id=%s
                """,
                (db_id(department_id),),
            )
            r = fetchone(cur)
            return _row_to_department(r) if r else None

    def list_all(self) -> Sequence[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT department_id, department_name, description, manager_id, created_at, updated_at
                FROM departments
                ORDER BY department_name
                """
            )
            return [_row_to_department(r) for r in fetchall(cur)]

    def names_by_ids(self, department_ids: Iterable[UUID]) -> dict[UUID, str]:
        ids = sorted({db_id(i) for i in department_ids if i is not None})
        if not ids:
            return {}
        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT department_id, department_name FROM departments WHERE department_id IN ({placeholders})",
                tuple(ids),
            )
            return {as_uuid(r["department_id"]): r["department_name"] for r in fetchall(cur)}

    def count(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM departments")
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def add(self, department: Department) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO departments(department_id, department_name, description, manager_id, created_at, updated_at)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    db_id(department.department_id),
                    department.name,
                    department.description,
                    db_id(department.manager_id),
                    to_mysql_datetime(department.created_at),
                    to_mysql_datetime(department.updated_at),
                ),
            )

    def update(self, department: Department) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE departments d
                SET d.department_name=%s, d.description=%s, d.manager_id=%s, d.updated_at=%s
                WHERE d.department_id=%s
                  AND (%s IS NULL OR EXISTS (
                      SELECT 1 FROM employees e WHERE e.employee_id=%s AND e.department_id=d.department_id
                  ))
                """,
                (
                    department.name,
                    department.description,
                    db_id(department.manager_id),
                    to_mysql_datetime(department.updated_at),
                    db_id(department.department_id),
                    db_id(department.manager_id),
                    db_id(department.manager_id),
                ),
            )
            return cur.rowcount > 0

    def set_manager(self, *, department_id: UUID, manager_id: UUID, updated_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE departments d
                JOIN employees e ON e.employee_id=%s AND e.department_id=d.department_id
                SET d.manager_id=e.employee_id, d.updated_at=%s
                WHERE d.department_id=%s
                """,
                (db_id(manager_id), to_mysql_datetime(updated_at), db_id(department_id)),
            )
            return cur.rowcount > 0
