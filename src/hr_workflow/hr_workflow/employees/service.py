from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Mapping, Optional
from uuid import UUID

from ..auth import policies
from ..auth.context import PermissionContext
from ..auth.permissions import authorize
from ..common.datetime_utils import format_date, format_datetime, now_utc
from ..common.validators import (
    optional_text,
    optional_uuid,
    require_known_fields,
    require_money,
    require_non_empty,
    require_uuid,
)
from ..core.constants import DEFAULT_FIRE_REASON, MAX_REASON_LENGTH
from ..core.enums import EmploymentStatus
from ..core.exceptions import ConflictError, InvalidStateError, NotFoundError, ValidationError
from .model import Department, Employee
from .repository import DUPLICATE_EMAIL_MESSAGE, DepartmentRepository, EmployeeRepository

logger = logging.getLogger(__name__)

PROFILE_FIELDS = (
    "full_name",
    "work_email",
    "personal_email",
    "position",
    "phone_number",
    "salary",
    "hire_date",
    "department_id",
    "user_id",
)
_LIFECYCLE_FIELDS = ("status", "exit_date", "exit_reason", "eligible_for_rehire")

_HIRE_STATUSES = (EmploymentStatus.ACTIVE, EmploymentStatus.ON_LEAVE)


def employee_view(e: Employee, *, department_name: Optional[str] = None) -> dict:
    return {
        "id": str(e.employee_id),
        "fullName": e.full_name,
        "workEmail": e.work_email,
        "personalEmail": e.personal_email,
        "position": e.position,
        "phoneNumber": e.phone_number,
        "salary": float(e.salary),
        "hireDate": format_date(e.hire_date),
        "status": e.status.value,
        "departmentId": str(e.department_id),
        "departmentName": department_name,
        "userId": str(e.user_id) if e.user_id else None,
        "exitDate": format_date(e.exit_date),
        "exitReason": e.exit_reason,
        "eligibleForRehire": e.eligible_for_rehire,
        "createdAt": format_datetime(e.created_at),
        "updatedAt": format_datetime(e.updated_at),
    }


class EmployeeService:
    """Use cases: hire, edit and move employees through their employment status."""

    def __init__(self, employees: EmployeeRepository, departments: DepartmentRepository):
        self._employees = employees
        self._departments = departments

    def _require_employee(self, employee_id: UUID) -> Employee:
        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def _require_department(self, department_id: UUID) -> Department:
        department = self._departments.get_by_id(department_id)
        if not department:
            raise NotFoundError("Department not found")
        return department

    def create_employee(
        self,
        context: PermissionContext,
        *,
        full_name: str,
        work_email: str,
        personal_email: str,
        position: str,
        salary: Decimal | int | str,
        department_id: UUID,
        hire_date: Optional[date] = None,
        status: EmploymentStatus | int | str = EmploymentStatus.ACTIVE,
        phone_number: Optional[str] = None,
        user_id: Optional[UUID] = None,
        now: Optional[datetime] = None,
    ) -> Employee:
        authorize(policies.EMPLOYEES_MANAGE, context, action="create employees")
        now = now or now_utc()

        status = EmploymentStatus.parse(status)
        if status not in _HIRE_STATUSES:
            raise ValidationError("New employees must start Active or OnLeave")

        department_id = require_uuid(department_id, "Department")
        self._require_department(department_id)

        employee = Employee(
            employee_id=uuid.uuid4(),
            full_name=require_non_empty(full_name, "Full name"),
            work_email=require_non_empty(work_email, "Work email"),
            personal_email=require_non_empty(personal_email, "Personal email"),
            position=require_non_empty(position, "Position"),
            phone_number=optional_text(phone_number, "Phone number", 30),
            salary=require_money(salary, "Salary"),
            hire_date=hire_date or now.date(),
            status=status,
            department_id=department_id,
            user_id=optional_uuid(user_id, "User"),
            created_at=now,
        )
        self._require_unused_email(employee.work_email)
        self._employees.add(employee)
        logger.info("Employee %s hired into department %s", employee.employee_id, department_id)
        return employee

    def update_employee(
        self,
        context: PermissionContext,
        employee_id: UUID,
        changes: Mapping[str, Any],
        *,
        now: Optional[datetime] = None,
    ) -> Employee:
        """Edit profile fields. Status and exit details change only through transitions."""

        authorize(policies.EMPLOYEES_MANAGE, context, action="update employees")
        if any(f in changes for f in _LIFECYCLE_FIELDS):
            raise ValidationError("Employment status changes through the status and fire operations")
        require_known_fields(changes, PROFILE_FIELDS)

        current = self._require_employee(employee_id)
        updates = self._clean_profile(changes)

        if "department_id" in updates and updates["department_id"] != current.department_id:
            self._require_department(updates["department_id"])
        if "work_email" in updates:
            self._require_unused_email(updates["work_email"], exclude_id=employee_id)

        updated = replace(current, **updates, updated_at=now or now_utc())
        if not self._employees.update_profile(updated, previous_department_id=current.department_id):
            raise NotFoundError("Employee not found")
        return updated

    def _require_unused_email(self, work_email: str, *, exclude_id: Optional[UUID] = None) -> None:
        if self._employees.email_in_use(work_email, exclude_id=exclude_id):
            raise ValidationError(DUPLICATE_EMAIL_MESSAGE)

    @staticmethod
    def _clean_profile(changes: Mapping[str, Any]) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for key, value in changes.items():
            if key in ("full_name", "work_email", "personal_email", "position"):
                out[key] = require_non_empty(value, key.replace("_", " ").capitalize())
            elif key == "phone_number":
                out[key] = optional_text(value, "Phone number", 30)
            elif key == "salary":
                out[key] = require_money(value, "Salary")
            elif key == "hire_date":
                if not isinstance(value, date):
                    raise ValidationError("Hire date is required")
                out[key] = value
            elif key == "department_id":
                out[key] = require_uuid(value, "Department")
            elif key == "user_id":
                out[key] = optional_uuid(value, "User")
        return out

    def change_status(
        self,
        context: PermissionContext,
        employee_id: UUID,
        status: EmploymentStatus | int | str,
        *,
        reason: Optional[str] = None,
        eligible_for_rehire: Optional[bool] = None,
        now: Optional[datetime] = None,
    ) -> Employee:
        """Active <-> OnLeave, or Active|OnLeave -> Resigned."""

        authorize(policies.EMPLOYEES_MANAGE, context, action="change employment status")
        status = EmploymentStatus.parse(status)
        if status == EmploymentStatus.TERMINATED:
            raise ValidationError("Use the fire operation to terminate an employee")

        current = self._require_employee(employee_id)
        if current.status.has_exited:
            raise InvalidStateError(f"Employee is already {current.status.value}")
        if current.status == status:
            raise InvalidStateError(f"Employee is already {status.value}")

        now = now or now_utc()
        exit_date = exit_reason = rehire = None
        if status == EmploymentStatus.RESIGNED:
            exit_reason = optional_text(reason, "Reason", MAX_REASON_LENGTH)
            if not exit_reason:
                raise ValidationError("Reason is required")
            exit_date = now.date()
            rehire = eligible_for_rehire

        return self._apply_status(current, status, exit_date, exit_reason, rehire, now, actor=context.employee_id)

    def fire_employee(
        self,
        context: PermissionContext,
        employee_id: UUID,
        *,
        reason: Optional[str] = None,
        eligible_for_rehire: Optional[bool] = None,
        now: Optional[datetime] = None,
    ) -> Employee:
        authorize(policies.EMPLOYEES_TERMINATE, context, action="terminate employees")
        current = self._require_employee(employee_id)
        if current.status.has_exited:
            raise InvalidStateError(f"Employee is already {current.status.value}")

        now = now or now_utc()
        return self._apply_status(
            current,
            EmploymentStatus.TERMINATED,
            current.exit_date or now.date(),
            optional_text(reason, "Reason", MAX_REASON_LENGTH) or DEFAULT_FIRE_REASON,
            bool(eligible_for_rehire),
            now,
            actor=context.employee_id,
        )

    def _apply_status(
        self,
        current: Employee,
        status: EmploymentStatus,
        exit_date: Optional[date],
        exit_reason: Optional[str],
        eligible_for_rehire: Optional[bool],
        now: datetime,
        *,
        actor: Optional[UUID],
    ) -> Employee:
        updated = replace(
            current,
            status=status,
            exit_date=exit_date,
            exit_reason=exit_reason,
            eligible_for_rehire=eligible_for_rehire,
            updated_at=now,
        )
        ok = self._employees.update_status(
            employee_id=current.employee_id,
            expected=current.status,
            status=status,
            exit_date=exit_date,
            exit_reason=exit_reason,
            eligible_for_rehire=eligible_for_rehire,
            updated_at=now,
        )
        if not ok:
            raise ConflictError("Employee status was changed by another request")
        logger.info(
            "Employee %s %s -> %s by %s",
            current.employee_id,
            current.status.value,
            status.value,
            actor,
        )
        return updated

    def view(self, employee: Employee) -> dict:
        names = self._departments.names_by_ids([employee.department_id])
        return employee_view(employee, department_name=names.get(employee.department_id))

    def get_employee(self, context: PermissionContext, employee_id: UUID) -> dict:
        if not context.is_employee(employee_id):
            authorize(policies.EMPLOYEES_READ, context, action="view employees")
        employee = self._require_employee(employee_id)
        return self.view(employee)

    def list_employees(
        self,
        context: PermissionContext,
        *,
        department_id: Optional[UUID] = None,
        status: EmploymentStatus | int | str | None = None,
    ) -> list[dict]:
        authorize(policies.EMPLOYEES_READ, context, action="view employees")
        status = EmploymentStatus.parse(status) if status is not None else None
        rows = self._employees.list_all(department_id=department_id, status=status)
        names = self._departments.names_by_ids({e.department_id for e in rows})
        return [employee_view(e, department_name=names.get(e.department_id)) for e in rows]


class DepartmentService:
    """Use cases: departments and their managers. Departments are never deleted."""

    def __init__(self, departments: DepartmentRepository, employees: EmployeeRepository):
        self._departments = departments
        self._employees = employees

    def _require_department(self, department_id: UUID) -> Department:
        department = self._departments.get_by_id(department_id)
        if not department:
            raise NotFoundError("Department not found")
        return department

    def _require_roster_member(self, department_id: UUID, employee_id: UUID) -> Employee:
        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError("Employee not found")
        if employee.department_id != department_id:
            raise ValidationError("Manager must be an employee of the department")
        return employee

    def create_department(
        self,
        context: PermissionContext,
        *,
        name: str,
        description: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Department:
        authorize(policies.DEPARTMENTS_MANAGE, context, action="create departments")
        department = Department(
            department_id=uuid.uuid4(),
            name=require_non_empty(name, "Department name"),
            description=optional_text(description, "Description", MAX_REASON_LENGTH),
            created_at=now or now_utc(),
        )
        self._departments.add(department)
        logger.info("Department %s created", department.department_id)
        return department

    def update_department(
        self,
        context: PermissionContext,
        department_id: UUID,
        changes: Mapping[str, Any],
        *,
        now: Optional[datetime] = None,
    ) -> Department:
        authorize(policies.DEPARTMENTS_MANAGE, context, action="update departments")
        require_known_fields(changes, ("name", "description", "manager_id"))
        current = self._require_department(department_id)

        updates: dict[str, Any] = {}
        if "name" in changes:
            updates["name"] = require_non_empty(changes["name"], "Department name")
        if "description" in changes:
            updates["description"] = optional_text(changes["description"], "Description", MAX_REASON_LENGTH)
        if "manager_id" in changes:
            manager_id = optional_uuid(changes["manager_id"], "Manager")
            if manager_id is not None:
                self._require_roster_member(current.department_id, manager_id)
            updates["manager_id"] = manager_id

        updated = replace(current, **updates, updated_at=now or now_utc())
        if not self._departments.update(updated):
            self._raise_write_failed(department_id)
        return updated

    def assign_manager(
        self,
        context: PermissionContext,
        department_id: UUID,
        employee_id: UUID,
        *,
        now: Optional[datetime] = None,
    ) -> Department:
        authorize(policies.DEPARTMENTS_ASSIGN_MANAGER, context, action="assign department managers")
        employee_id = require_uuid(employee_id, "Employee")
        current = self._require_department(department_id)
        self._require_roster_member(current.department_id, employee_id)

        now = now or now_utc()
        if not self._departments.set_manager(department_id=department_id, manager_id=employee_id, updated_at=now):
            self._raise_write_failed(department_id)
        logger.info("Department %s manager set to %s", department_id, employee_id)
        return replace(current, manager_id=employee_id, updated_at=now)

    def _raise_write_failed(self, department_id: UUID) -> None:
        self._require_department(department_id)
        raise ConflictError("Manager left the department before the change was saved")

    def view(self, d: Department) -> dict:
        roster = self._employees.list_all(department_id=d.department_id)
        manager = next((e for e in roster if e.employee_id == d.manager_id), None)
        return {
            "departmentId": str(d.department_id),
            "departmentName": d.name,
            "description": d.description,
            "managerId": str(d.manager_id) if d.manager_id else None,
            "managerFullName": manager.full_name if manager else None,
            "employeeCount": len(roster),
            "employees": [
                {"id": str(e.employee_id), "fullName": e.full_name, "jobTitle": e.position, "status": e.status.value}
                for e in roster
            ],
            "createdAt": format_datetime(d.created_at),
            "updatedAt": format_datetime(d.updated_at),
        }

    def get_department(self, context: PermissionContext, department_id: UUID) -> dict:
        authorize(policies.DEPARTMENTS_READ, context, action="view departments")
        return self.view(self._require_department(department_id))

    def list_departments(self, context: PermissionContext) -> list[dict]:
        authorize(policies.DEPARTMENTS_READ, context, action="view departments")
        return [self.view(d) for d in self._departments.list_all()]
