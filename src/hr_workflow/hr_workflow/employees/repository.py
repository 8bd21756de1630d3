from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Protocol, Sequence
from uuid import UUID

from ..core.enums import EmploymentStatus
from .model import Department, Employee

DUPLICATE_EMAIL_MESSAGE = "Work email is already in use"


class EmployeeRepository(Protocol):
    """Repository interface for Employee.

    Note: the service layer depends on this interface, never on a concrete DB.
    """

    def get_by_id(self, employee_id: UUID) -> Optional[Employee]:
        raise NotImplementedError

    def list_all(
        self,
        *,
        department_id: Optional[UUID] = None,
        status: Optional[EmploymentStatus] = None,
    ) -> Sequence[Employee]:
        raise NotImplementedError

    def names_by_ids(self, employee_ids: Iterable[UUID]) -> dict[UUID, str]:
        raise NotImplementedError

    def get_many(self, employee_ids: Iterable[UUID]) -> dict[UUID, Employee]:
        raise NotImplementedError

    def email_in_use(self, work_email: str, *, exclude_id: Optional[UUID] = None) -> bool:
        raise NotImplementedError

    def count(self, *, status: Optional[EmploymentStatus] = None) -> int:
        raise NotImplementedError

    def add(self, employee: Employee) -> None:
        """Raises ValidationError when the work email is taken."""

        raise NotImplementedError

    def update_profile(self, employee: Employee, *, previous_department_id: Optional[UUID] = None) -> bool:
        """Persist profile fields only; status and exit fields are untouched.

        When ``previous_department_id`` is given and the employee managed that
        department, its manager is cleared in the same transaction.
        Raises ValidationError when the work email is taken.
        """

        raise NotImplementedError

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
        """Conditional update: applies only while the stored status equals ``expected``."""

        raise NotImplementedError


class DepartmentRepository(Protocol):
    def get_by_id(self, department_id: UUID) -> Optional[Department]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Department]:
        raise NotImplementedError

    def names_by_ids(self, department_ids: Iterable[UUID]) -> dict[UUID, str]:
        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError

    def add(self, department: Department) -> None:
        raise NotImplementedError

    def update(self, department: Department) -> bool:
        """False when the department is gone or its manager is not in its roster."""

        raise NotImplementedError

    def set_manager(self, *, department_id: UUID, manager_id: UUID, updated_at: datetime) -> bool:
        """Conditional update: applies only while the employee belongs to the department."""

        raise NotImplementedError
