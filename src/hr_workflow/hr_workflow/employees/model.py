from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from ..core.enums import EmploymentStatus
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class Employee:
    """Domain entity: Employee.

    Exit fields (date, reason) are present exactly when the status says the
    employee has left; construction fails otherwise.
    """

    employee_id: UUID
    full_name: str
    work_email: str
    personal_email: str
    position: str
    salary: Decimal
    hire_date: date
    status: EmploymentStatus
    department_id: UUID
    created_at: datetime
    phone_number: Optional[str] = None
    user_id: Optional[UUID] = None
    exit_date: Optional[date] = None
    exit_reason: Optional[str] = None
    eligible_for_rehire: Optional[bool] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        has_exit = self.exit_date is not None and bool(self.exit_reason)
        has_any_exit = self.exit_date is not None or bool(self.exit_reason)
        if self.status.has_exited and not has_exit:
            raise ValidationError(f"{self.status.value} employees need an exit date and reason")
        if not self.status.has_exited and has_any_exit:
            raise ValidationError(f"{self.status.value} employees cannot carry exit details")


@dataclass(frozen=True)
class Department:
    department_id: UUID
    name: str
    created_at: datetime
    description: Optional[str] = None
    manager_id: Optional[UUID] = None
    updated_at: Optional[datetime] = None
