from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional
from uuid import UUID

from ..core.enums import LeaveStatus, LeaveType
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class LeaveRequest:
    """Domain entity: a leave request covering start_date..end_date inclusive."""

    request_id: UUID
    employee_id: UUID
    leave_type: LeaveType
    start_date: date
    end_date: date
    status: LeaveStatus
    requested_at: datetime
    reason: Optional[str] = None
    approver_id: Optional[UUID] = None
    decided_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if self.end_date < self.start_date:
            raise ValidationError("End date must be on or after start date")

    @property
    def days(self) -> int:
        return (self.end_date - self.start_date).days + 1
