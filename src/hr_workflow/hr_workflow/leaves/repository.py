from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence
from uuid import UUID

from ..core.enums import LeaveStatus, LeaveType
from .model import LeaveRequest


class LeaveRepository(Protocol):
    def get_by_id(self, request_id: UUID) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def list_requests(
        self,
        *,
        employee_id: Optional[UUID] = None,
        status: Optional[LeaveStatus] = None,
        limit: int = 500,
    ) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def add(self, request: LeaveRequest) -> None:
        raise NotImplementedError

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
        """Conditional on the stored status being ``expected``."""

        raise NotImplementedError

    def transition(
        self,
        *,
        request_id: UUID,
        expected: LeaveStatus,
        status: LeaveStatus,
        approver_id: Optional[UUID],
        decided_at: datetime,
    ) -> bool:
        """Conditional on the stored status being ``expected``."""

        raise NotImplementedError

    def delete(self, request_id: UUID) -> bool:
        raise NotImplementedError
