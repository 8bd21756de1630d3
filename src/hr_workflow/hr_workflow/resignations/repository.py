from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence
from uuid import UUID

from ..core.enums import ResignationStatus
from .model import ResignationRequest

PENDING_RESIGNATION_MESSAGE = "Employee already has a pending resignation"


class ResignationRepository(Protocol):
    def get_by_id(self, resignation_id: UUID) -> Optional[ResignationRequest]:
        raise NotImplementedError

    def list_requests(
        self,
        *,
        status: Optional[ResignationStatus] = None,
        employee_id: Optional[UUID] = None,
        limit: int = 500,
    ) -> Sequence[ResignationRequest]:
        raise NotImplementedError

    def count(self, *, status: Optional[ResignationStatus] = None) -> int:
        raise NotImplementedError

    def has_pending(self, employee_id: UUID) -> bool:
        raise NotImplementedError

    def add(self, request: ResignationRequest) -> None:
        """Raises ConflictError when the employee already has a pending resignation."""

        raise NotImplementedError

    def update_details(
        self,
        *,
        resignation_id: UUID,
        expected: ResignationStatus,
        effective_date: date,
        reason: Optional[str],
        updated_at: datetime,
    ) -> bool:
        """Conditional on the stored status being ``expected``."""

        raise NotImplementedError

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
        """Conditional on the stored status being ``expected``; at most one decider wins."""

        raise NotImplementedError
