from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional
from uuid import UUID

from ..core.enums import ResignationStatus


@dataclass(frozen=True)
class ResignationRequest:
    """Domain entity: an employee's notice of resignation.

    Decision fields stay empty while the request is Pending.
    """

    resignation_id: UUID
    employee_id: UUID
    effective_date: date
    status: ResignationStatus
    submitted_at: datetime
    reason: Optional[str] = None
    decision_notes: Optional[str] = None
    decided_by_id: Optional[UUID] = None
    decided_at: Optional[datetime] = None
    eligible_for_rehire: Optional[bool] = None
    updated_at: Optional[datetime] = None
