from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional
from uuid import UUID

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one check-in (and optional check-out) for an employee on a work date.

    The status is fixed when the record is created.
    """

    record_id: UUID
    employee_id: UUID
    work_date: date
    check_in: datetime
    status: AttendanceStatus
    check_out: Optional[datetime] = None
    notes: Optional[str] = None
