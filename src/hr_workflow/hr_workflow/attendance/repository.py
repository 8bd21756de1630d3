from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence
from uuid import UUID

from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_by_id(self, record_id: UUID) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_records(
        self,
        *,
        employee_id: Optional[UUID] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int = 500,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def add(self, record: AttendanceRecord) -> None:
        raise NotImplementedError

    def update_checkout(self, *, record_id: UUID, check_out: datetime) -> bool:
        raise NotImplementedError
