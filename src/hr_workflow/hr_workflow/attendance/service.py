from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import date, datetime
from typing import Optional
from uuid import UUID

from ..auth import policies
from ..auth.context import PermissionContext
from ..auth.permissions import authorize, authorize_self_or
from ..common.datetime_utils import as_utc, format_date, format_datetime, now_utc
from ..common.validators import optional_text, require_date_range
from ..core.constants import DEFAULT_LIST_LIMIT, MAX_NOTES_LENGTH
from ..core.enums import AttendanceStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Daily check-in/check-out ledger.

    A second check-in for the same employee and date is accepted; the ledger
    does not deduplicate.
    """

    def __init__(self, attendance: AttendanceRepository, employees: EmployeeRepository):
        self._attendance = attendance
        self._employees = employees

    def check_in(
        self,
        context: PermissionContext,
        employee_id: UUID,
        *,
        work_date: Optional[date] = None,
        status: AttendanceStatus | int | str = AttendanceStatus.PRESENT,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        authorize_self_or(policies.ATTENDANCE_MANAGE, context, employee_id=employee_id, action="record attendance")
        status = AttendanceStatus.parse(status)
        notes = optional_text(notes, "Notes", MAX_NOTES_LENGTH)

        if not self._employees.get_by_id(employee_id):
            raise NotFoundError("Employee not found")

        now = now or now_utc()
        record = AttendanceRecord(
            record_id=uuid.uuid4(),
            employee_id=employee_id,
            work_date=work_date or now.date(),
            check_in=now,
            status=status,
            notes=notes,
        )
        self._attendance.add(record)
        logger.info("Check-in %s for employee %s on %s", record.record_id, employee_id, record.work_date)
        return record

    def check_out(
        self,
        context: PermissionContext,
        record_id: UUID,
        *,
        check_out_at: Optional[datetime] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        """Set (or correct) the check-out instant. Status is left as recorded."""

        record = self._attendance.get_by_id(record_id)
        if not record:
            # Unknown ids are reported only to attendance managers.
            authorize(policies.ATTENDANCE_MANAGE, context, action="record attendance")
            raise NotFoundError("Attendance record not found")
        authorize_self_or(policies.ATTENDANCE_MANAGE, context, employee_id=record.employee_id, action="record attendance")

        check_out = as_utc(check_out_at) if check_out_at else (now or now_utc())
        if check_out < record.check_in:
            raise ValidationError("Check-out cannot be before check-in")

        if not self._attendance.update_checkout(record_id=record_id, check_out=check_out):
            raise NotFoundError("Attendance record not found")
        return replace(record, check_out=check_out)

    def list_records(
        self,
        context: PermissionContext,
        *,
        employee_id: Optional[UUID] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[dict]:
        if employee_id is None or not context.is_employee(employee_id):
            authorize(policies.ATTENDANCE_READ, context, action="view attendance")
        if start_date and end_date:
            require_date_range(start_date, end_date)

        rows = self._attendance.list_records(
            employee_id=employee_id,
            start_date=start_date,
            end_date=end_date,
            limit=DEFAULT_LIST_LIMIT,
        )
        names = self._employees.names_by_ids({r.employee_id for r in rows})
        return [self._to_view(r, names.get(r.employee_id)) for r in rows]

    def view(self, record: AttendanceRecord) -> dict:
        names = self._employees.names_by_ids([record.employee_id])
        return self._to_view(record, names.get(record.employee_id))

    @staticmethod
    def _to_view(r: AttendanceRecord, employee_name: Optional[str]) -> dict:
        return {
            "id": str(r.record_id),
            "employeeId": str(r.employee_id),
            "employeeName": employee_name,
            "workDate": format_date(r.work_date),
            "checkInTime": format_datetime(r.check_in),
            "checkOutTime": format_datetime(r.check_out),
            "status": r.status.value,
            "notes": r.notes,
        }
