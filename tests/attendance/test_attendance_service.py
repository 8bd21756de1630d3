from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from uuid import uuid4

import pytest

from src.hr_workflow.hr_workflow.auth.context import PermissionContext
from src.hr_workflow.hr_workflow.core.enums import AttendanceStatus
from src.hr_workflow.hr_workflow.core.exceptions import AuthorizationError, NotFoundError, ValidationError

MORNING = datetime(2026, 4, 1, 8, 30, tzinfo=timezone.utc)


def test_self_check_in_and_out(container, repos, alice):
    me = PermissionContext.of(employee_id=alice.employee_id)
    svc = container.attendance_service

    record = svc.check_in(me, alice.employee_id, now=MORNING)
    assert record.work_date == MORNING.date()
    assert record.status is AttendanceStatus.PRESENT

    out = svc.check_out(me, record.record_id, now=MORNING + timedelta(hours=8))
    assert out.check_out == MORNING + timedelta(hours=8)
    assert repos.attendance.get_by_id(record.record_id).check_out == out.check_out
    assert repos.attendance.get_by_id(record.record_id).status is AttendanceStatus.PRESENT


def test_check_in_for_someone_else_requires_manage(container, alice, bob):
    me = PermissionContext.of(employee_id=alice.employee_id)
    with pytest.raises(AuthorizationError):
        container.attendance_service.check_in(me, bob.employee_id)


def test_manager_records_attendance_with_status(container, hr, bob):
    record = container.attendance_service.check_in(hr, bob.employee_id, work_date=date(2026, 4, 2), status="Remote", now=MORNING)
    assert record.status is AttendanceStatus.REMOTE
    assert record.work_date == date(2026, 4, 2)


def test_duplicate_check_in_is_accepted(container, repos, hr, alice):
    svc = container.attendance_service
    svc.check_in(hr, alice.employee_id, now=MORNING)
    svc.check_in(hr, alice.employee_id, now=MORNING + timedelta(minutes=5))
    assert len(repos.attendance.list_records(employee_id=alice.employee_id)) == 2


def test_check_in_unknown_employee(container, hr):
    with pytest.raises(NotFoundError):
        container.attendance_service.check_in(hr, uuid4())


def test_check_out_before_check_in_is_invalid(container, hr, alice):
    record = container.attendance_service.check_in(hr, alice.employee_id, now=MORNING)
    with pytest.raises(ValidationError):
        container.attendance_service.check_out(hr, record.record_id, check_out_at=MORNING - timedelta(minutes=1))


def test_check_out_unknown_record(container, hr):
    with pytest.raises(NotFoundError):
        container.attendance_service.check_out(hr, uuid4())


def test_list_records_window_and_names(container, hr, alice):
    svc = container.attendance_service
    svc.check_in(hr, alice.employee_id, work_date=date(2026, 4, 1), now=MORNING)
    svc.check_in(hr, alice.employee_id, work_date=date(2026, 4, 3), now=MORNING)

    rows = svc.list_records(hr, employee_id=alice.employee_id, start_date=date(2026, 4, 2), end_date=date(2026, 4, 30))
    assert [r["workDate"] for r in rows] == ["2026-04-03"]
    assert rows[0]["employeeName"] == "Alice Smith"

    with pytest.raises(ValidationError):
        svc.list_records(hr, start_date=date(2026, 4, 3), end_date=date(2026, 4, 1))
