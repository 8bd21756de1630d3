from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from src.hr_workflow.hr_workflow.auth.context import PermissionContext
from src.hr_workflow.hr_workflow.core.enums import EmploymentStatus
from src.hr_workflow.hr_workflow.core.exceptions import (
    AuthorizationError,
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from src.hr_workflow.hr_workflow.employees.model import Employee
from tests.fakes import T0, seed_department, seed_employee

NOW = datetime(2026, 4, 1, 12, 0, tzinfo=timezone.utc)


def _hire(container, ctx, dept, **overrides):
    kwargs = dict(
        full_name="Grace Hopper",
        work_email="grace@corp.example",
        personal_email="grace@mail.example",
        position="Engineer",
        salary="7000",
        department_id=dept.department_id,
        now=NOW,
    )
    kwargs.update(overrides)
    return container.employee_service.create_employee(ctx, **kwargs)


def test_create_employee_defaults(container, repos, hr, dept):
    e = _hire(container, hr, dept)

    assert e.status is EmploymentStatus.ACTIVE
    assert e.hire_date == NOW.date()
    assert e.salary == Decimal("7000")
    assert repos.employees.get_by_id(e.employee_id) == e


def test_create_employee_requires_known_department(container, hr, dept):
    with pytest.raises(NotFoundError):
        _hire(container, hr, dept, department_id=uuid4())


@pytest.mark.parametrize("status", ["Resigned", 3])
def test_create_employee_rejects_exit_status(container, hr, dept, status):
    with pytest.raises(ValidationError):
        _hire(container, hr, dept, status=status)


def test_create_employee_rejects_negative_salary(container, hr, dept):
    with pytest.raises(ValidationError):
        _hire(container, hr, dept, salary=-1)


def test_create_employee_denied_without_permission(container, repos, dept, alice):
    self_service = PermissionContext.of(employee_id=alice.employee_id, permissions=("hr.employees.read",))
    before = repos.employees.writes
    with pytest.raises(AuthorizationError):
        _hire(container, self_service, dept)
    assert repos.employees.writes == before


def test_employee_invariant_exit_fields_follow_status():
    with pytest.raises(ValidationError):
        Employee(
            employee_id=uuid4(),
            full_name="X",
            work_email="x@a",
            personal_email="x@b",
            position="P",
            salary=Decimal("1"),
            hire_date=T0.date(),
            status=EmploymentStatus.TERMINATED,
            department_id=uuid4(),
            created_at=T0,
        )


def test_fire_active_employee(container, repos, hr, alice):
    fired = container.employee_service.fire_employee(hr, alice.employee_id, now=NOW)

    stored = repos.employees.get_by_id(alice.employee_id)
    assert stored.status is EmploymentStatus.TERMINATED
    assert stored.exit_reason == "Terminated"
    assert stored.exit_date == NOW.date()
    assert stored.eligible_for_rehire is False
    assert fired == stored


def test_fire_with_terminate_permission_only(container, repos, alice):
    ctx = PermissionContext.of(permissions=("hr.employees.terminate",))
    container.employee_service.fire_employee(ctx, alice.employee_id, reason="Misconduct", eligible_for_rehire=True, now=NOW)

    stored = repos.employees.get_by_id(alice.employee_id)
    assert stored.exit_reason == "Misconduct"
    assert stored.eligible_for_rehire is True


def test_fire_already_terminated_is_invalid_state(container, repos, hr, dept):
    gone = seed_employee(repos, dept, "Gone Person", status=EmploymentStatus.TERMINATED)
    before = repos.employees.get_by_id(gone.employee_id)

    with pytest.raises(InvalidStateError):
        container.employee_service.fire_employee(hr, gone.employee_id, now=NOW)
    assert repos.employees.get_by_id(gone.employee_id) == before


def test_fire_unknown_employee(container, hr):
    with pytest.raises(NotFoundError):
        container.employee_service.fire_employee(hr, uuid4())


def test_fire_lost_race_is_conflict(container, repos, hr, alice):
    # Another request resigns the employee between read and write.
    original = repos.employees.update_status

    def racing_update(**kw):
        original(
            employee_id=alice.employee_id,
            expected=EmploymentStatus.ACTIVE,
            status=EmploymentStatus.RESIGNED,
            exit_date=NOW.date(),
            exit_reason="Moving",
            eligible_for_rehire=None,
            updated_at=NOW,
        )
        return original(**kw)

    repos.employees.update_status = racing_update
    with pytest.raises(ConflictError):
        container.employee_service.fire_employee(hr, alice.employee_id, now=NOW)
    assert repos.employees.get_by_id(alice.employee_id).status is EmploymentStatus.RESIGNED


def test_change_status_on_leave_and_back(container, repos, hr, alice):
    svc = container.employee_service
    svc.change_status(hr, alice.employee_id, "OnLeave", now=NOW)
    assert repos.employees.get_by_id(alice.employee_id).status is EmploymentStatus.ON_LEAVE

    svc.change_status(hr, alice.employee_id, 0, now=NOW)
    assert repos.employees.get_by_id(alice.employee_id).status is EmploymentStatus.ACTIVE


def test_change_status_to_resigned_requires_reason(container, hr, alice):
    with pytest.raises(ValidationError):
        container.employee_service.change_status(hr, alice.employee_id, "Resigned", now=NOW)


def test_change_status_to_resigned_sets_exit_details(container, repos, hr, alice):
    container.employee_service.change_status(hr, alice.employee_id, "Resigned", reason="Relocating", now=NOW)

    stored = repos.employees.get_by_id(alice.employee_id)
    assert stored.exit_date == NOW.date()
    assert stored.exit_reason == "Relocating"


def test_change_status_cannot_terminate(container, hr, alice):
    with pytest.raises(ValidationError):
        container.employee_service.change_status(hr, alice.employee_id, "Terminated")


def test_change_status_from_exited_is_invalid_state(container, repos, hr, dept):
    gone = seed_employee(repos, dept, "Gone Person", status=EmploymentStatus.RESIGNED)
    with pytest.raises(InvalidStateError):
        container.employee_service.change_status(hr, gone.employee_id, "Active")


def test_update_employee_rejects_lifecycle_fields(container, hr, alice):
    with pytest.raises(ValidationError):
        container.employee_service.update_employee(hr, alice.employee_id, {"status": "Terminated"})


def test_update_employee_rejects_unknown_fields(container, hr, alice):
    with pytest.raises(ValidationError):
        container.employee_service.update_employee(hr, alice.employee_id, {"favourite_colour": "blue"})


def test_update_employee_profile(container, repos, hr, alice):
    updated = container.employee_service.update_employee(
        hr,
        alice.employee_id,
        {"position": "Lead Engineer", "salary": "8100.50", "hire_date": date(2025, 1, 6)},
        now=NOW,
    )

    stored = repos.employees.get_by_id(alice.employee_id)
    assert stored == updated
    assert stored.position == "Lead Engineer"
    assert stored.salary == Decimal("8100.50")
    assert stored.updated_at == NOW


def test_moving_manager_clears_old_department_manager(container, repos, hr, dept, alice):
    container.department_service.assign_manager(hr, dept.department_id, alice.employee_id, now=NOW)
    sales = seed_department(repos, "Sales")

    container.employee_service.update_employee(hr, alice.employee_id, {"department_id": sales.department_id}, now=NOW)

    assert repos.departments.get_by_id(dept.department_id).manager_id is None
    assert repos.employees.get_by_id(alice.employee_id).department_id == sales.department_id


def test_move_to_unknown_department(container, hr, alice):
    with pytest.raises(NotFoundError):
        container.employee_service.update_employee(hr, alice.employee_id, {"department_id": uuid4()})


def test_employee_can_view_self_but_not_others(container, alice, bob):
    me = PermissionContext.of(employee_id=alice.employee_id)
    view = container.employee_service.get_employee(me, alice.employee_id)
    assert view["fullName"] == "Alice Smith"
    assert view["departmentName"] == "Engineering"

    with pytest.raises(AuthorizationError):
        container.employee_service.get_employee(me, bob.employee_id)


def test_list_employees_filters(container, repos, hr, dept, alice, bob):
    seed_employee(repos, seed_department(repos, "Sales"), "Sam Seller")
    container.employee_service.change_status(hr, bob.employee_id, "OnLeave", now=NOW)

    in_dept = container.employee_service.list_employees(hr, department_id=dept.department_id)
    on_leave = container.employee_service.list_employees(hr, status="OnLeave")

    assert {v["fullName"] for v in in_dept} == {"Alice Smith", "Bob Jones", "Harriet Reyes"}
    assert [v["fullName"] for v in on_leave] == ["Bob Jones"]
    assert on_leave[0]["status"] == "OnLeave"


def test_work_email_must_be_unique_on_hire(container, repos, hr, dept):
    _hire(container, hr, dept)
    before = repos.employees.writes

    with pytest.raises(ValidationError, match="already in use"):
        _hire(container, hr, dept, work_email="GRACE@corp.example", personal_email="other@mail.example")
    assert repos.employees.writes == before


def test_work_email_must_be_unique_on_update(container, repos, hr, alice, bob):
    with pytest.raises(ValidationError, match="already in use"):
        container.employee_service.update_employee(hr, alice.employee_id, {"work_email": bob.work_email})
    assert repos.employees.get_by_id(alice.employee_id).work_email == alice.work_email


def test_keeping_own_work_email_is_allowed(container, repos, hr, alice):
    container.employee_service.update_employee(hr, alice.employee_id, {"work_email": alice.work_email, "position": "Staff"})
    assert repos.employees.get_by_id(alice.employee_id).position == "Staff"


def test_duplicate_email_slipping_past_the_lookup_is_still_rejected(container, repos, hr, dept):
    # Two hires racing: neither sees the other's email before inserting.
    _hire(container, hr, dept)
    repos.employees.email_in_use = lambda *a, **kw: False

    with pytest.raises(ValidationError, match="already in use"):
        _hire(container, hr, dept, personal_email="other@mail.example")
    assert repos.employees.count() == 2


@pytest.mark.parametrize("salary", ["NaN", "Infinity", "-Infinity", "sNaN"])
def test_create_employee_rejects_non_finite_salary(container, hr, dept, salary):
    with pytest.raises(ValidationError):
        _hire(container, hr, dept, salary=salary)


@pytest.mark.parametrize("field", ["full_name", "position", "work_email"])
def test_create_employee_rejects_non_text_fields(container, hr, dept, field):
    with pytest.raises(ValidationError):
        _hire(container, hr, dept, **{field: 5})
