from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from uuid import uuid4

import pytest

from src.hr_workflow.hr_workflow.auth.context import PermissionContext
from src.hr_workflow.hr_workflow.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from tests.fakes import seed_department, seed_employee

NOW = datetime(2026, 4, 1, 12, 0, tzinfo=timezone.utc)


def test_create_department_requires_name(container, hr):
    with pytest.raises(ValidationError):
        container.department_service.create_department(hr, name="  ")


def test_create_and_view_department(container, hr):
    d = container.department_service.create_department(hr, name="Finance", description="Money", now=NOW)
    view = container.department_service.view(d)

    assert view["departmentName"] == "Finance"
    assert view["employeeCount"] == 0
    assert view["managerId"] is None


def test_assign_manager_from_roster(container, repos, hr, dept, alice):
    updated = container.department_service.assign_manager(hr, dept.department_id, alice.employee_id, now=NOW)

    assert updated.manager_id == alice.employee_id
    assert repos.departments.get_by_id(dept.department_id).manager_id == alice.employee_id
    view = container.department_service.get_department(hr, dept.department_id)
    assert view["managerFullName"] == "Alice Smith"
    assert any(e["id"] == str(alice.employee_id) for e in view["employees"])


def test_assign_manager_outside_roster_is_invalid_input(container, repos, hr, dept):
    outsider = seed_employee(repos, seed_department(repos, "Sales"), "Sam Seller")
    with pytest.raises(ValidationError):
        container.department_service.assign_manager(hr, dept.department_id, outsider.employee_id)
    assert repos.departments.get_by_id(dept.department_id).manager_id is None


def test_assign_manager_unknown_ids(container, hr, dept, alice):
    with pytest.raises(NotFoundError):
        container.department_service.assign_manager(hr, uuid4(), alice.employee_id)
    with pytest.raises(NotFoundError):
        container.department_service.assign_manager(hr, dept.department_id, uuid4())


def test_assign_manager_with_dedicated_permission(container, dept, alice):
    ctx = PermissionContext.of(permissions=("hr.departments.manager.assign",))
    container.department_service.assign_manager(ctx, dept.department_id, alice.employee_id)


def test_assign_manager_denied(container, repos, dept, alice):
    ctx = PermissionContext.of(employee_id=alice.employee_id, permissions=("hr.departments.read",))
    before = repos.departments.writes
    with pytest.raises(AuthorizationError):
        container.department_service.assign_manager(ctx, dept.department_id, alice.employee_id)
    assert repos.departments.writes == before


def test_update_department_manager_must_be_in_roster(container, repos, hr, dept):
    outsider = seed_employee(repos, seed_department(repos, "Sales"), "Sam Seller")
    with pytest.raises(ValidationError):
        container.department_service.update_department(hr, dept.department_id, {"manager_id": outsider.employee_id})


def test_update_department_fields(container, repos, hr, dept):
    container.department_service.update_department(hr, dept.department_id, {"name": "R&D", "description": None}, now=NOW)
    stored = repos.departments.get_by_id(dept.department_id)
    assert stored.name == "R&D"
    assert stored.updated_at == NOW


def test_list_departments_requires_read(container, hr, nobody, dept):
    assert [d["departmentName"] for d in container.department_service.list_departments(hr)] == ["Engineering"]
    with pytest.raises(AuthorizationError):
        container.department_service.list_departments(nobody)


def _move_away_before(repos, method_name, employee, target):
    """Wrap a department write so ``employee`` changes department just before it runs."""
    original = getattr(repos.departments, method_name)

    def write(*args, **kwargs):
        repos.employees.update_profile(replace(employee, department_id=target.department_id), previous_department_id=employee.department_id)
        return original(*args, **kwargs)

    setattr(repos.departments, method_name, write)


def test_assign_manager_loses_to_concurrent_move(container, repos, hr, dept, alice):
    sales = seed_department(repos, "Sales")
    _move_away_before(repos, "set_manager", alice, sales)

    with pytest.raises(ConflictError):
        container.department_service.assign_manager(hr, dept.department_id, alice.employee_id)

    assert repos.departments.get_by_id(dept.department_id).manager_id is None
    assert repos.employees.get_by_id(alice.employee_id).department_id == sales.department_id


def test_update_department_manager_loses_to_concurrent_move(container, repos, hr, dept, alice):
    sales = seed_department(repos, "Sales")
    _move_away_before(repos, "update", alice, sales)

    with pytest.raises(ConflictError):
        container.department_service.update_department(hr, dept.department_id, {"manager_id": alice.employee_id})
    assert repos.departments.get_by_id(dept.department_id).manager_id is None


def test_update_department_can_clear_manager(container, repos, hr, dept, alice):
    container.department_service.assign_manager(hr, dept.department_id, alice.employee_id)
    container.department_service.update_department(hr, dept.department_id, {"manager_id": None})
    assert repos.departments.get_by_id(dept.department_id).manager_id is None


def test_manager_move_and_clear_happen_in_one_write(repos, dept, alice):
    sales = seed_department(repos, "Sales")
    repos.departments.set_manager(department_id=dept.department_id, manager_id=alice.employee_id, updated_at=NOW)

    moved = repos.employees.update_profile(
        replace(alice, department_id=sales.department_id, updated_at=NOW),
        previous_department_id=dept.department_id,
    )

    assert moved is True
    assert repos.departments.get_by_id(dept.department_id).manager_id is None
