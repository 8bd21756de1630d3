from __future__ import annotations

import pytest

from tests.fakes import HR_MANAGER_PERMISSIONS, fake_repositories, seed_department, seed_employee
from src.hr_workflow.hr_workflow.auth.context import PermissionContext
from src.hr_workflow.hr_workflow.auth.tokens import TokenVerifier
from src.hr_workflow.hr_workflow.container import wire


@pytest.fixture
def repos():
    return fake_repositories()


@pytest.fixture
def container(repos):
    return wire(repos, tokens=TokenVerifier("test-secret"))


@pytest.fixture
def dept(repos):
    return seed_department(repos)


@pytest.fixture
def alice(repos, dept):
    return seed_employee(repos, dept, "Alice Smith")


@pytest.fixture
def bob(repos, dept):
    return seed_employee(repos, dept, "Bob Jones")


@pytest.fixture
def hr(repos, dept):
    """An HR manager who is also an employee."""
    manager = seed_employee(repos, dept, "Harriet Reyes")
    return PermissionContext.of(employee_id=manager.employee_id, permissions=HR_MANAGER_PERMISSIONS)


@pytest.fixture
def admin():
    return PermissionContext.of(roles=("SystemAdmin",))


@pytest.fixture
def nobody():
    return PermissionContext.of()
