"""Named requirements for every HR operation."""

from __future__ import annotations

from ..core.constants import HR_PERMISSION_PREFIX, SYSTEM_ADMIN_ROLE
from .permissions import Requirement

_ADMIN = (SYSTEM_ADMIN_ROLE,)


def _manage(*permissions: str) -> Requirement:
    return Requirement.of(*permissions, roles=_ADMIN)


def _read(permission: str) -> Requirement:
    return Requirement.of(permission, prefix=HR_PERMISSION_PREFIX, roles=_ADMIN)


SUMMARY_VIEW = _read("hr.summary.view")

EMPLOYEES_READ = _read("hr.employees.read")
EMPLOYEES_MANAGE = _manage("hr.employees.manage")
EMPLOYEES_TERMINATE = _manage("hr.employees.manage", "hr.employees.terminate")

DEPARTMENTS_READ = _read("hr.departments.read")
DEPARTMENTS_MANAGE = _manage("hr.departments.manage")
DEPARTMENTS_ASSIGN_MANAGER = _manage("hr.departments.manage", "hr.departments.manager.assign")

ATTENDANCE_READ = _read("hr.attendance.read")
ATTENDANCE_MANAGE = _manage("hr.attendance.manage")

LEAVES_READ = _read("hr.leaves.read")
LEAVES_MANAGE = _manage("hr.leaves.manage")
LEAVES_DELETE = _manage("hr.leaves.delete", "hr.leaves.manage")

RESIGNATIONS_READ = _read("hr.resignations.read")
RESIGNATIONS_MANAGE = _manage("hr.resignations.manage")

JOB_OPENINGS_READ = _read("hr.job-openings.read")
JOB_OPENINGS_MANAGE = _manage("hr.job-openings.manage")

JOB_APPLICATIONS_READ = _read("hr.job-applications.read")
JOB_APPLICATIONS_MANAGE = _manage("hr.job-applications.manage")

INTERVIEWS_READ = _read("hr.interviews.read")
INTERVIEWS_MANAGE = _manage("hr.interviews.manage")
