from __future__ import annotations

from ..auth import policies
from ..auth.context import PermissionContext
from ..auth.permissions import authorize
from ..core.enums import EmploymentStatus, ResignationStatus
from ..employees.repository import DepartmentRepository, EmployeeRepository
from ..resignations.repository import ResignationRepository


class HrSummaryService:
    """Headline counts for the HR dashboard."""

    def __init__(
        self,
        employees: EmployeeRepository,
        departments: DepartmentRepository,
        resignations: ResignationRepository,
    ):
        self._employees = employees
        self._departments = departments
        self._resignations = resignations

    def summary(self, context: PermissionContext) -> dict:
        authorize(policies.SUMMARY_VIEW, context, action="view the HR summary")
        return {
            "totalEmployees": self._employees.count(),
            "activeEmployees": self._employees.count(status=EmploymentStatus.ACTIVE),
            "departments": self._departments.count(),
            "pendingResignations": self._resignations.count(status=ResignationStatus.PENDING),
        }
