from __future__ import annotations

from dataclasses import dataclass

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .auth.tokens import TokenVerifier
from .core.constants import DEFAULT_TOKEN_MAX_AGE_SECONDS, DEFAULT_TOKEN_SALT
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_department_repository import MySQLDepartmentRepository
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import DepartmentRepository, EmployeeRepository
from .employees.service import DepartmentService, EmployeeService
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.repository import LeaveRepository
from .leaves.service import LeaveService
from .recruitment.mysql_interview_repository import MySQLInterviewRepository
from .recruitment.mysql_job_application_repository import MySQLJobApplicationRepository
from .recruitment.mysql_job_opening_repository import MySQLJobOpeningRepository
from .recruitment.repository import InterviewRepository, JobApplicationRepository, JobOpeningRepository
from .recruitment.service import InterviewService, JobApplicationService, JobOpeningService
from .reports.service import HrSummaryService
from .resignations.mysql_resignation_repository import MySQLResignationRepository
from .resignations.repository import ResignationRepository
from .resignations.service import ResignationService


@dataclass(frozen=True)
class Repositories:
    employees: EmployeeRepository
    departments: DepartmentRepository
    attendance: AttendanceRepository
    leaves: LeaveRepository
    resignations: ResignationRepository
    job_openings: JobOpeningRepository
    job_applications: JobApplicationRepository
    interviews: InterviewRepository


@dataclass(frozen=True)
class Container:
    repos: Repositories
    tokens: TokenVerifier

    employee_service: EmployeeService
    department_service: DepartmentService
    attendance_service: AttendanceService
    leave_service: LeaveService
    resignation_service: ResignationService
    job_opening_service: JobOpeningService
    job_application_service: JobApplicationService
    interview_service: InterviewService
    summary_service: HrSummaryService


def wire(repos: Repositories, *, tokens: TokenVerifier) -> Container:
    """Build every service over the given repositories."""

    return Container(
        repos=repos,
        tokens=tokens,
        employee_service=EmployeeService(repos.employees, repos.departments),
        department_service=DepartmentService(repos.departments, repos.employees),
        attendance_service=AttendanceService(repos.attendance, repos.employees),
        leave_service=LeaveService(repos.leaves, repos.employees),
        resignation_service=ResignationService(repos.resignations, repos.employees),
        job_opening_service=JobOpeningService(repos.job_openings, repos.job_applications, repos.departments),
        job_application_service=JobApplicationService(repos.job_applications, repos.job_openings, repos.interviews),
        interview_service=InterviewService(
            repos.interviews,
            repos.job_applications,
            repos.job_openings,
            repos.employees,
        ),
        summary_service=HrSummaryService(repos.employees, repos.departments, repos.resignations),
    )


def build_container(
    *,
    db_config: dict,
    secret_key: str,
    token_salt: str = DEFAULT_TOKEN_SALT,
    token_max_age: int = DEFAULT_TOKEN_MAX_AGE_SECONDS,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    repos = Repositories(
        employees=MySQLEmployeeRepository(conn),
        departments=MySQLDepartmentRepository(conn),
        attendance=MySQLAttendanceRepository(conn),
        leaves=MySQLLeaveRepository(conn),
        resignations=MySQLResignationRepository(conn),
        job_openings=MySQLJobOpeningRepository(conn),
        job_applications=MySQLJobApplicationRepository(conn),
        interviews=MySQLInterviewRepository(conn),
    )
    return wire(repos, tokens=TokenVerifier(secret_key, salt=token_salt, max_age=token_max_age))
