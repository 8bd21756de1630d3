from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Mapping, Optional
from uuid import UUID

from ..auth import policies
from ..auth.context import PermissionContext
from ..auth.permissions import authorize
from ..common.datetime_utils import as_utc, format_date, format_datetime, now_utc
from ..common.validators import (
    optional_money,
    optional_text,
    optional_uuid,
    require_known_fields,
    require_non_empty,
    require_uuid,
)
from ..core.constants import MAX_NOTES_LENGTH
from ..core.enums import (
    ApplicationStatus,
    EmploymentType,
    InterviewMode,
    InterviewStatus,
    JobOpeningStatus,
)
from ..core.exceptions import InvalidStateError, NotFoundError, ValidationError
from ..employees.repository import DepartmentRepository, EmployeeRepository
from .model import Interview, JobApplication, JobOpening
from .repository import InterviewRepository, JobApplicationRepository, JobOpeningRepository

logger = logging.getLogger(__name__)

OPENING_FIELDS = (
    "title",
    "department_id",
    "location",
    "employment_type",
    "status",
    "description",
    "requirements",
    "salary_min",
    "salary_max",
    "closing_date",
)
APPLICATION_FIELDS = (
    "job_opening_id",
    "candidate_name",
    "candidate_email",
    "candidate_phone",
    "resume_url",
    "cover_letter",
    "status",
)
INTERVIEW_FIELDS = (
    "job_application_id",
    "interviewer_id",
    "scheduled_at",
    "mode",
    "status",
    "location",
    "notes",
)

_TEXT_LIMIT = 4000


def _optional_date(value: Any, field_name: str) -> Optional[date]:
    if value is None:
        return None
    if not isinstance(value, date):
        raise ValidationError(f"{field_name} must be a date")
    return value


def _require_instant(value: Any, field_name: str) -> datetime:
    if not isinstance(value, datetime):
        raise ValidationError(f"{field_name} is required")
    return as_utc(value)


def application_view(a: JobApplication, *, job_title: Optional[str] = None) -> dict:
    return {
        "id": str(a.application_id),
        "jobOpeningId": str(a.job_opening_id),
        "jobTitle": job_title,
        "candidateName": a.candidate_name,
        "candidateEmail": a.candidate_email,
        "candidatePhone": a.candidate_phone,
        "resumeUrl": a.resume_url,
        "coverLetter": a.cover_letter,
        "status": a.status.value,
        "appliedAt": format_datetime(a.applied_at),
        "updatedAt": format_datetime(a.updated_at),
    }


class JobOpeningService:
    """Job openings. Status is set freely by recruiters; there is no transition graph."""

    def __init__(
        self,
        openings: JobOpeningRepository,
        applications: JobApplicationRepository,
        departments: DepartmentRepository,
    ):
        self._openings = openings
        self._applications = applications
        self._departments = departments

    def _require_opening(self, opening_id: UUID) -> JobOpening:
        opening = self._openings.get_by_id(opening_id)
        if not opening:
            raise NotFoundError("Job opening not found")
        return opening

    def _resolve_department(self, value: Any) -> Optional[UUID]:
        department_id = optional_uuid(value, "Department")
        if department_id is not None and not self._departments.get_by_id(department_id):
            raise NotFoundError("Department not found")
        return department_id

    def create_opening(
        self,
        context: PermissionContext,
        *,
        title: str,
        employment_type: EmploymentType | int | str = EmploymentType.FULL_TIME,
        status: JobOpeningStatus | int | str = JobOpeningStatus.DRAFT,
        department_id: Optional[UUID] = None,
        location: Optional[str] = None,
        description: Optional[str] = None,
        requirements: Optional[str] = None,
        salary_min: Decimal | int | str | None = None,
        salary_max: Decimal | int | str | None = None,
        closing_date: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> JobOpening:
        authorize(policies.JOB_OPENINGS_MANAGE, context, action="create job openings")
        opening = JobOpening(
            opening_id=uuid.uuid4(),
            title=require_non_empty(title, "Title"),
            employment_type=EmploymentType.parse(employment_type),
            status=JobOpeningStatus.parse(status),
            department_id=self._resolve_department(department_id),
            location=optional_text(location, "Location", 200),
            description=optional_text(description, "Description", _TEXT_LIMIT),
            requirements=optional_text(requirements, "Requirements", _TEXT_LIMIT),
            salary_min=optional_money(salary_min, "Minimum salary"),
            salary_max=optional_money(salary_max, "Maximum salary"),
            closing_date=_optional_date(closing_date, "Closing date"),
            created_at=now or now_utc(),
        )
        self._openings.add(opening)
        logger.info("Job opening %s created (%s)", opening.opening_id, opening.status.value)
        return opening

    def update_opening(
        self,
        context: PermissionContext,
        opening_id: UUID,
        changes: Mapping[str, Any],
        *,
        now: Optional[datetime] = None,
    ) -> JobOpening:
        authorize(policies.JOB_OPENINGS_MANAGE, context, action="update job openings")
        require_known_fields(changes, OPENING_FIELDS)
        current = self._require_opening(opening_id)

        updates: dict[str, Any] = {}
        for key, value in changes.items():
            if key == "title":
                updates[key] = require_non_empty(value, "Title")
            elif key == "department_id":
                updates[key] = self._resolve_department(value)
            elif key == "location":
                updates[key] = optional_text(value, "Location", 200)
            elif key in ("description", "requirements"):
                updates[key] = optional_text(value, key.capitalize(), _TEXT_LIMIT)
            elif key == "employment_type":
                updates[key] = EmploymentType.parse(value)
            elif key == "status":
                updates[key] = JobOpeningStatus.parse(value)
            elif key == "salary_min":
                updates[key] = optional_money(value, "Minimum salary")
            elif key == "salary_max":
                updates[key] = optional_money(value, "Maximum salary")
            elif key == "closing_date":
                updates[key] = _optional_date(value, "Closing date")

        updated = replace(current, **updates, updated_at=now or now_utc())
        if not self._openings.update(updated):
            raise NotFoundError("Job opening not found")
        return updated

    def delete_opening(self, context: PermissionContext, opening_id: UUID) -> None:
        authorize(policies.JOB_OPENINGS_MANAGE, context, action="delete job openings")
        self._require_opening(opening_id)
        if self._applications.count_by_opening([opening_id]).get(opening_id):
            raise InvalidStateError("Job opening still has applications")
        if not self._openings.delete(opening_id):
            raise NotFoundError("Job opening not found")
        logger.info("Job opening %s deleted", opening_id)

    def list_openings(
        self,
        context: PermissionContext,
        *,
        department_id: Optional[UUID] = None,
        include_applications: bool = False,
    ) -> list[dict]:
        authorize(policies.JOB_OPENINGS_READ, context, action="view job openings")
        rows = self._openings.list_all(department_id=department_id)
        names = self._departments.names_by_ids({o.department_id for o in rows if o.department_id})
        counts = self._applications.count_by_opening(o.opening_id for o in rows)

        out = []
        for o in rows:
            item = self._to_view(o, names.get(o.department_id) if o.department_id else None, counts.get(o.opening_id, 0))
            if include_applications:
                item["applications"] = [
                    application_view(a, job_title=o.title)
                    for a in self._applications.list_all(job_opening_id=o.opening_id)
                ]
            out.append(item)
        return out

    def view(self, opening: JobOpening) -> dict:
        name = None
        if opening.department_id:
            name = self._departments.names_by_ids([opening.department_id]).get(opening.department_id)
        count = self._applications.count_by_opening([opening.opening_id]).get(opening.opening_id, 0)
        return self._to_view(opening, name, count)

    @staticmethod
    def _to_view(o: JobOpening, department_name: Optional[str], application_count: int) -> dict:
        return {
            "id": str(o.opening_id),
            "title": o.title,
            "departmentId": str(o.department_id) if o.department_id else None,
            "departmentName": department_name,
            "location": o.location,
            "employmentType": o.employment_type.value,
            "status": o.status.value,
            "description": o.description,
            "requirements": o.requirements,
            "salaryMin": float(o.salary_min) if o.salary_min is not None else None,
            "salaryMax": float(o.salary_max) if o.salary_max is not None else None,
            "closingDate": format_date(o.closing_date),
            "applicationCount": application_count,
            "createdAt": format_datetime(o.created_at),
            "updatedAt": format_datetime(o.updated_at),
        }


class JobApplicationService:
    def __init__(
        self,
        applications: JobApplicationRepository,
        openings: JobOpeningRepository,
        interviews: InterviewRepository,
    ):
        self._applications = applications
        self._openings = openings
        self._interviews = interviews

    def _require_application(self, application_id: UUID) -> JobApplication:
        application = self._applications.get_by_id(application_id)
        if not application:
            raise NotFoundError("Job application not found")
        return application

    def _resolve_opening(self, value: Any) -> UUID:
        opening_id = require_uuid(value, "Job opening")
        if not self._openings.get_by_id(opening_id):
            raise NotFoundError("Job opening not found")
        return opening_id

    def create_application(
        self,
        context: PermissionContext,
        *,
        job_opening_id: UUID,
        candidate_name: str,
        candidate_email: str,
        candidate_phone: Optional[str] = None,
        resume_url: Optional[str] = None,
        cover_letter: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> JobApplication:
        """Record a candidate's application. New applications always start Submitted."""

        authorize(policies.JOB_APPLICATIONS_MANAGE, context, action="create job applications")
        application = JobApplication(
            application_id=uuid.uuid4(),
            job_opening_id=self._resolve_opening(job_opening_id),
            candidate_name=require_non_empty(candidate_name, "Candidate name"),
            candidate_email=require_non_empty(candidate_email, "Candidate email"),
            candidate_phone=optional_text(candidate_phone, "Candidate phone", 30),
            resume_url=optional_text(resume_url, "Resume URL", 500),
            cover_letter=optional_text(cover_letter, "Cover letter", _TEXT_LIMIT),
            status=ApplicationStatus.SUBMITTED,
            applied_at=now or now_utc(),
        )
        self._applications.add(application)
        logger.info("Application %s received for opening %s", application.application_id, application.job_opening_id)
        return application

    def update_application(
        self,
        context: PermissionContext,
        application_id: UUID,
        changes: Mapping[str, Any],
        *,
        now: Optional[datetime] = None,
    ) -> JobApplication:
        authorize(policies.JOB_APPLICATIONS_MANAGE, context, action="update job applications")
        require_known_fields(changes, APPLICATION_FIELDS)
        current = self._require_application(application_id)

        updates: dict[str, Any] = {}
        for key, value in changes.items():
            if key == "job_opening_id":
                updates[key] = self._resolve_opening(value)
            elif key == "candidate_name":
                updates[key] = require_non_empty(value, "Candidate name")
            elif key == "candidate_email":
                updates[key] = require_non_empty(value, "Candidate email")
            elif key == "candidate_phone":
                updates[key] = optional_text(value, "Candidate phone", 30)
            elif key == "resume_url":
                updates[key] = optional_text(value, "Resume URL", 500)
            elif key == "cover_letter":
                updates[key] = optional_text(value, "Cover letter", _TEXT_LIMIT)
            elif key == "status":
                updates[key] = ApplicationStatus.parse(value)

        updated = replace(current, **updates, updated_at=now or now_utc())
        if not self._applications.update(updated):
            raise NotFoundError("Job application not found")
        if updated.status != current.status:
            logger.info("Application %s %s -> %s", application_id, current.status.value, updated.status.value)
        return updated

    def delete_application(self, context: PermissionContext, application_id: UUID) -> None:
        authorize(policies.JOB_APPLICATIONS_MANAGE, context, action="delete job applications")
        self._require_application(application_id)
        if self._interviews.count_for_application(application_id):
            raise InvalidStateError("Job application still has interviews")
        if not self._applications.delete(application_id):
            raise NotFoundError("Job application not found")
        logger.info("Application %s deleted", application_id)

    def list_applications(self, context: PermissionContext, *, job_opening_id: Optional[UUID] = None) -> list[dict]:
        authorize(policies.JOB_APPLICATIONS_READ, context, action="view job applications")
        rows = self._applications.list_all(job_opening_id=job_opening_id)
        titles = self._openings.titles_by_ids({a.job_opening_id for a in rows})
        return [application_view(a, job_title=titles.get(a.job_opening_id)) for a in rows]

    def view(self, application: JobApplication) -> dict:
        titles = self._openings.titles_by_ids([application.job_opening_id])
        return application_view(application, job_title=titles.get(application.job_opening_id))


class InterviewService:
    def __init__(
        self,
        interviews: InterviewRepository,
        applications: JobApplicationRepository,
        openings: JobOpeningRepository,
        employees: EmployeeRepository,
    ):
        self._interviews = interviews
        self._applications = applications
        self._openings = openings
        self._employees = employees

    def _require_interview(self, interview_id: UUID) -> Interview:
        interview = self._interviews.get_by_id(interview_id)
        if not interview:
            raise NotFoundError("Interview not found")
        return interview

    def _resolve_application(self, value: Any) -> UUID:
        application_id = require_uuid(value, "Job application")
        if not self._applications.get_by_id(application_id):
            raise NotFoundError("Job application not found")
        return application_id

    def _resolve_interviewer(self, value: Any) -> Optional[UUID]:
        interviewer_id = optional_uuid(value, "Interviewer")
        if interviewer_id is not None and not self._employees.get_by_id(interviewer_id):
            raise NotFoundError("Interviewer not found")
        return interviewer_id

    def schedule_interview(
        self,
        context: PermissionContext,
        *,
        job_application_id: UUID,
        scheduled_at: datetime,
        mode: InterviewMode | int | str = InterviewMode.IN_PERSON,
        interviewer_id: Optional[UUID] = None,
        location: Optional[str] = None,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Interview:
        authorize(policies.INTERVIEWS_MANAGE, context, action="schedule interviews")
        interview = Interview(
            interview_id=uuid.uuid4(),
            job_application_id=self._resolve_application(job_application_id),
            interviewer_id=self._resolve_interviewer(interviewer_id),
            scheduled_at=_require_instant(scheduled_at, "Scheduled time"),
            mode=InterviewMode.parse(mode),
            status=InterviewStatus.SCHEDULED,
            location=optional_text(location, "Location", 200),
            notes=optional_text(notes, "Notes", MAX_NOTES_LENGTH),
            created_at=now or now_utc(),
        )
        self._interviews.add(interview)
        logger.info("Interview %s scheduled for application %s", interview.interview_id, interview.job_application_id)
        return interview

    def update_interview(
        self,
        context: PermissionContext,
        interview_id: UUID,
        changes: Mapping[str, Any],
        *,
        now: Optional[datetime] = None,
    ) -> Interview:
        """Partial update; fields absent from ``changes`` keep their stored value."""

        authorize(policies.INTERVIEWS_MANAGE, context, action="update interviews")
        require_known_fields(changes, INTERVIEW_FIELDS)
        current = self._require_interview(interview_id)

        updates: dict[str, Any] = {}
        for key, value in changes.items():
            if key == "job_application_id":
                updates[key] = self._resolve_application(value)
            elif key == "interviewer_id":
                updates[key] = self._resolve_interviewer(value)
            elif key == "scheduled_at":
                updates[key] = _require_instant(value, "Scheduled time")
            elif key == "mode":
                updates[key] = InterviewMode.parse(value)
            elif key == "status":
                updates[key] = InterviewStatus.parse(value)
            elif key == "location":
                updates[key] = optional_text(value, "Location", 200)
            elif key == "notes":
                updates[key] = optional_text(value, "Notes", MAX_NOTES_LENGTH)

        updated = replace(current, **updates, updated_at=now or now_utc())
        if not self._interviews.update(updated):
            raise NotFoundError("Interview not found")
        return updated

    def delete_interview(self, context: PermissionContext, interview_id: UUID) -> None:
        authorize(policies.INTERVIEWS_MANAGE, context, action="delete interviews")
        if not self._interviews.delete(interview_id):
            raise NotFoundError("Interview not found")
        logger.info("Interview %s deleted", interview_id)

    def list_interviews(self, context: PermissionContext, *, job_application_id: Optional[UUID] = None) -> list[dict]:
        authorize(policies.INTERVIEWS_READ, context, action="view interviews")
        rows = self._interviews.list_all(job_application_id=job_application_id)
        return self._to_views(rows)

    def view(self, interview: Interview) -> dict:
        return self._to_views([interview])[0]

    def _to_views(self, rows) -> list[dict]:
        applications = self._applications.get_many({i.job_application_id for i in rows})
        titles = self._openings.titles_by_ids({a.job_opening_id for a in applications.values()})
        names = self._employees.names_by_ids({i.interviewer_id for i in rows if i.interviewer_id})

        out = []
        for i in rows:
            application = applications.get(i.job_application_id)
            out.append(
                {
                    "id": str(i.interview_id),
                    "jobApplicationId": str(i.job_application_id),
                    "candidateName": application.candidate_name if application else None,
                    "jobTitle": titles.get(application.job_opening_id) if application else None,
                    "interviewerEmployeeId": str(i.interviewer_id) if i.interviewer_id else None,
                    "interviewerName": names.get(i.interviewer_id) if i.interviewer_id else None,
                    "scheduledAt": format_datetime(i.scheduled_at),
                    "mode": i.mode.value,
                    "status": i.status.value,
                    "location": i.location,
                    "notes": i.notes,
                    "createdAt": format_datetime(i.created_at),
                    "updatedAt": format_datetime(i.updated_at),
                }
            )
        return out
