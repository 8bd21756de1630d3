from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from src.hr_workflow.hr_workflow.auth.context import PermissionContext
from src.hr_workflow.hr_workflow.core.enums import (
    ApplicationStatus,
    EmploymentType,
    InterviewMode,
    InterviewStatus,
    JobOpeningStatus,
)
from src.hr_workflow.hr_workflow.core.exceptions import (
    AuthorizationError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)

NOW = datetime(2026, 4, 1, 12, 0, tzinfo=timezone.utc)
SLOT = datetime(2026, 4, 8, 14, 0, tzinfo=timezone.utc)


@pytest.fixture
def opening(container, hr, dept):
    return container.job_opening_service.create_opening(
        hr, title="Backend Engineer", department_id=dept.department_id, salary_min="4000", salary_max="6000", now=NOW
    )


@pytest.fixture
def application(container, hr, opening):
    return container.job_application_service.create_application(
        hr,
        job_opening_id=opening.opening_id,
        candidate_name="Carla Candidate",
        candidate_email="carla@example.com",
        now=NOW,
    )


def test_opening_defaults(opening):
    assert opening.status is JobOpeningStatus.DRAFT
    assert opening.employment_type is EmploymentType.FULL_TIME
    assert opening.salary_min == Decimal("4000")


def test_opening_salary_band_must_not_be_inverted(container, hr):
    with pytest.raises(ValidationError):
        container.job_opening_service.create_opening(hr, title="X", salary_min=9000, salary_max=100)


def test_opening_department_must_resolve(container, hr):
    with pytest.raises(NotFoundError):
        container.job_opening_service.create_opening(hr, title="X", department_id=uuid4())


def test_opening_status_is_freely_settable(container, repos, hr, opening):
    svc = container.job_opening_service
    svc.update_opening(hr, opening.opening_id, {"status": "Closed"})
    svc.update_opening(hr, opening.opening_id, {"status": 1})
    assert repos.job_openings.get_by_id(opening.opening_id).status is JobOpeningStatus.OPEN


def test_update_opening_rejects_inverted_band(container, hr, opening):
    with pytest.raises(ValidationError):
        container.job_opening_service.update_opening(hr, opening.opening_id, {"salary_max": "100"})


def test_list_openings_with_counts(container, hr, opening, application):
    rows = container.job_opening_service.list_openings(hr, include_applications=True)
    assert rows[0]["departmentName"] == "Engineering"
    assert rows[0]["applicationCount"] == 1
    assert rows[0]["applications"][0]["candidateName"] == "Carla Candidate"

    plain = container.job_opening_service.list_openings(hr)
    assert "applications" not in plain[0]


def test_delete_opening_with_applications_is_invalid_state(container, repos, hr, opening, application):
    with pytest.raises(InvalidStateError):
        container.job_opening_service.delete_opening(hr, opening.opening_id)
    assert repos.job_openings.get_by_id(opening.opening_id) is not None


def test_delete_empty_opening(container, repos, hr, opening):
    container.job_opening_service.delete_opening(hr, opening.opening_id)
    assert repos.job_openings.get_by_id(opening.opening_id) is None


def test_application_always_starts_submitted(application):
    assert application.status is ApplicationStatus.SUBMITTED


def test_application_opening_must_resolve(container, hr):
    with pytest.raises(NotFoundError):
        container.job_application_service.create_application(
            hr, job_opening_id=uuid4(), candidate_name="A", candidate_email="a@example.com"
        )


def test_application_status_has_no_transition_graph(container, repos, hr, application):
    svc = container.job_application_service
    svc.update_application(hr, application.application_id, {"status": "Hired"})
    svc.update_application(hr, application.application_id, {"status": "Submitted"})
    assert repos.job_applications.get_by_id(application.application_id).status is ApplicationStatus.SUBMITTED


def test_update_application_unknown_field(container, hr, application):
    with pytest.raises(ValidationError):
        container.job_application_service.update_application(hr, application.application_id, {"salary": 1})


def test_list_applications_with_job_title(container, hr, opening, application):
    rows = container.job_application_service.list_applications(hr, job_opening_id=opening.opening_id)
    assert rows[0]["jobTitle"] == "Backend Engineer"


def test_schedule_interview(container, hr, application, bob):
    interview = container.interview_service.schedule_interview(
        hr, job_application_id=application.application_id, scheduled_at=SLOT, mode="Virtual", interviewer_id=bob.employee_id
    )
    assert interview.status is InterviewStatus.SCHEDULED
    assert interview.mode is InterviewMode.VIRTUAL

    view = container.interview_service.list_interviews(hr, job_application_id=application.application_id)[0]
    assert view["candidateName"] == "Carla Candidate"
    assert view["jobTitle"] == "Backend Engineer"
    assert view["interviewerName"] == "Bob Jones"


def test_schedule_interview_requires_known_interviewer(container, hr, application):
    with pytest.raises(NotFoundError):
        container.interview_service.schedule_interview(
            hr, job_application_id=application.application_id, scheduled_at=SLOT, interviewer_id=uuid4()
        )


def test_partial_interview_update_keeps_other_fields(container, repos, hr, application):
    svc = container.interview_service
    interview = svc.schedule_interview(
        hr, job_application_id=application.application_id, scheduled_at=SLOT, location="Room 4", notes="Bring laptop"
    )

    svc.update_interview(hr, interview.interview_id, {"status": "Completed"}, now=NOW)

    stored = repos.interviews.get_by_id(interview.interview_id)
    assert stored.status is InterviewStatus.COMPLETED
    assert stored.location == "Room 4"
    assert stored.notes == "Bring laptop"
    assert stored.scheduled_at == SLOT


def test_delete_application_with_interviews_is_invalid_state(container, repos, hr, application):
    interview = container.interview_service.schedule_interview(
        hr, job_application_id=application.application_id, scheduled_at=SLOT
    )
    with pytest.raises(InvalidStateError):
        container.job_application_service.delete_application(hr, application.application_id)

    container.interview_service.delete_interview(hr, interview.interview_id)
    container.job_application_service.delete_application(hr, application.application_id)
    assert repos.job_applications.get_by_id(application.application_id) is None


def test_recruitment_requires_permissions(container, alice, opening):
    me = PermissionContext.of(employee_id=alice.employee_id)
    with pytest.raises(AuthorizationError):
        container.job_opening_service.create_opening(me, title="Sneaky")
    with pytest.raises(AuthorizationError):
        container.job_application_service.create_application(
            me, job_opening_id=opening.opening_id, candidate_name="A", candidate_email="a@example.com"
        )
