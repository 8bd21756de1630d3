from __future__ import annotations

from uuid import UUID

from flask import Flask

from ..common.http import current_context, ok, parse_body, query_bool, query_uuid, read_json, service_kwargs
from ..container import Container
from ..core.constants import API_PREFIX

_INTERVIEW_ALIASES = {"interviewer_employee_id": "interviewer_id"}


def register(app: Flask, container: Container) -> None:
    openings = container.job_opening_service
    applications = container.job_application_service
    interviews = container.interview_service

    @app.route(f"{API_PREFIX}/job-openings", methods=["GET"], endpoint="hr_list_job_openings")
    def list_job_openings():
        ctx = current_context()
        return ok(
            openings.list_openings(
                ctx,
                department_id=query_uuid("departmentId"),
                include_applications=query_bool("includeApplications"),
            )
        )

    @app.route(f"{API_PREFIX}/job-openings", methods=["POST"], endpoint="hr_create_job_opening")
    def create_job_opening():
        ctx = current_context()
        kwargs = service_kwargs(
            parse_body(read_json()),
            required=("title",),
            optional=(
                "employment_type",
                "status",
                "department_id",
                "location",
                "description",
                "requirements",
                "salary_min",
                "salary_max",
                "closing_date",
            ),
        )
        return ok(openings.view(openings.create_opening(ctx, **kwargs)), 201)

    @app.route(f"{API_PREFIX}/job-openings/<uuid:opening_id>", methods=["PUT"], endpoint="hr_update_job_opening")
    def update_job_opening(opening_id: UUID):
        ctx = current_context()
        return ok(openings.view(openings.update_opening(ctx, opening_id, parse_body(read_json()))))

    @app.route(f"{API_PREFIX}/job-openings/<uuid:opening_id>", methods=["DELETE"], endpoint="hr_delete_job_opening")
    def delete_job_opening(opening_id: UUID):
        ctx = current_context()
        openings.delete_opening(ctx, opening_id)
        return ok()

    @app.route(f"{API_PREFIX}/job-applications", methods=["GET"], endpoint="hr_list_job_applications")
    def list_job_applications():
        ctx = current_context()
        return ok(applications.list_applications(ctx, job_opening_id=query_uuid("jobOpeningId")))

    @app.route(f"{API_PREFIX}/job-applications", methods=["POST"], endpoint="hr_create_job_application")
    def create_job_application():
        ctx = current_context()
        kwargs = service_kwargs(
            parse_body(read_json()),
            required=("job_opening_id", "candidate_name", "candidate_email"),
            optional=("candidate_phone", "resume_url", "cover_letter"),
        )
        return ok(applications.view(applications.create_application(ctx, **kwargs)), 201)

    @app.route(
        f"{API_PREFIX}/job-applications/<uuid:application_id>",
        methods=["PUT"],
        endpoint="hr_update_job_application",
    )
    def update_job_application(application_id: UUID):
        ctx = current_context()
        application = applications.update_application(ctx, application_id, parse_body(read_json()))
        return ok(applications.view(application))

    @app.route(
        f"{API_PREFIX}/job-applications/<uuid:application_id>",
        methods=["DELETE"],
        endpoint="hr_delete_job_application",
    )
    def delete_job_application(application_id: UUID):
        ctx = current_context()
        applications.delete_application(ctx, application_id)
        return ok()

    @app.route(f"{API_PREFIX}/interviews", methods=["GET"], endpoint="hr_list_interviews")
    def list_interviews():
        ctx = current_context()
        return ok(interviews.list_interviews(ctx, job_application_id=query_uuid("jobApplicationId")))

    @app.route(f"{API_PREFIX}/interviews", methods=["POST"], endpoint="hr_schedule_interview")
    def schedule_interview():
        ctx = current_context()
        kwargs = service_kwargs(
            parse_body(read_json(), aliases=_INTERVIEW_ALIASES),
            required=("job_application_id", "scheduled_at"),
            optional=("mode", "interviewer_id", "location", "notes"),
        )
        return ok(interviews.view(interviews.schedule_interview(ctx, **kwargs)), 201)

    @app.route(f"{API_PREFIX}/interviews/<uuid:interview_id>", methods=["PUT"], endpoint="hr_update_interview")
    def update_interview(interview_id: UUID):
        ctx = current_context()
        interview = interviews.update_interview(ctx, interview_id, parse_body(read_json(), aliases=_INTERVIEW_ALIASES))
        return ok(interviews.view(interview))

    @app.route(f"{API_PREFIX}/interviews/<uuid:interview_id>", methods=["DELETE"], endpoint="hr_delete_interview")
    def delete_interview(interview_id: UUID):
        ctx = current_context()
        interviews.delete_interview(ctx, interview_id)
        return ok()
