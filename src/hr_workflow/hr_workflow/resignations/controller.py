from __future__ import annotations

from uuid import UUID

from flask import Flask, request

from ..common.http import current_context, ok, parse_body, query_uuid, read_json, service_kwargs
from ..common.validators import require_known_fields
from ..container import Container
from ..core.constants import API_PREFIX


def register(app: Flask, container: Container) -> None:
    resignations = container.resignation_service

    @app.route(f"{API_PREFIX}/resignations", methods=["GET"], endpoint="hr_list_resignations")
    def list_resignations():
        ctx = current_context()
        return ok(
            resignations.list_resignations(
                ctx,
                status=request.args.get("status") or None,
                employee_id=query_uuid("employeeId"),
            )
        )

    @app.route(f"{API_PREFIX}/resignations", methods=["POST"], endpoint="hr_submit_resignation")
    def submit_resignation():
        ctx = current_context()
        body = parse_body(read_json())
        kwargs = service_kwargs(body, required=("employee_id", "effective_date"), optional=("reason",))
        return ok(resignations.view(resignations.submit(ctx, **kwargs)), 201)

    @app.route(f"{API_PREFIX}/resignations/<uuid:resignation_id>", methods=["GET"], endpoint="hr_get_resignation")
    def get_resignation(resignation_id: UUID):
        ctx = current_context()
        return ok(resignations.get_resignation(ctx, resignation_id))

    @app.route(f"{API_PREFIX}/resignations/<uuid:resignation_id>", methods=["PUT"], endpoint="hr_update_resignation")
    def update_resignation(resignation_id: UUID):
        ctx = current_context()
        req = resignations.update(ctx, resignation_id, parse_body(read_json()))
        return ok(resignations.view(req))

    @app.route(
        f"{API_PREFIX}/resignations/<uuid:resignation_id>/decision",
        methods=["PUT"],
        endpoint="hr_decide_resignation",
    )
    def decide_resignation(resignation_id: UUID):
        ctx = current_context()
        body = parse_body(
            read_json(),
            aliases={"decision_notes": "notes", "approver_employee_id": "approver_id", "status": "decision"},
        )
        require_known_fields(body, ("decision", "notes", "eligible_for_rehire", "approver_id"))
        req = resignations.decide(
            ctx,
            resignation_id,
            body.get("decision"),
            notes=body.get("notes"),
            eligible_for_rehire=body.get("eligible_for_rehire"),
            approver_id=body.get("approver_id"),
        )
        return ok(resignations.view(req))
