from __future__ import annotations

from uuid import UUID

from flask import Flask

from ..common.http import current_context, ok, parse_body, query_bool, query_uuid, read_json, service_kwargs
from ..common.validators import require_known_fields
from ..container import Container
from ..core.constants import API_PREFIX

_ALIASES = {"approved_by_employee_id": "approver_id"}


def register(app: Flask, container: Container) -> None:
    leaves = container.leave_service

    @app.route(f"{API_PREFIX}/leaves", methods=["GET"], endpoint="hr_list_leaves")
    def list_leaves():
        ctx = current_context()
        return ok(
            leaves.list_leaves(
                ctx,
                employee_id=query_uuid("employeeId"),
                pending_only=query_bool("pendingOnly"),
            )
        )

    @app.route(f"{API_PREFIX}/leaves", methods=["POST"], endpoint="hr_create_leave")
    def create_leave():
        ctx = current_context()
        body = parse_body(read_json(), aliases=_ALIASES)
        kwargs = service_kwargs(
            body,
            required=("employee_id", "leave_type", "start_date", "end_date"),
            optional=("reason", "status", "approver_id"),
        )
        req = leaves.create_leave(ctx, **kwargs)
        return ok(leaves.view(req), 201)

    @app.route(f"{API_PREFIX}/leaves/<uuid:request_id>", methods=["GET"], endpoint="hr_get_leave")
    def get_leave(request_id: UUID):
        ctx = current_context()
        return ok(leaves.get_leave(ctx, request_id))

    @app.route(f"{API_PREFIX}/leaves/<uuid:request_id>", methods=["PUT"], endpoint="hr_update_leave")
    def update_leave(request_id: UUID):
        ctx = current_context()
        req = leaves.update_leave(ctx, request_id, parse_body(read_json()))
        return ok(leaves.view(req))

    @app.route(f"{API_PREFIX}/leaves/<uuid:request_id>", methods=["DELETE"], endpoint="hr_delete_leave")
    def delete_leave(request_id: UUID):
        ctx = current_context()
        leaves.delete_leave(ctx, request_id)
        return ok()

    @app.route(f"{API_PREFIX}/leaves/<uuid:request_id>/approve", methods=["POST"], endpoint="hr_approve_leave")
    def approve_leave(request_id: UUID):
        ctx = current_context()
        body = parse_body(read_json(), aliases=_ALIASES)
        require_known_fields(body, ("approver_id",))
        return ok(leaves.view(leaves.approve(ctx, request_id, approver_id=body.get("approver_id"))))

    @app.route(f"{API_PREFIX}/leaves/<uuid:request_id>/reject", methods=["POST"], endpoint="hr_reject_leave")
    def reject_leave(request_id: UUID):
        ctx = current_context()
        body = parse_body(read_json(), aliases=_ALIASES)
        require_known_fields(body, ("approver_id",))
        return ok(leaves.view(leaves.reject(ctx, request_id, approver_id=body.get("approver_id"))))

    @app.route(f"{API_PREFIX}/leaves/<uuid:request_id>/cancel", methods=["POST"], endpoint="hr_cancel_leave")
    def cancel_leave(request_id: UUID):
        ctx = current_context()
        return ok(leaves.view(leaves.cancel(ctx, request_id)))
