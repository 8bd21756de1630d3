from __future__ import annotations

from uuid import UUID

from flask import Flask, request

from ..common.http import as_date, current_context, ok, parse_body, query_uuid, read_json, service_kwargs
from ..common.validators import require_known_fields, require_uuid
from ..container import Container
from ..core.constants import API_PREFIX


def register(app: Flask, container: Container) -> None:
    attendance = container.attendance_service

    @app.route(f"{API_PREFIX}/attendance", methods=["GET"], endpoint="hr_list_attendance")
    def list_attendance():
        ctx = current_context()
        return ok(
            attendance.list_records(
                ctx,
                employee_id=query_uuid("employeeId"),
                start_date=as_date(request.args.get("startDate")),
                end_date=as_date(request.args.get("endDate")),
            )
        )

    @app.route(f"{API_PREFIX}/attendance", methods=["POST"], endpoint="hr_check_in")
    def check_in():
        ctx = current_context()
        body = parse_body(read_json())
        kwargs = service_kwargs(body, required=("employee_id",), optional=("work_date", "status", "notes"))
        employee_id = require_uuid(kwargs.pop("employee_id"), "Employee")
        record = attendance.check_in(ctx, employee_id, **kwargs)
        return ok(attendance.view(record), 201)

    @app.route(f"{API_PREFIX}/attendance/<uuid:record_id>/checkout", methods=["PUT"], endpoint="hr_check_out")
    def check_out(record_id: UUID):
        ctx = current_context()
        body = parse_body(read_json(), aliases={"check_out_time": "check_out_at"})
        require_known_fields(body, ("check_out_at",))
        record = attendance.check_out(ctx, record_id, check_out_at=body.get("check_out_at"))
        return ok(attendance.view(record))
