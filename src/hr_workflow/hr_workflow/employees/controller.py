from __future__ import annotations

from uuid import UUID

from flask import Flask, request

from ..common.http import current_context, ok, parse_body, query_uuid, read_json, service_kwargs
from ..common.validators import require_known_fields
from ..container import Container
from ..core.constants import API_PREFIX

# Wire names used by the HR screens.
_EMPLOYEE_ALIASES = {"job_title": "position"}
_DEPARTMENT_ALIASES = {"department_name": "name", "manager_employee_id": "manager_id"}


def register(app: Flask, container: Container) -> None:
    employees = container.employee_service
    departments = container.department_service

    @app.route(f"{API_PREFIX}/employees", methods=["GET"], endpoint="hr_list_employees")
    def list_employees():
        ctx = current_context()
        return ok(
            employees.list_employees(
                ctx,
                department_id=query_uuid("departmentId"),
                status=request.args.get("status") or None,
            )
        )

    @app.route(f"{API_PREFIX}/employees", methods=["POST"], endpoint="hr_create_employee")
    def create_employee():
        ctx = current_context()
        body = parse_body(read_json(), aliases=_EMPLOYEE_ALIASES)
        kwargs = service_kwargs(
            body,
            required=("full_name", "work_email", "personal_email", "position", "salary", "department_id"),
            optional=("hire_date", "status", "phone_number", "user_id"),
        )
        employee = employees.create_employee(ctx, **kwargs)
        return ok(employees.view(employee), 201)

    @app.route(f"{API_PREFIX}/employees/<uuid:employee_id>", methods=["GET"], endpoint="hr_get_employee")
    def get_employee(employee_id: UUID):
        ctx = current_context()
        return ok(employees.get_employee(ctx, employee_id))

    @app.route(f"{API_PREFIX}/employees/<uuid:employee_id>", methods=["PUT"], endpoint="hr_update_employee")
    def update_employee(employee_id: UUID):
        ctx = current_context()
        employee = employees.update_employee(ctx, employee_id, parse_body(read_json(), aliases=_EMPLOYEE_ALIASES))
        return ok(employees.view(employee))

    @app.route(f"{API_PREFIX}/employees/<uuid:employee_id>/status", methods=["POST"], endpoint="hr_change_employee_status")
    def change_status(employee_id: UUID):
        ctx = current_context()
        body = parse_body(read_json())
        require_known_fields(body, ("status", "reason", "eligible_for_rehire"))
        employee = employees.change_status(
            ctx,
            employee_id,
            body.get("status"),
            reason=body.get("reason"),
            eligible_for_rehire=body.get("eligible_for_rehire"),
        )
        return ok(employees.view(employee))

    @app.route(f"{API_PREFIX}/employees/<uuid:employee_id>/fire", methods=["POST"], endpoint="hr_fire_employee")
    def fire_employee(employee_id: UUID):
        ctx = current_context()
        body = parse_body(read_json())
        require_known_fields(body, ("reason", "eligible_for_rehire"))
        employee = employees.fire_employee(
            ctx,
            employee_id,
            reason=body.get("reason"),
            eligible_for_rehire=body.get("eligible_for_rehire"),
        )
        return ok(employees.view(employee))

    @app.route(f"{API_PREFIX}/departments", methods=["GET"], endpoint="hr_list_departments")
    def list_departments():
        ctx = current_context()
        return ok(departments.list_departments(ctx))

    @app.route(f"{API_PREFIX}/departments", methods=["POST"], endpoint="hr_create_department")
    def create_department():
        ctx = current_context()
        body = parse_body(read_json(), aliases=_DEPARTMENT_ALIASES)
        department = departments.create_department(ctx, **service_kwargs(body, required=("name",), optional=("description",)))
        return ok(departments.view(department), 201)

    @app.route(f"{API_PREFIX}/departments/<uuid:department_id>", methods=["GET"], endpoint="hr_get_department")
    def get_department(department_id: UUID):
        ctx = current_context()
        return ok(departments.get_department(ctx, department_id))

    @app.route(f"{API_PREFIX}/departments/<uuid:department_id>", methods=["PUT"], endpoint="hr_update_department")
    def update_department(department_id: UUID):
        ctx = current_context()
        department = departments.update_department(ctx, department_id, parse_body(read_json(), aliases=_DEPARTMENT_ALIASES))
        return ok(departments.view(department))

    @app.route(f"{API_PREFIX}/departments/<uuid:department_id>/manager", methods=["PUT"], endpoint="hr_assign_manager")
    def assign_manager(department_id: UUID):
        ctx = current_context()
        body = parse_body(read_json(), aliases={"manager_employee_id": "employee_id", "manager_id": "employee_id"})
        require_known_fields(body, ("employee_id",))
        department = departments.assign_manager(ctx, department_id, body.get("employee_id"))
        return ok(departments.view(department))
