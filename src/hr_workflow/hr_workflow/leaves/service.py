from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import date, datetime
from typing import Any, Mapping, Optional
from uuid import UUID

from ..auth import policies
from ..auth.context import PermissionContext
from ..auth.permissions import Requirement, authorize, authorize_self_or, is_allowed
from ..common.datetime_utils import format_date, format_datetime, now_utc
from ..common.validators import optional_text, require_date_range, require_known_fields
from ..core.constants import DEFAULT_LIST_LIMIT, MAX_REASON_LENGTH
from ..core.enums import LeaveStatus, LeaveType
from ..core.exceptions import ConflictError, InvalidStateError, NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from .model import LeaveRequest
from .repository import LeaveRepository

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("leave_type", "start_date", "end_date", "reason")


class LeaveService:
    """Leave request lifecycle: Pending -> Approved | Rejected | Cancelled.

    Every decided status is terminal; a new request is needed to change plans
    after a decision.
    """

    def __init__(self, leaves: LeaveRepository, employees: EmployeeRepository):
        self._leaves = leaves
        self._employees = employees

    def _require_request(self, request_id: UUID) -> LeaveRequest:
        req = self._leaves.get_by_id(request_id)
        if not req:
            raise NotFoundError("Leave request not found")
        return req

    def _require_employee(self, employee_id: UUID, label: str = "Employee") -> None:
        if not self._employees.get_by_id(employee_id):
            raise NotFoundError(f"{label} not found")

    def create_leave(
        self,
        context: PermissionContext,
        *,
        employee_id: UUID,
        leave_type: LeaveType | int | str,
        start_date: date,
        end_date: date,
        reason: Optional[str] = None,
        status: LeaveStatus | int | str | None = None,
        approver_id: Optional[UUID] = None,
        now: Optional[datetime] = None,
    ) -> LeaveRequest:
        """File a leave request, always Pending unless a leave manager says otherwise."""

        authorize_self_or(policies.LEAVES_MANAGE, context, employee_id=employee_id, action="request leave")
        leave_type = LeaveType.parse(leave_type)
        if not isinstance(start_date, date) or not isinstance(end_date, date):
            raise ValidationError("Start and end dates are required")
        require_date_range(start_date, end_date)
        reason = optional_text(reason, "Reason", MAX_REASON_LENGTH)
        self._require_employee(employee_id)

        initial = LeaveStatus.PENDING
        if status is not None and is_allowed(policies.LEAVES_MANAGE, context):
            initial = LeaveStatus.parse(status)
        elif status is not None:
            logger.debug("Ignoring status %r supplied by non-privileged caller", status)

        now = now or now_utc()
        decided_by: Optional[UUID] = None
        decided_at: Optional[datetime] = None
        if initial != LeaveStatus.PENDING:
            decided_by = approver_id or context.employee_id
            if approver_id:
                self._require_employee(approver_id, "Approver")
            decided_at = now

        req = LeaveRequest(
            request_id=uuid.uuid4(),
            employee_id=employee_id,
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            reason=reason,
            status=initial,
            approver_id=decided_by,
            requested_at=now,
            decided_at=decided_at,
        )
        self._leaves.add(req)
        logger.info("Leave request %s created for employee %s (%s)", req.request_id, employee_id, initial.value)
        return req

    def update_leave(
        self,
        context: PermissionContext,
        request_id: UUID,
        changes: Mapping[str, Any],
        *,
        now: Optional[datetime] = None,
    ) -> LeaveRequest:
        require_known_fields(changes, EDITABLE_FIELDS)
        current = self._require_request(request_id)
        authorize_self_or(policies.LEAVES_MANAGE, context, employee_id=current.employee_id, action="edit leave requests")
        if current.status != LeaveStatus.PENDING:
            raise InvalidStateError(f"Leave request is already {current.status.value}")

        leave_type = LeaveType.parse(changes["leave_type"]) if "leave_type" in changes else current.leave_type
        start_date = changes.get("start_date", current.start_date)
        end_date = changes.get("end_date", current.end_date)
        if not isinstance(start_date, date) or not isinstance(end_date, date):
            raise ValidationError("Start and end dates are required")
        require_date_range(start_date, end_date)
        reason = optional_text(changes["reason"], "Reason", MAX_REASON_LENGTH) if "reason" in changes else current.reason

        now = now or now_utc()
        ok = self._leaves.update_details(
            request_id=request_id,
            expected=LeaveStatus.PENDING,
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            reason=reason,
            updated_at=now,
        )
        if not ok:
            raise ConflictError("Leave request was decided by another request")
        return replace(
            current,
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            reason=reason,
            updated_at=now,
        )

    def approve(self, context: PermissionContext, request_id: UUID, *, approver_id: Optional[UUID] = None, now: Optional[datetime] = None) -> LeaveRequest:
        authorize(policies.LEAVES_MANAGE, context, action="approve leave")
        return self._transition(context, request_id, LeaveStatus.APPROVED, approver_id=approver_id, now=now)

    def reject(self, context: PermissionContext, request_id: UUID, *, approver_id: Optional[UUID] = None, now: Optional[datetime] = None) -> LeaveRequest:
        authorize(policies.LEAVES_MANAGE, context, action="reject leave")
        return self._transition(context, request_id, LeaveStatus.REJECTED, approver_id=approver_id, now=now)

    def cancel(self, context: PermissionContext, request_id: UUID, *, now: Optional[datetime] = None) -> LeaveRequest:
        """Leave managers, or the employee who asked, may cancel a pending request."""

        return self._transition(
            context,
            request_id,
            LeaveStatus.CANCELLED,
            owner_may_act=policies.LEAVES_MANAGE,
            now=now,
        )

    def _transition(
        self,
        context: PermissionContext,
        request_id: UUID,
        target: LeaveStatus,
        *,
        approver_id: Optional[UUID] = None,
        owner_may_act: Optional[Requirement] = None,
        now: Optional[datetime] = None,
    ) -> LeaveRequest:
        current = self._require_request(request_id)
        if owner_may_act is not None:
            authorize_self_or(owner_may_act, context, employee_id=current.employee_id, action="cancel leave")
        if current.status != LeaveStatus.PENDING:
            raise InvalidStateError(f"Leave request is already {current.status.value}")

        if approver_id:
            self._require_employee(approver_id, "Approver")
        decided_by = approver_id or context.employee_id

        now = now or now_utc()
        ok = self._leaves.transition(
            request_id=request_id,
            expected=LeaveStatus.PENDING,
            status=target,
            approver_id=decided_by,
            decided_at=now,
        )
        if not ok:
            raise ConflictError("Leave request was decided by another request")

        logger.info("Leave request %s %s -> %s by %s", request_id, current.status.value, target.value, decided_by)
        return replace(current, status=target, approver_id=decided_by, decided_at=now, updated_at=now)

    def delete_leave(self, context: PermissionContext, request_id: UUID) -> None:
        authorize(policies.LEAVES_DELETE, context, action="delete leave requests")
        if not self._leaves.delete(request_id):
            raise NotFoundError("Leave request not found")
        logger.info("Leave request %s deleted", request_id)

    def get_leave(self, context: PermissionContext, request_id: UUID) -> dict:
        req = self._require_request(request_id)
        authorize_self_or(policies.LEAVES_READ, context, employee_id=req.employee_id, action="view leave requests")
        return self.view(req)

    def list_leaves(
        self,
        context: PermissionContext,
        *,
        employee_id: Optional[UUID] = None,
        pending_only: bool = False,
    ) -> list[dict]:
        if employee_id is None or not context.is_employee(employee_id):
            authorize(policies.LEAVES_READ, context, action="view leave requests")

        rows = self._leaves.list_requests(
            employee_id=employee_id,
            status=LeaveStatus.PENDING if pending_only else None,
            limit=DEFAULT_LIST_LIMIT,
        )
        names = self._employees.names_by_ids({r.employee_id for r in rows} | {r.approver_id for r in rows if r.approver_id})
        return [self._to_view(r, names) for r in rows]

    def view(self, req: LeaveRequest) -> dict:
        ids = [req.employee_id] + ([req.approver_id] if req.approver_id else [])
        return self._to_view(req, self._employees.names_by_ids(ids))

    @staticmethod
    def _to_view(r: LeaveRequest, names: Mapping[UUID, str]) -> dict:
        return {
            "id": str(r.request_id),
            "employeeId": str(r.employee_id),
            "employeeName": names.get(r.employee_id),
            "leaveType": r.leave_type.value,
            "startDate": format_date(r.start_date),
            "endDate": format_date(r.end_date),
            "days": r.days,
            "status": r.status.value,
            "reason": r.reason,
            "approvedByEmployeeId": str(r.approver_id) if r.approver_id else None,
            "approvedByName": names.get(r.approver_id) if r.approver_id else None,
            "requestedAt": format_datetime(r.requested_at),
            "decidedAt": format_datetime(r.decided_at),
            "updatedAt": format_datetime(r.updated_at),
        }
