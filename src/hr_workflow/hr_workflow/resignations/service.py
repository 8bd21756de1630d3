from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import date, datetime
from typing import Any, Mapping, Optional
from uuid import UUID

from ..auth import policies
from ..auth.context import PermissionContext
from ..auth.permissions import authorize, authorize_self_or
from ..common.datetime_utils import format_date, format_datetime, now_utc
from ..common.validators import optional_text, require_known_fields
from ..core.constants import DEFAULT_LIST_LIMIT, MAX_NOTES_LENGTH, MAX_REASON_LENGTH
from ..core.enums import ResignationStatus
from ..core.exceptions import ConflictError, InvalidStateError, NotFoundError, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from .model import ResignationRequest
from .repository import PENDING_RESIGNATION_MESSAGE, ResignationRepository

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("effective_date", "reason")


class ResignationService:
    """Resignation requests: Pending -> Approved | Rejected.

    Deciding a resignation records HR's answer only. Moving the employee to
    Resigned is a separate status change on the employee record.
    """

    def __init__(self, resignations: ResignationRepository, employees: EmployeeRepository):
        self._resignations = resignations
        self._employees = employees

    def _require_request(self, resignation_id: UUID) -> ResignationRequest:
        req = self._resignations.get_by_id(resignation_id)
        if not req:
            raise NotFoundError("Resignation request not found")
        return req

    def submit(
        self,
        context: PermissionContext,
        *,
        employee_id: UUID,
        effective_date: Optional[date],
        reason: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ResignationRequest:
        authorize_self_or(policies.RESIGNATIONS_MANAGE, context, employee_id=employee_id, action="submit resignations")
        if not isinstance(effective_date, date):
            raise ValidationError("Effective date is required")
        reason = optional_text(reason, "Reason", MAX_REASON_LENGTH)

        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError("Employee not found")
        if employee.status.has_exited:
            raise InvalidStateError(f"Employee is already {employee.status.value}")
        if self._resignations.has_pending(employee_id):
            raise InvalidStateError(PENDING_RESIGNATION_MESSAGE)

        now = now or now_utc()
        req = ResignationRequest(
            resignation_id=uuid.uuid4(),
            employee_id=employee_id,
            effective_date=effective_date,
            reason=reason,
            status=ResignationStatus.PENDING,
            submitted_at=now,
        )
        self._resignations.add(req)
        logger.info("Resignation %s submitted for employee %s", req.resignation_id, employee_id)
        return req

    def update(
        self,
        context: PermissionContext,
        resignation_id: UUID,
        changes: Mapping[str, Any],
        *,
        now: Optional[datetime] = None,
    ) -> ResignationRequest:
        require_known_fields(changes, EDITABLE_FIELDS)
        current = self._require_request(resignation_id)
        authorize_self_or(
            policies.RESIGNATIONS_MANAGE,
            context,
            employee_id=current.employee_id,
            action="edit resignations",
        )
        if current.status != ResignationStatus.PENDING:
            raise InvalidStateError(f"Resignation is already {current.status.value}")

        effective_date = changes.get("effective_date", current.effective_date)
        if not isinstance(effective_date, date):
            raise ValidationError("Effective date is required")
        reason = optional_text(changes["reason"], "Reason", MAX_REASON_LENGTH) if "reason" in changes else current.reason

        now = now or now_utc()
        ok = self._resignations.update_details(
            resignation_id=resignation_id,
            expected=ResignationStatus.PENDING,
            effective_date=effective_date,
            reason=reason,
            updated_at=now,
        )
        if not ok:
            raise ConflictError("Resignation was decided by another request")
        return replace(current, effective_date=effective_date, reason=reason, updated_at=now)

    def decide(
        self,
        context: PermissionContext,
        resignation_id: UUID,
        decision: ResignationStatus | int | str,
        *,
        notes: Optional[str] = None,
        eligible_for_rehire: Optional[bool] = None,
        approver_id: Optional[UUID] = None,
        now: Optional[datetime] = None,
    ) -> ResignationRequest:
        """Approve or reject a pending resignation.

        Approval records ``eligible_for_rehire`` (False when omitted); a
        rejection leaves it unset.
        """

        authorize(policies.RESIGNATIONS_MANAGE, context, action="decide resignations")
        decision = ResignationStatus.parse(decision)
        if not decision.is_terminal:
            raise ValidationError("Decision must be Approved or Rejected")
        notes = optional_text(notes, "Decision notes", MAX_NOTES_LENGTH)

        current = self._require_request(resignation_id)
        if current.status != ResignationStatus.PENDING:
            raise InvalidStateError(f"Resignation is already {current.status.value}")

        if approver_id and not self._employees.get_by_id(approver_id):
            raise NotFoundError("Approver not found")
        decided_by = approver_id or context.employee_id
        rehire = bool(eligible_for_rehire) if decision == ResignationStatus.APPROVED else None

        now = now or now_utc()
        ok = self._resignations.decide(
            resignation_id=resignation_id,
            expected=ResignationStatus.PENDING,
            status=decision,
            decision_notes=notes,
            decided_by_id=decided_by,
            eligible_for_rehire=rehire,
            decided_at=now,
        )
        if not ok:
            raise ConflictError("Resignation was decided by another request")

        logger.info("Resignation %s %s by %s", resignation_id, decision.value, decided_by)
        return replace(
            current,
            status=decision,
            decision_notes=notes,
            decided_by_id=decided_by,
            eligible_for_rehire=rehire,
            decided_at=now,
            updated_at=now,
        )

    def get_resignation(self, context: PermissionContext, resignation_id: UUID) -> dict:
        req = self._require_request(resignation_id)
        authorize_self_or(policies.RESIGNATIONS_READ, context, employee_id=req.employee_id, action="view resignations")
        return self.view(req)

    def list_resignations(
        self,
        context: PermissionContext,
        *,
        status: ResignationStatus | int | str | None = None,
        employee_id: Optional[UUID] = None,
    ) -> list[dict]:
        if employee_id is None or not context.is_employee(employee_id):
            authorize(policies.RESIGNATIONS_READ, context, action="view resignations")
        status = ResignationStatus.parse(status) if status is not None else None

        rows = self._resignations.list_requests(status=status, employee_id=employee_id, limit=DEFAULT_LIST_LIMIT)
        people = self._employees.get_many({r.employee_id for r in rows})
        names = self._employees.names_by_ids({r.decided_by_id for r in rows if r.decided_by_id})
        return [self._to_view(r, people.get(r.employee_id), names) for r in rows]

    def view(self, req: ResignationRequest) -> dict:
        people = self._employees.get_many([req.employee_id])
        names = self._employees.names_by_ids([req.decided_by_id] if req.decided_by_id else [])
        return self._to_view(req, people.get(req.employee_id), names)

    @staticmethod
    def _to_view(r: ResignationRequest, employee: Optional[Employee], names: Mapping[UUID, str]) -> dict:
        return {
            "id": str(r.resignation_id),
            "employeeId": str(r.employee_id),
            "employeeName": employee.full_name if employee else None,
            "employeeEmail": employee.work_email if employee else None,
            "effectiveDate": format_date(r.effective_date),
            "reason": r.reason,
            "status": r.status.value,
            "submittedAt": format_datetime(r.submitted_at),
            "decisionNotes": r.decision_notes,
            "decidedByEmployeeId": str(r.decided_by_id) if r.decided_by_id else None,
            "decidedByName": names.get(r.decided_by_id) if r.decided_by_id else None,
            "decidedAt": format_datetime(r.decided_at),
            "eligibleForRehire": r.eligible_for_rehire,
            "updatedAt": format_datetime(r.updated_at),
        }
