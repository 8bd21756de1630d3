from __future__ import annotations

import threading
from datetime import date, datetime, timezone
from uuid import uuid4

import pytest

from src.hr_workflow.hr_workflow.auth.context import PermissionContext
from src.hr_workflow.hr_workflow.core.enums import LeaveStatus, LeaveType
from src.hr_workflow.hr_workflow.core.exceptions import (
    AuthorizationError,
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)

NOW = datetime(2026, 4, 1, 12, 0, tzinfo=timezone.utc)


def _request(container, ctx, employee, **overrides):
    kwargs = dict(
        employee_id=employee.employee_id,
        leave_type="Vacation",
        start_date=date(2026, 5, 4),
        end_date=date(2026, 5, 8),
        reason="Trip",
        now=NOW,
    )
    kwargs.update(overrides)
    return container.leave_service.create_leave(ctx, **kwargs)


def test_employee_files_pending_request(container, alice):
    me = PermissionContext.of(employee_id=alice.employee_id)
    req = _request(container, me, alice)

    assert req.status is LeaveStatus.PENDING
    assert req.leave_type is LeaveType.VACATION
    assert req.days == 5
    assert req.approver_id is None


def test_status_from_unprivileged_caller_is_ignored(container, alice):
    me = PermissionContext.of(employee_id=alice.employee_id)
    req = _request(container, me, alice, status="Approved")
    assert req.status is LeaveStatus.PENDING


def test_privileged_status_records_approver(container, hr, alice):
    req = _request(container, hr, alice, status=1)
    assert req.status is LeaveStatus.APPROVED
    assert req.approver_id == hr.employee_id
    assert req.decided_at == NOW


def test_end_before_start_is_invalid(container, hr, alice):
    with pytest.raises(ValidationError):
        _request(container, hr, alice, start_date=date(2026, 5, 8), end_date=date(2026, 5, 4))


def test_request_for_other_employee_requires_manage(container, alice, bob):
    me = PermissionContext.of(employee_id=alice.employee_id)
    with pytest.raises(AuthorizationError):
        _request(container, me, bob)


def test_unknown_employee(container, hr, alice):
    with pytest.raises(NotFoundError):
        _request(container, hr, alice, employee_id=uuid4())


def test_approve_pending(container, repos, hr, alice):
    req = _request(container, hr, alice)
    approved = container.leave_service.approve(hr, req.request_id, now=NOW)

    stored = repos.leaves.get_by_id(req.request_id)
    assert stored.status is LeaveStatus.APPROVED
    assert stored.approver_id == hr.employee_id
    assert stored.decided_at == NOW
    assert approved == stored


def test_explicit_approver_must_exist(container, hr, alice, bob):
    req = _request(container, hr, alice)
    with pytest.raises(NotFoundError):
        container.leave_service.approve(hr, req.request_id, approver_id=uuid4())

    approved = container.leave_service.approve(hr, req.request_id, approver_id=bob.employee_id)
    assert approved.approver_id == bob.employee_id


def test_approving_decided_request_is_invalid_state(container, repos, hr, alice):
    req = _request(container, hr, alice)
    container.leave_service.reject(hr, req.request_id, now=NOW)
    before = repos.leaves.get_by_id(req.request_id)

    with pytest.raises(InvalidStateError):
        container.leave_service.approve(hr, req.request_id)
    assert repos.leaves.get_by_id(req.request_id) == before


def test_employee_cannot_approve_own_request(container, repos, alice):
    me = PermissionContext.of(employee_id=alice.employee_id)
    req = _request(container, me, alice)
    before = repos.leaves.writes

    with pytest.raises(AuthorizationError):
        container.leave_service.approve(me, req.request_id)
    assert repos.leaves.writes == before


def test_owner_can_cancel_pending(container, repos, alice):
    me = PermissionContext.of(employee_id=alice.employee_id)
    req = _request(container, me, alice)

    container.leave_service.cancel(me, req.request_id, now=NOW)
    assert repos.leaves.get_by_id(req.request_id).status is LeaveStatus.CANCELLED


def test_other_employee_cannot_cancel(container, alice, bob):
    req = _request(container, PermissionContext.of(employee_id=alice.employee_id), alice)
    with pytest.raises(AuthorizationError):
        container.leave_service.cancel(PermissionContext.of(employee_id=bob.employee_id), req.request_id)


def test_concurrent_approve_and_reject_single_winner(container, repos, hr, alice):
    req = _request(container, hr, alice)
    svc = container.leave_service
    barrier = threading.Barrier(2)
    outcomes: list[object] = []

    def decide(op):
        barrier.wait()
        try:
            outcomes.append(op(hr, req.request_id))
        except InvalidStateError as e:
            outcomes.append(e)

    threads = [threading.Thread(target=decide, args=(op,)) for op in (svc.approve, svc.reject)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    winners = [o for o in outcomes if not isinstance(o, Exception)]
    assert len(winners) == 1
    assert repos.leaves.get_by_id(req.request_id).status is winners[0].status


def test_lost_race_surfaces_conflict(container, repos, hr, alice):
    req = _request(container, hr, alice)
    original = repos.leaves.transition

    def racing_transition(**kw):
        original(**{**kw, "status": LeaveStatus.CANCELLED})
        return original(**kw)

    repos.leaves.transition = racing_transition
    with pytest.raises(ConflictError):
        container.leave_service.approve(hr, req.request_id)
    assert repos.leaves.get_by_id(req.request_id).status is LeaveStatus.CANCELLED


def test_update_pending_request(container, repos, alice):
    me = PermissionContext.of(employee_id=alice.employee_id)
    req = _request(container, me, alice)

    container.leave_service.update_leave(me, req.request_id, {"end_date": date(2026, 5, 11), "leave_type": "Sick"}, now=NOW)
    stored = repos.leaves.get_by_id(req.request_id)
    assert stored.end_date == date(2026, 5, 11)
    assert stored.leave_type is LeaveType.SICK


def test_update_decided_request_is_invalid_state(container, hr, alice):
    req = _request(container, hr, alice)
    container.leave_service.approve(hr, req.request_id)
    with pytest.raises(InvalidStateError):
        container.leave_service.update_leave(hr, req.request_id, {"reason": "changed"})


def test_update_rejects_inverted_range(container, hr, alice):
    req = _request(container, hr, alice)
    with pytest.raises(ValidationError):
        container.leave_service.update_leave(hr, req.request_id, {"end_date": date(2026, 5, 1)})


def test_delete_requires_delete_permission(container, repos, hr, alice):
    req = _request(container, hr, alice)
    with pytest.raises(AuthorizationError):
        container.leave_service.delete_leave(PermissionContext.of(permissions=("hr.leaves.read",)), req.request_id)

    container.leave_service.delete_leave(PermissionContext.of(permissions=("hr.leaves.delete",)), req.request_id)
    assert repos.leaves.get_by_id(req.request_id) is None
    with pytest.raises(NotFoundError):
        container.leave_service.delete_leave(hr, req.request_id)


def test_list_pending_only_with_names(container, hr, alice, bob):
    first = _request(container, hr, alice)
    _request(container, hr, bob)
    container.leave_service.approve(hr, first.request_id)

    pending = container.leave_service.list_leaves(hr, pending_only=True)
    assert [v["employeeName"] for v in pending] == ["Bob Jones"]

    mine = container.leave_service.list_leaves(PermissionContext.of(employee_id=alice.employee_id), employee_id=alice.employee_id)
    assert mine[0]["approvedByName"] == "Harriet Reyes"
    assert mine[0]["status"] == "Approved"
