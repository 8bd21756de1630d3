from __future__ import annotations

import threading
from datetime import date, datetime, timezone
from uuid import uuid4

import pytest

from src.hr_workflow.hr_workflow.auth.context import PermissionContext
from src.hr_workflow.hr_workflow.core.enums import EmploymentStatus, ResignationStatus
from src.hr_workflow.hr_workflow.core.exceptions import (
    AuthorizationError,
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from tests.fakes import seed_employee

NOW = datetime(2026, 4, 1, 12, 0, tzinfo=timezone.utc)
EFFECTIVE = date(2026, 4, 30)


def _submit(container, employee, ctx=None, **kw):
    ctx = ctx or PermissionContext.of(employee_id=employee.employee_id)
    return container.resignation_service.submit(
        ctx, employee_id=employee.employee_id, effective_date=EFFECTIVE, reason="New job", now=NOW, **kw
    )


def test_submit_creates_pending(container, alice):
    req = _submit(container, alice)
    assert req.status is ResignationStatus.PENDING
    assert req.decided_at is None
    assert req.eligible_for_rehire is None


def test_submit_requires_effective_date(container, alice):
    me = PermissionContext.of(employee_id=alice.employee_id)
    with pytest.raises(ValidationError):
        container.resignation_service.submit(me, employee_id=alice.employee_id, effective_date=None)


def test_submit_for_other_employee_denied(container, alice, bob):
    with pytest.raises(AuthorizationError):
        _submit(container, bob, ctx=PermissionContext.of(employee_id=alice.employee_id))


def test_only_one_pending_per_employee(container, alice):
    _submit(container, alice)
    with pytest.raises(InvalidStateError):
        _submit(container, alice)


def test_exited_employee_cannot_submit(container, repos, hr, dept):
    gone = seed_employee(repos, dept, "Gone Person", status=EmploymentStatus.TERMINATED)
    with pytest.raises(InvalidStateError):
        _submit(container, gone, ctx=hr)


def test_unknown_employee(container, hr):
    with pytest.raises(NotFoundError):
        container.resignation_service.submit(hr, employee_id=uuid4(), effective_date=EFFECTIVE)


def test_approve_records_rehire_flag(container, repos, hr, alice):
    req = _submit(container, alice)
    decided = container.resignation_service.decide(
        hr, req.resignation_id, "Approve", notes="Good luck", eligible_for_rehire=True, now=NOW
    )

    stored = repos.resignations.get_by_id(req.resignation_id)
    assert stored == decided
    assert stored.status is ResignationStatus.APPROVED
    assert stored.eligible_for_rehire is True
    assert stored.decided_by_id == hr.employee_id
    assert stored.decision_notes == "Good luck"


def test_approve_defaults_rehire_to_false(container, hr, alice):
    req = _submit(container, alice)
    decided = container.resignation_service.decide(hr, req.resignation_id, 1)
    assert decided.eligible_for_rehire is False


def test_reject_leaves_rehire_unset(container, repos, hr, alice):
    req = _submit(container, alice)
    container.resignation_service.decide(hr, req.resignation_id, "Rejected", eligible_for_rehire=True)
    assert repos.resignations.get_by_id(req.resignation_id).eligible_for_rehire is None


def test_approval_does_not_touch_employee(container, repos, hr, alice):
    req = _submit(container, alice)
    container.resignation_service.decide(hr, req.resignation_id, "Approved")
    assert repos.employees.get_by_id(alice.employee_id).status is EmploymentStatus.ACTIVE


@pytest.mark.parametrize("decision", ["Pending", 0, "maybe", 7])
def test_decision_must_be_terminal(container, hr, alice, decision):
    req = _submit(container, alice)
    with pytest.raises(ValidationError):
        container.resignation_service.decide(hr, req.resignation_id, decision)


def test_decide_twice_is_invalid_state(container, repos, hr, alice):
    req = _submit(container, alice)
    container.resignation_service.decide(hr, req.resignation_id, "Approved")
    before = repos.resignations.get_by_id(req.resignation_id)

    with pytest.raises(InvalidStateError):
        container.resignation_service.decide(hr, req.resignation_id, "Rejected")
    assert repos.resignations.get_by_id(req.resignation_id) == before


def test_employee_cannot_decide(container, repos, alice):
    req = _submit(container, alice)
    before = repos.resignations.writes
    with pytest.raises(AuthorizationError):
        container.resignation_service.decide(PermissionContext.of(employee_id=alice.employee_id), req.resignation_id, "Approved")
    assert repos.resignations.writes == before


def test_concurrent_deciders_exactly_one_wins(container, repos, hr, alice):
    req = _submit(container, alice)
    svc = container.resignation_service
    barrier = threading.Barrier(2)
    outcomes: list[object] = []

    def decide(decision):
        barrier.wait()
        try:
            outcomes.append(svc.decide(hr, req.resignation_id, decision))
        except InvalidStateError as e:
            outcomes.append(e)

    threads = [threading.Thread(target=decide, args=(d,)) for d in ("Approved", "Rejected")]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    winners = [o for o in outcomes if not isinstance(o, Exception)]
    assert len(winners) == 1
    assert repos.resignations.get_by_id(req.resignation_id).status is winners[0].status


def test_lost_race_surfaces_conflict(container, repos, hr, alice):
    req = _submit(container, alice)
    original = repos.resignations.decide

    def racing_decide(**kw):
        original(**{**kw, "status": ResignationStatus.REJECTED, "eligible_for_rehire": None})
        return original(**kw)

    repos.resignations.decide = racing_decide
    with pytest.raises(ConflictError):
        container.resignation_service.decide(hr, req.resignation_id, "Approved")


def test_update_while_pending(container, repos, alice):
    me = PermissionContext.of(employee_id=alice.employee_id)
    req = _submit(container, alice)
    container.resignation_service.update(me, req.resignation_id, {"effective_date": date(2026, 5, 15)}, now=NOW)
    assert repos.resignations.get_by_id(req.resignation_id).effective_date == date(2026, 5, 15)


def test_update_after_decision_is_invalid_state(container, hr, alice):
    req = _submit(container, alice)
    container.resignation_service.decide(hr, req.resignation_id, "Rejected")
    with pytest.raises(InvalidStateError):
        container.resignation_service.update(hr, req.resignation_id, {"reason": "Changed my mind"})


def test_list_and_view(container, hr, alice, bob):
    first = _submit(container, alice)
    _submit(container, bob)
    container.resignation_service.decide(hr, first.resignation_id, "Approved")

    pending = container.resignation_service.list_resignations(hr, status="Pending")
    assert [v["employeeName"] for v in pending] == ["Bob Jones"]

    view = container.resignation_service.get_resignation(hr, first.resignation_id)
    assert view["employeeEmail"] == alice.work_email
    assert view["decidedByName"] == "Harriet Reyes"
    assert view["status"] == "Approved"


def test_concurrent_submits_leave_one_pending(container, repos, alice):
    barrier = threading.Barrier(2)
    outcomes: list[object] = []

    def submit():
        barrier.wait()
        try:
            outcomes.append(_submit(container, alice))
        except InvalidStateError as e:
            outcomes.append(e)

    threads = [threading.Thread(target=submit) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len([o for o in outcomes if not isinstance(o, Exception)]) == 1
    assert len(repos.resignations.list_requests(status=ResignationStatus.PENDING)) == 1


def test_pending_check_race_is_conflict(container, repos, alice):
    _submit(container, alice)
    # The second submit reads before the first one is visible.
    repos.resignations.has_pending = lambda employee_id: False

    with pytest.raises(ConflictError, match="pending resignation"):
        _submit(container, alice)
    assert len(repos.resignations.list_requests(status=ResignationStatus.PENDING)) == 1


def test_list_resolves_employees_in_one_lookup(container, repos, hr, alice, bob):
    _submit(container, alice)
    _submit(container, bob)

    def no_single_lookups(employee_id):
        raise AssertionError("per-row employee lookup")

    repos.employees.get_by_id = no_single_lookups
    views = container.resignation_service.list_resignations(hr)
    assert {v["employeeEmail"] for v in views} == {alice.work_email, bob.work_email}
