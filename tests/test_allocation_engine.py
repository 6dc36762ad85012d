from datetime import date

import pytest

from core.exceptions import NotFoundError, ValidationError
from core.models import AllocationType, BillingModel, Client, Project, WorkSession
from core.services.allocation import (
    allocate,
    recompute_client_rollups,
    recompute_project_totals,
    recompute_retainer_remaining,
    reverse_allocation,
    validate_allocation_request,
)


def _retainer_client(total=20.0, remaining=None, rate=100.0) -> Client:
    return Client.create(
        name="Northwind",
        model=BillingModel.RETAINER,
        rate=rate,
        retainer_total=total,
        retainer_remaining=remaining,
    )


def _session(client_id, duration, *, allocation=AllocationType.GENERAL, project_id=None, billable=True, revenue=0.0, on=None):
    return WorkSession.create(
        client_id=client_id,
        date=on or date(2024, 3, 4),
        duration=duration,
        revenue=revenue,
        billable=billable,
        allocation_type=allocation,
        project_id=project_id,
    )


def test_billable_retainer_session_decrements_remaining_hours():
    client = _retainer_client(total=20, remaining=20)
    s = _session(client.id, 5, allocation=AllocationType.RETAINER, revenue=500)

    result = allocate(s, client, [])

    assert result.client_patch is not None
    assert result.client_patch.retainer_remaining == 15
    assert result.project_patch is None
    assert result.skipped == ()


def test_retainer_decrement_never_goes_negative():
    client = _retainer_client(total=20, remaining=3)
    s = _session(client.id, 5, allocation=AllocationType.RETAINER)

    result = allocate(s, client, [])

    assert result.client_patch.retainer_remaining == 0


def test_non_billable_retainer_session_is_tracked_not_deducted():
    client = _retainer_client(total=20, remaining=20)
    s = _session(client.id, 4, allocation=AllocationType.RETAINER, billable=False)

    result = allocate(s, client, [])

    assert not result.has_patches
    assert result.skipped == ()


@pytest.mark.parametrize("billable", [True, False])
def test_project_session_rolls_up_hours_and_revenue_regardless_of_billability(billable):
    client = Client.create(name="Acme", model=BillingModel.PROJECT, rate=100)
    project = Project.create(client_id=client.id, name="Site rebuild", estimated_hours=40, total_value=4000)
    project.hours = 10
    project.revenue = 1000
    s = _session(client.id, 3, allocation=AllocationType.PROJECT, project_id=project.id, billable=billable, revenue=300 if billable else 0)

    result = allocate(s, client, [project])

    assert result.client_patch is None
    assert result.project_patch.project_id == project.id
    assert result.project_patch.hours == 13
    assert result.project_patch.revenue == (1300 if billable else 1000)


@pytest.mark.parametrize("billable", [True, False])
def test_general_session_produces_no_patch(billable):
    client = _retainer_client()
    s = _session(client.id, 2, billable=billable, revenue=200 if billable else 0)

    result = allocate(s, client, [])

    assert result.client_patch is None
    assert result.project_patch is None


def test_missing_project_is_skipped_not_raised():
    client = Client.create(name="Acme", model=BillingModel.HOURLY, rate=80)
    s = _session(client.id, 1, allocation=AllocationType.PROJECT, project_id="gone")

    result = allocate(s, client, [])

    assert not result.has_patches
    assert len(result.skipped) == 1
    assert "gone" in result.skipped[0]


def test_missing_retainer_client_is_skipped_not_raised():
    s = _session("ghost", 1, allocation=AllocationType.RETAINER)

    result = allocate(s, None, [])

    assert not result.has_patches
    assert "ghost" in result.skipped[0]


def test_reverse_allocation_returns_retainer_hours_clamped_to_total():
    client = _retainer_client(total=20, remaining=18)
    s = _session(client.id, 5, allocation=AllocationType.RETAINER)

    result = reverse_allocation(s, client, [])

    assert result.client_patch.retainer_remaining == 20


def test_reverse_allocation_only_credits_hours_taken_before_the_overage():
    client = _retainer_client(total=20, remaining=0)
    early = _session(client.id, 5, allocation=AllocationType.RETAINER)
    big = _session(client.id, 25, allocation=AllocationType.RETAINER)

    assert reverse_allocation(early, client, [], [early, big]).client_patch.retainer_remaining == 0
    assert reverse_allocation(big, client, [], [early, big]).client_patch.retainer_remaining == 15

    over = _session(client.id, 15, allocation=AllocationType.RETAINER)
    other = _session(client.id, 15, allocation=AllocationType.RETAINER)
    assert reverse_allocation(over, client, [], [over, other]).client_patch.retainer_remaining == 5


def test_reverse_allocation_floors_project_totals_at_zero():
    client = Client.create(name="Acme", model=BillingModel.PROJECT, rate=100)
    project = Project.create(client_id=client.id, name="Audit")
    project.hours = 1
    project.revenue = 50
    s = _session(client.id, 3, allocation=AllocationType.PROJECT, project_id=project.id, revenue=300)

    result = reverse_allocation(s, client, [project])

    assert result.project_patch.hours == 0
    assert result.project_patch.revenue == 0


def test_validation_rejects_bad_allocation_requests():
    hourly = Client.create(name="Hourly Co", model=BillingModel.HOURLY, rate=90)
    other = Client.create(name="Other Co", model=BillingModel.HOURLY, rate=90)
    foreign_project = Project.create(client_id=other.id, name="Not yours")

    with pytest.raises(NotFoundError) as exc_missing:
        validate_allocation_request(_session(hourly.id, 1), None, [])
    assert exc_missing.value.code == "CLIENT_NOT_FOUND"

    with pytest.raises(ValidationError) as exc_retainer:
        validate_allocation_request(_session(hourly.id, 1, allocation=AllocationType.RETAINER), hourly, [])
    assert exc_retainer.value.code == "SESSION_RETAINER_INVALID"

    with pytest.raises(ValidationError) as exc_unknown:
        validate_allocation_request(
            _session(hourly.id, 1, allocation=AllocationType.PROJECT, project_id="nope"), hourly, []
        )
    assert exc_unknown.value.code == "PROJECT_NOT_FOUND"

    with pytest.raises(ValidationError) as exc_foreign:
        validate_allocation_request(
            _session(hourly.id, 1, allocation=AllocationType.PROJECT, project_id=foreign_project.id),
            hourly,
            [foreign_project],
        )
    assert exc_foreign.value.code == "SESSION_PROJECT_CLIENT_MISMATCH"

    with pytest.raises(ValidationError) as exc_mismatch:
        validate_allocation_request(_session(other.id, 1), hourly, [])
    assert exc_mismatch.value.code == "SESSION_CLIENT_MISMATCH"


def test_session_construction_rejects_unknown_allocation_shapes():
    with pytest.raises(ValidationError) as exc_required:
        _session("c1", 1, allocation=AllocationType.PROJECT)
    assert exc_required.value.code == "SESSION_PROJECT_REQUIRED"

    with pytest.raises(ValidationError) as exc_unexpected:
        _session("c1", 1, allocation=AllocationType.RETAINER, project_id="p1")
    assert exc_unexpected.value.code == "SESSION_PROJECT_UNEXPECTED"

    with pytest.raises(ValidationError) as exc_duration:
        _session("c1", 0)
    assert exc_duration.value.code == "SESSION_DURATION_INVALID"

    with pytest.raises(ValueError):
        _session("c1", 1, allocation="overtime")


def test_reconciliation_recomputes_totals_from_history():
    client = _retainer_client(total=20, remaining=20)
    project_client = Client.create(name="Acme", model=BillingModel.PROJECT, rate=100)
    project = Project.create(client_id=project_client.id, name="Rebuild")
    sessions = [
        _session(client.id, 5, allocation=AllocationType.RETAINER, revenue=500, on=date(2024, 2, 27)),
        _session(client.id, 2, allocation=AllocationType.RETAINER, revenue=200, on=date(2024, 3, 5)),
        _session(client.id, 9, allocation=AllocationType.RETAINER, billable=False, on=date(2024, 3, 6)),
        _session(project_client.id, 3, allocation=AllocationType.PROJECT, project_id=project.id, revenue=300),
        _session(project_client.id, 1, allocation=AllocationType.PROJECT, project_id=project.id, billable=False),
    ]

    assert recompute_retainer_remaining(client, sessions).retainer_remaining == 13
    assert recompute_retainer_remaining(client, sessions, cycle_start=date(2024, 3, 1)).retainer_remaining == 18
    assert recompute_retainer_remaining(project_client, sessions) is None

    totals = recompute_project_totals(project, sessions)
    assert (totals.hours, totals.revenue) == (4, 300)

    rollup = recompute_client_rollups(client, sessions, as_of=date(2024, 3, 20))
    assert rollup.hours_logged == 16
    assert rollup.lifetime_revenue == 700
    assert rollup.monthly_earnings == 200
    assert rollup.last_session_date == date(2024, 3, 6)
    assert rollup.true_hourly_rate == 100
