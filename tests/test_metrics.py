from datetime import date

import pytest

from core.models import BillingModel, Client, ClientStatus, WorkSession
from core.services.metrics import compute_metrics
from core.services.metrics.breakdowns import UNCATEGORIZED
from core.services.metrics.rankings import DEFAULT_UTILIZATION
from core.services.common.periods import in_month, month_bounds


def _client(name, **kwargs):
    client = Client.create(name=name, **kwargs)
    client.last_session_date = date(2024, 3, 1)
    return client


def _session(client, duration, revenue, *, billable=True, tags=None, on=date(2024, 3, 4)):
    return WorkSession.create(
        client_id=client.id,
        date=on,
        duration=duration,
        revenue=revenue,
        billable=billable,
        work_tags=tags,
        client_name=client.name,
    )


def test_zero_billable_hours_gives_zero_average_rate():
    client = _client("Pro Bono", rate=0)
    snap = compute_metrics([_session(client, 3, 0, billable=False)], [client], 0.7)

    assert snap.billable_hours == 0
    assert snap.avg_hourly_rate == 0
    assert snap.performance.effective_rate.value == "0/hr"


def test_empty_workspace_snapshot_is_all_zero():
    snap = compute_metrics([], [], 0.721)

    assert snap.total_revenue == 0
    assert snap.top_client is None
    assert snap.client_rankings == []
    assert snap.performance.concentration.value == "0%"
    assert snap.performance.utilization.amount == 0
    assert snap.performance.net_margin.value == "72%"


def test_totals_and_net_revenue():
    a = _client("Alpha", rate=100)
    b = _client("Beta", rate=50)
    sessions = [
        _session(a, 2, 200),
        _session(a, 1, 0, billable=False),
        _session(b, 4, 200),
    ]

    snap = compute_metrics(sessions, [a, b], 0.721)

    assert snap.total_revenue == 400
    assert snap.total_hours == 7
    assert snap.billable_hours == 6
    assert snap.avg_hourly_rate == pytest.approx(400 / 6)
    assert snap.net_revenue == pytest.approx(288.4)
    assert snap.client_count == 2
    assert snap.top_client.name == "Alpha"


def test_scenario_two_clients_concentration_warns_at_eighty_percent():
    big = _client("Big Co", rate=100)
    small = _client("Small Co", rate=100)
    sessions = [_session(big, 8, 800), _session(small, 2, 200)]

    snap = compute_metrics(sessions, [small, big], 0.75)

    assert snap.total_revenue == 1000
    assert snap.client_rankings[0].name == "Big Co"
    assert snap.client_rankings[0].share == 80
    assert snap.performance.concentration.value == "80%"
    assert snap.performance.concentration.warn is True


@pytest.mark.parametrize(
    "revenues, expected_share, expected_warn",
    [
        ([600, 400], 60, True),
        ([400, 350, 250], 40, False),
    ],
)
def test_concentration_warning_threshold(revenues, expected_share, expected_warn):
    clients = [_client(f"Client {i}", rate=100) for i in range(len(revenues))]
    sessions = [_session(c, r / 100, r) for c, r in zip(clients, revenues)]

    snap = compute_metrics(sessions, clients, 0.75)

    assert snap.performance.concentration.amount == expected_share
    assert snap.performance.concentration.warn is expected_warn


def test_rankings_skip_inactive_and_zero_revenue_clients():
    active = _client("Active", rate=100)
    archived = _client("Archived", rate=100, status=ClientStatus.ARCHIVED)
    idle = _client("Idle", rate=100)
    sessions = [_session(active, 1, 100), _session(archived, 5, 500), _session(idle, 2, 0, billable=False)]

    snap = compute_metrics(sessions, [active, archived, idle], 0.75)

    assert [r.name for r in snap.client_rankings] == ["Active"]
    assert snap.client_rankings[0].share == 17
    assert snap.client_rankings[0].utilization == DEFAULT_UTILIZATION


def test_retainer_utilization_feeds_rankings_and_mean():
    retainer = _client("Retained", model=BillingModel.RETAINER, rate=100, retainer_total=20, retainer_remaining=5)
    hourly = _client("Hourly", rate=100)
    sessions = [_session(retainer, 15, 1500), _session(hourly, 5, 500)]

    snap = compute_metrics(sessions, [retainer, hourly], 0.75)

    by_name = {r.name: r for r in snap.client_rankings}
    assert by_name["Retained"].utilization == 75
    assert by_name["Hourly"].utilization == DEFAULT_UTILIZATION
    assert snap.performance.utilization.value == "75%"


@pytest.mark.parametrize(
    "remaining, expected_impact",
    [
        (7, None),
        (6, "Medium"),
        (4, "Medium"),
        (3, "High"),
        (0, "High"),
    ],
)
def test_retainer_forward_signal_thresholds(remaining, expected_impact):
    client = _client("Retained", model=BillingModel.RETAINER, rate=100, retainer_total=20, retainer_remaining=remaining)

    snap = compute_metrics([], [client], 0.75)

    overage_signals = [s for s in snap.forward_signals if s.type == "overage"]
    if expected_impact is None:
        assert overage_signals == []
    else:
        assert len(overage_signals) == 1
        assert overage_signals[0].impact == expected_impact


def test_active_client_without_sessions_gets_one_inactive_signal():
    client = Client.create(name="Fresh", rate=100)
    assert client.last_session_date is None

    snap = compute_metrics([], [client], 0.75)

    assert len(snap.forward_signals) == 1
    signal = snap.forward_signals[0]
    assert signal.type == "inactive"
    assert signal.impact == "Low"
    assert signal.client_id == client.id


def test_prospects_are_flagged_and_signal_ids_are_sequential():
    retained = _client("Retained", model=BillingModel.RETAINER, rate=100, retainer_total=10, retainer_remaining=1)
    prospect = Client.create(name="Maybe", rate=100, status=ClientStatus.PROSPECT)
    archived = Client.create(name="Gone", rate=100, status=ClientStatus.ARCHIVED)

    snap = compute_metrics([], [retained, prospect, archived], 0.75)

    assert [(s.id, s.type) for s in snap.forward_signals] == [("sig-1", "overage"), ("sig-2", "inactive")]


def test_breakdowns_group_by_client_id_and_resolve_current_name():
    client = _client("Old Name", rate=100)
    sessions = [_session(client, 1, 100), _session(client, 2, 200)]
    client.name = "New Name"
    orphan = WorkSession.create(client_id="deleted", date=date(2024, 3, 1), duration=1, revenue=50, client_name="Former")

    snap = compute_metrics(sessions + [orphan], [client], 0.75)

    assert [(r.name, r.revenue) for r in snap.revenue_by_client] == [("New Name", 300), ("Former", 50)]


def test_tag_breakdowns_credit_full_duration_and_split_time_allocation():
    client = _client("Tagged", rate=100)
    sessions = [
        _session(client, 3, 300, tags=["design", "dev"]),
        _session(client, 1, 100),
    ]

    snap = compute_metrics(sessions, [client], 0.75)

    hours = {row.name: row.hours for row in snap.hours_by_category}
    assert hours == {"design": 3, "dev": 3}

    allocation = {row.category: row.hours for row in snap.time_allocation}
    assert allocation == {"design": 1.5, "dev": 1.5, UNCATEGORIZED: 1}
    assert {row.category: row.percentage for row in snap.time_allocation}[UNCATEGORIZED] == 25


def test_monthly_revenue_is_ordered_and_as_of_filters_future_sessions():
    client = _client("Monthly", rate=100)
    sessions = [
        _session(client, 1, 100, on=date(2024, 3, 2)),
        _session(client, 2, 200, on=date(2024, 1, 15)),
        _session(client, 1, 100, on=date(2024, 1, 20)),
        _session(client, 5, 500, on=date(2024, 4, 1)),
    ]

    snap = compute_metrics(sessions, [client], 0.75, as_of=date(2024, 3, 31))

    assert snap.total_revenue == 400
    assert [(row.revenue, row.hours) for row in snap.monthly_revenue] == [(300, 3), (100, 1)]


def test_compute_metrics_does_not_mutate_inputs():
    client = _client("Stable", rate=100)
    sessions = [_session(client, 1, 100, tags=["ops"])]
    before = (list(sessions[0].work_tags), client.retainer_remaining, client.name)

    compute_metrics(sessions, [client], 0.75)
    compute_metrics(sessions, [client], 0.75)

    assert (list(sessions[0].work_tags), client.retainer_remaining, client.name) == before


def test_month_bounds_cover_the_whole_calendar_month():
    assert month_bounds(date(2024, 2, 10)) == ("2024-02", date(2024, 2, 1), date(2024, 2, 29))
    assert in_month(date(2024, 12, 31), date(2024, 12, 1))
    assert not in_month(date(2025, 1, 1), date(2024, 12, 31))
    assert not in_month(None, date(2024, 12, 31))
