from __future__ import annotations

from datetime import date
from typing import Iterable

from core.models import Client, WorkSession
from core.services.metrics.breakdowns import (
    build_hours_by_category,
    build_monthly_revenue,
    build_revenue_by_client,
    build_time_allocation,
)
from core.services.metrics.helpers import client_index
from core.services.metrics.models import MetricsSnapshot
from core.services.metrics.performance import build_performance
from core.services.metrics.rankings import build_client_rankings
from core.services.metrics.signals import build_forward_signals


def compute_metrics(
    sessions: Iterable[WorkSession],
    clients: Iterable[Client],
    net_multiplier: float,
    *,
    as_of: date | None = None,
) -> MetricsSnapshot:
    """Derive the full analytics snapshot from the session and client collections.

    Pure and deterministic: no I/O, inputs are not mutated. Every pass is
    O(sessions + clients).
    """
    sessions = list(sessions)
    clients = list(clients)
    if as_of is not None:
        sessions = [s for s in sessions if s.date is None or s.date <= as_of]
    clients_by_id = client_index(clients)

    total_revenue = sum(float(s.revenue or 0.0) for s in sessions)
    total_hours = sum(float(s.duration or 0.0) for s in sessions)
    billable_hours = sum(float(s.duration or 0.0) for s in sessions if s.billable)
    avg_hourly_rate = total_revenue / billable_hours if billable_hours > 0 else 0.0

    revenue_by_client = build_revenue_by_client(sessions, clients_by_id, total_revenue)
    rankings = build_client_rankings(sessions, clients, total_revenue)

    return MetricsSnapshot(
        total_revenue=total_revenue,
        total_hours=total_hours,
        billable_hours=billable_hours,
        avg_hourly_rate=avg_hourly_rate,
        net_revenue=total_revenue * net_multiplier,
        net_multiplier=net_multiplier,
        client_count=sum(1 for c in clients if c.is_active),
        top_client=(revenue_by_client[0] if revenue_by_client else None),
        revenue_by_client=revenue_by_client,
        hours_by_category=build_hours_by_category(sessions, total_hours),
        monthly_revenue=build_monthly_revenue(sessions),
        client_rankings=rankings,
        time_allocation=build_time_allocation(sessions, total_hours),
        performance=build_performance(rankings, avg_hourly_rate, net_multiplier),
        forward_signals=build_forward_signals(clients),
    )


__all__ = ["compute_metrics"]
