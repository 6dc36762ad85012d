from __future__ import annotations

from datetime import date
from typing import Iterable

from core.models import Client, WorkSession
from core.services.common.periods import month_bounds
from core.services.metrics.helpers import percentage, resolve_client_name, rounded_pct
from core.services.metrics.models import (
    CategoryHours,
    MonthlyRevenueRow,
    RevenueShare,
    TimeAllocationRow,
)

UNCATEGORIZED = "Uncategorized"


def build_revenue_by_client(
    sessions: Iterable[WorkSession],
    clients_by_id: dict[str, Client],
    total_revenue: float,
) -> list[RevenueShare]:
    buckets: dict[str, float] = {}
    names: dict[str, str] = {}
    for s in sessions:
        key = str(s.client_id)
        buckets[key] = buckets.get(key, 0.0) + float(s.revenue or 0.0)
        names.setdefault(key, resolve_client_name(s, clients_by_id))

    rows = [
        RevenueShare(
            client_id=key,
            name=names[key],
            revenue=revenue,
            percentage=percentage(revenue, total_revenue),
        )
        for key, revenue in buckets.items()
    ]
    rows.sort(key=lambda row: (-row.revenue, row.name.lower()))
    return rows


def build_hours_by_category(
    sessions: Iterable[WorkSession],
    total_hours: float,
) -> list[CategoryHours]:
    """Each tag on a session is credited with the session's full duration."""
    buckets: dict[str, float] = {}
    for s in sessions:
        for tag in s.work_tags or []:
            buckets[tag] = buckets.get(tag, 0.0) + float(s.duration or 0.0)

    rows = [
        CategoryHours(name=name, hours=hours, percentage=percentage(hours, total_hours))
        for name, hours in buckets.items()
    ]
    rows.sort(key=lambda row: (-row.hours, row.name.lower()))
    return rows


def build_time_allocation(
    sessions: Iterable[WorkSession],
    total_hours: float,
) -> list[TimeAllocationRow]:
    """Split each session's duration evenly across its tags so shares sum to the total."""
    buckets: dict[str, float] = {}
    for s in sessions:
        tags = list(s.work_tags or []) or [UNCATEGORIZED]
        portion = float(s.duration or 0.0) / len(tags)
        for tag in tags:
            buckets[tag] = buckets.get(tag, 0.0) + portion

    rows = [
        TimeAllocationRow(
            category=name,
            hours=round(hours, 1),
            percentage=rounded_pct(hours, total_hours),
        )
        for name, hours in buckets.items()
    ]
    rows.sort(key=lambda row: (-row.hours, row.category.lower()))
    return rows


def build_monthly_revenue(sessions: Iterable[WorkSession]) -> list[MonthlyRevenueRow]:
    buckets: dict[str, dict[str, object]] = {}
    for s in sessions:
        if not isinstance(s.date, date):
            continue
        key, start, _ = month_bounds(s.date)
        bucket = buckets.get(key)
        if bucket is None:
            bucket = {"start": start, "revenue": 0.0, "hours": 0.0}
            buckets[key] = bucket
        bucket["revenue"] = float(bucket["revenue"]) + float(s.revenue or 0.0)
        bucket["hours"] = float(bucket["hours"]) + float(s.duration or 0.0)

    return [
        MonthlyRevenueRow(month=key, revenue=float(row["revenue"]), hours=float(row["hours"]))
        for key, row in sorted(buckets.items(), key=lambda item: item[1]["start"])
    ]


__all__ = [
    "UNCATEGORIZED",
    "build_revenue_by_client",
    "build_hours_by_category",
    "build_time_allocation",
    "build_monthly_revenue",
]
