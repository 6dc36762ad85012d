"""Rebuild the rollups held on clients and projects from session history.

Used to repair drift left behind by skipped or failed side effects.
"""
from __future__ import annotations

from datetime import date
from typing import Iterable

from core.models import AllocationType, Client, Project, WorkSession
from core.services.allocation.models import ClientPatch, ClientRollup, ProjectPatch
from core.services.common.periods import in_month


def recompute_project_totals(project: Project, sessions: Iterable[WorkSession]) -> ProjectPatch:
    hours = 0.0
    revenue = 0.0
    for s in sessions:
        if s.allocation_type != AllocationType.PROJECT or str(s.project_id) != str(project.id):
            continue
        hours += float(s.duration or 0.0)
        revenue += float(s.revenue or 0.0)
    return ProjectPatch(client_id=project.client_id, project_id=project.id, hours=hours, revenue=revenue)


def recompute_retainer_remaining(
    client: Client,
    sessions: Iterable[WorkSession],
    cycle_start: date | None = None,
) -> ClientPatch | None:
    """Remaining retainer hours implied by billable retainer sessions.

    ``cycle_start`` limits the count to the current retainer cycle; without it
    the whole history is counted, matching the running decrement.
    """
    if not client.has_retainer:
        return None
    used = 0.0
    for s in sessions:
        if s.client_id != client.id or s.allocation_type != AllocationType.RETAINER:
            continue
        if not s.billable:
            continue
        if cycle_start is not None and s.date < cycle_start:
            continue
        used += float(s.duration or 0.0)
    return ClientPatch(client_id=client.id, retainer_remaining=client.clamp_retainer(client.retainer_total - used))


def recompute_client_rollups(
    client: Client,
    sessions: Iterable[WorkSession],
    as_of: date | None = None,
) -> ClientRollup:
    as_of = as_of or date.today()
    hours = 0.0
    billable_hours = 0.0
    revenue = 0.0
    monthly = 0.0
    last: date | None = None
    for s in sessions:
        if s.client_id != client.id:
            continue
        hours += float(s.duration or 0.0)
        revenue += float(s.revenue or 0.0)
        if s.billable:
            billable_hours += float(s.duration or 0.0)
        if in_month(s.date, as_of):
            monthly += float(s.revenue or 0.0)
        if last is None or s.date > last:
            last = s.date
    return ClientRollup(
        client_id=client.id,
        hours_logged=round(hours, 2),
        lifetime_revenue=round(revenue, 2),
        monthly_earnings=round(monthly, 2),
        last_session_date=last,
        true_hourly_rate=(round(revenue / billable_hours, 2) if billable_hours > 0 else 0.0),
    )


__all__ = [
    "recompute_project_totals",
    "recompute_retainer_remaining",
    "recompute_client_rollups",
]
