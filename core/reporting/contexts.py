from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List

from core.models import Client, Project, WorkSession
from core.services.metrics import MetricsSnapshot


@dataclass
class SessionLedgerRow:
    date: date
    client: str
    task: str
    tags: str
    duration: float
    billable: bool
    revenue: float
    allocation: str
    project: str


@dataclass
class WorkbookContext:
    snapshot: MetricsSnapshot
    ledger: List[SessionLedgerRow]
    clients: List[Client]
    currency: str
    as_of: date


def build_ledger(
    sessions: List[WorkSession],
    clients: List[Client],
    projects: List[Project] | None = None,
) -> List[SessionLedgerRow]:
    client_names = {c.id: c.name for c in clients}
    project_names = {p.id: p.name for p in projects or []}
    rows = [
        SessionLedgerRow(
            date=s.date,
            client=client_names.get(s.client_id) or s.client_name or s.client_id,
            task=s.task,
            tags=", ".join(s.work_tags),
            duration=round(float(s.duration), 2),
            billable=s.billable,
            revenue=round(float(s.revenue), 2),
            allocation=s.allocation_type.value,
            project=project_names.get(s.project_id, "") if s.project_id else "",
        )
        for s in sessions
    ]
    rows.sort(key=lambda r: (r.date, r.client))
    return rows
