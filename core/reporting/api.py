"""Export entry points wrapping the renderer classes."""

from datetime import date
from pathlib import Path
from typing import Iterable

from core.models import Client, Project, WorkSession
from core.reporting.contexts import WorkbookContext, build_ledger
from core.reporting.renderers.ledger_csv import SessionLedgerCsvRenderer
from core.reporting.renderers.excel import WorkbookRenderer
from core.services.metrics import MetricsSnapshot


def _ensure_parent(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def export_sessions_csv(
    sessions: Iterable[WorkSession],
    clients: Iterable[Client],
    path: str | Path,
    projects: Iterable[Project] | None = None,
) -> Path:
    ledger = build_ledger(list(sessions), list(clients), list(projects or []))
    return SessionLedgerCsvRenderer().render(ledger, _ensure_parent(Path(path)))


def export_workbook(
    snapshot: MetricsSnapshot,
    sessions: Iterable[WorkSession],
    clients: Iterable[Client],
    path: str | Path,
    projects: Iterable[Project] | None = None,
    currency: str = "USD",
    as_of: date | None = None,
) -> Path:
    clients = list(clients)
    ctx = WorkbookContext(
        snapshot=snapshot,
        ledger=build_ledger(list(sessions), clients, list(projects or [])),
        clients=clients,
        currency=currency,
        as_of=as_of or date.today(),
    )
    return WorkbookRenderer().render(ctx, _ensure_parent(Path(path)))


__all__ = ["export_sessions_csv", "export_workbook"]
