"""Change notifications published by a workspace to its readers."""
from __future__ import annotations

from core.events.signal import Signal


class WorkspaceEvents:
    def __init__(self) -> None:
        self.clients_changed: Signal[str] = Signal()   # client_id
        self.sessions_changed: Signal[str] = Signal()  # session_id
        self.projects_changed: Signal[str] = Signal()  # project_id
        self.notes_changed: Signal[str] = Signal()     # client_id
        self.metrics_changed: Signal[object] = Signal()  # MetricsSnapshot
        self.plan_changed: Signal[str] = Signal()      # plan id


__all__ = ["WorkspaceEvents"]
