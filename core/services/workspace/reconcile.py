from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date

from core.services.allocation import (
    recompute_client_rollups,
    recompute_project_totals,
    recompute_retainer_remaining,
)

logger = logging.getLogger(__name__)


@dataclass
class ReconcileReport:
    projects: list[str] = field(default_factory=list)
    retainers: list[str] = field(default_factory=list)
    rollups: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.projects or self.retainers or self.rollups)


class WorkspaceReconcileMixin:
    def reconcile(self, retainer_cycle_start: date | None = None) -> ReconcileReport:
        """Rebuild project totals, retainer balances and client rollups from session history.

        This is the repair path for side effects that were skipped or failed
        when sessions were logged. Unlike those side effects, a failure here
        raises: nothing is merged unless the whole repair is stored.
        """
        report = ReconcileReport()
        with self._lock:
            sessions = list(self._sessions.values())
            as_of = self._today()
            project_fields: dict[str, tuple[str, dict]] = {}
            client_fields: dict[str, dict] = {}

            for project in self._projects.values():
                fields = recompute_project_totals(project, sessions).as_fields()
                if any(abs(getattr(project, k) - v) > 1e-9 for k, v in fields.items()):
                    project_fields[project.id] = (project.client_id, fields)
                    report.projects.append(project.id)

            for client in self._clients.values():
                fields: dict = {}
                patch = recompute_retainer_remaining(client, sessions, cycle_start=retainer_cycle_start)
                if patch is not None and abs(patch.retainer_remaining - client.retainer_remaining) > 1e-9:
                    fields.update(patch.as_fields())
                    report.retainers.append(client.id)
                rollup = recompute_client_rollups(client, sessions, as_of=as_of).as_fields()
                rollup = {k: v for k, v in rollup.items() if getattr(client, k) != v}
                if rollup:
                    fields.update(rollup)
                    report.rollups.append(client.id)
                if fields:
                    client_fields[client.id] = fields

            if not report.changed:
                logger.info("Reconcile found no drift")
                return report

            def write() -> None:
                for project_id, (client_id, fields) in project_fields.items():
                    self._project_repo.update_fields(client_id, project_id, fields)
                for client_id, fields in client_fields.items():
                    self._client_repo.update_fields(client_id, fields)

            self._persist("reconcile workspace", write)
            for project_id, (_, fields) in project_fields.items():
                self._projects[project_id] = replace(self._projects[project_id], **fields)
            for client_id, fields in client_fields.items():
                self._clients[client_id] = replace(self._clients[client_id], **fields)
            logger.info(
                "Reconciled %d project(s), %d retainer(s), %d client rollup(s)",
                len(report.projects),
                len(report.retainers),
                len(report.rollups),
            )

        for project_id in report.projects:
            self._events.projects_changed.emit(project_id)
        for client_id in client_fields:
            self._events.clients_changed.emit(client_id)
        self._recompute()
        return report


__all__ = ["ReconcileReport", "WorkspaceReconcileMixin"]
