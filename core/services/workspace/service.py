from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from pathlib import Path
from threading import RLock
from typing import Any, Callable, Iterable, Optional

from sqlalchemy.orm import Session

from core.events.domain_events import WorkspaceEvents
from core.exceptions import BusinessRuleError, PersistenceError, ValidationError
from core.interfaces import (
    ClientRepository,
    NoteRepository,
    ProjectRepository,
    WorkSessionRepository,
    WorkspaceSettingsRepository,
)
from core.models import Client, ClientNote, FinancialDefaults, PlanId, Project, WorkSession, WorkspacePlan
from core.reporting.api import export_sessions_csv, export_workbook
from core.services.metrics import MetricsSnapshot, compute_metrics
from core.services.plan import PLANS, PlanService, UsageRow
from core.services.workspace.clients import WorkspaceClientsMixin
from core.services.workspace.notes import WorkspaceNotesMixin
from core.services.workspace.persistence import SupportRecorder, WorkspacePersistenceMixin
from core.services.workspace.projects import WorkspaceProjectsMixin
from core.services.workspace.reconcile import WorkspaceReconcileMixin
from core.services.workspace.sessions import WorkspaceSessionsMixin
from core.services.workspace.validation import WorkspaceValidationMixin

logger = logging.getLogger(__name__)


class WorkspaceState(
    WorkspaceClientsMixin,
    WorkspaceProjectsMixin,
    WorkspaceSessionsMixin,
    WorkspaceNotesMixin,
    WorkspaceReconcileMixin,
    WorkspaceValidationMixin,
    WorkspacePersistenceMixin,
):
    """Single writer of the signed-in workspace's clients, sessions, projects and notes.

    Every mutation runs under one workspace lock: persist the primary record,
    apply compensating updates from the allocation engine, then recompute the
    metrics snapshot wholesale. Readers get copies of the collections and the
    latest immutable snapshot.
    """

    def __init__(
        self,
        session: Session,
        client_repo: ClientRepository,
        session_repo: WorkSessionRepository,
        project_repo: ProjectRepository,
        note_repo: NoteRepository,
        settings_repo: WorkspaceSettingsRepository,
        plan_service: PlanService | None = None,
        support: SupportRecorder | None = None,
        today: Callable[[], date] = date.today,
    ):
        self._session: Session = session
        self._client_repo: ClientRepository = client_repo
        self._session_repo: WorkSessionRepository = session_repo
        self._project_repo: ProjectRepository = project_repo
        self._note_repo: NoteRepository = note_repo
        self._settings_repo: WorkspaceSettingsRepository = settings_repo
        self._plan_service: PlanService = plan_service or PlanService(settings_repo)
        self._support: Optional[SupportRecorder] = support
        self._today: Callable[[], date] = today

        self._lock: RLock = RLock()
        self._events: WorkspaceEvents = WorkspaceEvents()
        self._clients: dict[str, Client] = {}
        self._sessions: dict[str, WorkSession] = {}
        self._projects: dict[str, Project] = {}
        self._notes: dict[str, ClientNote] = {}
        self._financial: FinancialDefaults = FinancialDefaults()
        self._metrics: MetricsSnapshot = compute_metrics([], [], self._financial.net_multiplier)

    @property
    def events(self) -> WorkspaceEvents:
        return self._events

    @property
    def metrics(self) -> MetricsSnapshot:
        return self._metrics

    @property
    def financial_defaults(self) -> FinancialDefaults:
        return self._financial

    @property
    def plan(self) -> WorkspacePlan:
        return self._plan_service.plan

    @property
    def plan_service(self) -> PlanService:
        return self._plan_service

    def load(self) -> "WorkspaceState":
        with self._lock:
            clients = self._client_repo.list_all()
            self._clients = {c.id: c for c in clients}
            self._sessions = {s.id: s for s in self._session_repo.list_all()}
            self._projects = {p.id: p for p in self._project_repo.list_all()}
            self._notes = {n.id: n for c in clients for n in self._note_repo.list_by_client(c.id)}
            self._plan_service.load()
            self._financial = self._settings_repo.load_financial_defaults()
            logger.info(
                "Loaded workspace: %d clients, %d sessions, %d projects (plan %s)",
                len(self._clients),
                len(self._sessions),
                len(self._projects),
                self._plan_service.effective_plan_id().value,
            )
        self._recompute()
        return self

    def set_financial_defaults(self, defaults: FinancialDefaults | None = None, **changes: Any) -> FinancialDefaults:
        with self._lock:
            updated = replace(defaults or self._financial, **changes)
            for label, rate in (("Tax rate", updated.tax_rate), ("Processing fee", updated.processing_fee_rate)):
                if not 0.0 <= rate <= 1.0:
                    raise ValidationError(f"{label} must be between 0 and 1.", code="SETTINGS_RATE_INVALID")
            if updated.net_multiplier < 0:
                raise ValidationError(
                    "Tax and processing fees cannot exceed revenue.",
                    code="SETTINGS_RATE_INVALID",
                )
            self._persist(
                "save financial defaults",
                lambda: self._settings_repo.save_financial_defaults(updated),
            )
            self._financial = updated
            logger.info("Financial defaults updated (net multiplier %.3f)", updated.net_multiplier)
        self._recompute()
        return updated

    def switch_plan(self, plan_id: PlanId | str, reason: str | None = None) -> WorkspacePlan:
        with self._lock:
            try:
                plan = self._persist("switch plan", lambda: self._plan_service.switch_plan(plan_id, reason))
            except PersistenceError:
                # drop the unsaved swap held by the plan service
                self._plan_service.load()
                raise
        self._events.plan_changed.emit(PlanId(plan.plan_id).value)
        return plan

    def start_trial(self) -> WorkspacePlan:
        with self._lock:
            try:
                plan = self._persist("start trial", self._plan_service.start_trial)
            except PersistenceError:
                self._plan_service.load()
                raise
        self._events.plan_changed.emit(PlanId(plan.plan_id).value)
        return plan

    def usage(self) -> list[UsageRow]:
        with self._lock:
            return self._plan_service.usage(self._clients.values(), self._projects.values())

    def export(self, path: str | Path, fmt: str = "CSV", session_ids: Iterable[str] | None = None) -> Path:
        """Write the session ledger, or only the selected sessions, as CSV or an XLSX workbook."""
        fmt = (fmt or "").strip().upper()
        plan_id = self._plan_service.effective_plan_id()
        if fmt not in ("CSV", "XLSX"):
            raise ValidationError(f"Unknown export format: {fmt}", code="EXPORT_FORMAT_UNKNOWN")
        if fmt not in PLANS[plan_id].export_formats:
            raise BusinessRuleError(
                f"{fmt} export is not available on the {PLANS[plan_id].name} plan.",
                code="FEATURE_NOT_AVAILABLE",
            )
        with self._lock:
            sessions = self._select_sessions(session_ids)
            clients = list(self._clients.values())
            projects = list(self._projects.values())
            snapshot = self._metrics
            if session_ids is not None:
                snapshot = compute_metrics(sessions, clients, self._financial.net_multiplier)
        if fmt == "CSV":
            output = export_sessions_csv(sessions, clients, path, projects=projects)
        else:
            self._require_feature("data_export", "Workbook export")
            output = export_workbook(
                snapshot,
                sessions,
                clients,
                path,
                projects=projects,
                currency=self._financial.currency,
                as_of=self._today(),
            )
        logger.info("Exported %d sessions to %s", len(sessions), output)
        return output

    def _recompute(self) -> MetricsSnapshot:
        with self._lock:
            snapshot = compute_metrics(
                self._sessions.values(),
                self._clients.values(),
                self._financial.net_multiplier,
            )
            self._metrics = snapshot
        self._events.metrics_changed.emit(snapshot)
        return snapshot


__all__ = ["WorkspaceState"]
