from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy.orm import Session

from core.services.plan import PlanService
from core.services.workspace import WorkspaceState
from infra.db.base import create_session_factory
from infra.db.repositories import (
    SqlAlchemyClientRepository,
    SqlAlchemyNoteRepository,
    SqlAlchemyProjectRepository,
    SqlAlchemyWorkSessionRepository,
    SqlAlchemyWorkspaceSettingsRepository,
)
from infra.migrate import run_migrations
from infra.operational_support import OperationalSupport, bind_trace_id
from infra.path import default_db_url

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceGraph:
    session: Session
    support: OperationalSupport | None
    plan_service: PlanService
    workspace: WorkspaceState

    def as_dict(self) -> dict[str, Any]:
        return {
            "session": self.session,
            "support": self.support,
            "plan_service": self.plan_service,
            "workspace": self.workspace,
        }


def build_service_graph(session: Session, support: OperationalSupport | None = None) -> ServiceGraph:
    client_repo = SqlAlchemyClientRepository(session)
    session_repo = SqlAlchemyWorkSessionRepository(session)
    project_repo = SqlAlchemyProjectRepository(session)
    note_repo = SqlAlchemyNoteRepository(session)
    settings_repo = SqlAlchemyWorkspaceSettingsRepository(session)

    plan_service = PlanService(settings_repo)
    workspace = WorkspaceState(
        session,
        client_repo,
        session_repo,
        project_repo,
        note_repo,
        settings_repo,
        plan_service=plan_service,
        support=support,
    )
    return ServiceGraph(
        session=session,
        support=support,
        plan_service=plan_service,
        workspace=workspace,
    )


def open_workspace(
    db_url: str | None = None,
    *,
    support: OperationalSupport | None = None,
    migrate: bool = True,
) -> ServiceGraph:
    """Upgrade the schema, open a session and load the workspace into memory."""
    url = db_url or default_db_url()
    with bind_trace_id() as trace_id:
        if migrate:
            run_migrations(url)
        session = create_session_factory(url)()
        graph = build_service_graph(session, support=support)
        graph.workspace.load()
        logger.info("Workspace ready (trace %s)", trace_id)
    return graph


__all__ = ["ServiceGraph", "build_service_graph", "open_workspace"]
