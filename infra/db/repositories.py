from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from core.exceptions import NotFoundError, ValidationError
from core.interfaces import (
    ClientRepository,
    NoteRepository,
    ProjectRepository,
    WorkSessionRepository,
    WorkspaceSettingsRepository,
)
from core.models import (
    Client,
    ClientNote,
    FinancialDefaults,
    PlanId,
    Project,
    WorkSession,
    WorkspacePlan,
)
from infra.db.mappers import (
    links_to_json,
    milestones_to_json,
    client_from_orm,
    client_to_orm,
    note_from_orm,
    note_to_orm,
    project_from_orm,
    project_to_orm,
    work_session_from_orm,
    work_session_to_orm,
)
from infra.db.models import (
    ClientNoteORM,
    ClientORM,
    ProjectORM,
    WorkSessionORM,
    WorkspaceSettingORM,
)

_CLIENT_FIELDS = frozenset(
    {
        "name",
        "model",
        "rate",
        "status",
        "contact_name",
        "contact_email",
        "website",
        "show_portal_costs",
        "retainer_total",
        "retainer_remaining",
        "monthly_earnings",
        "lifetime_revenue",
        "hours_logged",
        "last_session_date",
        "true_hourly_rate",
        "external_links",
    }
)
_PROJECT_FIELDS = frozenset(
    {
        "name",
        "status",
        "estimated_hours",
        "total_value",
        "hours",
        "revenue",
        "start_date",
        "end_date",
        "milestones",
        "external_links",
    }
)


def _apply_patch(obj: Any, patch: Mapping[str, Any], allowed: frozenset[str], entity: str) -> None:
    unknown = set(patch) - allowed
    if unknown:
        raise ValidationError(
            f"Unknown {entity} fields: {', '.join(sorted(unknown))}",
            code=f"{entity.upper()}_PATCH_INVALID",
        )
    for key, value in patch.items():
        if key == "external_links":
            value = links_to_json(value)
        elif key == "milestones":
            value = milestones_to_json(value)
        setattr(obj, key, value)


class SqlAlchemyClientRepository(ClientRepository):
    def __init__(self, session: Session):
        self.session = session

    def add(self, client: Client) -> Client:
        self.session.add(client_to_orm(client))
        self.session.flush()
        return client

    def get(self, client_id: str) -> Optional[Client]:
        obj = self.session.get(ClientORM, client_id)
        return client_from_orm(obj) if obj else None

    def list_all(self) -> List[Client]:
        stmt = select(ClientORM).order_by(ClientORM.name)
        rows = self.session.execute(stmt).scalars().all()
        return [client_from_orm(row) for row in rows]

    def update_fields(self, client_id: str, patch: Mapping[str, Any]) -> None:
        obj = self.session.get(ClientORM, client_id)
        if obj is None:
            raise NotFoundError("Client not found.", code="CLIENT_NOT_FOUND")
        _apply_patch(obj, patch, _CLIENT_FIELDS, "client")
        self.session.flush()


class SqlAlchemyWorkSessionRepository(WorkSessionRepository):
    def __init__(self, session: Session):
        self.session = session

    def add(self, work_session: WorkSession) -> WorkSession:
        self.session.add(work_session_to_orm(work_session))
        self.session.flush()
        return work_session

    def get(self, session_id: str) -> Optional[WorkSession]:
        obj = self.session.get(WorkSessionORM, session_id)
        return work_session_from_orm(obj) if obj else None

    def list_all(self) -> List[WorkSession]:
        stmt = select(WorkSessionORM).order_by(WorkSessionORM.session_date.desc(), WorkSessionORM.id)
        rows = self.session.execute(stmt).scalars().all()
        return [work_session_from_orm(row) for row in rows]

    def update(self, work_session: WorkSession) -> None:
        if self.session.get(WorkSessionORM, work_session.id) is None:
            raise NotFoundError("Session not found.", code="SESSION_NOT_FOUND")
        self.session.merge(work_session_to_orm(work_session))
        self.session.flush()

    def delete(self, session_id: str) -> None:
        self.session.query(WorkSessionORM).filter_by(id=session_id).delete()
        self.session.flush()


class SqlAlchemyProjectRepository(ProjectRepository):
    def __init__(self, session: Session):
        self.session = session

    def add(self, project: Project) -> Project:
        self.session.add(project_to_orm(project))
        self.session.flush()
        return project

    def get(self, project_id: str) -> Optional[Project]:
        obj = self.session.get(ProjectORM, project_id)
        return project_from_orm(obj) if obj else None

    def list_all(self) -> List[Project]:
        stmt = select(ProjectORM)
        rows = self.session.execute(stmt).scalars().all()
        return [project_from_orm(row) for row in rows]

    def list_by_client(self, client_id: str) -> List[Project]:
        stmt = select(ProjectORM).where(ProjectORM.client_id == client_id)
        rows = self.session.execute(stmt).scalars().all()
        return [project_from_orm(row) for row in rows]

    def update_fields(self, client_id: str, project_id: str, patch: Mapping[str, Any]) -> None:
        stmt = select(ProjectORM).where(
            ProjectORM.id == project_id,
            ProjectORM.client_id == client_id,
        )
        obj = self.session.execute(stmt).scalars().first()
        if obj is None:
            raise NotFoundError("Project not found.", code="PROJECT_NOT_FOUND")
        _apply_patch(obj, patch, _PROJECT_FIELDS, "project")
        self.session.flush()


class SqlAlchemyNoteRepository(NoteRepository):
    def __init__(self, session: Session):
        self.session = session

    def add(self, note: ClientNote) -> ClientNote:
        self.session.add(note_to_orm(note))
        self.session.flush()
        return note

    def get(self, note_id: str) -> Optional[ClientNote]:
        obj = self.session.get(ClientNoteORM, note_id)
        return note_from_orm(obj) if obj else None

    def list_by_client(self, client_id: str) -> List[ClientNote]:
        stmt = (
            select(ClientNoteORM)
            .where(ClientNoteORM.client_id == client_id)
            .order_by(ClientNoteORM.is_pinned.desc(), ClientNoteORM.created_at.desc())
        )
        rows = self.session.execute(stmt).scalars().all()
        return [note_from_orm(row) for row in rows]

    def update(self, note: ClientNote) -> None:
        self.session.merge(note_to_orm(note))
        self.session.flush()

    def delete(self, note_id: str) -> None:
        self.session.query(ClientNoteORM).filter_by(id=note_id).delete()
        self.session.flush()


def _parse_datetime(value: Any) -> datetime | None:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    parsed = datetime.fromisoformat(str(value))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _format_datetime(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


class SqlAlchemyWorkspaceSettingsRepository(WorkspaceSettingsRepository):
    PLAN_SECTION = "plan"
    FINANCIAL_SECTION = "financial"

    def __init__(self, session: Session):
        self.session = session

    def _load(self, section: str) -> dict[str, Any] | None:
        obj = self.session.get(WorkspaceSettingORM, section)
        return dict(obj.data or {}) if obj else None

    def _save(self, section: str, data: dict[str, Any]) -> None:
        self.session.merge(
            WorkspaceSettingORM(
                section=section,
                data=data,
                updated_at=datetime.now(timezone.utc),
            )
        )
        self.session.flush()

    def load_plan(self) -> WorkspacePlan:
        data = self._load(self.PLAN_SECTION)
        if not data:
            return WorkspacePlan(plan_id=PlanId.STARTER, activated_at=datetime.now(timezone.utc))
        return WorkspacePlan(
            plan_id=PlanId(data.get("planId") or PlanId.STARTER.value),
            activated_at=_parse_datetime(data.get("activatedAt")),
            is_trial=bool(data.get("isTrial", False)),
            trial_end=_parse_datetime(data.get("trialEnd")),
            downgrade_reason=data.get("downgradeReason"),
        )

    def save_plan(self, plan: WorkspacePlan) -> None:
        self._save(
            self.PLAN_SECTION,
            {
                "planId": PlanId(plan.plan_id).value,
                "activatedAt": _format_datetime(plan.activated_at),
                "isTrial": plan.is_trial,
                "trialEnd": _format_datetime(plan.trial_end),
                "downgradeReason": plan.downgrade_reason,
            },
        )

    def load_financial_defaults(self) -> FinancialDefaults:
        return FinancialDefaults.from_settings(self._load(self.FINANCIAL_SECTION))

    def save_financial_defaults(self, defaults: FinancialDefaults) -> None:
        self._save(self.FINANCIAL_SECTION, defaults.to_settings())


__all__ = [
    "SqlAlchemyClientRepository",
    "SqlAlchemyWorkSessionRepository",
    "SqlAlchemyProjectRepository",
    "SqlAlchemyNoteRepository",
    "SqlAlchemyWorkspaceSettingsRepository",
]
