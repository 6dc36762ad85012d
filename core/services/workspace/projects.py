from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Any

from core.exceptions import ValidationError
from core.interfaces import ProjectRepository
from core.models import ExternalLink, Milestone, Project, ProjectStatus

logger = logging.getLogger(__name__)

_EDITABLE_PROJECT_FIELDS = frozenset(
    {
        "name",
        "status",
        "estimated_hours",
        "total_value",
        "start_date",
        "end_date",
        "milestones",
        "external_links",
    }
)
# maintained from session history only
_ROLLUP_PROJECT_FIELDS = frozenset({"hours", "revenue"})


class WorkspaceProjectsMixin:
    _project_repo: ProjectRepository

    @property
    def projects(self) -> list[Project]:
        return list(self._projects.values())

    def get_project(self, project_id: str) -> Project | None:
        return self._projects.get(str(project_id))

    def list_projects_for_client(self, client_id: str) -> list[Project]:
        return self._projects_for(client_id)

    def add_project(
        self,
        client_id: str,
        name: str,
        status: ProjectStatus = ProjectStatus.NOT_STARTED,
        estimated_hours: float = 0.0,
        total_value: float = 0.0,
        start_date: date | None = None,
        end_date: date | None = None,
        milestones: list[Milestone] | None = None,
        external_links: list[ExternalLink] | None = None,
    ) -> Project:
        with self._lock:
            client = self._require_client(client_id)
            self._check_project_limit(client.id)
            project = Project.create(
                client_id=client.id,
                name=name,
                status=status,
                estimated_hours=estimated_hours,
                total_value=total_value,
                start_date=start_date,
                end_date=end_date,
                milestones=list(milestones or []),
                external_links=list(external_links or []),
            )
            self._persist("add project", lambda: self._project_repo.add(project))
            self._projects[project.id] = project
            logger.info("Added project %s - %s for client %s", project.id, project.name, client.id)
        self._events.projects_changed.emit(project.id)
        return project

    def update_project(self, project_id: str, **changes: Any) -> Project:
        readonly = set(changes) & _ROLLUP_PROJECT_FIELDS
        if readonly:
            raise ValidationError(
                "Project hours and revenue are rolled up from sessions; use reconcile() to repair them.",
                code="PROJECT_ROLLUP_READONLY",
            )
        unknown = set(changes) - _EDITABLE_PROJECT_FIELDS
        if unknown:
            raise ValidationError(
                f"Cannot edit project fields: {', '.join(sorted(unknown))}",
                code="PROJECT_FIELD_READONLY",
            )

        with self._lock:
            current = self._require_project(project_id)
            normalized = dict(changes)
            if "name" in normalized:
                if not (normalized["name"] or "").strip():
                    raise ValidationError("Project name cannot be empty.", code="PROJECT_NAME_EMPTY")
                normalized["name"] = normalized["name"].strip()
            if "status" in normalized:
                normalized["status"] = ProjectStatus(normalized["status"])
            for key in ("estimated_hours", "total_value"):
                if key in normalized:
                    if float(normalized[key]) < 0:
                        raise ValidationError(
                            "Project estimate and budget cannot be negative.",
                            code="PROJECT_BUDGET_INVALID",
                        )
                    normalized[key] = float(normalized[key])

            updated = replace(current, **normalized)
            if updated.start_date and updated.end_date and updated.end_date < updated.start_date:
                raise ValidationError("Project end date cannot be before start date.", code="PROJECT_DATES_INVALID")

            patch = {key: getattr(updated, key) for key in normalized}
            self._persist(
                "update project",
                lambda: self._project_repo.update_fields(current.client_id, current.id, patch),
            )
            self._projects[current.id] = updated
        self._events.projects_changed.emit(project_id)
        return updated


__all__ = ["WorkspaceProjectsMixin"]
