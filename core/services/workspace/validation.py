from __future__ import annotations

from core.exceptions import BusinessRuleError, NotFoundError
from core.models import Client, Project
from core.services.plan import PlanService, format_limit_value, upgrade_plan_for


class WorkspaceValidationMixin:
    _clients: dict[str, Client]
    _projects: dict[str, Project]
    _plan_service: PlanService

    def _require_client(self, client_id: str) -> Client:
        client = self._clients.get(str(client_id))
        if client is None:
            raise NotFoundError("Client not found.", code="CLIENT_NOT_FOUND")
        return client

    def _require_project(self, project_id: str) -> Project:
        project = self._projects.get(str(project_id))
        if project is None:
            raise NotFoundError("Project not found.", code="PROJECT_NOT_FOUND")
        return project

    def _projects_for(self, client_id: str) -> list[Project]:
        return [p for p in self._projects.values() if p.client_id == client_id]

    def _check_plan_limit(self, key: str, current_count: int, label: str) -> None:
        if not self._plan_service.would_exceed(key, current_count):
            return
        plan_id = self._plan_service.effective_plan_id()
        limit = format_limit_value(self._plan_service.limit(key))
        upgrade = upgrade_plan_for(plan_id, key)
        hint = f" Upgrade to {upgrade.value} to add more." if upgrade else ""
        raise BusinessRuleError(
            f"Your plan allows {limit} {label}.{hint}",
            code="PLAN_LIMIT_REACHED",
        )

    def _check_active_client_limit(self) -> None:
        active = sum(1 for c in self._clients.values() if c.is_active)
        self._check_plan_limit("active_clients", active, "active clients")

    def _check_project_limit(self, client_id: str) -> None:
        self._check_plan_limit("projects_per_client", len(self._projects_for(client_id)), "projects per client")

    def _require_feature(self, feature: str, label: str) -> None:
        if not self._plan_service.can(feature):
            raise BusinessRuleError(
                f"{label} is not available on your plan.",
                code="FEATURE_NOT_AVAILABLE",
            )


__all__ = ["WorkspaceValidationMixin"]
