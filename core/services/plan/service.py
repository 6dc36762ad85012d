from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Optional

from core.exceptions import BusinessRuleError
from core.interfaces import WorkspaceSettingsRepository
from core.models import Client, PlanId, Project, WorkspacePlan
from core.services.plan.catalog import PLAN_ORDER, PLANS
from core.services.plan.entitlements import (
    Entitlement,
    as_plan_id,
    at_limit,
    format_limit_value,
    resolve,
    would_exceed,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UsageRow:
    key: str
    label: str
    used: int
    limit: Optional[int]
    at_limit: bool

    @property
    def display(self) -> str:
        return f"{self.used} / {format_limit_value(self.limit)}"


class PlanService:
    """Active plan for the workspace plus trial handling and usage views."""

    def __init__(self, settings_repo: WorkspaceSettingsRepository, plan: WorkspacePlan | None = None):
        self._settings_repo: WorkspaceSettingsRepository = settings_repo
        self._plan: WorkspacePlan = plan or WorkspacePlan()

    def load(self) -> WorkspacePlan:
        self._plan = self._settings_repo.load_plan()
        return self._plan

    @property
    def plan(self) -> WorkspacePlan:
        return self._plan

    def effective_plan_id(self, now: datetime | None = None) -> PlanId:
        # an active trial grants Pro access on top of the stored plan
        if self._plan.trial_active(now) and not self.is_at_least_stored(PlanId.PRO):
            return PlanId.PRO
        return as_plan_id(self._plan.plan_id)

    def is_at_least_stored(self, required: PlanId) -> bool:
        return PLAN_ORDER.index(as_plan_id(self._plan.plan_id)) >= PLAN_ORDER.index(required)

    def entitlement(self, now: datetime | None = None) -> Entitlement:
        return resolve(self.effective_plan_id(now))

    def can(self, feature: str) -> bool:
        return self.entitlement().can(feature)

    def limit(self, key: str) -> Optional[int]:
        return self.entitlement().limit(key)

    def at_limit(self, key: str, count: int) -> bool:
        return at_limit(self.effective_plan_id(), key, count)

    def would_exceed(self, key: str, count: int) -> bool:
        return would_exceed(self.effective_plan_id(), key, count)

    def trial_expired(self, now: datetime | None = None) -> bool:
        return self._plan.is_trial and self._plan.trial_end is not None and not self._plan.trial_active(now)

    def start_trial(self, now: datetime | None = None) -> WorkspacePlan:
        if self._plan.is_trial:
            raise BusinessRuleError("A trial has already been used.", code="PLAN_TRIAL_USED")
        plan = WorkspacePlan.starting_trial(self._plan, now)
        self._settings_repo.save_plan(plan)
        self._plan = plan
        logger.info("Started trial until %s", plan.trial_end)
        return plan

    def switch_plan(self, plan_id: PlanId | str, reason: str | None = None) -> WorkspacePlan:
        target = as_plan_id(plan_id)
        current = as_plan_id(self._plan.plan_id)
        if target == current:
            return self._plan

        cleaned_reason = (reason or "").strip() or None
        is_downgrade = PLAN_ORDER.index(target) < PLAN_ORDER.index(current)
        if is_downgrade and target == PLAN_ORDER[0] and not cleaned_reason:
            raise BusinessRuleError(
                f"Tell us why you are moving to {PLANS[target].name}.",
                code="PLAN_DOWNGRADE_REASON_REQUIRED",
            )

        plan = WorkspacePlan(
            plan_id=target,
            activated_at=datetime.now(timezone.utc),
            is_trial=False,
            trial_end=None,
            downgrade_reason=cleaned_reason if is_downgrade else None,
        )
        self._settings_repo.save_plan(plan)
        self._plan = plan
        logger.info("Switched plan %s -> %s", current.value, target.value)
        return plan

    def usage(
        self,
        clients: Iterable[Client],
        projects: Iterable[Project],
        seats_used: int = 1,
    ) -> list[UsageRow]:
        entitlement = self.entitlement()
        active = sum(1 for c in clients if c.is_active)

        per_client: dict[str, int] = {}
        for p in projects:
            per_client[p.client_id] = per_client.get(p.client_id, 0) + 1
        busiest = max(per_client.values(), default=0)

        rows: list[UsageRow] = []
        for key, label, used in (
            ("seats", "Seats", seats_used),
            ("active_clients", "Active clients", active),
            ("projects_per_client", "Projects per client (max)", busiest),
        ):
            maximum = entitlement.limit(key)
            rows.append(
                UsageRow(
                    key=key,
                    label=label,
                    used=used,
                    limit=maximum,
                    at_limit=(maximum is not None and used >= maximum),
                )
            )
        return rows


__all__ = ["PlanService", "UsageRow"]
