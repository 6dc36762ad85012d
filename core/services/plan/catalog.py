from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

from core.models import PlanId

LIMIT_KEYS = ("seats", "active_clients", "projects_per_client", "data_retention_days")

FEATURE_KEYS = (
    "full_insights",
    "client_invoicing",
    "batch_invoicing",
    "rich_notes",
    "custom_categories",
    "integrations",
    "data_export",
    "advanced_notifications",
    "white_label_portal",
    "team_utilization",
    "multi_workspace",
    "api_access",
    "webhooks",
    "custom_invoice_templates",
)

PLAN_ORDER = (PlanId.STARTER, PlanId.PRO, PlanId.STUDIO)


@dataclass(frozen=True)
class PlanDefinition:
    plan_id: PlanId
    name: str
    tagline: str
    price: int
    # None means unlimited
    limits: Mapping[str, Optional[int]]
    features: Mapping[str, bool]
    export_formats: tuple[str, ...]
    support_tier: str


def _features(*enabled: str) -> Mapping[str, bool]:
    unknown = set(enabled) - set(FEATURE_KEYS)
    if unknown:
        raise ValueError(f"Unknown plan features: {sorted(unknown)}")
    return MappingProxyType({key: key in enabled for key in FEATURE_KEYS})


_PRO_FEATURES = (
    "full_insights",
    "client_invoicing",
    "rich_notes",
    "custom_categories",
    "integrations",
    "data_export",
    "advanced_notifications",
)

PLANS: Mapping[PlanId, PlanDefinition] = MappingProxyType(
    {
        PlanId.STARTER: PlanDefinition(
            plan_id=PlanId.STARTER,
            name="Starter",
            tagline="For solo freelancers getting started",
            price=0,
            limits=MappingProxyType(
                {"seats": 1, "active_clients": 5, "projects_per_client": 3, "data_retention_days": 90}
            ),
            features=_features(),
            export_formats=("CSV",),
            support_tier="Email support",
        ),
        PlanId.PRO: PlanDefinition(
            plan_id=PlanId.PRO,
            name="Pro",
            tagline="For established freelancers and small teams",
            price=24,
            limits=MappingProxyType(
                {"seats": 5, "active_clients": None, "projects_per_client": None, "data_retention_days": None}
            ),
            features=_features(*_PRO_FEATURES),
            export_formats=("CSV", "XLSX"),
            support_tier="Priority support",
        ),
        PlanId.STUDIO: PlanDefinition(
            plan_id=PlanId.STUDIO,
            name="Studio",
            tagline="For agencies and growing studios",
            price=59,
            limits=MappingProxyType(
                {"seats": None, "active_clients": None, "projects_per_client": None, "data_retention_days": None}
            ),
            features=_features(*FEATURE_KEYS),
            export_formats=("CSV", "XLSX"),
            support_tier="Dedicated support",
        ),
    }
)


__all__ = ["PLANS", "PLAN_ORDER", "LIMIT_KEYS", "FEATURE_KEYS", "PlanDefinition"]
