from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from core.exceptions import ValidationError
from core.models import PlanId
from core.services.plan.catalog import FEATURE_KEYS, LIMIT_KEYS, PLAN_ORDER, PLANS


@dataclass(frozen=True)
class Entitlement:
    plan_id: PlanId
    limits: Mapping[str, Optional[int]]
    features: Mapping[str, bool]

    def can(self, feature: str) -> bool:
        return bool(self.features[_check_feature(feature)])

    def limit(self, key: str) -> Optional[int]:
        return self.limits[_check_limit(key)]


def as_plan_id(plan_id: PlanId | str) -> PlanId:
    try:
        return PlanId(plan_id)
    except ValueError as exc:
        raise ValidationError(f"Unknown plan: {plan_id!r}", code="PLAN_UNKNOWN") from exc


def _check_feature(feature: str) -> str:
    if feature not in FEATURE_KEYS:
        raise ValidationError(f"Unknown feature: {feature!r}", code="PLAN_FEATURE_UNKNOWN")
    return feature


def _check_limit(key: str) -> str:
    if key not in LIMIT_KEYS:
        raise ValidationError(f"Unknown plan limit: {key!r}", code="PLAN_LIMIT_UNKNOWN")
    return key


def resolve(plan_id: PlanId | str) -> Entitlement:
    definition = PLANS[as_plan_id(plan_id)]
    return Entitlement(
        plan_id=definition.plan_id,
        limits=definition.limits,
        features=definition.features,
    )


def can_access(plan_id: PlanId | str, feature: str) -> bool:
    return resolve(plan_id).can(feature)


def get_limit(plan_id: PlanId | str, key: str) -> Optional[int]:
    return resolve(plan_id).limit(key)


def at_limit(plan_id: PlanId | str, key: str, current_count: int) -> bool:
    maximum = get_limit(plan_id, key)
    if maximum is None:
        return False
    return current_count >= maximum


def would_exceed(plan_id: PlanId | str, key: str, current_count: int) -> bool:
    maximum = get_limit(plan_id, key)
    if maximum is None:
        return False
    return current_count + 1 > maximum


def is_at_least(plan_id: PlanId | str, required: PlanId | str) -> bool:
    return PLAN_ORDER.index(as_plan_id(plan_id)) >= PLAN_ORDER.index(as_plan_id(required))


def required_plan(feature: str) -> PlanId:
    """Lowest tier that unlocks ``feature``."""
    _check_feature(feature)
    for plan_id in PLAN_ORDER:
        if PLANS[plan_id].features[feature]:
            return plan_id
    return PLAN_ORDER[-1]


def upgrade_plan_for(plan_id: PlanId | str, key: str) -> Optional[PlanId]:
    """Next tier that raises ``key`` above the current plan's limit, if any."""
    current = as_plan_id(plan_id)
    current_limit = get_limit(current, key)
    if current_limit is None:
        return None
    for candidate in PLAN_ORDER[PLAN_ORDER.index(current) + 1:]:
        candidate_limit = PLANS[candidate].limits[key]
        if candidate_limit is None or candidate_limit > current_limit:
            return candidate
    return None


def format_limit_value(value: Optional[int]) -> str:
    if value is None:
        return "unlimited"
    return str(value)


__all__ = [
    "Entitlement",
    "as_plan_id",
    "resolve",
    "can_access",
    "get_limit",
    "at_limit",
    "would_exceed",
    "is_at_least",
    "required_plan",
    "upgrade_plan_for",
    "format_limit_value",
]
