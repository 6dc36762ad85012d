from .catalog import FEATURE_KEYS, LIMIT_KEYS, PLAN_ORDER, PLANS, PlanDefinition
from .entitlements import (
    Entitlement,
    as_plan_id,
    at_limit,
    can_access,
    format_limit_value,
    get_limit,
    is_at_least,
    required_plan,
    resolve,
    upgrade_plan_for,
    would_exceed,
)
from .service import PlanService, UsageRow

__all__ = [
    "PLANS",
    "PLAN_ORDER",
    "LIMIT_KEYS",
    "FEATURE_KEYS",
    "PlanDefinition",
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
    "PlanService",
    "UsageRow",
]
