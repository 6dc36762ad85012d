from datetime import datetime, timedelta, timezone

import pytest

from core.exceptions import ValidationError
from core.models import PlanId, WorkspacePlan
from core.services.plan import (
    FEATURE_KEYS,
    PLANS,
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


def test_catalog_covers_every_feature_on_every_tier():
    for definition in PLANS.values():
        assert set(definition.features) == set(FEATURE_KEYS)
    assert all(resolve(PlanId.STUDIO).features.values())
    assert not any(resolve(PlanId.STARTER).features.values())


def test_limits_per_tier():
    assert get_limit("starter", "active_clients") == 5
    assert get_limit("starter", "projects_per_client") == 3
    assert get_limit("pro", "seats") == 5
    assert get_limit("pro", "active_clients") is None
    assert get_limit(PlanId.STUDIO, "seats") is None


def test_limit_checks_treat_none_as_unlimited():
    assert at_limit("starter", "active_clients", 5)
    assert not at_limit("starter", "active_clients", 4)
    assert would_exceed("starter", "active_clients", 5)
    assert not would_exceed("starter", "active_clients", 4)
    assert not at_limit("pro", "active_clients", 10_000)
    assert not would_exceed("studio", "seats", 10_000)


def test_feature_gating_and_required_plan():
    assert not can_access("starter", "rich_notes")
    assert can_access("pro", "rich_notes")
    assert not can_access("pro", "api_access")
    assert required_plan("rich_notes") == PlanId.PRO
    assert required_plan("webhooks") == PlanId.STUDIO


def test_plan_ordering_and_upgrade_hints():
    assert is_at_least("studio", "pro")
    assert not is_at_least("starter", "pro")
    assert upgrade_plan_for("starter", "active_clients") == PlanId.PRO
    assert upgrade_plan_for("pro", "seats") == PlanId.STUDIO
    assert upgrade_plan_for("pro", "active_clients") is None
    assert format_limit_value(None) == "unlimited"
    assert format_limit_value(3) == "3"


def test_unknown_plan_feature_and_limit_are_rejected():
    with pytest.raises(ValidationError) as exc_plan:
        resolve("enterprise")
    assert exc_plan.value.code == "PLAN_UNKNOWN"

    with pytest.raises(ValidationError) as exc_feature:
        can_access("pro", "time_travel")
    assert exc_feature.value.code == "PLAN_FEATURE_UNKNOWN"

    with pytest.raises(ValidationError) as exc_limit:
        get_limit("pro", "storage_gb")
    assert exc_limit.value.code == "PLAN_LIMIT_UNKNOWN"


def test_trial_days_remaining_rounds_up_and_expires():
    now = datetime(2026, 3, 1, 12, tzinfo=timezone.utc)
    trial = WorkspacePlan.starting_trial(WorkspacePlan(), now)

    assert trial.trial_days_remaining(now) == 7
    assert trial.trial_days_remaining(now + timedelta(days=6, hours=1)) == 1
    assert trial.trial_active(now + timedelta(days=6, hours=23))
    assert not trial.trial_active(now + timedelta(days=7))
    assert WorkspacePlan().trial_days_remaining(now) == 0
