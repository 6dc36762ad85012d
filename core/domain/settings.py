from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Optional

from core.domain.enums import PlanId
from core.exceptions import ValidationError

TRIAL_LENGTH_DAYS = 7


def _parse_rate(value: Any, fallback: float, *, percent: bool = False) -> float:
    """Read a stored rate as a fraction.

    Strings (``"25"``, ``"2.9"``) and ``percent`` values are percentages;
    other numbers are fractions unless they are above 1.
    """
    if value in (None, ""):
        return fallback
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid rate value: {value!r}", code="SETTINGS_RATE_INVALID") from exc
    if number < 0:
        raise ValidationError(f"Rate cannot be negative: {value!r}", code="SETTINGS_RATE_INVALID")
    if percent or isinstance(value, str) or number > 1:
        return number / 100.0
    return number


@dataclass(frozen=True)
class FinancialDefaults:
    tax_rate: float = 0.25
    processing_fee_rate: float = 0.029
    cost_rate: float = 45.0
    currency: str = "USD"
    weekly_target: float = 40.0

    @property
    def net_multiplier(self) -> float:
        return 1.0 - self.tax_rate - self.processing_fee_rate

    @staticmethod
    def from_settings(data: Mapping[str, Any] | None) -> "FinancialDefaults":
        defaults = FinancialDefaults()
        if not data:
            return defaults
        if data.get("processingFeeRate") not in (None, ""):
            processing = _parse_rate(data["processingFeeRate"], defaults.processing_fee_rate)
        else:
            # legacy settings key, always a percentage
            processing = _parse_rate(data.get("processingFee"), defaults.processing_fee_rate, percent=True)
        return FinancialDefaults(
            tax_rate=_parse_rate(data.get("taxRate"), defaults.tax_rate),
            processing_fee_rate=processing,
            cost_rate=float(data.get("costRate") or defaults.cost_rate),
            currency=(str(data.get("currency") or "").strip().upper() or defaults.currency),
            weekly_target=float(data.get("weeklyTarget") or defaults.weekly_target),
        )

    def to_settings(self) -> dict[str, Any]:
        return {
            "taxRate": self.tax_rate,
            "processingFeeRate": self.processing_fee_rate,
            "costRate": self.cost_rate,
            "currency": self.currency,
            "weeklyTarget": self.weekly_target,
        }


@dataclass
class WorkspacePlan:
    plan_id: PlanId = PlanId.STARTER
    activated_at: datetime | None = None
    is_trial: bool = False
    trial_end: Optional[datetime] = None
    downgrade_reason: Optional[str] = None

    def trial_days_remaining(self, now: datetime | None = None) -> int:
        if self.trial_end is None:
            return 0
        now = now or datetime.now(timezone.utc)
        seconds = (self.trial_end - now).total_seconds()
        if seconds <= 0:
            return 0
        return int(-(-seconds // 86400))

    def trial_active(self, now: datetime | None = None) -> bool:
        return self.is_trial and self.trial_end is not None and self.trial_days_remaining(now) > 0

    @staticmethod
    def starting_trial(plan: "WorkspacePlan", now: datetime | None = None) -> "WorkspacePlan":
        now = now or datetime.now(timezone.utc)
        return WorkspacePlan(
            plan_id=plan.plan_id,
            activated_at=plan.activated_at,
            is_trial=True,
            trial_end=now + timedelta(days=TRIAL_LENGTH_DAYS),
        )


__all__ = ["FinancialDefaults", "WorkspacePlan", "TRIAL_LENGTH_DAYS"]
