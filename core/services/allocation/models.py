from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

from core.models import WorkSession


@dataclass(frozen=True)
class ClientPatch:
    client_id: str
    retainer_remaining: float

    def as_fields(self) -> dict[str, Any]:
        return {"retainer_remaining": self.retainer_remaining}


@dataclass(frozen=True)
class ProjectPatch:
    client_id: str
    project_id: str
    hours: float
    revenue: float

    def as_fields(self) -> dict[str, Any]:
        return {"hours": self.hours, "revenue": self.revenue}


@dataclass(frozen=True)
class ClientRollup:
    client_id: str
    hours_logged: float
    lifetime_revenue: float
    monthly_earnings: float
    last_session_date: Optional[date]
    true_hourly_rate: float

    def as_fields(self) -> dict[str, Any]:
        return {
            "hours_logged": self.hours_logged,
            "lifetime_revenue": self.lifetime_revenue,
            "monthly_earnings": self.monthly_earnings,
            "last_session_date": self.last_session_date,
            "true_hourly_rate": self.true_hourly_rate,
        }


@dataclass(frozen=True)
class AllocationResult:
    session: WorkSession
    client_patch: ClientPatch | None = None
    project_patch: ProjectPatch | None = None
    skipped: tuple[str, ...] = field(default_factory=tuple)

    @property
    def has_patches(self) -> bool:
        return self.client_patch is not None or self.project_patch is not None


__all__ = ["ClientPatch", "ProjectPatch", "ClientRollup", "AllocationResult"]
