from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RevenueShare:
    client_id: str
    name: str
    revenue: float
    percentage: float


@dataclass(frozen=True)
class CategoryHours:
    name: str
    hours: float
    percentage: float


@dataclass(frozen=True)
class MonthlyRevenueRow:
    month: str
    revenue: float
    hours: float


@dataclass(frozen=True)
class ClientRanking:
    client_id: str
    name: str
    revenue: float
    hours: float
    utilization: int
    share: int


@dataclass(frozen=True)
class TimeAllocationRow:
    category: str
    hours: float
    percentage: int


@dataclass(frozen=True)
class PerformanceCard:
    key: str
    title: str
    value: str
    amount: float
    detail: str
    warn: bool = False


@dataclass(frozen=True)
class PerformanceSummary:
    concentration: PerformanceCard
    utilization: PerformanceCard
    effective_rate: PerformanceCard
    net_margin: PerformanceCard

    def cards(self) -> list[PerformanceCard]:
        return [self.concentration, self.utilization, self.effective_rate, self.net_margin]


@dataclass(frozen=True)
class ForwardSignal:
    # sequential within one aggregation pass; not stable across recomputation
    id: str
    type: str
    client_id: str
    client_name: str
    message: str
    impact: str
    used_pct: Optional[int] = None


@dataclass(frozen=True)
class MetricsSnapshot:
    total_revenue: float
    total_hours: float
    billable_hours: float
    avg_hourly_rate: float
    net_revenue: float
    net_multiplier: float
    client_count: int
    top_client: Optional[RevenueShare]
    revenue_by_client: list[RevenueShare]
    hours_by_category: list[CategoryHours]
    monthly_revenue: list[MonthlyRevenueRow]
    client_rankings: list[ClientRanking]
    time_allocation: list[TimeAllocationRow]
    performance: PerformanceSummary
    forward_signals: list[ForwardSignal]


__all__ = [
    "RevenueShare",
    "CategoryHours",
    "MonthlyRevenueRow",
    "ClientRanking",
    "TimeAllocationRow",
    "PerformanceCard",
    "PerformanceSummary",
    "ForwardSignal",
    "MetricsSnapshot",
]
