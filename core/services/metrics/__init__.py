from .models import (
    CategoryHours,
    ClientRanking,
    ForwardSignal,
    MetricsSnapshot,
    MonthlyRevenueRow,
    PerformanceCard,
    PerformanceSummary,
    RevenueShare,
    TimeAllocationRow,
)
from .service import compute_metrics

__all__ = [
    "compute_metrics",
    "CategoryHours",
    "ClientRanking",
    "ForwardSignal",
    "MetricsSnapshot",
    "MonthlyRevenueRow",
    "PerformanceCard",
    "PerformanceSummary",
    "RevenueShare",
    "TimeAllocationRow",
]
