from __future__ import annotations

from core.services.metrics.models import ClientRanking, PerformanceCard, PerformanceSummary

CONCENTRATION_WARN_THRESHOLD = 50
CONCENTRATION_MODERATE_THRESHOLD = 30


def _concentration_detail(value: int, has_clients: bool) -> str:
    if not has_clients:
        return "No client revenue yet"
    if value > CONCENTRATION_WARN_THRESHOLD:
        return "Top client share - high dependence on one client"
    if value > CONCENTRATION_MODERATE_THRESHOLD:
        return "Top client share - moderate diversification"
    return "Top client share - well diversified"


def build_performance(
    rankings: list[ClientRanking],
    avg_hourly_rate: float,
    net_multiplier: float,
) -> PerformanceSummary:
    concentration = rankings[0].share if rankings else 0
    utilization = (
        int(round(sum(r.utilization for r in rankings) / len(rankings))) if rankings else 0
    )
    effective_rate = int(round(avg_hourly_rate))
    net_margin = int(round(net_multiplier * 100))

    return PerformanceSummary(
        concentration=PerformanceCard(
            key="concentration",
            title="Revenue Concentration",
            value=f"{concentration}%",
            amount=float(concentration),
            detail=_concentration_detail(concentration, bool(rankings)),
            warn=concentration > CONCENTRATION_WARN_THRESHOLD,
        ),
        utilization=PerformanceCard(
            key="utilization",
            title="Utilization Rate",
            value=f"{utilization}%",
            amount=float(utilization),
            detail=f"Average across {len(rankings)} active client(s)",
        ),
        effective_rate=PerformanceCard(
            key="effective_rate",
            title="Effective Rate",
            value=f"{effective_rate}/hr",
            amount=float(effective_rate),
            detail="Revenue per billable hour",
        ),
        net_margin=PerformanceCard(
            key="net_margin",
            title="Net Margin",
            value=f"{net_margin}%",
            amount=float(net_margin),
            detail="After tax and processing fees",
        ),
    )


__all__ = [
    "CONCENTRATION_WARN_THRESHOLD",
    "build_performance",
]
