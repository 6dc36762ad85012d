from __future__ import annotations

from typing import Iterable

from core.models import Client, WorkSession
from core.services.metrics.helpers import rounded_pct
from core.services.metrics.models import ClientRanking

# used for clients without a retainer until capacity targets exist per client
DEFAULT_UTILIZATION = 75


def client_utilization(client: Client) -> int:
    if client.has_retainer:
        return rounded_pct(client.retainer_used, client.retainer_total)
    return DEFAULT_UTILIZATION


def build_client_rankings(
    sessions: Iterable[WorkSession],
    clients: Iterable[Client],
    total_revenue: float,
) -> list[ClientRanking]:
    revenue: dict[str, float] = {}
    hours: dict[str, float] = {}
    for s in sessions:
        key = str(s.client_id)
        revenue[key] = revenue.get(key, 0.0) + float(s.revenue or 0.0)
        hours[key] = hours.get(key, 0.0) + float(s.duration or 0.0)

    rankings: list[ClientRanking] = []
    for client in clients:
        if not client.is_active:
            continue
        client_revenue = revenue.get(str(client.id), 0.0)
        if client_revenue <= 0:
            continue
        rankings.append(
            ClientRanking(
                client_id=client.id,
                name=client.name,
                revenue=client_revenue,
                hours=hours.get(str(client.id), 0.0),
                utilization=client_utilization(client),
                share=rounded_pct(client_revenue, total_revenue),
            )
        )
    rankings.sort(key=lambda row: (-row.revenue, row.name.lower()))
    return rankings


__all__ = ["DEFAULT_UTILIZATION", "client_utilization", "build_client_rankings"]
