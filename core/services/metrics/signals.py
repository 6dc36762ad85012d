from __future__ import annotations

from typing import Iterable

from core.models import Client, ClientStatus
from core.services.metrics.helpers import rounded_pct
from core.services.metrics.models import ForwardSignal

RETAINER_WATCH_PCT = 70
RETAINER_HIGH_PCT = 85


def build_forward_signals(clients: Iterable[Client]) -> list[ForwardSignal]:
    clients = list(clients)
    signals: list[ForwardSignal] = []

    def _next_id() -> str:
        return f"sig-{len(signals) + 1}"

    for client in clients:
        if not (client.is_active and client.has_retainer):
            continue
        used_pct = rounded_pct(client.retainer_used, client.retainer_total)
        if used_pct < RETAINER_WATCH_PCT:
            continue
        signals.append(
            ForwardSignal(
                id=_next_id(),
                type="overage",
                client_id=client.id,
                client_name=client.name,
                message=(
                    f"{client.name} has used {used_pct}% of its retainer "
                    f"({client.retainer_used:g}h of {client.retainer_total:g}h)."
                ),
                impact="High" if used_pct >= RETAINER_HIGH_PCT else "Medium",
                used_pct=used_pct,
            )
        )

    for client in clients:
        if client.status == ClientStatus.PROSPECT:
            message = f"{client.name} is still a prospect with no work under way."
        elif client.is_active and client.last_session_date is None:
            message = f"{client.name} has no logged sessions."
        else:
            continue
        signals.append(
            ForwardSignal(
                id=_next_id(),
                type="inactive",
                client_id=client.id,
                client_name=client.name,
                message=message,
                impact="Low",
            )
        )
    return signals


__all__ = ["RETAINER_WATCH_PCT", "RETAINER_HIGH_PCT", "build_forward_signals"]
