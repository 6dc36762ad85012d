from __future__ import annotations

from typing import Iterable

from core.models import Client, WorkSession


def percentage(part: float, whole: float) -> float:
    if whole <= 0:
        return 0.0
    return part / whole * 100.0


def rounded_pct(part: float, whole: float) -> int:
    return int(round(percentage(part, whole)))


def client_index(clients: Iterable[Client]) -> dict[str, Client]:
    return {str(c.id): c for c in clients}


def resolve_client_name(session: WorkSession, clients_by_id: dict[str, Client]) -> str:
    client = clients_by_id.get(str(session.client_id))
    if client is not None:
        return client.name
    return session.client_name or str(session.client_id)


__all__ = ["percentage", "rounded_pct", "client_index", "resolve_client_name"]
