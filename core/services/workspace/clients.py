from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from core.events.domain_events import WorkspaceEvents
from core.exceptions import ValidationError
from core.interfaces import ClientRepository
from core.models import BillingModel, Client, ClientStatus, ExternalLink

logger = logging.getLogger(__name__)

_EDITABLE_CLIENT_FIELDS = frozenset(
    {
        "name",
        "model",
        "rate",
        "status",
        "contact_name",
        "contact_email",
        "website",
        "show_portal_costs",
        "retainer_total",
        "retainer_remaining",
        "external_links",
    }
)


class WorkspaceClientsMixin:
    _client_repo: ClientRepository
    _events: WorkspaceEvents

    @property
    def clients(self) -> list[Client]:
        return sorted(self._clients.values(), key=lambda c: c.name.lower())

    def get_client(self, client_id: str) -> Client | None:
        return self._clients.get(str(client_id))

    def add_client(
        self,
        name: str,
        model: BillingModel = BillingModel.HOURLY,
        rate: float = 0.0,
        status: ClientStatus = ClientStatus.ACTIVE,
        retainer_total: float = 0.0,
        retainer_remaining: float | None = None,
        contact_name: str = "",
        contact_email: str = "",
        website: str = "",
        external_links: list[ExternalLink] | None = None,
    ) -> Client:
        client = Client.create(
            name=name,
            model=model,
            rate=rate,
            status=status,
            retainer_total=retainer_total,
            retainer_remaining=retainer_remaining,
            contact_name=(contact_name or "").strip(),
            contact_email=(contact_email or "").strip(),
            website=(website or "").strip(),
            external_links=list(external_links or []),
        )
        with self._lock:
            if client.is_active:
                self._check_active_client_limit()
            self._persist("add client", lambda: self._client_repo.add(client))
            self._clients[client.id] = client
            logger.info("Added client %s - %s", client.id, client.name)
        self._events.clients_changed.emit(client.id)
        self._recompute()
        return client

    def update_client(self, client_id: str, **changes: Any) -> Client:
        unknown = set(changes) - _EDITABLE_CLIENT_FIELDS
        if unknown:
            raise ValidationError(
                f"Cannot edit client fields: {', '.join(sorted(unknown))}",
                code="CLIENT_FIELD_READONLY",
            )
        with self._lock:
            current = self._require_client(client_id)
            updated = self._apply_client_changes(current, changes)
            if updated.is_active and not current.is_active:
                self._check_active_client_limit()

            patch = {
                key: getattr(updated, key)
                for key in _EDITABLE_CLIENT_FIELDS
                if getattr(updated, key) != getattr(current, key)
            }
            if patch:
                self._persist("update client", lambda: self._client_repo.update_fields(current.id, patch))
                self._clients[current.id] = updated
                logger.info("Updated client %s: %s", current.id, ", ".join(sorted(patch)))
        self._events.clients_changed.emit(client_id)
        self._recompute()
        return updated

    def archive_client(self, client_id: str) -> Client:
        # archival keeps every session and project; only the status moves
        return self.update_client(client_id, status=ClientStatus.ARCHIVED)

    @staticmethod
    def _apply_client_changes(current: Client, changes: dict[str, Any]) -> Client:
        if "name" in changes and not (changes["name"] or "").strip():
            raise ValidationError("Client name cannot be empty.", code="CLIENT_NAME_EMPTY")
        if "rate" in changes and float(changes["rate"]) < 0:
            raise ValidationError("Client rate cannot be negative.", code="CLIENT_RATE_INVALID")
        if "retainer_total" in changes and float(changes["retainer_total"]) < 0:
            raise ValidationError("Retainer hours cannot be negative.", code="CLIENT_RETAINER_INVALID")

        normalized = dict(changes)
        if "name" in normalized:
            normalized["name"] = normalized["name"].strip()
        if "model" in normalized:
            normalized["model"] = BillingModel(normalized["model"])
        if "status" in normalized:
            normalized["status"] = ClientStatus(normalized["status"])
        for key in ("rate", "retainer_total", "retainer_remaining"):
            if key in normalized:
                normalized[key] = float(normalized[key])
        if "external_links" in normalized:
            normalized["external_links"] = list(normalized["external_links"] or [])

        updated = replace(current, **normalized)
        if updated.model != BillingModel.RETAINER:
            updated.retainer_total = 0.0
            updated.retainer_remaining = 0.0
        else:
            if current.model != BillingModel.RETAINER and "retainer_remaining" not in normalized:
                updated.retainer_remaining = updated.retainer_total
            # clamp rather than reject
            updated.retainer_remaining = updated.clamp_retainer(updated.retainer_remaining)
        return updated


__all__ = ["WorkspaceClientsMixin"]
