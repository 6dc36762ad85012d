from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from core.domain.enums import BillingModel, ClientStatus
from core.domain.identifiers import generate_id
from core.exceptions import ValidationError


@dataclass
class ExternalLink:
    label: str
    url: str


@dataclass
class Client:
    id: str
    name: str
    model: BillingModel = BillingModel.HOURLY
    rate: float = 0.0
    status: ClientStatus = ClientStatus.ACTIVE
    contact_name: str = ""
    contact_email: str = ""
    website: str = ""
    show_portal_costs: bool = True
    retainer_total: float = 0.0
    retainer_remaining: float = 0.0
    # cached rollups, written by the allocation/reconciliation layer
    monthly_earnings: float = 0.0
    lifetime_revenue: float = 0.0
    hours_logged: float = 0.0
    last_session_date: Optional[date] = None
    true_hourly_rate: float = 0.0
    external_links: list[ExternalLink] = field(default_factory=list)

    @property
    def is_active(self) -> bool:
        return self.status == ClientStatus.ACTIVE

    @property
    def has_retainer(self) -> bool:
        return self.model == BillingModel.RETAINER and self.retainer_total > 0

    @property
    def retainer_used(self) -> float:
        return max(0.0, self.retainer_total - self.retainer_remaining)

    def clamp_retainer(self, value: float) -> float:
        """Clamp a retainer balance into ``[0, retainer_total]``."""
        return min(max(0.0, float(value)), max(0.0, float(self.retainer_total)))

    @staticmethod
    def create(
        name: str,
        model: BillingModel = BillingModel.HOURLY,
        rate: float = 0.0,
        status: ClientStatus = ClientStatus.ACTIVE,
        retainer_total: float = 0.0,
        retainer_remaining: float | None = None,
        **extra,
    ) -> "Client":
        if not name or not name.strip():
            raise ValidationError("Client name cannot be empty.", code="CLIENT_NAME_EMPTY")
        if rate < 0:
            raise ValidationError("Client rate cannot be negative.", code="CLIENT_RATE_INVALID")
        model = BillingModel(model)
        if model != BillingModel.RETAINER:
            retainer_total = 0.0
            retainer_remaining = 0.0
        elif retainer_total < 0:
            raise ValidationError("Retainer hours cannot be negative.", code="CLIENT_RETAINER_INVALID")

        client = Client(
            id=generate_id(),
            name=name.strip(),
            model=model,
            rate=float(rate),
            status=ClientStatus(status),
            retainer_total=float(retainer_total),
            **extra,
        )
        start = retainer_total if retainer_remaining is None else retainer_remaining
        client.retainer_remaining = client.clamp_retainer(start)
        return client


__all__ = ["Client", "ExternalLink"]
