from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from core.domain.enums import AllocationType
from core.domain.identifiers import generate_id
from core.exceptions import ValidationError


def session_revenue(duration: float, rate: float, billable: bool) -> float:
    """Revenue of a logged session at the client's current rate."""
    if not billable:
        return 0.0
    return float(duration) * float(rate)


def check_allocation_shape(allocation_type: AllocationType, project_id: Optional[str]) -> None:
    if allocation_type == AllocationType.PROJECT and not project_id:
        raise ValidationError(
            "Project allocation requires a project.",
            code="SESSION_PROJECT_REQUIRED",
        )
    if allocation_type != AllocationType.PROJECT and project_id:
        raise ValidationError(
            "Only project allocations may reference a project.",
            code="SESSION_PROJECT_UNEXPECTED",
        )


@dataclass
class WorkSession:
    """A logged block of work for one client.

    ``client_name`` is the display name captured when the session was logged;
    metrics resolve the current name through ``client_id`` instead.
    """

    id: str
    client_id: str
    date: date
    duration: float
    revenue: float = 0.0
    billable: bool = True
    task: str = ""
    work_tags: list[str] = field(default_factory=list)
    allocation_type: AllocationType = AllocationType.GENERAL
    project_id: Optional[str] = None
    client_name: str = ""

    @staticmethod
    def create(
        client_id: str,
        date: date,
        duration: float,
        revenue: float = 0.0,
        billable: bool = True,
        task: str = "",
        work_tags: list[str] | None = None,
        allocation_type: AllocationType = AllocationType.GENERAL,
        project_id: str | None = None,
        client_name: str = "",
    ) -> "WorkSession":
        if not client_id:
            raise ValidationError("Session must belong to a client.", code="SESSION_CLIENT_REQUIRED")
        if date is None:
            raise ValidationError("Session date is required.", code="SESSION_DATE_REQUIRED")
        if duration is None or float(duration) <= 0:
            raise ValidationError("Session duration must be positive.", code="SESSION_DURATION_INVALID")
        if revenue is not None and float(revenue) < 0:
            raise ValidationError("Session revenue cannot be negative.", code="SESSION_REVENUE_INVALID")

        allocation_type = AllocationType(allocation_type)
        check_allocation_shape(allocation_type, project_id)

        tags: list[str] = []
        for tag in work_tags or []:
            cleaned = (tag or "").strip()
            if cleaned and cleaned not in tags:
                tags.append(cleaned)

        return WorkSession(
            id=generate_id(),
            client_id=client_id,
            date=date,
            duration=float(duration),
            revenue=float(revenue or 0.0),
            billable=bool(billable),
            task=(task or "").strip(),
            work_tags=tags,
            allocation_type=allocation_type,
            project_id=project_id or None,
            client_name=client_name,
        )


__all__ = ["WorkSession", "session_revenue", "check_allocation_shape"]
