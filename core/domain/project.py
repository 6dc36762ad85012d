from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from core.domain.client import ExternalLink
from core.domain.enums import ProjectStatus
from core.domain.identifiers import generate_id
from core.exceptions import ValidationError


@dataclass
class Milestone:
    title: str
    due_date: Optional[date] = None
    done: bool = False


@dataclass
class Project:
    id: str
    client_id: str
    name: str
    status: ProjectStatus = ProjectStatus.NOT_STARTED
    estimated_hours: float = 0.0
    total_value: float = 0.0
    # rolled up from project-allocated sessions
    hours: float = 0.0
    revenue: float = 0.0
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    milestones: list[Milestone] = field(default_factory=list)
    external_links: list[ExternalLink] = field(default_factory=list)

    @property
    def percent_complete(self) -> float:
        if self.estimated_hours <= 0:
            return 0.0
        return min(100.0, self.hours / self.estimated_hours * 100.0)

    @property
    def budget_remaining(self) -> float:
        return self.total_value - self.revenue

    @staticmethod
    def create(
        client_id: str,
        name: str,
        status: ProjectStatus = ProjectStatus.NOT_STARTED,
        estimated_hours: float = 0.0,
        total_value: float = 0.0,
        start_date: date | None = None,
        end_date: date | None = None,
        **extra,
    ) -> "Project":
        if not name or not name.strip():
            raise ValidationError("Project name cannot be empty.", code="PROJECT_NAME_EMPTY")
        if estimated_hours < 0 or total_value < 0:
            raise ValidationError(
                "Project estimate and budget cannot be negative.",
                code="PROJECT_BUDGET_INVALID",
            )
        if start_date and end_date and end_date < start_date:
            raise ValidationError("Project end date cannot be before start date.", code="PROJECT_DATES_INVALID")
        return Project(
            id=generate_id(),
            client_id=client_id,
            name=name.strip(),
            status=ProjectStatus(status),
            estimated_hours=float(estimated_hours),
            total_value=float(total_value),
            start_date=start_date,
            end_date=end_date,
            **extra,
        )


__all__ = ["Project", "Milestone"]
