from __future__ import annotations

from core.domain import (
    AllocationType,
    BillingModel,
    Client,
    ClientNote,
    ClientStatus,
    ExternalLink,
    FinancialDefaults,
    Milestone,
    NoteType,
    PlanId,
    Project,
    ProjectStatus,
    WorkSession,
    WorkspacePlan,
    generate_id,
    session_revenue,
)

__all__ = [
    "generate_id",
    "AllocationType",
    "BillingModel",
    "ClientStatus",
    "NoteType",
    "PlanId",
    "ProjectStatus",
    "Client",
    "ExternalLink",
    "ClientNote",
    "Milestone",
    "Project",
    "WorkSession",
    "session_revenue",
    "FinancialDefaults",
    "WorkspacePlan",
]
