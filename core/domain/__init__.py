from core.domain.client import Client, ExternalLink
from core.domain.enums import (
    AllocationType,
    BillingModel,
    ClientStatus,
    NoteType,
    PlanId,
    ProjectStatus,
)
from core.domain.identifiers import generate_id
from core.domain.note import ClientNote
from core.domain.project import Milestone, Project
from core.domain.session import WorkSession, session_revenue
from core.domain.settings import FinancialDefaults, WorkspacePlan

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
