from __future__ import annotations

from enum import Enum


class BillingModel(str, Enum):
    HOURLY = "Hourly"
    RETAINER = "Retainer"
    PROJECT = "Project"


class ClientStatus(str, Enum):
    ACTIVE = "Active"
    PROSPECT = "Prospect"
    ARCHIVED = "Archived"


class ProjectStatus(str, Enum):
    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    ON_HOLD = "On Hold"
    COMPLETE = "Complete"


class AllocationType(str, Enum):
    GENERAL = "general"
    RETAINER = "retainer"
    PROJECT = "project"


class NoteType(str, Enum):
    GENERAL = "general"
    MEETING = "meeting"
    DECISION = "decision"
    ACTION_ITEM = "action-item"
    FEEDBACK = "feedback"


class PlanId(str, Enum):
    STARTER = "starter"
    PRO = "pro"
    STUDIO = "studio"


__all__ = [
    "BillingModel",
    "ClientStatus",
    "ProjectStatus",
    "AllocationType",
    "NoteType",
    "PlanId",
]
