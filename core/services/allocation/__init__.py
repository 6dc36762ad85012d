from .engine import allocate, reverse_allocation, validate_allocation_request
from .models import AllocationResult, ClientPatch, ClientRollup, ProjectPatch
from .reconciliation import (
    recompute_client_rollups,
    recompute_project_totals,
    recompute_retainer_remaining,
)

__all__ = [
    "allocate",
    "reverse_allocation",
    "validate_allocation_request",
    "AllocationResult",
    "ClientPatch",
    "ClientRollup",
    "ProjectPatch",
    "recompute_client_rollups",
    "recompute_project_totals",
    "recompute_retainer_remaining",
]
