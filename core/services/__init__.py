from .allocation import allocate, reverse_allocation, validate_allocation_request
from .metrics import MetricsSnapshot, compute_metrics
from .plan import PlanService, resolve

__all__ = [
    "allocate",
    "reverse_allocation",
    "validate_allocation_request",
    "compute_metrics",
    "MetricsSnapshot",
    "PlanService",
    "resolve",
]
