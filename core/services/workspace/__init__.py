from .persistence import SupportRecorder
from .reconcile import ReconcileReport
from .service import WorkspaceState

__all__ = ["WorkspaceState", "ReconcileReport", "SupportRecorder"]
