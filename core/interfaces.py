"""Entity store contracts consumed by the services.

Implementations stage writes on the shared SQLAlchemy session; the caller
commits, and rolls back on failure.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, List, Mapping, Optional

from core.models import (
    Client,
    ClientNote,
    FinancialDefaults,
    Project,
    WorkSession,
    WorkspacePlan,
)


class ClientRepository(ABC):
    @abstractmethod
    def add(self, client: Client) -> Client: ...

    @abstractmethod
    def get(self, client_id: str) -> Optional[Client]: ...

    @abstractmethod
    def list_all(self) -> List[Client]: ...

    @abstractmethod
    def update_fields(self, client_id: str, patch: Mapping[str, Any]) -> None: ...


class WorkSessionRepository(ABC):
    @abstractmethod
    def add(self, session: WorkSession) -> WorkSession: ...

    @abstractmethod
    def get(self, session_id: str) -> Optional[WorkSession]: ...

    @abstractmethod
    def list_all(self) -> List[WorkSession]: ...

    @abstractmethod
    def update(self, session: WorkSession) -> None: ...

    @abstractmethod
    def delete(self, session_id: str) -> None: ...


class ProjectRepository(ABC):
    @abstractmethod
    def add(self, project: Project) -> Project: ...

    @abstractmethod
    def get(self, project_id: str) -> Optional[Project]: ...

    @abstractmethod
    def list_all(self) -> List[Project]: ...

    @abstractmethod
    def list_by_client(self, client_id: str) -> List[Project]: ...

    @abstractmethod
    def update_fields(self, client_id: str, project_id: str, patch: Mapping[str, Any]) -> None: ...


class NoteRepository(ABC):
    @abstractmethod
    def add(self, note: ClientNote) -> ClientNote: ...

    @abstractmethod
    def get(self, note_id: str) -> Optional[ClientNote]: ...

    @abstractmethod
    def list_by_client(self, client_id: str) -> List[ClientNote]: ...

    @abstractmethod
    def update(self, note: ClientNote) -> None: ...

    @abstractmethod
    def delete(self, note_id: str) -> None: ...


class WorkspaceSettingsRepository(ABC):
    @abstractmethod
    def load_plan(self) -> WorkspacePlan: ...

    @abstractmethod
    def save_plan(self, plan: WorkspacePlan) -> None: ...

    @abstractmethod
    def load_financial_defaults(self) -> FinancialDefaults: ...

    @abstractmethod
    def save_financial_defaults(self, defaults: FinancialDefaults) -> None: ...


__all__ = [
    "ClientRepository",
    "WorkSessionRepository",
    "ProjectRepository",
    "NoteRepository",
    "WorkspaceSettingsRepository",
]
