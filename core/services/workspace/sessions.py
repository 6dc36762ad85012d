from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Any, Callable, Iterable

from core.exceptions import NotFoundError, ValidationError
from core.interfaces import WorkSessionRepository
from core.models import AllocationType, WorkSession
from core.domain.session import session_revenue
from core.services.allocation import (
    AllocationResult,
    allocate,
    recompute_client_rollups,
    reverse_allocation,
    validate_allocation_request,
)

logger = logging.getLogger(__name__)

_EDITABLE_SESSION_FIELDS = frozenset(
    {
        "client_id",
        "date",
        "duration",
        "billable",
        "task",
        "work_tags",
        "allocation_type",
        "project_id",
    }
)
# changing any of these re-prices the session at the client's current rate
_REPRICING_FIELDS = frozenset({"client_id", "duration", "billable"})


class WorkspaceSessionsMixin:
    _session_repo: WorkSessionRepository
    _sessions: dict[str, WorkSession]
    _today: Callable[[], date]

    @property
    def sessions(self) -> list[WorkSession]:
        return sorted(self._sessions.values(), key=lambda s: (s.date, s.id), reverse=True)

    def get_session(self, session_id: str) -> WorkSession | None:
        return self._sessions.get(str(session_id))

    def log_session(
        self,
        client_id: str,
        date: date,
        duration: float,
        *,
        billable: bool = True,
        task: str = "",
        work_tags: list[str] | None = None,
        allocation_type: AllocationType = AllocationType.GENERAL,
        project_id: str | None = None,
    ) -> WorkSession:
        """Record worked time and roll it into the retainer or project it was allocated to.

        The session write is the primary operation: if it fails nothing changes
        in memory. Retainer/project updates that follow are best effort and
        can be repaired with ``reconcile()``.
        """
        with self._lock:
            client = self._require_client(client_id)
            work_session = WorkSession.create(
                client_id=client.id,
                date=date,
                duration=duration,
                revenue=session_revenue(duration, client.rate, billable),
                billable=billable,
                task=task,
                work_tags=work_tags,
                allocation_type=allocation_type,
                project_id=project_id,
                client_name=client.name,
            )
            validate_allocation_request(work_session, client, self._projects_for(client.id))

            self._persist("log session", lambda: self._session_repo.add(work_session))
            self._sessions[work_session.id] = work_session
            logger.info(
                "Logged session %s: %.2fh for client %s (%s)",
                work_session.id,
                work_session.duration,
                client.id,
                work_session.allocation_type.value,
            )

            result = allocate(work_session, self._clients.get(client.id), self._projects_for(client.id))
            self._apply_allocation(result)
            self._refresh_client_rollups([client.id])
        self._events.sessions_changed.emit(work_session.id)
        self._recompute()
        return work_session

    def edit_session(self, session_id: str, **changes: Any) -> WorkSession:
        unknown = set(changes) - _EDITABLE_SESSION_FIELDS
        if unknown:
            raise ValidationError(
                f"Cannot edit session fields: {', '.join(sorted(unknown))}",
                code="SESSION_FIELD_READONLY",
            )

        with self._lock:
            current = self._sessions.get(str(session_id))
            if current is None:
                raise NotFoundError("Session not found.", code="SESSION_NOT_FOUND")

            merged = {key: getattr(current, key) for key in _EDITABLE_SESSION_FIELDS}
            merged.update(changes)
            if (
                "allocation_type" in changes
                and AllocationType(changes["allocation_type"]) != AllocationType.PROJECT
                and "project_id" not in changes
            ):
                merged["project_id"] = None

            client = self._require_client(merged["client_id"])
            if any(merged[key] != getattr(current, key) for key in _REPRICING_FIELDS):
                revenue = session_revenue(merged["duration"], client.rate, merged["billable"])
            else:
                revenue = current.revenue

            updated = replace(
                WorkSession.create(revenue=revenue, client_name=client.name, **merged),
                id=current.id,
            )
            if client.id == current.client_id:
                updated = replace(updated, client_name=current.client_name)
            validate_allocation_request(updated, client, self._projects_for(client.id))

            self._persist("edit session", lambda: self._session_repo.update(updated))
            self._sessions[current.id] = updated
            logger.info("Edited session %s: %s", current.id, ", ".join(sorted(changes)) or "no changes")

            if self._allocation_changed(current, updated):
                self._apply_allocation(
                    reverse_allocation(
                        current,
                        self._clients.get(current.client_id),
                        self._projects_for(current.client_id),
                        self._sessions.values(),
                    )
                )
                self._apply_allocation(
                    allocate(updated, self._clients.get(updated.client_id), self._projects_for(updated.client_id))
                )
            self._refresh_client_rollups({current.client_id, updated.client_id})
        self._events.sessions_changed.emit(updated.id)
        self._recompute()
        return updated

    def delete_session(self, session_id: str) -> None:
        with self._lock:
            current = self._sessions.get(str(session_id))
            if current is None:
                raise NotFoundError("Session not found.", code="SESSION_NOT_FOUND")

            self._persist("delete session", lambda: self._session_repo.delete(current.id))
            del self._sessions[current.id]
            logger.info("Deleted session %s for client %s", current.id, current.client_id)

            self._apply_allocation(
                reverse_allocation(
                    current,
                    self._clients.get(current.client_id),
                    self._projects_for(current.client_id),
                    self._sessions.values(),
                )
            )
            self._refresh_client_rollups([current.client_id])
        self._events.sessions_changed.emit(current.id)
        self._recompute()

    def delete_sessions(self, session_ids: Iterable[str]) -> int:
        """Delete a selection of sessions; nothing is deleted if any id is unknown."""
        with self._lock:
            selected = self._select_sessions(session_ids)
            for work_session in selected:
                self.delete_session(work_session.id)
        logger.info("Deleted %d selected session(s)", len(selected))
        return len(selected)

    def _select_sessions(self, session_ids: Iterable[str] | None) -> list[WorkSession]:
        if session_ids is None:
            return list(self._sessions.values())
        ids = list(dict.fromkeys(str(i) for i in session_ids))
        missing = [i for i in ids if i not in self._sessions]
        if missing:
            raise NotFoundError(
                f"Sessions not found: {', '.join(missing)}",
                code="SESSION_NOT_FOUND",
            )
        return [self._sessions[i] for i in ids]

    @staticmethod
    def _allocation_changed(before: WorkSession, after: WorkSession) -> bool:
        return (
            before.client_id != after.client_id
            or before.allocation_type != after.allocation_type
            or before.project_id != after.project_id
            or before.duration != after.duration
            or before.revenue != after.revenue
            or before.billable != after.billable
        )

    def _apply_allocation(self, result: AllocationResult) -> None:
        data = {"session_id": result.session.id, "client_id": result.session.client_id}
        for reason in result.skipped:
            self._report(
                "allocation.side_effect_skipped",
                reason,
                level="WARNING",
                data=data,
            )

        client_patch = result.client_patch
        if client_patch is not None:

            def merge_client() -> None:
                client = self._clients[client_patch.client_id]
                self._clients[client.id] = replace(client, **client_patch.as_fields())

            self._side_effect(
                "update retainer balance",
                lambda: self._client_repo.update_fields(client_patch.client_id, client_patch.as_fields()),
                merge_client,
                data=data,
            )

        project_patch = result.project_patch
        if project_patch is not None:

            def merge_project() -> None:
                project = self._projects[project_patch.project_id]
                self._projects[project.id] = replace(project, **project_patch.as_fields())

            if self._side_effect(
                "update project totals",
                lambda: self._project_repo.update_fields(
                    project_patch.client_id,
                    project_patch.project_id,
                    project_patch.as_fields(),
                ),
                merge_project,
                data=data,
            ):
                self._events.projects_changed.emit(project_patch.project_id)

    def _refresh_client_rollups(self, client_ids: Iterable[str]) -> None:
        sessions = list(self._sessions.values())
        as_of = self._today()
        for client_id in client_ids:
            client = self._clients.get(client_id)
            if client is None:
                continue
            fields = recompute_client_rollups(client, sessions, as_of=as_of).as_fields()
            if all(getattr(client, key) == value for key, value in fields.items()):
                continue

            def merge(client=client, fields=fields) -> None:
                self._clients[client.id] = replace(self._clients[client.id], **fields)

            self._side_effect(
                "refresh client rollups",
                lambda client=client, fields=fields: self._client_repo.update_fields(client.id, fields),
                merge,
                data={"client_id": client.id},
            )


__all__ = ["WorkspaceSessionsMixin"]
