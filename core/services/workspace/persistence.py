from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional, Protocol, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.exceptions import DomainError, PersistenceError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SupportRecorder(Protocol):
    def emit_event(
        self,
        *,
        event_type: str,
        message: str,
        level: str = "INFO",
        trace_id: str | None = None,
        data: Mapping[str, Any] | None = None,
    ) -> str: ...


class WorkspacePersistenceMixin:
    """Commit/rollback policy shared by every workspace operation.

    Primary writes raise on failure; side-effect writes are logged and
    reported, and leave the in-memory copy untouched.
    """

    _session: Session
    _support: Optional[SupportRecorder]

    def _persist(self, operation: str, write: Callable[[], T]) -> T:
        try:
            result = write()
            self._session.commit()
            return result
        except DomainError:
            self._session.rollback()
            raise
        except SQLAlchemyError as exc:
            self._session.rollback()
            logger.error("%s failed: %s", operation, exc)
            raise PersistenceError(f"Could not {operation}.", code="PERSISTENCE_FAILED") from exc

    def _side_effect(
        self,
        operation: str,
        write: Callable[[], None],
        merge: Callable[[], None],
        *,
        data: Mapping[str, Any] | None = None,
    ) -> bool:
        try:
            write()
            self._session.commit()
        except (DomainError, SQLAlchemyError) as exc:
            self._session.rollback()
            logger.warning("Side effect '%s' failed and was skipped: %s", operation, exc)
            self._report(
                "allocation.side_effect_failed",
                f"{operation} failed: {exc}",
                level="WARNING",
                data=data,
            )
            return False
        merge()
        return True

    def _report(
        self,
        event_type: str,
        message: str,
        *,
        level: str = "INFO",
        data: Mapping[str, Any] | None = None,
    ) -> None:
        if self._support is None:
            return
        try:
            self._support.emit_event(event_type=event_type, message=message, level=level, data=data)
        except OSError as exc:
            logger.warning("Could not record support event %s: %s", event_type, exc)


__all__ = ["SupportRecorder", "WorkspacePersistenceMixin"]
