from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from core.domain.enums import NoteType
from core.domain.identifiers import generate_id
from core.exceptions import ValidationError


@dataclass
class ClientNote:
    id: str
    client_id: str
    content: str
    type: NoteType = NoteType.GENERAL
    tags: list[str] = field(default_factory=list)
    project_id: Optional[str] = None
    is_pinned: bool = False
    is_resolved: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @staticmethod
    def create(
        client_id: str,
        content: str,
        type: NoteType = NoteType.GENERAL,
        tags: list[str] | None = None,
        project_id: str | None = None,
        is_pinned: bool = False,
    ) -> "ClientNote":
        if not (content or "").strip():
            raise ValidationError("Note content cannot be empty.", code="NOTE_CONTENT_EMPTY")
        now = datetime.now(timezone.utc)
        return ClientNote(
            id=generate_id(),
            client_id=client_id,
            content=content.strip(),
            type=NoteType(type),
            tags=list(tags or []),
            project_id=project_id,
            is_pinned=is_pinned,
            created_at=now,
            updated_at=now,
        )


__all__ = ["ClientNote"]
