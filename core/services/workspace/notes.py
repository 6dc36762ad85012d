from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

from core.exceptions import NotFoundError, ValidationError
from core.interfaces import NoteRepository
from core.models import ClientNote, NoteType

logger = logging.getLogger(__name__)

_EDITABLE_NOTE_FIELDS = frozenset({"content", "type", "tags", "project_id", "is_pinned", "is_resolved"})


class WorkspaceNotesMixin:
    _note_repo: NoteRepository
    _notes: dict[str, ClientNote]

    def list_notes(self, client_id: str) -> list[ClientNote]:
        notes = [n for n in self._notes.values() if n.client_id == client_id]
        # pinned first, then most recently touched
        notes.sort(key=lambda n: n.updated_at or n.created_at or datetime.min.replace(tzinfo=timezone.utc), reverse=True)
        notes.sort(key=lambda n: not n.is_pinned)
        return notes

    def add_note(
        self,
        client_id: str,
        content: str,
        type: NoteType = NoteType.GENERAL,
        tags: list[str] | None = None,
        project_id: str | None = None,
        is_pinned: bool = False,
    ) -> ClientNote:
        with self._lock:
            client = self._require_client(client_id)
            self._check_note_type(NoteType(type))
            self._check_note_project(client.id, project_id)
            note = ClientNote.create(
                client_id=client.id,
                content=content,
                type=type,
                tags=tags,
                project_id=project_id,
                is_pinned=is_pinned,
            )
            self._persist("add note", lambda: self._note_repo.add(note))
            self._notes[note.id] = note
            logger.info("Added %s note %s for client %s", note.type.value, note.id, client.id)
        self._events.notes_changed.emit(note.client_id)
        return note

    def update_note(self, note_id: str, **changes: Any) -> ClientNote:
        unknown = set(changes) - _EDITABLE_NOTE_FIELDS
        if unknown:
            raise ValidationError(
                f"Cannot edit note fields: {', '.join(sorted(unknown))}",
                code="NOTE_FIELD_READONLY",
            )
        with self._lock:
            current = self._require_note(note_id)
            normalized = dict(changes)
            if "content" in normalized:
                if not (normalized["content"] or "").strip():
                    raise ValidationError("Note content cannot be empty.", code="NOTE_CONTENT_EMPTY")
                normalized["content"] = normalized["content"].strip()
            if "type" in normalized:
                normalized["type"] = NoteType(normalized["type"])
                if normalized["type"] != current.type:
                    self._check_note_type(normalized["type"])
            if "tags" in normalized:
                normalized["tags"] = list(normalized["tags"] or [])
            if "project_id" in normalized:
                self._check_note_project(current.client_id, normalized["project_id"])

            updated = replace(current, updated_at=datetime.now(timezone.utc), **normalized)
            self._persist("update note", lambda: self._note_repo.update(updated))
            self._notes[current.id] = updated
        self._events.notes_changed.emit(updated.client_id)
        return updated

    def delete_note(self, note_id: str) -> None:
        with self._lock:
            note = self._require_note(note_id)
            self._persist("delete note", lambda: self._note_repo.delete(note.id))
            del self._notes[note.id]
            logger.info("Deleted note %s", note.id)
        self._events.notes_changed.emit(note.client_id)

    def _require_note(self, note_id: str) -> ClientNote:
        note = self._notes.get(str(note_id))
        if note is None:
            raise NotFoundError("Note not found.", code="NOTE_NOT_FOUND")
        return note

    def _check_note_type(self, note_type: NoteType) -> None:
        if note_type != NoteType.GENERAL:
            self._require_feature("rich_notes", "Rich note types")

    def _check_note_project(self, client_id: str, project_id: str | None) -> None:
        if not project_id:
            return
        project = self._require_project(project_id)
        if project.client_id != client_id:
            raise ValidationError("Project belongs to a different client.", code="NOTE_PROJECT_CLIENT_MISMATCH")


__all__ = ["WorkspaceNotesMixin"]
