"""Sticky notes repository.

Notes share the "teacherTasks" list with the task board and are told apart
by category "note"; entries of other categories are preserved untouched.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Literal

import structlog

from sparkskool.storage.local_store import LocalStore

logger = structlog.get_logger(__name__)

TASKS_STORAGE_KEY = "teacherTasks"
NOTE_CATEGORY = "note"
NOTE_COLORS = ("yellow", "blue", "green", "pink", "purple")
DEFAULT_COLOR = "yellow"

ViewMode = Literal["all", "pinned", "archived"]


@dataclass
class Note:
    """A sticky note."""

    id: str
    content: str
    created_at: str
    color: str = DEFAULT_COLOR
    pinned: bool = False
    archived: bool = False
    last_edited: str | None = None
    category: str = NOTE_CATEGORY

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = {
            "id": self.id,
            "content": self.content,
            "category": self.category,
            "created_at": self.created_at,
            "color": self.color,
            "pinned": self.pinned,
            "archived": self.archived,
        }
        if self.last_edited:
            result["last_edited"] = self.last_edited
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Note:
        return cls(
            id=str(data.get("id", "")),
            content=data.get("content", ""),
            created_at=data.get("created_at", ""),
            color=data.get("color") or DEFAULT_COLOR,
            pinned=bool(data.get("pinned", False)),
            archived=bool(data.get("archived", False)),
            last_edited=data.get("last_edited"),
        )


class NoteValidationError(Exception):
    """Error validating a note."""

    pass


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _normalize_color(color: str | None) -> str:
    return color if color in NOTE_COLORS else DEFAULT_COLOR


def _load_all(store: LocalStore) -> list[dict[str, Any]]:
    return [t for t in store.get_list(TASKS_STORAGE_KEY) if isinstance(t, dict)]


def _is_note(entry: dict[str, Any]) -> bool:
    return entry.get("category") == NOTE_CATEGORY


def list_notes(view: ViewMode = "all", store: LocalStore | None = None) -> list[Note]:
    """Notes visible in a view, pinned first then newest first.

    Views: "all" hides archived notes, "pinned" shows pinned non-archived
    notes, "archived" shows only archived notes.
    """
    store = store or LocalStore()
    notes = [Note.from_dict(t) for t in _load_all(store) if _is_note(t)]

    if view == "pinned":
        notes = [n for n in notes if n.pinned and not n.archived]
    elif view == "archived":
        notes = [n for n in notes if n.archived]
    else:
        notes = [n for n in notes if not n.archived]

    notes.sort(key=lambda n: n.created_at, reverse=True)
    notes.sort(key=lambda n: not n.pinned)
    return notes


def add_note(
    content: str,
    color: str | None = None,
    store: LocalStore | None = None,
) -> Note:
    """Create a note.

    Raises:
        NoteValidationError: If content is blank
    """
    if not content or not content.strip():
        raise NoteValidationError("Note content is empty")

    store = store or LocalStore()
    saved: list[Note] = []

    def prepend(entries: list[Any]) -> list[Any]:
        existing = [t for t in entries if isinstance(t, dict)]
        taken = {str(t.get("id")) for t in existing}

        stamp = int(time.time() * 1000)
        while str(stamp) in taken:
            stamp += 1

        note = Note(id=str(stamp), content=content, created_at=_now(), color=_normalize_color(color))
        saved.append(note)
        return [note.to_dict()] + existing

    store.update_list(TASKS_STORAGE_KEY, prepend)
    note = saved[0]

    logger.info("note_added", id=note.id)
    return note


def _modify_note(
    note_id: str,
    change: Callable[[Note], None],
    store: LocalStore | None = None,
) -> Note | None:
    """Apply change to one note inside a single locked store update."""
    store = store or LocalStore()
    updated: Note | None = None

    def apply(entries: list[Any]) -> list[Any]:
        nonlocal updated
        existing = [t for t in entries if isinstance(t, dict)]
        for i, entry in enumerate(existing):
            if not _is_note(entry) or str(entry.get("id")) != str(note_id):
                continue
            note = Note.from_dict(entry)
            change(note)
            note.last_edited = _now()
            existing[i] = note.to_dict()
            updated = note
            return existing
        return entries

    store.update_list(TASKS_STORAGE_KEY, apply)
    if updated is not None:
        logger.info("note_updated", id=note_id)
    return updated


def update_note(
    note_id: str,
    content: str | None = None,
    color: str | None = None,
    pinned: bool | None = None,
    archived: bool | None = None,
    store: LocalStore | None = None,
) -> Note | None:
    """Update fields of a note and stamp last_edited.

    Returns:
        The updated note, or None if no note has that id
    """
    if content is not None and not content.strip():
        raise NoteValidationError("Note content is empty")

    def change(note: Note) -> None:
        if content is not None:
            note.content = content
        if color is not None:
            note.color = _normalize_color(color)
        if pinned is not None:
            note.pinned = pinned
        if archived is not None:
            note.archived = archived

    return _modify_note(note_id, change, store)


def toggle_pin(note_id: str, store: LocalStore | None = None) -> Note | None:
    def flip(note: Note) -> None:
        note.pinned = not note.pinned

    return _modify_note(note_id, flip, store)


def toggle_archive(note_id: str, store: LocalStore | None = None) -> Note | None:
    def flip(note: Note) -> None:
        note.archived = not note.archived

    return _modify_note(note_id, flip, store)


def get_note(note_id: str, store: LocalStore | None = None) -> Note | None:
    store = store or LocalStore()
    for entry in _load_all(store):
        if _is_note(entry) and str(entry.get("id")) == str(note_id):
            return Note.from_dict(entry)
    return None


def delete_note(note_id: str, store: LocalStore | None = None) -> bool:
    """Remove a note. Returns True if one was removed."""
    store = store or LocalStore()
    removed = False

    def remove(entries: list[Any]) -> list[Any]:
        nonlocal removed
        existing = [t for t in entries if isinstance(t, dict)]
        remaining = [
            t for t in existing if not (_is_note(t) and str(t.get("id")) == str(note_id))
        ]
        removed = len(remaining) != len(existing)
        return remaining if removed else entries

    store.update_list(TASKS_STORAGE_KEY, remove)
    if not removed:
        return False

    logger.info("note_deleted", id=note_id)
    return True
