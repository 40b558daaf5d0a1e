"""Teaching materials repository.

Materials are saved teaching content (lesson plans, quizzes, chat outputs)
stored per teacher as one JSON list, newest first, capped at 100 entries.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import structlog

from sparkskool.storage.local_store import LocalStore
from sparkskool.utils.text_utils import first_line_title

logger = structlog.get_logger(__name__)

# =============================================================================
# CONSTANTS
# =============================================================================

TEACHER_ID = "teacher123"
MAX_MATERIALS = 100
CATEGORIES = ("lesson", "quiz", "other")
DEFAULT_CATEGORY = "other"


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class Material:
    """A saved piece of teaching material."""

    id: str
    title: str
    content: str
    category: str
    created_at: str
    user_id: str
    file_type: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "category": self.category,
            "created_at": self.created_at,
            "user_id": self.user_id,
        }
        if self.file_type:
            result["file_type"] = self.file_type
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Material:
        return cls(
            id=data.get("id", ""),
            title=data.get("title", ""),
            content=data.get("content", ""),
            category=data.get("category", DEFAULT_CATEGORY),
            created_at=data.get("created_at", ""),
            user_id=data.get("user_id", TEACHER_ID),
            file_type=data.get("file_type"),
        )


class MaterialValidationError(Exception):
    """Error validating a material."""

    pass


# =============================================================================
# REPOSITORY
# =============================================================================


def _storage_key(user_id: str) -> str:
    return f"materials:{user_id}"


def list_materials(
    user_id: str = TEACHER_ID,
    category: str | None = None,
    store: LocalStore | None = None,
) -> list[Material]:
    """Materials for a user, newest first, optionally filtered by category."""
    store = store or LocalStore()
    materials = [
        Material.from_dict(m)
        for m in store.get_list(_storage_key(user_id))
        if isinstance(m, dict)
    ]
    if category:
        materials = [m for m in materials if m.category == category]
    return materials


def save_material(
    content: str,
    title: str | None = None,
    category: str | None = None,
    file_type: str | None = None,
    user_id: str = TEACHER_ID,
    store: LocalStore | None = None,
) -> Material:
    """Save a new material at the front of the user's list.

    Raises:
        MaterialValidationError: If content is empty
    """
    if not content or not content.strip():
        raise MaterialValidationError("Missing content")

    store = store or LocalStore()
    saved: list[Material] = []

    def prepend(entries: list[Any]) -> list[Any]:
        existing = [m for m in entries if isinstance(m, dict)]
        taken = {m.get("id") for m in existing}

        stamp = int(time.time() * 1000)
        while f"material:{stamp}" in taken:
            stamp += 1

        material = Material(
            id=f"material:{stamp}",
            title=title or first_line_title(content),
            content=content,
            category=category or DEFAULT_CATEGORY,
            created_at=datetime.now(timezone.utc).isoformat(),
            user_id=user_id,
            file_type=file_type,
        )
        saved.append(material)
        return ([material.to_dict()] + existing)[:MAX_MATERIALS]

    store.update_list(_storage_key(user_id), prepend)
    material = saved[0]

    logger.info("material_saved", id=material.id, category=material.category)
    return material


def delete_material(
    material_id: str,
    user_id: str = TEACHER_ID,
    store: LocalStore | None = None,
) -> bool:
    store = store or LocalStore()
    removed = False

    def remove(entries: list[Any]) -> list[Any]:
        nonlocal removed
        existing = [m for m in entries if isinstance(m, dict)]
        remaining = [m for m in existing if m.get("id") != material_id]
        removed = len(remaining) != len(existing)
        return remaining if removed else entries

    store.update_list(_storage_key(user_id), remove)
    if not removed:
        return False
    logger.info("material_deleted", id=material_id)
    return True
