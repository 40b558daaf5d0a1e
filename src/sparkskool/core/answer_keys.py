"""Answer key repository.

Answer keys are the graded reference for an exam: the extracted questions,
the exam context used while extracting them and a small metadata block.
All keys live in one JSON list under the store key "spark_skool_answer_keys".
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import structlog

from sparkskool.core.questions import Question
from sparkskool.storage.local_store import LocalStore

logger = structlog.get_logger(__name__)

ANSWER_KEYS_STORAGE_KEY = "spark_skool_answer_keys"


@dataclass
class AnswerKey:
    """A saved answer key."""

    id: str
    questions: list[Question]
    exam_context: str = ""
    timestamp: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "questions": [q.to_dict() for q in self.questions],
            "exam_context": self.exam_context,
            "timestamp": self.timestamp,
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AnswerKey:
        questions = [
            Question.from_dict(q, index=i)
            for i, q in enumerate(data.get("questions") or [])
            if isinstance(q, dict)
        ]
        return cls(
            id=str(data.get("id", "")),
            questions=questions,
            exam_context=data.get("exam_context") or "",
            timestamp=data.get("timestamp") or "",
            metadata=data.get("metadata") or build_metadata(questions),
        )


def build_metadata(questions: list[Question]) -> dict[str, Any]:
    """Question count plus the distinct question types, in first-seen order."""
    types: list[str] = []
    for q in questions:
        if q.type not in types:
            types.append(q.type)
    return {"question_count": len(questions), "types": types}


def _load_raw(store: LocalStore) -> list[dict[str, Any]]:
    return [k for k in store.get_list(ANSWER_KEYS_STORAGE_KEY) if isinstance(k, dict)]


def save_answer_key(
    questions: list[Question],
    exam_context: str = "",
    store: LocalStore | None = None,
) -> AnswerKey:
    """Append a new answer key.

    The id is the current time in milliseconds, bumped if already taken.
    """
    store = store or LocalStore()
    saved: list[AnswerKey] = []

    def append(entries: list[Any]) -> list[Any]:
        existing = [k for k in entries if isinstance(k, dict)]
        taken = {str(k.get("id")) for k in existing}

        key_id = int(time.time() * 1000)
        while str(key_id) in taken:
            key_id += 1

        answer_key = AnswerKey(
            id=str(key_id),
            questions=list(questions),
            exam_context=exam_context or "",
            timestamp=datetime.now(timezone.utc).isoformat(),
            metadata=build_metadata(questions),
        )
        saved.append(answer_key)
        return existing + [answer_key.to_dict()]

    store.update_list(ANSWER_KEYS_STORAGE_KEY, append)
    answer_key = saved[0]

    logger.info("answer_key_saved", id=answer_key.id, questions=len(questions))
    return answer_key


def list_answer_keys(store: LocalStore | None = None) -> list[AnswerKey]:
    """All stored answer keys, oldest first."""
    store = store or LocalStore()
    return [AnswerKey.from_dict(k) for k in _load_raw(store)]


def get_answer_key(key_id: str, store: LocalStore | None = None) -> AnswerKey | None:
    for answer_key in list_answer_keys(store):
        if answer_key.id == str(key_id):
            return answer_key
    return None


def delete_answer_key(key_id: str, store: LocalStore | None = None) -> bool:
    """Remove an answer key. Returns True if one was removed."""
    store = store or LocalStore()
    removed = False

    def remove(entries: list[Any]) -> list[Any]:
        nonlocal removed
        existing = [k for k in entries if isinstance(k, dict)]
        remaining = [k for k in existing if str(k.get("id")) != str(key_id)]
        removed = len(remaining) != len(existing)
        return remaining if removed else entries

    store.update_list(ANSWER_KEYS_STORAGE_KEY, remove)
    if not removed:
        return False

    logger.info("answer_key_deleted", id=key_id)
    return True
