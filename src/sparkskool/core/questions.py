"""Question and grading records shared by extraction, answer keys and grading."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

DEFAULT_POINTS = 10


@dataclass
class Question:
    """An exam question with its expected answer."""

    id: int | str
    question: str
    answer: str = ""
    type: str = "short-answer"
    explanation: str = ""
    points: int = DEFAULT_POINTS
    options: list[str] = field(default_factory=list)
    context: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "id": self.id,
            "question": self.question,
            "answer": self.answer,
            "type": self.type,
            "explanation": self.explanation,
            "points": self.points,
        }
        if self.options:
            result["options"] = list(self.options)
        if self.context is not None:
            result["context"] = self.context
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any], index: int = 0) -> Question:
        """Build from a loose dict (LLM output or stored JSON).

        Missing ids fall back to index + 1 and missing points to 10.
        """
        options = data.get("options") or []
        if not isinstance(options, list):
            options = []

        try:
            points = int(data.get("points") or DEFAULT_POINTS)
        except (TypeError, ValueError):
            points = DEFAULT_POINTS

        return cls(
            id=data.get("id") or index + 1,
            question=str(data.get("question") or "").strip(),
            answer=str(data.get("answer") or ""),
            type=str(data.get("type") or data.get("questionType") or "short-answer"),
            explanation=str(data.get("explanation") or ""),
            points=points,
            options=[str(o) for o in options],
            context=data.get("context") or None,
        )


@dataclass
class GradingResult:
    """Grade for one question of a submission."""

    question_id: int | str
    score: int
    feedback: str
    is_correct: bool
    confidence: float
    partial_credit: int = 0
    match_type: str = "none"

    def to_dict(self) -> dict[str, Any]:
        return {
            "question_id": self.question_id,
            "score": self.score,
            "feedback": self.feedback,
            "is_correct": self.is_correct,
            "confidence": self.confidence,
            "partial_credit": self.partial_credit,
            "match_type": self.match_type,
        }
