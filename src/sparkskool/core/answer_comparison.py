"""Answer comparison module.

Compares a single student answer with the expected answer:
- Objective questions (multiple-choice, true-false) use a normalized
  string-similarity score with three tiers (exact / partial / incorrect)
- Short answers, essays and other types are graded by the LLM, each with
  its own fallback when the LLM call fails

Scores are on a 0-100 scale; confidence is 0.0-1.0.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog

from sparkskool.llm.client import LLMClient, LLMError
from sparkskool.utils.text_utils import dice_coefficient, normalize_answer

logger = structlog.get_logger(__name__)

# =============================================================================
# CONSTANTS
# =============================================================================

OBJECTIVE_TYPES = ("multiple-choice", "true-false")

EXACT_THRESHOLD = 0.8
PARTIAL_THRESHOLD = 0.5
PARTIAL_WEIGHT = 70
CORRECT_SCORE = 80

# =============================================================================
# PROMPTS
# =============================================================================

SYSTEM_PROMPT_SHORT = "You are an AI grading assistant with expertise in evaluating student answers."

USER_PROMPT_SHORT = """Grade the following student's answer to a short answer question:

Question answer key: "{correct_answer}"
Student's answer: "{student_answer}"

Score the answer from 0-100 based on accuracy and completeness.
Provide constructive feedback.
Indicate if the answer is correct (80+ points), partially correct (40-79 points), or incorrect (0-39 points).
Rate your confidence in this assessment from 0.0 to 1.0.
Specify the match type as one of: "exact", "semantic", "partial", or "incorrect".

Respond in JSON format with the following fields:
{{
  "score": <number>,
  "feedback": "<feedback>",
  "isCorrect": <boolean>,
  "confidence": <number>,
  "matchType": "<match_type>"
}}"""

SYSTEM_PROMPT_ESSAY = "You are an AI grading assistant with expertise in evaluating essay answers."

USER_PROMPT_ESSAY = """Grade the following student's essay answer:

Expected key points: "{correct_answer}"
Student's answer: "{student_answer}"

Evaluate the essay on the following criteria:
1. Content (50%): Inclusion of key points and accuracy
2. Organization (20%): Logical flow and structure
3. Evidence (20%): Support for arguments
4. Language (10%): Grammar and clarity

Score the answer from 0-100.
Provide detailed, constructive feedback.
Rate your confidence in this assessment from 0.0 to 1.0.

Respond in JSON format with the following fields:
{{
  "score": <number>,
  "feedback": "<feedback>",
  "isCorrect": <boolean>,
  "confidence": <number>,
  "matchType": "essay"
}}"""

SYSTEM_PROMPT_GENERIC = "You are an AI grading assistant that objectively evaluates student answers."

USER_PROMPT_GENERIC = """Grade the following student's answer:

Question type: {question_type}
Expected answer: "{correct_answer}"
Student's answer: "{student_answer}"

Score the answer from 0-100.
Provide constructive feedback.
Indicate if the answer is correct (score >= 80).
Rate your confidence in this assessment from 0.0 to 1.0.
Specify the match type as one of: "exact", "semantic", "partial", or "incorrect".

Respond in JSON format with the following fields:
{{
  "score": <number>,
  "feedback": "<feedback>",
  "isCorrect": <boolean>,
  "confidence": <number>,
  "matchType": "<match_type>"
}}"""


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class ComparisonResult:
    """Outcome of comparing one answer."""

    score: int
    feedback: str
    is_correct: bool
    confidence: float
    match_type: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "feedback": self.feedback,
            "is_correct": self.is_correct,
            "confidence": self.confidence,
            "match_type": self.match_type,
        }


# =============================================================================
# HELPERS
# =============================================================================


def _clamp_score(value: Any) -> int:
    try:
        score = float(value)
    except (TypeError, ValueError):
        return 0
    return int(round(max(0.0, min(100.0, score))))


def _clamp_confidence(value: Any, default: float) -> float:
    try:
        confidence = float(value)
    except (TypeError, ValueError):
        return default
    return max(0.0, min(1.0, confidence))


def _similarity(student_answer: str, correct_answer: str) -> float:
    return dice_coefficient(normalize_answer(student_answer), normalize_answer(correct_answer))


def _compare_objective(student_answer: str, correct_answer: str) -> ComparisonResult:
    """Three-tier similarity comparison for objective questions."""
    similarity = _similarity(student_answer, correct_answer)

    if similarity > EXACT_THRESHOLD:
        return ComparisonResult(
            score=100,
            feedback="Correct! Your answer matches the expected response.",
            is_correct=True,
            confidence=similarity,
            match_type="exact",
        )
    if similarity > PARTIAL_THRESHOLD:
        return ComparisonResult(
            score=round(similarity * PARTIAL_WEIGHT),
            feedback="Partially correct. Your answer contains some elements of the correct response.",
            is_correct=False,
            confidence=similarity,
            match_type="partial",
        )
    return ComparisonResult(
        score=0,
        feedback=f"Incorrect. The correct answer is: {correct_answer}",
        is_correct=False,
        confidence=1 - similarity,
        match_type="incorrect",
    )


def _evaluate_short_answer(
    client: LLMClient,
    student_answer: str,
    correct_answer: str,
) -> ComparisonResult:
    """LLM grading for short answers, similarity fallback on failure."""
    try:
        result = client.simple_json(
            system_prompt=SYSTEM_PROMPT_SHORT,
            user_message=USER_PROMPT_SHORT.format(
                correct_answer=correct_answer,
                student_answer=student_answer,
            ),
            temperature=0.3,
        )
        return ComparisonResult(
            score=_clamp_score(result.get("score", 0)),
            feedback=result.get("feedback") or "Unable to evaluate answer.",
            is_correct=bool(result.get("isCorrect", False)),
            confidence=_clamp_confidence(result.get("confidence"), 0.5),
            match_type=result.get("matchType") or "incorrect",
        )
    except LLMError as e:
        logger.error("short_answer_llm_failed", error=str(e))

    score = round(_similarity(student_answer, correct_answer) * 100)
    if score >= CORRECT_SCORE:
        match_type = "semantic"
    elif score >= 40:
        match_type = "partial"
    else:
        match_type = "incorrect"

    return ComparisonResult(
        score=score,
        feedback="Your answer was evaluated using text similarity.",
        is_correct=score >= CORRECT_SCORE,
        confidence=0.5,
        match_type=match_type,
    )


def _evaluate_essay(
    client: LLMClient,
    student_answer: str,
    correct_answer: str,
) -> ComparisonResult:
    """Rubric-based essay grading."""
    try:
        result = client.simple_json(
            system_prompt=SYSTEM_PROMPT_ESSAY,
            user_message=USER_PROMPT_ESSAY.format(
                correct_answer=correct_answer,
                student_answer=student_answer,
            ),
            temperature=0.3,
        )
    except LLMError as e:
        logger.error("essay_llm_failed", error=str(e))
        return ComparisonResult(
            score=50,
            feedback="Your essay was received but could not be fully evaluated.",
            is_correct=False,
            confidence=0.3,
            match_type="essay",
        )

    score = _clamp_score(result.get("score", 0))
    return ComparisonResult(
        score=score,
        feedback=result.get("feedback") or "Unable to evaluate essay.",
        is_correct=score >= CORRECT_SCORE,
        confidence=_clamp_confidence(result.get("confidence"), 0.5),
        match_type="essay",
    )


def _evaluate_generic(
    client: LLMClient,
    student_answer: str,
    correct_answer: str,
    question_type: str,
) -> ComparisonResult:
    try:
        result = client.simple_json(
            system_prompt=SYSTEM_PROMPT_GENERIC,
            user_message=USER_PROMPT_GENERIC.format(
                question_type=question_type,
                correct_answer=correct_answer,
                student_answer=student_answer,
            ),
            temperature=0.3,
        )
    except LLMError as e:
        logger.error("generic_llm_failed", question_type=question_type, error=str(e))
        return ComparisonResult(
            score=0,
            feedback="Your answer could not be evaluated at this time.",
            is_correct=False,
            confidence=0.1,
            match_type="incorrect",
        )

    return ComparisonResult(
        score=_clamp_score(result.get("score", 0)),
        feedback=result.get("feedback") or "Unable to evaluate answer.",
        is_correct=bool(result.get("isCorrect", False)),
        confidence=_clamp_confidence(result.get("confidence"), 0.5),
        match_type=result.get("matchType") or "incorrect",
    )


# =============================================================================
# MAIN FUNCTION
# =============================================================================


def compare_answers(
    student_answer: str | None,
    correct_answer: str,
    question_type: str,
    client: LLMClient | None = None,
) -> ComparisonResult:
    """Compare a student's answer with the expected one.

    Args:
        student_answer: The student's answer (None or blank = no answer)
        correct_answer: The answer key entry
        question_type: multiple-choice, true-false, short-answer, essay or other
        client: LLM client for non-objective types (created lazily if needed)

    Returns:
        ComparisonResult with a 0-100 score
    """
    if not student_answer or not student_answer.strip():
        return ComparisonResult(
            score=0,
            feedback="No answer was provided.",
            is_correct=False,
            confidence=1.0,
            match_type="no-answer",
        )

    if question_type in OBJECTIVE_TYPES:
        return _compare_objective(student_answer, correct_answer)

    if client is None:
        client = LLMClient()

    if question_type == "short-answer":
        return _evaluate_short_answer(client, student_answer, correct_answer)

    if question_type == "essay":
        return _evaluate_essay(client, student_answer, correct_answer)

    return _evaluate_generic(client, student_answer, correct_answer, question_type)
