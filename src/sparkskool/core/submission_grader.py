"""Submission grading module.

Responsibilities:
- Extract an answer key (questions + expected answers) from exam text
- Grade a whole student submission against an answer key
- Grade per question over the full submission text (fast path)
- Short free-text helpers: exam context, feedback, improvement tips

All LLM calls go through LLMClient, which retries on provider rate limits.
Per-question grading fans out over a thread pool and keeps question order.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, TypeVar

import structlog

from sparkskool.config.app_config import GradingConfig, load_app_config
from sparkskool.core.questions import Question, GradingResult
from sparkskool.llm.client import LLMClient, LLMError, LLMResponseError

logger = structlog.get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")

# =============================================================================
# CONSTANTS
# =============================================================================

MIN_SUBMISSION_LENGTH = 10
NO_ANSWER = "NO_ANSWER"

# =============================================================================
# PROMPTS
# =============================================================================

SYSTEM_PROMPT_ANSWER_KEY = """You are an expert at analyzing exam questions and providing precise answers.

For each question:
1. Identify the specific part of the text that contains the answer
2. Extract ONLY the relevant information needed to answer the question
3. Provide a clear, concise answer
4. Include paragraph reference (e.g., "paragraph I") if mentioned in the question

Return a JSON array of questions with this structure:
{
  "id": number,
  "type": "multiple-choice/short-answer/etc",
  "question": "the question text",
  "answer": "precise answer from the text",
  "explanation": "brief explanation with reference to specific text",
  "points": 10,
  "context": "only the specific sentence/part relevant to this question"
}"""

USER_PROMPT_ANSWER_KEY = """Text to analyze:

{text}"""

SYSTEM_PROMPT_EXTRACT_ANSWERS = """You are a very strict exam grader. Your task is to extract ONLY clearly stated answers from the student submission.

STRICT RULES:
1. If you cannot find an explicit answer to a question, mark it as "NO_ANSWER"
2. Do not infer or guess answers from context
3. Do not give partial credit for vague responses
4. Only extract text that directly answers the question
5. Mark any unclear or ambiguous responses as "NO_ANSWER"

Return a JSON array in this exact format:
[{
  "questionNumber": 1,
  "studentAnswer": "EXACT answer text found, or 'NO_ANSWER' if no clear answer exists",
  "workingShown": "EXACT calculations/work shown, or 'NONE' if no work found",
  "confidence": 0-1 (how confident you are this is the actual answer)
}]"""

USER_PROMPT_EXTRACT_ANSWERS = """Questions to grade:
{answer_key}

Student's submission:
{submission}"""

SYSTEM_PROMPT_STRICT_GRADE = """You are a strict exam grader. Grade according to these STRICT rules:

1. ZERO SCORE if:
   - Answer is blank or irrelevant
   - Answer is completely wrong
   - Answer lacks required explanation/working
   - Answer is too vague or general

2. PARTIAL CREDIT (1-49%):
   - Shows some understanding but major errors
   - Missing crucial elements
   - Incorrect methodology but right direction

3. PASSING GRADE (50-79%):
   - Mostly correct but with minor errors
   - All main points covered but lacking detail
   - Correct methodology with small mistakes

4. FULL CREDIT (80-100%):
   - Completely correct answer
   - Clear explanation/working shown
   - Demonstrates full understanding

Return ONLY a JSON object:
{
  "score": 0-100,
  "feedback": "detailed explanation of grade",
  "isCorrect": boolean,
  "confidence": 0-1,
  "partialCredit": 0-100,
  "matchType": "none|partial|exact"
}"""

USER_PROMPT_STRICT_GRADE = """Question: {question}
Correct Answer: {correct_answer}
Student Answer: {student_answer}
Working Shown: {working_shown}
Question Type: {question_type}"""

SYSTEM_PROMPT_PER_QUESTION = "You are an expert tutor who grades exam answers fairly and accurately."

USER_PROMPT_PER_QUESTION = """You are grading a student's answer to an exam question. Be fair and objective.

EXAM CONTEXT: {exam_context}

QUESTION ({question_type}): {question}
CORRECT ANSWER: {correct_answer}

STUDENT'S SUBMISSION:
{submission}

Please analyze this submission carefully to find the student's answer to this specific question.
Rate the answer on a scale of 0-100 based on accuracy and completeness.
Provide specific feedback on what was correct and what could be improved.

Return ONLY a JSON object in this format (nothing else):
{{
  "score": 0-100,
  "feedback": "detailed feedback on the answer",
  "isCorrect": boolean,
  "confidence": 0-1,
  "matchType": "none | partial | exact"
}}"""

SYSTEM_PROMPT_CONTEXT = (
    "Analyze the exam text and provide a brief context summary. "
    "Focus on subject area, difficulty level, and key topics covered."
)

SYSTEM_PROMPT_FEEDBACK = (
    "Generate constructive feedback for the student's answer. "
    "Explain what was correct and what could be improved."
)

SYSTEM_PROMPT_IMPROVEMENT = (
    "Suggest specific ways the student can improve their answer. "
    "Provide study tips and resources if relevant."
)


# =============================================================================
# EXCEPTIONS
# =============================================================================


class GradingError(Exception):
    """Error during grading."""

    pass


class GradingConfigError(GradingError):
    """The grading service is not configured (missing API key)."""

    pass


# =============================================================================
# HELPERS
# =============================================================================


def _clamp(value: Any, low: float, high: float, default: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return max(low, min(high, number))


def _fan_out(fn: Callable[[T], R], items: list[T], max_workers: int) -> list[R]:
    """Apply fn to every item concurrently, results in input order."""
    if not items:
        return []
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(items)))) as pool:
        return list(pool.map(fn, items))


def _require_api_key(client: LLMClient) -> None:
    if not client.has_api_key:
        raise GradingConfigError(
            f"No API key configured for provider '{client.config.provider}'"
        )


def format_answer_key(answer_key: list[Question]) -> str:
    """Render questions as "id. question" lines."""
    return "\n".join(f"{q.id}. {q.question}" for q in answer_key)


def _blank_result(question: Question, feedback: str) -> GradingResult:
    return GradingResult(
        question_id=question.id,
        score=0,
        feedback=feedback,
        is_correct=False,
        confidence=1.0,
        partial_credit=0,
        match_type="none",
    )


# =============================================================================
# ANSWER KEY EXTRACTION
# =============================================================================


def extract_answer_key(
    text: str,
    context: str | None = None,
    client: LLMClient | None = None,
) -> list[Question]:
    """Extract questions and their answers from exam text.

    Args:
        text: Exam text containing questions (and ideally answers)
        context: Optional reading passage / extra context appended to the text
        client: LLM client (created if not provided)

    Returns:
        Questions with id, type, answer, points and context filled in

    Raises:
        GradingConfigError: If the provider has no API key
        GradingError: If the LLM reply cannot be parsed
    """
    full_text = (text or "").strip()
    if context and context.strip():
        full_text = f"{full_text}\n\n{context.strip()}"

    if client is None:
        client = LLMClient()
    _require_api_key(client)

    if not full_text:
        return []

    try:
        raw_questions = client.simple_json_array(
            system_prompt=SYSTEM_PROMPT_ANSWER_KEY,
            user_message=USER_PROMPT_ANSWER_KEY.format(text=full_text),
            temperature=0.1,
        )
    except LLMError as e:
        logger.error("answer_key_extraction_failed", error=str(e))
        raise GradingError(f"Failed to extract answer key: {e}") from e

    questions = [
        Question.from_dict(item, index=i)
        for i, item in enumerate(raw_questions)
        if isinstance(item, dict)
    ]
    questions = [q for q in questions if q.question]

    logger.info("answer_key_extracted", count=len(questions))
    return questions


# =============================================================================
# WHOLE-SUBMISSION GRADING
# =============================================================================


def _extract_student_answers(
    client: LLMClient,
    answer_key: list[Question],
    student_text: str,
) -> dict[str, dict[str, Any]]:
    """One LLM call mapping question number -> extracted answer record."""
    try:
        raw_answers = client.simple_json_array(
            system_prompt=SYSTEM_PROMPT_EXTRACT_ANSWERS,
            user_message=USER_PROMPT_EXTRACT_ANSWERS.format(
                answer_key=format_answer_key(answer_key),
                submission=student_text,
            ),
            temperature=0.1,
        )
    except LLMResponseError as e:
        logger.warning("student_answers_unparsable", error=str(e))
        return {}

    answers: dict[str, dict[str, Any]] = {}
    for item in raw_answers:
        if isinstance(item, dict) and item.get("questionNumber") is not None:
            answers[str(item["questionNumber"])] = item
    return answers


def _grade_extracted_answer(
    client: LLMClient,
    question: Question,
    extracted: dict[str, Any],
    pass_threshold: int,
) -> GradingResult:
    try:
        grading = client.simple_json(
            system_prompt=SYSTEM_PROMPT_STRICT_GRADE,
            user_message=USER_PROMPT_STRICT_GRADE.format(
                question=question.question,
                correct_answer=question.answer,
                student_answer=extracted.get("studentAnswer", ""),
                working_shown=extracted.get("workingShown", "NONE"),
                question_type=question.type,
            ),
            temperature=0.1,
        )
    except LLMResponseError as e:
        logger.warning("grading_unparsable", question_id=question.id, error=str(e))
        return GradingResult(
            question_id=question.id,
            score=0,
            feedback="Error grading answer",
            is_correct=False,
            confidence=1.0,
            partial_credit=0,
            match_type="error",
        )

    score = int(round(_clamp(grading.get("score"), 0, 100, 0)))
    return GradingResult(
        question_id=question.id,
        score=score,
        feedback=grading.get("feedback") or "Unable to grade answer",
        is_correct=score >= pass_threshold,
        confidence=_clamp(grading.get("confidence"), 0.0, 1.0, 1.0),
        partial_credit=int(round(_clamp(grading.get("partialCredit"), 0, 100, 0))),
        match_type=grading.get("matchType") or "none",
    )


def grade_student_submission(
    answer_key: list[Question],
    student_text: str | None,
    client: LLMClient | None = None,
    grading_config: GradingConfig | None = None,
) -> list[GradingResult]:
    """Grade a student's submission against an answer key.

    Blank or near-empty submissions score 0 everywhere without calling the
    LLM. Otherwise the student's answers are extracted in one call, and
    every confidently extracted answer is graded by a strict rubric.

    Raises:
        GradingError: If the LLM is unreachable or keeps failing
    """
    text = (student_text or "").strip()
    if len(text) < MIN_SUBMISSION_LENGTH:
        logger.info("blank_submission", length=len(text))
        return [
            _blank_result(q, "No answer provided - received blank or invalid submission")
            for q in answer_key
        ]

    if grading_config is None:
        grading_config = load_app_config().grading
    if client is None:
        client = LLMClient(model=grading_config.model)

    try:
        extracted = _extract_student_answers(client, answer_key, text)

        def grade_one(question: Question) -> GradingResult:
            answer = extracted.get(str(question.id))
            if (
                answer is None
                or answer.get("studentAnswer") == NO_ANSWER
                or _clamp(answer.get("confidence"), 0.0, 1.0, 0.0)
                < grading_config.min_extraction_confidence
            ):
                return _blank_result(question, "No valid answer provided for this question")
            return _grade_extracted_answer(
                client, question, answer, grading_config.pass_threshold
            )

        results = _fan_out(grade_one, answer_key, grading_config.max_workers)
    except LLMError as e:
        logger.error("submission_grading_failed", error=str(e))
        raise GradingError(f"Failed to grade submission: {e}") from e

    logger.info(
        "submission_graded",
        questions=len(results),
        correct=sum(1 for r in results if r.is_correct),
    )
    return results


# =============================================================================
# PER-QUESTION GRADING
# =============================================================================


def grade_submission_per_question(
    extracted_text: str,
    questions: list[Question],
    exam_context: str | None = None,
    client: LLMClient | None = None,
    grading_config: GradingConfig | None = None,
) -> list[GradingResult]:
    """Grade each question over the full submission text.

    One LLM call per question on the fast model. Failures are reported
    per question and never abort the whole submission.

    Raises:
        GradingError: If there is no text or no questions
        GradingConfigError: If the provider has no API key
    """
    if not extracted_text or not questions:
        raise GradingError("Missing required data: text content or questions")

    if grading_config is None:
        grading_config = load_app_config().grading
    if client is None:
        client = LLMClient()
    _require_api_key(client)

    def grade_one(question: Question) -> GradingResult:
        try:
            result = client.simple_json(
                system_prompt=SYSTEM_PROMPT_PER_QUESTION,
                user_message=USER_PROMPT_PER_QUESTION.format(
                    exam_context=exam_context or "Not provided",
                    question_type=question.type,
                    question=question.question,
                    correct_answer=question.answer,
                    submission=extracted_text,
                ),
                temperature=0.1,
                max_tokens=1000,
                model=grading_config.fast_model,
            )
        except LLMResponseError as e:
            logger.warning("per_question_unparsable", question_id=question.id, error=str(e))
            return GradingResult(
                question_id=question.id,
                score=0,
                feedback="Error processing this answer. Please check manually.",
                is_correct=False,
                confidence=0.5,
                match_type="error",
            )
        except LLMError as e:
            logger.error("per_question_failed", question_id=question.id, error=str(e))
            return GradingResult(
                question_id=question.id,
                score=0,
                feedback="Error grading this question. Technical issue encountered.",
                is_correct=False,
                confidence=0.0,
                match_type="error",
            )

        score = int(round(_clamp(result.get("score"), 0, 100, 0)))
        return GradingResult(
            question_id=question.id,
            score=score,
            feedback=result.get("feedback") or "",
            is_correct=bool(result.get("isCorrect", score >= grading_config.pass_threshold)),
            confidence=_clamp(result.get("confidence"), 0.0, 1.0, 0.5),
            match_type=result.get("matchType") or "none",
        )

    logger.info("grading_per_question", questions=len(questions))
    return _fan_out(grade_one, questions, grading_config.max_workers)


# =============================================================================
# TEXT HELPERS
# =============================================================================


def analyze_exam_context(text: str, client: LLMClient | None = None) -> str:
    """Summarize subject, difficulty and key topics of an exam."""
    client = client or LLMClient()
    return client.simple_chat(
        system_prompt=SYSTEM_PROMPT_CONTEXT,
        user_message=text,
        temperature=0.1,
    )


def generate_feedback(
    question: Question,
    student_answer: str,
    client: LLMClient | None = None,
) -> str:
    """Constructive feedback on one answer."""
    client = client or LLMClient()
    return client.simple_chat(
        system_prompt=SYSTEM_PROMPT_FEEDBACK,
        user_message=(
            f"Question: {question.question}\n"
            f"Correct Answer: {question.answer}\n"
            f"Student Answer: {student_answer}"
        ),
        temperature=0.7,
    )


def suggest_improvement(
    question: Question,
    student_answer: str,
    client: LLMClient | None = None,
) -> str:
    client = client or LLMClient()
    return client.simple_chat(
        system_prompt=SYSTEM_PROMPT_IMPROVEMENT,
        user_message=(
            f"Question: {question.question}\n"
            f"Student Answer: {student_answer}\n"
            f"Expected Answer: {question.answer}"
        ),
        temperature=0.7,
    )


# =============================================================================
# SUMMARY
# =============================================================================


def summarize_results(
    results: list[GradingResult],
    answer_key: list[Question],
) -> dict[str, Any]:
    """Points earned vs. possible, weighting each score by question points.

    Returns:
        Dictionary with earned/possible points, percentage and counts
    """
    points_by_id = {str(q.id): q.points for q in answer_key}

    possible = sum(points_by_id.values())
    earned = 0.0
    for result in results:
        points = points_by_id.get(str(result.question_id), 0)
        earned += points * result.score / 100

    return {
        "points_earned": round(earned, 2),
        "points_possible": possible,
        "percentage": round(earned / possible * 100, 1) if possible else 0.0,
        "total_questions": len(answer_key),
        "correct_count": sum(1 for r in results if r.is_correct),
    }
