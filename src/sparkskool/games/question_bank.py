"""Quiz question bank for classroom games.

Questions come from three sources queried in parallel:
- the LLM (multiple-choice questions on subject/topic)
- QuizAPI (needs QUIZ_API_KEY)
- Open Trivia DB (no key)

A source that fails contributes nothing. When the pool is still short the
LLM is asked for the remainder; the result is cut to the requested count
and renumbered 1..n.
"""

from __future__ import annotations

import html
import os
import random
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Literal

import httpx
import structlog

from sparkskool.llm.client import LLMClient, LLMError

logger = structlog.get_logger(__name__)

# =============================================================================
# CONSTANTS
# =============================================================================

Difficulty = Literal["easy", "medium", "hard"]

QUIZ_API_URL = "https://quizapi.io/api/v1/questions"
OPEN_TRIVIA_URL = "https://opentdb.com/api.php"
QUIZ_API_KEY_ENV = "QUIZ_API_KEY"

DEFAULT_POINTS = 100
TIME_LIMITS = {"easy": 30, "medium": 20, "hard": 15}
HTTP_TIMEOUT = 10.0

USER_PROMPT = """Generate {count} multiple-choice questions about {subject} - {topic}.
Difficulty level: {difficulty}
Additional context: {context}

Format each question as a JSON object with:
- question (string)
- options (array of 4 strings)
- correctAnswer (string, must match one of the options)
- explanation (string)
- points (number)
- timeLimit (number in seconds)

Make the questions engaging, educational, and appropriate for the difficulty level.
Ensure all questions are factually accurate and well-formatted.
Return the questions as a JSON array."""

SYSTEM_PROMPT = "You are a quiz designer who writes accurate multiple-choice questions for classroom games."


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class GenerationOptions:
    subject: str
    topic: str
    difficulty: str = "medium"
    count: int = 10
    context: str | None = None
    language: str = "en"


@dataclass
class GameQuestion:
    """A timed multiple-choice question."""

    id: int
    question: str
    options: list[str] = field(default_factory=list)
    correct_answer: str = ""
    points: int = DEFAULT_POINTS
    time_limit: int = TIME_LIMITS["medium"]
    explanation: str = ""
    source: str = "llm"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "question": self.question,
            "options": list(self.options),
            "correct_answer": self.correct_answer,
            "points": self.points,
            "time_limit": self.time_limit,
            "explanation": self.explanation,
            "source": self.source,
        }


def time_limit_for(difficulty: str) -> int:
    """Seconds per question: easy 30, medium 20, anything else 15."""
    return TIME_LIMITS.get(difficulty, TIME_LIMITS["hard"])


# =============================================================================
# SOURCES
# =============================================================================


def questions_from_llm(
    options: GenerationOptions,
    client: LLMClient,
    count: int | None = None,
) -> list[GameQuestion]:
    count = options.count if count is None else count
    try:
        raw = client.simple_json_array(
            system_prompt=SYSTEM_PROMPT,
            user_message=USER_PROMPT.format(
                count=count,
                subject=options.subject,
                topic=options.topic,
                difficulty=options.difficulty,
                context=options.context or "None",
            ),
            temperature=0.7,
            max_tokens=2048,
        )
    except LLMError as e:
        logger.error("llm_questions_failed", error=str(e))
        return []

    questions = []
    for index, item in enumerate(raw):
        if not isinstance(item, dict) or not item.get("question"):
            continue
        questions.append(
            GameQuestion(
                id=index + 1,
                question=str(item["question"]),
                options=[str(o) for o in item.get("options") or []],
                correct_answer=str(item.get("correctAnswer", "")),
                points=int(item.get("points") or DEFAULT_POINTS),
                time_limit=int(item.get("timeLimit") or time_limit_for(options.difficulty)),
                explanation=str(item.get("explanation") or ""),
                source="llm",
            )
        )
    return questions


def questions_from_quiz_api(
    options: GenerationOptions,
    http: httpx.Client,
    api_key: str | None = None,
) -> list[GameQuestion]:
    """QuizAPI questions; the correct option is resolved to its text."""
    api_key = api_key or os.environ.get(QUIZ_API_KEY_ENV)
    if not api_key:
        logger.debug("quiz_api_skipped", reason="missing_api_key")
        return []

    try:
        response = http.get(
            QUIZ_API_URL,
            params={"apiKey": api_key, "limit": options.count, "difficulty": options.difficulty},
        )
        response.raise_for_status()
        data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.error("quiz_api_failed", error=str(e))
        return []

    questions = []
    for index, item in enumerate(data if isinstance(data, list) else []):
        answers = item.get("answers") or {}
        correct_flags = item.get("correct_answers") or {}
        correct_key = next(
            (k.replace("_correct", "") for k, v in correct_flags.items() if v == "true"),
            None,
        )
        questions.append(
            GameQuestion(
                id=index + 1,
                question=str(item.get("question", "")),
                options=[str(v) for v in answers.values() if v],
                correct_answer=str(answers.get(correct_key) or "") if correct_key else "",
                time_limit=time_limit_for(options.difficulty),
                explanation=str(item.get("explanation") or ""),
                source="quizapi",
            )
        )
    return questions


def questions_from_open_trivia(
    options: GenerationOptions,
    http: httpx.Client,
    rng: random.Random | None = None,
) -> list[GameQuestion]:
    """Open Trivia DB multiple-choice questions, options shuffled."""
    rng = rng or random.Random()
    difficulty = options.difficulty if options.difficulty in ("medium", "hard") else "easy"

    try:
        response = http.get(
            OPEN_TRIVIA_URL,
            params={"amount": options.count, "difficulty": difficulty, "type": "multiple"},
        )
        response.raise_for_status()
        results = response.json().get("results") or []
    except (httpx.HTTPError, ValueError, AttributeError) as e:
        logger.error("open_trivia_failed", error=str(e))
        return []

    questions = []
    for index, item in enumerate(results):
        correct = html.unescape(item.get("correct_answer", ""))
        choices = [html.unescape(a) for a in item.get("incorrect_answers", [])] + [correct]
        rng.shuffle(choices)
        questions.append(
            GameQuestion(
                id=index + 1,
                question=html.unescape(item.get("question", "")),
                options=choices,
                correct_answer=correct,
                time_limit=time_limit_for(options.difficulty),
                source="opentdb",
            )
        )
    return questions


# =============================================================================
# MAIN FUNCTION
# =============================================================================


def generate_questions(
    options: GenerationOptions,
    client: LLMClient | None = None,
    http: httpx.Client | None = None,
    rng: random.Random | None = None,
) -> list[GameQuestion]:
    """Collect up to options.count questions from all sources."""
    client = client or LLMClient()
    if http is None:
        with httpx.Client(timeout=HTTP_TIMEOUT) as owned:
            return generate_questions(options, client=client, http=owned, rng=rng)

    sources: list[Callable[[], list[GameQuestion]]] = [
        lambda: questions_from_llm(options, client),
        lambda: questions_from_quiz_api(options, http),
        lambda: questions_from_open_trivia(options, http, rng),
    ]

    questions: list[GameQuestion] = []
    with ThreadPoolExecutor(max_workers=len(sources)) as pool:
        futures = [pool.submit(source) for source in sources]
        for future in futures:
            try:
                questions.extend(future.result())
            except Exception as e:
                logger.error("question_source_failed", error=str(e))

    if len(questions) < options.count:
        remaining = options.count - len(questions)
        logger.info("question_top_up", remaining=remaining)
        questions.extend(questions_from_llm(options, client, count=remaining))

    questions = questions[: options.count]
    for index, question in enumerate(questions):
        question.id = index + 1

    logger.info("questions_generated", count=len(questions), requested=options.count)
    return questions
