"""Question extraction module.

Turns the raw text of an exam (typed, or extracted from a PDF/photo by the
caller) into a list of Question records.

Pipeline:
1. Classify lines with regex heuristics to find question starts
2. For each question block, read answer/options/explanation markers
3. Ask the LLM only for blocks the heuristics cannot resolve, or for the
   whole document when no question start is found
4. If the pass takes longer than the deadline (or fails), fall back to
   create_basic_questions(), which never calls the LLM
"""

from __future__ import annotations

import re
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field

import structlog

from sparkskool.core.questions import Question
from sparkskool.llm.client import LLMClient, LLMError

logger = structlog.get_logger(__name__)

# =============================================================================
# PATTERNS
# =============================================================================

QUESTION_PREFIX = re.compile(r"^(Q|Question)(\s*\d+)?[\s:.]+", re.IGNORECASE)
QUESTION_START_PATTERNS = [
    QUESTION_PREFIX,
    re.compile(r"^\d+[\s).]+"),
    re.compile(r"^[\[(]?\s*\d+\s*[\])]?[\s.]"),
]

ANSWER_MARKER = re.compile(r"^(Answer key|Correct answer|Answer)[\s:.]+|^A\s*:\s*", re.IGNORECASE)
OPTION_MARKER = re.compile(r"^[A-D][.)]\s+")
EXPLANATION_MARKER = re.compile(r"^(Explanation|Note|Reason)[\s:.]+", re.IGNORECASE)
TRUE_FALSE_ANSWER = re.compile(r"^(true|false|yes|no)$", re.IGNORECASE)

BASIC_QUESTION_LINE = re.compile(r"^(\d+|[A-Z]|Q|Question)[\s.):]\s+\w+")
BASIC_OPTION_LINE = re.compile(r"^[A-D][.)]\s+\w+")

ESSAY_MIN_LENGTH = 300
DEFAULT_FALLBACK_AFTER = 25.0

# =============================================================================
# PROMPTS
# =============================================================================

SYSTEM_PROMPT_DOCUMENT = "You are an expert at identifying and extracting exam questions from documents."

USER_PROMPT_DOCUMENT = """Extract exam questions from the following text:

{text}

For each question, identify the following:
1. Question text
2. Question type (multiple-choice, short-answer, true-false, essay)
3. Correct answer
4. Explanation (if available)
5. Options (for multiple-choice questions)

Respond in JSON format with an array of questions:
{{
  "questions": [
    {{
      "id": 1,
      "question": "Question text",
      "type": "question_type",
      "answer": "correct_answer",
      "explanation": "explanation_text",
      "options": ["option1", "option2"]
    }}
  ]
}}"""

SYSTEM_PROMPT_BLOCK = "You are an expert at analyzing and extracting components from exam questions."

USER_PROMPT_BLOCK = """Analyze the following exam question content:

{content}

Identify the following components:
1. Question type (multiple-choice, short-answer, true-false, essay)
2. The correct answer
3. Any explanation provided
4. Options for multiple-choice questions (if applicable)

Return the results in JSON format:
{{
  "questionType": "type_here",
  "answer": "answer_text_here",
  "explanation": "explanation_text_here",
  "options": ["option1", "option2"]
}}"""


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class BlockAnalysis:
    """Components read from one question block."""

    question_type: str = "short-answer"
    answer: str = ""
    explanation: str = ""
    options: list[str] = field(default_factory=list)


@dataclass
class QuestionCandidate:
    """A line that looks like the start of a question."""

    index: int
    line: str
    question_text: str


# =============================================================================
# HEURISTICS
# =============================================================================


def _non_empty_lines(text: str) -> list[str]:
    return [line for line in text.split("\n") if line.strip()]


def is_question_start(line: str) -> bool:
    """Whether a (trimmed) line looks like the start of a question."""
    if line.endswith("?"):
        return True
    return any(p.match(line) for p in QUESTION_START_PATTERNS)


def find_question_candidates(lines: list[str]) -> list[QuestionCandidate]:
    """Find lines that start questions."""
    candidates = []
    for i, raw in enumerate(lines):
        line = raw.strip()
        if is_question_start(line):
            candidates.append(
                QuestionCandidate(
                    index=i,
                    line=line,
                    question_text=QUESTION_PREFIX.sub("", line).strip(),
                )
            )
    return candidates


def read_block_markers(content: str) -> BlockAnalysis:
    """Read answer, option and explanation markers from a question block.

    Type rules: two or more options make it multiple-choice; a
    true/false/yes/no answer makes it true-false; a long block with no
    answer is an essay; anything else is short-answer.
    """
    analysis = BlockAnalysis()

    for raw in _non_empty_lines(content):
        line = raw.strip()
        if ANSWER_MARKER.match(line):
            analysis.answer = ANSWER_MARKER.sub("", line, count=1).strip()
        elif OPTION_MARKER.match(line):
            analysis.options.append(OPTION_MARKER.sub("", line, count=1).strip())
        elif EXPLANATION_MARKER.match(line):
            analysis.explanation = EXPLANATION_MARKER.sub("", line, count=1).strip()

    if len(analysis.options) >= 2:
        analysis.question_type = "multiple-choice"
    elif TRUE_FALSE_ANSWER.match(analysis.answer):
        analysis.question_type = "true-false"
    elif len(content) > ESSAY_MIN_LENGTH and not analysis.answer:
        analysis.question_type = "essay"

    return analysis


def create_basic_questions(text: str) -> list[Question]:
    """Extract questions with simple heuristics only (no LLM).

    A line counts as a question if it ends with '?', starts with a
    number/letter/Q marker, or is longer than 10 characters and is not the
    last line. The following line is taken as its answer, and up to four
    following lines shaped like "A) ..." become options.
    """
    questions: list[Question] = []
    lines = _non_empty_lines(text)
    current_id = 1

    for i, raw in enumerate(lines):
        line = raw.strip()
        is_question = (
            line.endswith("?")
            or BASIC_QUESTION_LINE.match(line) is not None
            or (len(line) > 10 and i < len(lines) - 1)
        )
        if not is_question:
            continue

        answer = lines[i + 1].strip() if i < len(lines) - 1 else ""

        options = []
        for opt_raw in lines[i + 1 : i + 5]:
            opt_line = opt_raw.strip()
            if BASIC_OPTION_LINE.match(opt_line):
                options.append(OPTION_MARKER.sub("", opt_line, count=1))

        questions.append(
            Question(
                id=current_id,
                question=line,
                answer=answer,
                type="multiple-choice" if options else "short-answer",
                options=options,
            )
        )
        current_id += 1

    return questions


# =============================================================================
# LLM HELPERS
# =============================================================================


def _extract_with_llm(client: LLMClient, text: str) -> list[Question]:
    """Ask the LLM to segment the whole document."""
    try:
        result = client.simple_json(
            system_prompt=SYSTEM_PROMPT_DOCUMENT,
            user_message=USER_PROMPT_DOCUMENT.format(text=text),
            temperature=0.3,
        )
    except LLMError as e:
        logger.error("document_extraction_failed", error=str(e))
        return []

    raw_questions = result.get("questions") or []
    if not isinstance(raw_questions, list):
        return []

    questions = [
        Question.from_dict(q, index=i)
        for i, q in enumerate(raw_questions)
        if isinstance(q, dict)
    ]
    return [q for q in questions if q.question]


def _analyze_block_with_llm(client: LLMClient, content: str) -> BlockAnalysis:
    try:
        result = client.simple_json(
            system_prompt=SYSTEM_PROMPT_BLOCK,
            user_message=USER_PROMPT_BLOCK.format(content=content),
            temperature=0.3,
        )
    except LLMError as e:
        logger.error("block_analysis_failed", error=str(e))
        return BlockAnalysis()

    options = result.get("options") or []
    return BlockAnalysis(
        question_type=result.get("questionType") or "short-answer",
        answer=str(result.get("answer") or ""),
        explanation=str(result.get("explanation") or ""),
        options=[str(o) for o in options] if isinstance(options, list) else [],
    )


def analyze_question_content(client: LLMClient, content: str) -> BlockAnalysis:
    """Analyze one question block, asking the LLM only when markers miss."""
    analysis = read_block_markers(content)
    if not analysis.answer and analysis.question_type != "essay":
        return _analyze_block_with_llm(client, content)
    return analysis


def _extract(client: LLMClient, text: str) -> list[Question]:
    lines = _non_empty_lines(text)
    candidates = find_question_candidates(lines)

    if not candidates:
        logger.info("no_question_markers_using_llm")
        return _extract_with_llm(client, text)

    questions = []
    for i, candidate in enumerate(candidates):
        next_index = candidates[i + 1].index if i < len(candidates) - 1 else len(lines)
        block = "\n".join(lines[candidate.index : next_index])

        analysis = analyze_question_content(client, block)
        questions.append(
            Question(
                id=i + 1,
                question=candidate.question_text,
                answer=analysis.answer,
                type=analysis.question_type,
                explanation=analysis.explanation,
                options=analysis.options,
            )
        )

    return questions


# =============================================================================
# MAIN FUNCTION
# =============================================================================


def extract_questions_from_text(
    text: str,
    client: LLMClient | None = None,
    fallback_after: float = DEFAULT_FALLBACK_AFTER,
) -> list[Question]:
    """Extract questions from exam text.

    Args:
        text: Exam text
        client: LLM client (created lazily if not provided)
        fallback_after: Seconds to wait before using basic extraction

    Returns:
        List of questions (possibly empty)
    """
    if not text or not text.strip():
        return []

    if client is None:
        client = LLMClient()

    executor = ThreadPoolExecutor(max_workers=1)
    future = executor.submit(_extract, client, text)
    try:
        questions = future.result(timeout=fallback_after)
    except FutureTimeoutError:
        logger.warning("question_extraction_timed_out", fallback_after=fallback_after)
        return create_basic_questions(text)
    except Exception as e:
        logger.error("question_extraction_failed", error=str(e))
        return create_basic_questions(text)
    finally:
        executor.shutdown(wait=False)

    logger.info("questions_extracted", count=len(questions))
    return questions
