"""Pydantic schemas for the Web API.

Request and response models for grading, questions, answer keys, slides,
materials, notes, chat, lessons and games.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, Field

from sparkskool.core.questions import Question, GradingResult


# =============================================================================
# HEALTH
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str = "0.1.0"
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


# =============================================================================
# QUESTION / GRADING SCHEMAS
# =============================================================================


class QuestionSchema(BaseModel):
    """An exam question with its expected answer."""

    id: int | str
    question: str
    answer: str = ""
    type: str = "short-answer"
    explanation: str = ""
    points: int = 10
    options: list[str] = Field(default_factory=list)
    context: str | None = None

    def to_question(self) -> Question:
        return Question(**self.model_dump())

    @classmethod
    def from_question(cls, question: Question) -> QuestionSchema:
        return cls(
            id=question.id,
            question=question.question,
            answer=question.answer,
            type=question.type,
            explanation=question.explanation,
            points=question.points,
            options=list(question.options),
            context=question.context,
        )


class QuestionListResponse(BaseModel):
    questions: list[QuestionSchema]
    count: int


class ExtractQuestionsRequest(BaseModel):
    """Request body for question extraction."""

    text: str = Field(..., min_length=1)
    mode: Literal["heuristic", "answer-key"] = "heuristic"
    context: str | None = None


class CompareAnswersRequest(BaseModel):
    """Request body for comparing one answer."""

    student_answer: str | None = None
    correct_answer: str
    question_type: str = "short-answer"


class ComparisonResponse(BaseModel):
    score: int
    feedback: str
    is_correct: bool
    confidence: float
    match_type: str


class GradingResultSchema(BaseModel):
    question_id: int | str
    score: int
    feedback: str
    is_correct: bool
    confidence: float
    partial_credit: int = 0
    match_type: str = "none"

    @classmethod
    def from_result(cls, result: GradingResult) -> GradingResultSchema:
        return cls(**result.to_dict())


class GradeSubmissionRequest(BaseModel):
    """Request body for per-question grading over a full submission."""

    extracted_text: str
    questions: list[QuestionSchema]
    exam_context: str | None = None


class GradeStudentRequest(BaseModel):
    """Request body for grading against an inline or stored answer key."""

    student_text: str = ""
    answer_key: list[QuestionSchema] = Field(default_factory=list)
    answer_key_id: str | None = None


class GradingResponse(BaseModel):
    results: list[GradingResultSchema]
    summary: dict[str, Any]


# =============================================================================
# ANSWER KEY SCHEMAS
# =============================================================================


class AnswerKeyCreate(BaseModel):
    """Save questions directly, or extract them from text first."""

    questions: list[QuestionSchema] = Field(default_factory=list)
    text: str | None = None
    exam_context: str = ""


class AnswerKeyResponse(BaseModel):
    id: str
    questions: list[QuestionSchema]
    exam_context: str
    timestamp: str
    metadata: dict[str, Any]


class AnswerKeyListResponse(BaseModel):
    answer_keys: list[AnswerKeyResponse]
    count: int


# =============================================================================
# SLIDES
# =============================================================================


class SlidesRequest(BaseModel):
    prompt: str = Field(..., min_length=1)
    context: str = ""
    language: str = "en"


class SlideSchema(BaseModel):
    title: str
    content: str
    image_prompt: str
    image_url: str | None = None
    layout: str = "content"


class SlideDeckResponse(BaseModel):
    slides: list[SlideSchema]
    cached: bool = False
    fallback: bool = False
    message: str | None = None
    raw: str | None = None


# =============================================================================
# MATERIALS / NOTES
# =============================================================================


class MaterialCreate(BaseModel):
    content: str = Field(..., min_length=1)
    title: str | None = None
    category: Literal["lesson", "quiz", "other"] | None = None
    file_type: str | None = None


class MaterialResponse(BaseModel):
    id: str
    title: str
    content: str
    category: str
    created_at: str
    user_id: str
    file_type: str | None = None


class MaterialListResponse(BaseModel):
    materials: list[MaterialResponse]
    count: int


class NoteCreate(BaseModel):
    content: str = Field(..., min_length=1)
    color: str | None = None


class NoteUpdate(BaseModel):
    content: str | None = None
    color: str | None = None
    pinned: bool | None = None
    archived: bool | None = None


class NoteResponse(BaseModel):
    id: str
    content: str
    category: str = "note"
    created_at: str
    color: str
    pinned: bool
    archived: bool
    last_edited: str | None = None


class NoteListResponse(BaseModel):
    notes: list[NoteResponse]
    count: int


# =============================================================================
# CHAT / LESSONS
# =============================================================================


class ChatMessageSchema(BaseModel):
    role: Literal["user", "assistant", "system"]
    content: str
    language: str | None = None


class ChatRequest(BaseModel):
    messages: list[ChatMessageSchema] = Field(..., min_length=1)
    tool: str | None = None
    language: str | None = None
    preferences: dict[str, str] | None = None


class ChatResponse(BaseModel):
    reply: str


class ChatHistorySave(BaseModel):
    messages: list[ChatMessageSchema]
    title: str | None = None


class ConversationResponse(BaseModel):
    id: str
    title: str
    messages: list[dict[str, Any]]
    created_at: str
    updated_at: str


class ConversationListResponse(BaseModel):
    conversations: list[ConversationResponse]
    count: int


class LessonRequest(BaseModel):
    topic: str | None = None
    grade_level: str | None = None
    duration: int | None = Field(default=None, gt=0)
    objectives: list[str] = Field(default_factory=list)
    revision_request: str | None = None


class LessonResponse(BaseModel):
    plan: str
    status: str = "success"


# =============================================================================
# GAMES
# =============================================================================


class WordSearchRequest(BaseModel):
    words: list[str] = Field(..., min_length=1)
    definitions: list[str] = Field(default_factory=list)
    size: int = Field(default=15, ge=5, le=30)
    seed: int | None = None


class ClueSchema(BaseModel):
    question: str
    answer: str


class CrosswordRequest(BaseModel):
    clues: list[ClueSchema] = Field(..., min_length=1)
    size: int = Field(default=15, ge=5, le=30)
    seed: int | None = None


class MemoryRequest(BaseModel):
    pairs: list[ClueSchema] = Field(..., min_length=1)
    seed: int | None = None


class ScrambleWordSchema(BaseModel):
    word: str
    hint: str = ""
    category: str | None = None


class WordScrambleRequest(BaseModel):
    words: list[ScrambleWordSchema] = Field(..., min_length=1)
    seed: int | None = None


class MatchPairSchema(BaseModel):
    term: str
    definition: str
    id: int | None = None
    category: str | None = None
    image_url: str | None = None


class MatchingRequest(BaseModel):
    pairs: list[MatchPairSchema] = Field(..., min_length=1)
    difficulty: Literal["easy", "medium", "hard"] = "medium"
    seed: int | None = None


class GameQuestionsRequest(BaseModel):
    subject: str
    topic: str
    difficulty: Literal["easy", "medium", "hard"] = "medium"
    count: int = Field(default=10, ge=1, le=50)
    context: str | None = None


class GameSessionCreate(BaseModel):
    game_id: str = Field(..., min_length=1)
    game_type: str = Field(..., min_length=1)
    teacher_id: str = Field(..., min_length=1)


class GameSessionCreated(BaseModel):
    access_code: str


class GameJoinRequest(BaseModel):
    access_code: str = Field(..., min_length=1)
    student_name: str = Field(..., min_length=1)


class GameJoinResponse(BaseModel):
    game_id: str
    game_type: str
