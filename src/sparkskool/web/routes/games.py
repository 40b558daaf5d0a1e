"""Classroom game endpoints.

Generators return the full game state (answers included) for the
teacher's client. Live sessions let students join with an access code.
"""

import random
from typing import Any

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query, status

from sparkskool.games.crossword import generate_crossword
from sparkskool.games.matching import build_matching_items
from sparkskool.games.memory import MemoryGame
from sparkskool.games.question_bank import GenerationOptions, generate_questions
from sparkskool.games.sessions import (
    GameExpiredError,
    GameNotFoundError,
    GameSessionStore,
)
from sparkskool.games.word_scramble import build_scrambled_words
from sparkskool.games.word_search import generate_word_search
from sparkskool.llm.client import LLMClient
from sparkskool.web.dependencies import get_game_sessions, get_http_client, get_llm_client
from sparkskool.web.schemas import (
    CrosswordRequest,
    GameJoinRequest,
    GameJoinResponse,
    GameQuestionsRequest,
    GameSessionCreate,
    GameSessionCreated,
    MatchingRequest,
    MemoryRequest,
    WordScrambleRequest,
    WordSearchRequest,
)

router = APIRouter(prefix="/api/games", tags=["games"])


def _rng(seed: int | None) -> random.Random:
    return random.Random(seed)


# =============================================================================
# GENERATORS
# =============================================================================


@router.post("/word-search")
async def word_search(request: WordSearchRequest) -> dict[str, Any]:
    puzzle = generate_word_search(
        request.words,
        definitions=request.definitions,
        size=request.size,
        rng=_rng(request.seed),
    )
    return puzzle.to_dict()


@router.post("/crossword")
async def crossword(request: CrosswordRequest) -> dict[str, Any]:
    result = generate_crossword(
        [c.model_dump() for c in request.clues],
        size=request.size,
        rng=_rng(request.seed),
    )
    return result.to_dict(include_answers=True)


@router.post("/memory")
async def memory(request: MemoryRequest) -> dict[str, Any]:
    game = MemoryGame.new([p.model_dump() for p in request.pairs], rng=_rng(request.seed))
    return game.to_dict(reveal=True)


@router.post("/word-scramble")
async def word_scramble(request: WordScrambleRequest) -> dict[str, Any]:
    words = build_scrambled_words(
        [w.model_dump(exclude_none=True) for w in request.words],
        rng=_rng(request.seed),
    )
    return {"words": [w.to_dict(include_answer=True) for w in words]}


@router.post("/matching")
async def matching(request: MatchingRequest) -> dict[str, Any]:
    items = build_matching_items(
        [p.model_dump(exclude_none=True) for p in request.pairs],
        rng=_rng(request.seed),
    )
    return {"items": [i.to_dict() for i in items], "difficulty": request.difficulty}


@router.post("/questions")
def questions(
    request: GameQuestionsRequest,
    client: LLMClient = Depends(get_llm_client),
    http: httpx.Client = Depends(get_http_client),
) -> dict[str, Any]:
    """Timed multiple-choice questions from the LLM and public quiz APIs."""
    options = GenerationOptions(
        subject=request.subject,
        topic=request.topic,
        difficulty=request.difficulty,
        count=request.count,
        context=request.context,
    )
    result = generate_questions(options, client=client, http=http)
    return {"questions": [q.to_dict() for q in result], "count": len(result)}


# =============================================================================
# LIVE SESSIONS
# =============================================================================


@router.put("/join", response_model=GameSessionCreated, status_code=status.HTTP_201_CREATED)
async def create_session(
    request: GameSessionCreate,
    sessions: GameSessionStore = Depends(get_game_sessions),
) -> GameSessionCreated:
    """Open a session for a game and return its access code."""
    session = await sessions.create(request.game_id, request.game_type, request.teacher_id)
    return GameSessionCreated(access_code=session.access_code)


@router.post("/join", response_model=GameJoinResponse)
async def join_session(
    request: GameJoinRequest,
    sessions: GameSessionStore = Depends(get_game_sessions),
) -> GameJoinResponse:
    try:
        session = await sessions.join(request.access_code, request.student_name)
    except GameNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )
    except GameExpiredError as e:
        raise HTTPException(
            status_code=status.HTTP_410_GONE,
            detail=str(e),
        )
    return GameJoinResponse(game_id=session.game_id, game_type=session.game_type)


@router.get("/join")
async def session_info(
    access_code: str = Query(..., min_length=1),
    sessions: GameSessionStore = Depends(get_game_sessions),
) -> dict[str, Any]:
    """Session details without the teacher id."""
    try:
        session = await sessions.get(access_code)
    except GameNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )
    except GameExpiredError as e:
        raise HTTPException(
            status_code=status.HTTP_410_GONE,
            detail=str(e),
        )
    return session.public_info()
