"""Live game sessions.

A teacher opens a session for a generated game and shares a 6-character
access code; students join with the code and a name. Sessions live in
memory and expire 24 hours after creation.
"""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import structlog

logger = structlog.get_logger(__name__)

# Look-alike characters (0/O, 1/I) are left out
CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
CODE_LENGTH = 6
SESSION_TTL = timedelta(hours=24)


class GameSessionError(Exception):
    """Error handling a game session."""

    pass


class GameNotFoundError(GameSessionError):
    """No active session for the access code."""

    pass


class GameExpiredError(GameSessionError):
    """The session for the access code has expired."""

    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Student:
    name: str
    joined_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "joined_at": self.joined_at.isoformat()}


@dataclass
class GameSession:
    """An open game that students can join."""

    access_code: str
    game_id: str
    game_type: str
    teacher_id: str
    created_at: datetime
    expires_at: datetime
    students: list[Student] = field(default_factory=list)

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at < now

    def public_info(self) -> dict[str, Any]:
        """Session details safe to show students (no teacher id)."""
        return {
            "access_code": self.access_code,
            "game_id": self.game_id,
            "game_type": self.game_type,
            "students": [s.to_dict() for s in self.students],
            "created_at": self.created_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
        }


def generate_access_code(rng: random.Random | None = None) -> str:
    rng = rng or random.Random()
    return "".join(rng.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))


class GameSessionStore:
    """In-memory registry of active game sessions."""

    def __init__(
        self,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._sessions: dict[str, GameSession] = {}
        self._lock = asyncio.Lock()
        self._rng = rng or random.Random()
        self._clock = clock

    def _purge_expired(self, now: datetime) -> None:
        """Drop every expired session. Caller holds the lock."""
        expired = [code for code, s in self._sessions.items() if s.is_expired(now)]
        for code in expired:
            del self._sessions[code]
        if expired:
            logger.info("game_sessions_purged", count=len(expired))

    async def create(self, game_id: str, game_type: str, teacher_id: str) -> GameSession:
        """Open a session under a fresh access code, unique among active sessions."""
        now = self._clock()
        async with self._lock:
            self._purge_expired(now)
            code = generate_access_code(self._rng)
            while code in self._sessions:
                code = generate_access_code(self._rng)

            session = GameSession(
                access_code=code,
                game_id=game_id,
                game_type=game_type,
                teacher_id=teacher_id,
                created_at=now,
                expires_at=now + SESSION_TTL,
            )
            self._sessions[code] = session

        logger.info("game_session_created", access_code=code, game_type=game_type)
        return session

    async def join(self, access_code: str, student_name: str) -> GameSession:
        """Add a student to a session.

        Raises:
            GameNotFoundError: If no session has this code
            GameExpiredError: If the session has expired (it is removed)
        """
        now = self._clock()
        async with self._lock:
            session = self._sessions.get(access_code)
            if session is None:
                raise GameNotFoundError("Invalid access code or expired game session")

            if session.is_expired(now):
                del self._sessions[access_code]
                logger.info("game_session_expired", access_code=access_code)
                raise GameExpiredError("Game session has expired")

            session.students.append(Student(name=student_name, joined_at=now))

        logger.info("student_joined", access_code=access_code, students=len(session.students))
        return session

    async def get(self, access_code: str) -> GameSession:
        """Look up a session.

        Raises:
            GameNotFoundError: If no session has this code
            GameExpiredError: If the session has expired (it is removed)
        """
        now = self._clock()
        async with self._lock:
            session = self._sessions.get(access_code)
            if session is not None and session.is_expired(now):
                del self._sessions[access_code]
                logger.info("game_session_expired", access_code=access_code)
                raise GameExpiredError("Game session has expired")

            self._purge_expired(now)
        if session is None:
            raise GameNotFoundError("Game session not found")
        return session

    async def count(self) -> int:
        async with self._lock:
            return len(self._sessions)


# Global session store instance
_session_store: GameSessionStore | None = None


def get_session_store() -> GameSessionStore:
    """Get the global game session store."""
    global _session_store
    if _session_store is None:
        _session_store = GameSessionStore()
    return _session_store


def reset_session_store() -> None:
    """Reset the game session store (for testing)."""
    global _session_store
    _session_store = None
