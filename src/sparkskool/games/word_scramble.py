"""Word scramble game.

Words are trimmed to at most two words and 15 characters, uppercased and
scrambled: short words are reversed, phrases are scrambled word by word,
and longer words keep their first and last letters while the inner
letters are shuffled (up to 5 tries to get something different).
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any

import structlog

logger = structlog.get_logger(__name__)

MAX_WORDS = 2
MAX_LENGTH = 15
SHUFFLE_ATTEMPTS = 5
TIME_LIMIT = 300  # seconds
WORD_POINTS = 100
ATTEMPT_BONUS = 50
ATTEMPT_PENALTY = 10


def process_word(text: str) -> str:
    """Collapse whitespace, keep at most two words and 15 characters."""
    words = text.split()
    return " ".join(words[:MAX_WORDS])[:MAX_LENGTH]


def scramble_word(word: str, rng: random.Random | None = None) -> str:
    rng = rng or random.Random()

    if len(word) <= 3:
        return word if len(word) == 1 else word[::-1]

    if " " in word:
        return " ".join(scramble_word(part, rng) for part in word.split(" "))

    first, middle, last = word[0], word[1:-1], word[-1]
    if len(middle) <= 1:
        return word

    scrambled = middle
    for _ in range(SHUFFLE_ATTEMPTS):
        letters = list(middle)
        rng.shuffle(letters)
        scrambled = "".join(letters)
        if scrambled != middle:
            break

    return first + scrambled + last


def word_score(attempts: int, time_left: int) -> int:
    """100 + max(0, 50 - 10 per failed attempt) + one point per 10 s left."""
    return WORD_POINTS + max(0, ATTEMPT_BONUS - attempts * ATTEMPT_PENALTY) + max(0, time_left) // 10


def final_score(score: int, time_left: int) -> int:
    """Game-over score: remaining seconds count double."""
    return score + max(0, time_left) * 2


@dataclass
class ScrambledWord:
    original: str
    scrambled: str
    hint: str = ""
    category: str | None = None
    solved: bool = False
    attempts: int = 0

    def to_dict(self, include_answer: bool = False) -> dict[str, Any]:
        result: dict[str, Any] = {
            "scrambled": self.scrambled,
            "hint": self.hint,
            "category": self.category,
            "solved": self.solved,
            "attempts": self.attempts,
        }
        if include_answer:
            result["original"] = self.original
        return result


def build_scrambled_words(
    words: list[dict[str, str]],
    rng: random.Random | None = None,
) -> list[ScrambledWord]:
    """Prepare {"word", "hint", "category"} entries for play."""
    rng = rng or random.Random()
    result = []
    for entry in words:
        original = process_word(str(entry.get("word", ""))).upper()
        if not original:
            continue
        result.append(
            ScrambledWord(
                original=original,
                scrambled=scramble_word(original, rng),
                hint=entry.get("hint", ""),
                category=entry.get("category"),
            )
        )
    logger.debug("words_scrambled", count=len(result))
    return result


@dataclass
class WordScrambleGame:
    """Score keeping for a word scramble round."""

    words: list[ScrambledWord]
    time_left: int = TIME_LIMIT
    score: int = 0
    current: int = 0

    def guess(self, value: str) -> bool:
        """Check a guess for the current word; a correct one scores and advances."""
        if self.current >= len(self.words):
            return False
        word = self.words[self.current]

        if value.strip().upper() == word.original.strip():
            word.solved = True
            self.score += word_score(word.attempts, self.time_left)
            self.current += 1
            return True

        word.attempts += 1
        return False

    @property
    def is_complete(self) -> bool:
        return self.current >= len(self.words)

    def final_score(self) -> int:
        return final_score(self.score, self.time_left)
