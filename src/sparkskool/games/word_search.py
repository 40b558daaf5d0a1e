"""Word search generator.

Words are placed on a square grid in one of eight directions by random
trial: up to 100 attempts per word, each picking a direction and a start
cell. A cell may be shared by two words only when they agree on the
letter. Remaining cells are filled with random A-Z letters.
"""

from __future__ import annotations

import random
import string
from dataclasses import dataclass, field
from typing import Any

import structlog

logger = structlog.get_logger(__name__)

# =============================================================================
# CONSTANTS
# =============================================================================

GRID_SIZE = 15
MAX_ATTEMPTS = 100
TIME_LIMIT = 300  # seconds
WORD_POINTS = 100

# (row delta, col delta): right, down, down-right, up-right, left, up, up-left, down-left
DIRECTIONS: list[tuple[int, int]] = [
    (0, 1),
    (1, 0),
    (1, 1),
    (-1, 1),
    (0, -1),
    (-1, 0),
    (-1, -1),
    (1, -1),
]


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class PlacedWord:
    """A word placed on the grid."""

    word: str
    definition: str
    start: tuple[int, int]
    direction: tuple[int, int]
    found: bool = False

    @property
    def cells(self) -> list[tuple[int, int]]:
        row, col = self.start
        d_row, d_col = self.direction
        return [(row + d_row * i, col + d_col * i) for i in range(len(self.word))]

    @property
    def end(self) -> tuple[int, int]:
        return self.cells[-1]

    def to_dict(self) -> dict[str, Any]:
        return {
            "word": self.word,
            "definition": self.definition,
            "start": list(self.start),
            "end": list(self.end),
            "direction": list(self.direction),
            "found": self.found,
        }


@dataclass
class WordSearchPuzzle:
    """Generated grid plus the words hidden in it."""

    grid: list[list[str]]
    words: list[PlacedWord] = field(default_factory=list)
    unplaced: list[str] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.grid)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "size": self.size,
            "grid": [list(row) for row in self.grid],
            "words": [w.to_dict() for w in self.words],
            "unplaced": list(self.unplaced),
            "time_limit": TIME_LIMIT,
        }

    def render(self) -> str:
        """Grid as space-separated rows."""
        return "\n".join(" ".join(row) for row in self.grid)


# =============================================================================
# PLACEMENT
# =============================================================================


def _normalize_word(word: str) -> str:
    return "".join(word.split()).upper()


def can_place_word(
    grid: list[list[str]],
    word: str,
    start_row: int,
    start_col: int,
    direction: tuple[int, int],
) -> bool:
    """Whether word fits from the start cell without conflicting letters."""
    size = len(grid)
    d_row, d_col = direction
    for i, letter in enumerate(word):
        row = start_row + d_row * i
        col = start_col + d_col * i
        if row < 0 or row >= size or col < 0 or col >= size:
            return False
        if grid[row][col] and grid[row][col] != letter:
            return False
    return True


def place_word(
    grid: list[list[str]],
    word: str,
    start_row: int,
    start_col: int,
    direction: tuple[int, int],
) -> None:
    d_row, d_col = direction
    for i, letter in enumerate(word):
        grid[start_row + d_row * i][start_col + d_col * i] = letter


def generate_word_search(
    words: list[str],
    definitions: list[str] | None = None,
    size: int = GRID_SIZE,
    max_attempts: int = MAX_ATTEMPTS,
    rng: random.Random | None = None,
) -> WordSearchPuzzle:
    """Build a word search puzzle.

    Args:
        words: Words to hide (spaces are removed, letters uppercased)
        definitions: Clue per word, by index (missing clues are empty)
        size: Grid side length
        max_attempts: Random placement attempts per word
        rng: Random source (seed it for reproducible grids)

    Returns:
        WordSearchPuzzle; words that could not be placed are listed in unplaced
    """
    rng = rng or random.Random()
    definitions = definitions or []
    grid = [["" for _ in range(size)] for _ in range(size)]

    placed: list[PlacedWord] = []
    unplaced: list[str] = []

    for index, raw_word in enumerate(words):
        word = _normalize_word(raw_word)
        if not word:
            continue
        definition = definitions[index] if index < len(definitions) else ""

        for _ in range(max_attempts):
            direction = DIRECTIONS[rng.randrange(len(DIRECTIONS))]
            start_row = rng.randrange(size)
            start_col = rng.randrange(size)
            if can_place_word(grid, word, start_row, start_col, direction):
                place_word(grid, word, start_row, start_col, direction)
                placed.append(PlacedWord(word, definition, (start_row, start_col), direction))
                break
        else:
            unplaced.append(word)

    for row in grid:
        for col in range(size):
            if not row[col]:
                row[col] = rng.choice(string.ascii_uppercase)

    if unplaced:
        logger.warning("words_not_placed", words=unplaced)
    logger.info("word_search_generated", size=size, placed=len(placed))

    return WordSearchPuzzle(grid=grid, words=placed, unplaced=unplaced)


# =============================================================================
# GAMEPLAY
# =============================================================================


def letters_at(puzzle: WordSearchPuzzle, cells: list[tuple[int, int]]) -> str:
    """Letters under a selection of cells, in selection order."""
    return "".join(puzzle.grid[row][col] for row, col in cells)


def find_word(puzzle: WordSearchPuzzle, letters: str) -> PlacedWord | None:
    """Match a selection against the not-yet-found words, forward or reversed."""
    selected = letters.upper()
    reversed_selected = selected[::-1]
    for placed in puzzle.words:
        if not placed.found and placed.word in (selected, reversed_selected):
            return placed
    return None


def word_score(time_left: int) -> int:
    """Points for finding a word: 100 plus a bonus of one point per 10 s left."""
    return WORD_POINTS + max(0, time_left) // 10


@dataclass
class WordSearchGame:
    """Score keeping for one word search round."""

    puzzle: WordSearchPuzzle
    time_left: int = TIME_LIMIT
    score: int = 0

    def submit(self, letters: str) -> int:
        """Check a selection. Returns the points earned (0 if no word)."""
        placed = find_word(self.puzzle, letters)
        if placed is None:
            return 0
        placed.found = True
        points = word_score(self.time_left)
        self.score += points
        return points

    @property
    def is_complete(self) -> bool:
        return all(w.found for w in self.puzzle.words)
