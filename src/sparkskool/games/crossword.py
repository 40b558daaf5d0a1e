"""Crossword generator.

Answers alternate across/down by clue index. Each answer is tried at up to
100 random start cells drawn from [0, size - len); an active cell may be
shared only when both answers have the same letter there. Clue numbers
follow placement order.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any, Literal

import structlog

logger = structlog.get_logger(__name__)

GRID_SIZE = 15
MAX_ATTEMPTS = 100
TIME_LIMIT = 600  # seconds
CLUE_POINTS = 100

Direction = Literal["across", "down"]


@dataclass
class CrosswordCell:
    letter: str = ""
    active: bool = False
    number: int | None = None
    revealed: bool = False


@dataclass
class CrosswordClue:
    """A placed answer and its clue."""

    number: int
    clue: str
    answer: str
    direction: Direction
    start: tuple[int, int]

    @property
    def cells(self) -> list[tuple[int, int]]:
        row, col = self.start
        if self.direction == "across":
            return [(row, col + i) for i in range(len(self.answer))]
        return [(row + i, col) for i in range(len(self.answer))]

    def to_dict(self) -> dict[str, Any]:
        return {
            "number": self.number,
            "clue": self.clue,
            "answer": self.answer,
            "direction": self.direction,
            "start": list(self.start),
        }


@dataclass
class Crossword:
    """Generated crossword grid and clues."""

    grid: list[list[CrosswordCell]]
    clues: list[CrosswordClue] = field(default_factory=list)
    unplaced: list[str] = field(default_factory=list)
    answers: dict[int, str] = field(default_factory=dict)
    score: int = 0

    @property
    def size(self) -> int:
        return len(self.grid)

    def to_dict(self, include_answers: bool = True) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        grid = [
            [
                {
                    "letter": cell.letter if include_answers or cell.revealed else "",
                    "active": cell.active,
                    "number": cell.number,
                }
                for cell in row
            ]
            for row in self.grid
        ]
        clues = []
        for clue in self.clues:
            data = clue.to_dict()
            if not include_answers:
                data.pop("answer")
                data["length"] = len(clue.answer)
            clues.append(data)
        return {
            "size": self.size,
            "grid": grid,
            "clues": clues,
            "unplaced": list(self.unplaced),
            "time_limit": TIME_LIMIT,
        }

    def render(self) -> str:
        """Grid with '#' for inactive cells."""
        return "\n".join(
            " ".join(cell.letter if cell.active else "#" for cell in row) for row in self.grid
        )


def can_place_word(
    grid: list[list[CrosswordCell]],
    word: str,
    start_row: int,
    start_col: int,
    direction: Direction,
) -> bool:
    size = len(grid)
    if direction == "across":
        if start_col + len(word) > size:
            return False
        cells = [grid[start_row][start_col + i] for i in range(len(word))]
    else:
        if start_row + len(word) > size:
            return False
        cells = [grid[start_row + i][start_col] for i in range(len(word))]

    return all(not cell.active or cell.letter == letter for cell, letter in zip(cells, word))


def place_word(
    grid: list[list[CrosswordCell]],
    word: str,
    start_row: int,
    start_col: int,
    direction: Direction,
) -> None:
    for i, letter in enumerate(word):
        if direction == "across":
            cell = grid[start_row][start_col + i]
        else:
            cell = grid[start_row + i][start_col]
        cell.letter = letter
        cell.active = True


def generate_crossword(
    clues: list[dict[str, str]],
    size: int = GRID_SIZE,
    max_attempts: int = MAX_ATTEMPTS,
    rng: random.Random | None = None,
) -> Crossword:
    """Build a crossword from {"question", "answer"} pairs.

    Answers are uppercased with spaces removed. Answers that do not fit
    (too long, or no free position found) are listed in unplaced.
    """
    rng = rng or random.Random()
    grid = [[CrosswordCell() for _ in range(size)] for _ in range(size)]
    crossword = Crossword(grid=grid)
    clue_number = 1

    for index, item in enumerate(clues):
        answer = "".join(str(item.get("answer", "")).split()).upper()
        if not answer:
            continue
        direction: Direction = "across" if index % 2 == 0 else "down"

        if len(answer) >= size:
            crossword.unplaced.append(answer)
            continue

        for _ in range(max_attempts):
            start_row = rng.randrange(size - len(answer))
            start_col = rng.randrange(size - len(answer))
            if can_place_word(grid, answer, start_row, start_col, direction):
                place_word(grid, answer, start_row, start_col, direction)
                grid[start_row][start_col].number = clue_number
                crossword.clues.append(
                    CrosswordClue(
                        number=clue_number,
                        clue=str(item.get("question", "")),
                        answer=answer,
                        direction=direction,
                        start=(start_row, start_col),
                    )
                )
                clue_number += 1
                break
        else:
            crossword.unplaced.append(answer)

    if crossword.unplaced:
        logger.warning("crossword_answers_not_placed", answers=crossword.unplaced)
    logger.info("crossword_generated", size=size, clues=len(crossword.clues))
    return crossword


def check_answer(crossword: Crossword, number: int, value: str, time_left: int = 0) -> bool:
    """Record an answer for a clue; a correct one reveals its cells and scores.

    Points: 100 plus one per 10 seconds left.
    """
    clue = next((c for c in crossword.clues if c.number == number), None)
    if clue is None:
        return False

    guess = value.strip().upper()
    already_correct = crossword.answers.get(number) == clue.answer
    crossword.answers[number] = guess

    if guess != clue.answer:
        return False

    if not already_correct:
        for row, col in clue.cells:
            crossword.grid[row][col].revealed = True
        crossword.score += CLUE_POINTS + max(0, time_left) // 10
    return True


def is_complete(crossword: Crossword) -> bool:
    """Whether every placed clue has its correct answer recorded."""
    return all(crossword.answers.get(c.number) == c.answer for c in crossword.clues)
