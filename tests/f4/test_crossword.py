"""Tests for the crossword generator."""

import random

from sparkskool.games.crossword import (
    CrosswordCell,
    can_place_word,
    check_answer,
    generate_crossword,
    is_complete,
)

CLUES = [
    {"question": "Molten rock above ground", "answer": "lava"},
    {"question": "Opening at the top of a volcano", "answer": "crater"},
    {"question": "Fine volcanic dust", "answer": "ash"},
]


class TestGenerateCrossword:
    def test_alternating_directions_and_numbers(self):
        crossword = generate_crossword(CLUES, rng=random.Random(11))

        placed = {c.answer: c for c in crossword.clues}
        assert placed["LAVA"].direction == "across"
        assert placed["CRATER"].direction == "down"
        assert [c.number for c in crossword.clues] == list(range(1, len(crossword.clues) + 1))

    def test_letters_on_grid(self):
        crossword = generate_crossword(CLUES, rng=random.Random(11))

        for clue in crossword.clues:
            letters = "".join(crossword.grid[r][c].letter for r, c in clue.cells)
            assert letters == clue.answer
            assert all(crossword.grid[r][c].active for r, c in clue.cells)

    def test_spaces_removed_and_uppercased(self):
        crossword = generate_crossword([{"question": "q", "answer": "ice age"}], rng=random.Random(1))
        assert crossword.clues[0].answer == "ICEAGE"

    def test_answer_as_long_as_grid_is_unplaced(self):
        crossword = generate_crossword([{"question": "q", "answer": "abcde"}], size=5, rng=random.Random(0))

        assert crossword.clues == []
        assert crossword.unplaced == ["ABCDE"]

    def test_hidden_answers(self):
        crossword = generate_crossword(CLUES, rng=random.Random(11))
        data = crossword.to_dict(include_answers=False)

        assert all("answer" not in c for c in data["clues"])
        assert all(cell["letter"] == "" for row in data["grid"] for cell in row)


class TestPlacement:
    def test_shared_cell_needs_same_letter(self):
        grid = [[CrosswordCell() for _ in range(5)] for _ in range(5)]
        grid[0][1] = CrosswordCell(letter="A", active=True)

        assert can_place_word(grid, "CAT", 0, 0, "across")
        assert not can_place_word(grid, "COT", 0, 0, "across")
        assert not can_place_word(grid, "HORSES", 0, 0, "down")


class TestAnswers:
    def test_check_answer_scores_once(self):
        crossword = generate_crossword(CLUES[:1], rng=random.Random(2))

        assert not check_answer(crossword, 1, "rock")
        assert check_answer(crossword, 1, " lava ", time_left=100)
        assert crossword.score == 110
        assert check_answer(crossword, 1, "LAVA", time_left=100)
        assert crossword.score == 110
        assert is_complete(crossword)

    def test_unknown_clue(self):
        crossword = generate_crossword(CLUES[:1], rng=random.Random(2))
        assert not check_answer(crossword, 99, "LAVA")
