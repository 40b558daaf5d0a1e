"""Tests for the word search generator."""

import random

from sparkskool.games.word_search import (
    DIRECTIONS,
    WordSearchGame,
    can_place_word,
    find_word,
    generate_word_search,
    letters_at,
    word_score,
)

WORDS = ["volcano", "magma", "lava flow", "crater", "ash"]


class TestGenerateWordSearch:
    def test_words_are_on_the_grid(self):
        puzzle = generate_word_search(WORDS, rng=random.Random(7))

        assert puzzle.size == 15
        for placed in puzzle.words:
            assert letters_at(puzzle, placed.cells) == placed.word
            assert placed.direction in DIRECTIONS
        assert {w.word for w in puzzle.words} | set(puzzle.unplaced) == {
            "VOLCANO", "MAGMA", "LAVAFLOW", "CRATER", "ASH"
        }

    def test_grid_is_filled(self):
        puzzle = generate_word_search(WORDS, rng=random.Random(1))

        assert all(len(row) == 15 for row in puzzle.grid)
        assert all(cell.isalpha() and cell.isupper() for row in puzzle.grid for cell in row)

    def test_seed_is_reproducible(self):
        first = generate_word_search(WORDS, rng=random.Random(3))
        second = generate_word_search(WORDS, rng=random.Random(3))

        assert first.grid == second.grid

    def test_definitions_by_index(self):
        puzzle = generate_word_search(["cat", "dog"], definitions=["meows"], rng=random.Random(2))

        by_word = {w.word: w.definition for w in puzzle.words}
        assert by_word["CAT"] == "meows"
        assert by_word["DOG"] == ""

    def test_word_too_long_is_unplaced(self):
        puzzle = generate_word_search(["abcdefgh"], size=5, rng=random.Random(0))

        assert puzzle.words == []
        assert puzzle.unplaced == ["ABCDEFGH"]


class TestPlacement:
    def test_shared_cell_needs_same_letter(self):
        grid = [["" for _ in range(5)] for _ in range(5)]
        grid[0][2] = "T"

        assert can_place_word(grid, "CAT", 0, 0, (0, 1))
        assert not can_place_word(grid, "COW", 0, 0, (0, 1))

    def test_out_of_bounds(self):
        grid = [["" for _ in range(5)] for _ in range(5)]

        assert not can_place_word(grid, "HORSE", 1, 1, (0, 1))
        assert not can_place_word(grid, "CAT", 1, 1, (-1, -1))


class TestGameplay:
    def test_find_forward_and_reversed(self):
        puzzle = generate_word_search(["magma"], rng=random.Random(5))

        assert find_word(puzzle, "magma").word == "MAGMA"
        assert find_word(puzzle, "AMGAM").word == "MAGMA"
        assert find_word(puzzle, "LAVA") is None

    def test_score(self):
        assert word_score(300) == 130
        assert word_score(9) == 100
        assert word_score(-5) == 100

    def test_game_round(self):
        puzzle = generate_word_search(["cat", "dog"], rng=random.Random(4))
        game = WordSearchGame(puzzle=puzzle, time_left=120)

        assert game.submit("CAT") == 112
        assert game.submit("CAT") == 0
        assert not game.is_complete
        assert game.submit("GOD") == 112
        assert game.is_complete
        assert game.score == 224
