"""Tests for the memory game."""

import random

from sparkskool.games.memory import MemoryGame, build_memory_cards

PAIRS = [
    {"question": "2 + 2", "answer": "4"},
    {"question": "3 x 3", "answer": "9"},
]


def _card_id(game, content):
    return next(c.id for c in game.cards if c.content == content)


class TestBuildCards:
    def test_ids_and_types(self):
        cards = build_memory_cards(PAIRS, rng=random.Random(0))

        by_id = {c.id: c for c in cards}
        assert sorted(by_id) == [0, 1, 2, 3]
        assert by_id[0].type == "question" and by_id[0].content == "2 + 2"
        assert by_id[1].type == "answer" and by_id[1].content == "4"
        assert by_id[3].pair_index == 1


class TestMemoryGame:
    def test_match(self):
        game = MemoryGame.new(PAIRS, rng=random.Random(1))

        assert game.flip(_card_id(game, "2 + 2")) is None
        assert game.flip(_card_id(game, "4")) is True
        assert game.matches == 1
        assert game.score == 100
        assert game.moves == 1

    def test_mismatch(self):
        game = MemoryGame.new(PAIRS, rng=random.Random(1))

        game.flip(_card_id(game, "2 + 2"))
        assert game.flip(_card_id(game, "9")) is False
        assert game.score == 0
        assert game.flipped == []

    def test_ignored_flips(self):
        game = MemoryGame.new(PAIRS, rng=random.Random(1))
        first = _card_id(game, "2 + 2")

        game.flip(first)
        assert game.flip(first) is None
        assert game.flip(99) is None
        assert game.moves == 0

    def test_complete_and_final_score(self):
        game = MemoryGame.new(PAIRS, rng=random.Random(1))
        for question, answer in (("2 + 2", "4"), ("3 x 3", "9")):
            game.flip(_card_id(game, question))
            game.flip(_card_id(game, answer))

        assert game.is_complete
        assert game.final_score(elapsed_seconds=30) == 200 - 2 * 10 - 60
        assert game.final_score(elapsed_seconds=1000) == 0

    def test_hidden_content(self):
        game = MemoryGame.new(PAIRS, rng=random.Random(1))
        data = game.to_dict()

        assert all(card["content"] is None for card in data["cards"])
