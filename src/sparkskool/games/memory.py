"""Memory (concentration) game.

Every question/answer pair becomes two cards: the question gets id
index * 2 and the answer index * 2 + 1. Cards are shuffled; a move is
flipping two cards, and a question/answer pair that belongs together is a
match worth 100 points.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any, Literal

MATCH_POINTS = 100
MOVE_PENALTY = 10
SECOND_PENALTY = 2

CardType = Literal["question", "answer"]


@dataclass
class MemoryCard:
    id: int
    content: str
    type: CardType
    pair_index: int
    matched: bool = False

    def to_dict(self, reveal: bool = True) -> dict[str, Any]:
        return {
            "id": self.id,
            "content": self.content if reveal or self.matched else None,
            "type": self.type,
            "matched": self.matched,
        }


def build_memory_cards(
    pairs: list[dict[str, str]],
    rng: random.Random | None = None,
) -> list[MemoryCard]:
    """Build the shuffled deck from {"question", "answer"} pairs."""
    rng = rng or random.Random()
    cards: list[MemoryCard] = []
    for index, pair in enumerate(pairs):
        cards.append(MemoryCard(index * 2, str(pair.get("question", "")), "question", index))
        cards.append(MemoryCard(index * 2 + 1, str(pair.get("answer", "")), "answer", index))
    rng.shuffle(cards)
    return cards


@dataclass
class MemoryGame:
    """State of one memory game."""

    cards: list[MemoryCard]
    flipped: list[int] = field(default_factory=list)
    moves: int = 0
    matches: int = 0
    score: int = 0

    @classmethod
    def new(cls, pairs: list[dict[str, str]], rng: random.Random | None = None) -> MemoryGame:
        return cls(cards=build_memory_cards(pairs, rng))

    @property
    def total_pairs(self) -> int:
        return len(self.cards) // 2

    @property
    def is_complete(self) -> bool:
        return self.matches == self.total_pairs

    def _card(self, card_id: int) -> MemoryCard | None:
        return next((c for c in self.cards if c.id == card_id), None)

    def flip(self, card_id: int) -> bool | None:
        """Flip a card.

        Returns:
            None after the first card of a move (or an ignored flip),
            True when the second card completes a match, False otherwise
        """
        card = self._card(card_id)
        if card is None or card.matched or card_id in self.flipped:
            return None

        self.flipped.append(card_id)
        if len(self.flipped) < 2:
            return None

        self.moves += 1
        first, second = (self._card(i) for i in self.flipped)
        self.flipped = []

        if (
            first is not None
            and second is not None
            and first.pair_index == second.pair_index
            and first.type != second.type
        ):
            first.matched = True
            second.matched = True
            self.matches += 1
            self.score += MATCH_POINTS
            return True
        return False

    def final_score(self, elapsed_seconds: int) -> int:
        """Score less 10 per move and 2 per elapsed second, never below 0."""
        return max(0, self.score - self.moves * MOVE_PENALTY - elapsed_seconds * SECOND_PENALTY)

    def to_dict(self, reveal: bool = False) -> dict[str, Any]:
        return {
            "cards": [c.to_dict(reveal=reveal) for c in self.cards],
            "moves": self.moves,
            "matches": self.matches,
            "score": self.score,
        }
