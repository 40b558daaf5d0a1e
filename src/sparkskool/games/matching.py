"""Term/definition matching game."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any, Literal

ItemType = Literal["term", "definition"]

TIME_LIMITS = {"easy": 300, "medium": 240, "hard": 180}
MATCH_POINTS = 100
TIME_BONUS = 50
STREAK_BONUS = 10


@dataclass
class MatchItem:
    id: int
    content: str
    type: ItemType
    category: str | None = None
    image_url: str | None = None
    matched: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "content": self.content,
            "type": self.type,
            "category": self.category,
            "image_url": self.image_url,
            "matched": self.matched,
        }


def build_matching_items(
    pairs: list[dict[str, Any]],
    rng: random.Random | None = None,
) -> list[MatchItem]:
    """Split pairs into shuffled term and definition items sharing the pair id.

    Pairs without an id get their index + 1.
    """
    rng = rng or random.Random()
    items: list[MatchItem] = []
    for index, pair in enumerate(pairs):
        pair_id = pair.get("id") or index + 1
        category = pair.get("category")
        items.append(
            MatchItem(pair_id, str(pair.get("term", "")), "term", category, pair.get("image_url"))
        )
        items.append(MatchItem(pair_id, str(pair.get("definition", "")), "definition", category))
    rng.shuffle(items)
    return items


def is_match(first: MatchItem, second: MatchItem) -> bool:
    """A term and a definition of the same pair that are not matched yet."""
    return first.id == second.id and first.type != second.type and not second.matched


def match_points(time_left: int, streak: int, difficulty: str = "medium") -> int:
    """100 + up to 50 for time left (relative to the limit) + 10 per streak step."""
    limit = TIME_LIMITS.get(difficulty, TIME_LIMITS["medium"])
    return MATCH_POINTS + int(max(0, time_left) / limit * TIME_BONUS) + streak * STREAK_BONUS


@dataclass
class MatchingGame:
    items: list[MatchItem]
    difficulty: str = "medium"
    moves: int = 0
    score: int = 0
    streak: int = 0

    @property
    def time_limit(self) -> int:
        return TIME_LIMITS.get(self.difficulty, TIME_LIMITS["medium"])

    def select_pair(self, first: MatchItem, second: MatchItem, time_left: int) -> bool:
        """Try to match two items; scores and extends the streak on success."""
        self.moves += 1
        if is_match(first, second) and not first.matched:
            first.matched = True
            second.matched = True
            self.score += match_points(time_left, self.streak, self.difficulty)
            self.streak += 1
            return True
        self.streak = 0
        return False

    @property
    def is_complete(self) -> bool:
        return all(item.matched for item in self.items)
