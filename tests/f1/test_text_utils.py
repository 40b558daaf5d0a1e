"""Tests for text utilities."""

import pytest

from sparkskool.utils.text_utils import (
    dice_coefficient,
    first_line_title,
    normalize_answer,
    strip_think,
)


class TestStripThink:
    def test_removes_think_block(self):
        assert strip_think("<think>hmm</think>Answer") == "Answer"

    def test_multiline_and_case(self):
        assert strip_think("<THINK>\nline\n</THINK>\n  Final") == "Final"

    def test_plain_text_unchanged(self):
        assert strip_think("  plain  ") == "plain"


class TestNormalizeAnswer:
    def test_punctuation_and_spaces(self):
        assert normalize_answer("  The Answer, is: (B)! ") == "the answer is b"

    def test_keeps_inner_words(self):
        assert normalize_answer("New   York") == "new york"


class TestDiceCoefficient:
    def test_identical(self):
        assert dice_coefficient("paris", "paris") == 1.0

    def test_whitespace_ignored(self):
        assert dice_coefficient("new york", "newyork") == 1.0

    def test_disjoint(self):
        assert dice_coefficient("london", "paris") == 0.0

    def test_known_value(self):
        assert dice_coefficient("night", "nacht") == pytest.approx(0.25)

    def test_short_strings(self):
        assert dice_coefficient("a", "b") == 0.0
        assert dice_coefficient("", "") == 1.0

    def test_symmetric(self):
        assert dice_coefficient("photosyn", "photosynthesis") == pytest.approx(
            dice_coefficient("photosynthesis", "photosyn")
        )


class TestFirstLineTitle:
    def test_first_line(self):
        assert first_line_title("Fractions\nHalves and quarters") == "Fractions"

    def test_truncated(self):
        assert first_line_title("x" * 80) == "x" * 50
