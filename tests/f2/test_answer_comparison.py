"""Tests for answer comparison."""

import pytest

from sparkskool.core.answer_comparison import compare_answers
from sparkskool.llm.client import LLMConnectionError, LLMResponseError


class TestNoAnswer:
    @pytest.mark.parametrize("answer", [None, "", "   "])
    def test_blank_answer_scores_zero(self, answer, mock_llm):
        result = compare_answers(answer, "Paris", "short-answer", client=mock_llm)

        assert result.score == 0
        assert result.match_type == "no-answer"
        assert result.confidence == 1.0
        assert not result.is_correct
        mock_llm.simple_json.assert_not_called()


class TestObjectiveQuestions:
    """Similarity tiers for multiple-choice and true/false."""

    def test_exact_after_normalization(self, mock_llm):
        result = compare_answers("True.", "true", "true-false", client=mock_llm)

        assert result.score == 100
        assert result.is_correct
        assert result.match_type == "exact"
        mock_llm.simple_json.assert_not_called()

    def test_near_match_is_exact(self, mock_llm):
        result = compare_answers("Pariss", "Paris", "multiple-choice", client=mock_llm)

        assert result.score == 100
        assert result.match_type == "exact"

    def test_partial(self, mock_llm):
        result = compare_answers("photosyn", "photosynthesis", "multiple-choice", client=mock_llm)

        assert result.match_type == "partial"
        assert result.score == 49
        assert not result.is_correct
        assert result.confidence == pytest.approx(0.7)

    def test_incorrect_names_answer(self, mock_llm):
        result = compare_answers("London", "Paris", "multiple-choice", client=mock_llm)

        assert result.score == 0
        assert result.match_type == "incorrect"
        assert result.confidence == 1.0
        assert "Paris" in result.feedback


class TestShortAnswer:
    def test_llm_grade(self, mock_llm):
        mock_llm.simple_json.return_value = {
            "score": 85,
            "feedback": "Good",
            "isCorrect": True,
            "confidence": 0.9,
            "matchType": "semantic",
        }

        result = compare_answers("It makes food from light", "Photosynthesis", "short-answer", client=mock_llm)

        assert result.score == 85
        assert result.is_correct
        assert result.match_type == "semantic"
        assert result.confidence == 0.9

    def test_scores_are_clamped(self, mock_llm):
        mock_llm.simple_json.return_value = {"score": 140, "confidence": 3, "isCorrect": True}

        result = compare_answers("x", "y", "short-answer", client=mock_llm)

        assert result.score == 100
        assert result.confidence == 1.0

    def test_similarity_fallback(self, mock_llm):
        mock_llm.simple_json.side_effect = LLMResponseError("not json")

        result = compare_answers("mitochondria", "Mitochondria", "short-answer", client=mock_llm)

        assert result.score == 100
        assert result.is_correct
        assert result.match_type == "semantic"
        assert result.confidence == 0.5

    def test_similarity_fallback_incorrect(self, mock_llm):
        mock_llm.simple_json.side_effect = LLMConnectionError("down")

        result = compare_answers("london", "paris", "short-answer", client=mock_llm)

        assert result.score == 0
        assert result.match_type == "incorrect"


class TestEssay:
    def test_rubric_score(self, mock_llm):
        mock_llm.simple_json.return_value = {"score": 82, "feedback": "Well argued", "confidence": 0.7}

        result = compare_answers("essay text", "model essay", "essay", client=mock_llm)

        assert result.score == 82
        assert result.is_correct
        assert result.match_type == "essay"

    def test_failure_gives_half_marks(self, mock_llm):
        mock_llm.simple_json.side_effect = LLMResponseError("bad")

        result = compare_answers("essay text", "model essay", "essay", client=mock_llm)

        assert result.score == 50
        assert result.confidence == 0.3
        assert not result.is_correct


class TestOtherTypes:
    def test_generic_failure(self, mock_llm):
        mock_llm.simple_json.side_effect = LLMResponseError("bad")

        result = compare_answers("42", "forty-two", "numeric", client=mock_llm)

        assert result.score == 0
        assert result.confidence == 0.1
