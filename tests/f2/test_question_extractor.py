"""Tests for question extraction."""

import time

from sparkskool.core.question_extractor import (
    create_basic_questions,
    extract_questions_from_text,
    find_question_candidates,
    is_question_start,
    read_block_markers,
)
from sparkskool.llm.client import LLMResponseError

EXAM = """Q1: What is 2 + 2?
A) 3
B) 4
Answer: B
Q2. The sun is a star. True or false?
Answer: True
Explanation: The sun is a G-type star.
"""


class TestQuestionStart:
    def test_q_prefix(self):
        assert is_question_start("Q3: Name a mammal")
        assert is_question_start("Question 4. Define energy")

    def test_numbered(self):
        assert is_question_start("1) Define energy")
        assert is_question_start("(2) Define force")

    def test_question_mark(self):
        assert is_question_start("Why is the sky blue?")

    def test_plain_line(self):
        assert not is_question_start("The mitochondria is the powerhouse")

    def test_prefix_removed_from_text(self):
        candidates = find_question_candidates(["Question 1: Define energy", "Answer: work"])

        assert len(candidates) == 1
        assert candidates[0].question_text == "Define energy"
        assert candidates[0].index == 0


class TestBlockMarkers:
    def test_multiple_choice(self):
        analysis = read_block_markers("Pick one\nA) cat\nB) dog\nAnswer: B")

        assert analysis.question_type == "multiple-choice"
        assert analysis.options == ["cat", "dog"]
        assert analysis.answer == "B"

    def test_true_false(self):
        analysis = read_block_markers("Fish can fly\nA: No")

        assert analysis.question_type == "true-false"
        assert analysis.answer == "No"

    def test_explanation(self):
        analysis = read_block_markers("Capital?\nCorrect answer: Paris\nReason: it is")

        assert analysis.answer == "Paris"
        assert analysis.explanation == "it is"
        assert analysis.question_type == "short-answer"

    def test_long_block_without_answer_is_essay(self):
        analysis = read_block_markers("Discuss the causes of the war. " + "Consider politics. " * 20)

        assert analysis.question_type == "essay"
        assert analysis.answer == ""


class TestExtractQuestions:
    def test_markers_need_no_llm(self, mock_llm):
        questions = extract_questions_from_text(EXAM, client=mock_llm)

        assert [q.id for q in questions] == [1, 2]
        assert questions[0].question == "What is 2 + 2?"
        assert questions[0].type == "multiple-choice"
        assert questions[0].options == ["3", "4"]
        assert questions[0].answer == "B"
        assert questions[1].type == "true-false"
        assert questions[1].explanation == "The sun is a G-type star."
        mock_llm.simple_json.assert_not_called()

    def test_block_without_answer_asks_llm(self, mock_llm):
        mock_llm.simple_json.return_value = {
            "questionType": "short-answer",
            "answer": "Evaporation and condensation",
        }

        questions = extract_questions_from_text("1. Explain the water cycle", client=mock_llm)

        assert questions[0].question == "1. Explain the water cycle"
        assert questions[0].answer == "Evaporation and condensation"
        mock_llm.simple_json.assert_called_once()

    def test_block_analysis_failure(self, mock_llm):
        mock_llm.simple_json.side_effect = LLMResponseError("bad")

        questions = extract_questions_from_text("Why do leaves fall?", client=mock_llm)

        assert len(questions) == 1
        assert questions[0].type == "short-answer"
        assert questions[0].answer == ""

    def test_no_markers_uses_document_extraction(self, mock_llm):
        mock_llm.simple_json.return_value = {
            "questions": [
                {"question": "What is H2O?", "answer": "Water", "type": "short-answer"},
                {"question": ""},
            ]
        }

        questions = extract_questions_from_text("Name the formula of water\nH2O", client=mock_llm)

        assert len(questions) == 1
        assert questions[0].id == 1
        assert questions[0].answer == "Water"

    def test_slow_llm_falls_back_to_basic(self, mock_llm):
        def slow(**kwargs):
            time.sleep(0.5)
            return {"questions": []}

        mock_llm.simple_json.side_effect = slow

        questions = extract_questions_from_text(
            "Name the capital of France\nParis", client=mock_llm, fallback_after=0.05
        )

        assert len(questions) == 1
        assert questions[0].question == "Name the capital of France"
        assert questions[0].answer == "Paris"

    def test_unexpected_error_falls_back_to_basic(self, mock_llm):
        mock_llm.simple_json.side_effect = RuntimeError("boom")

        questions = extract_questions_from_text("Name the capital of France\nParis", client=mock_llm)

        assert questions[0].answer == "Paris"

    def test_blank_text(self, mock_llm):
        assert extract_questions_from_text("   \n ", client=mock_llm) == []


class TestBasicQuestions:
    def test_options_make_multiple_choice(self):
        questions = create_basic_questions("What is 2 + 2?\nA) 3\nB) 4")

        first = questions[0]
        assert first.question == "What is 2 + 2?"
        assert first.type == "multiple-choice"
        assert first.options == ["3", "4"]

    def test_short_last_line_is_not_a_question(self):
        questions = create_basic_questions("Largest planet in the solar system\nJupiter")

        assert len(questions) == 1
        assert questions[0].answer == "Jupiter"
