"""Tests for exact-match scoring."""

import random
from datetime import date

import pytest

from practice_exam.models import AnswerRecord, ReviewStatus
from practice_exam.scoring import (
    count_answered,
    is_exact_match,
    is_passing,
    is_question_correct,
    review_questions,
    score_test,
)


class TestIsExactMatch:
    """Tests for the answer-set matcher."""

    def test_identical_sets_match(self):
        assert is_exact_match({1}, {1})
        assert is_exact_match({0, 2}, {2, 0})

    def test_subset_does_not_match(self):
        """Test that a partial multi-select earns nothing."""
        assert not is_exact_match({0, 2}, {0})

    def test_superset_does_not_match(self):
        assert not is_exact_match({0}, {0, 1})

    def test_same_size_different_members(self):
        assert not is_exact_match({0, 1}, {0, 2})

    def test_empty_sets(self):
        assert is_exact_match(set(), set())
        assert not is_exact_match({0}, set())

    @pytest.mark.parametrize("correct", [{0}, {1, 3}, {0, 1, 2, 3}])
    def test_reflexive_and_symmetric(self, correct):
        other = {0, 1}
        assert is_exact_match(correct, correct)
        assert is_exact_match(correct, other) == is_exact_match(other, correct)


class TestIsQuestionCorrect:
    def test_missing_answer_is_incorrect(self, make_question):
        assert not is_question_correct(make_question(1, [0]), None)

    def test_selected_answer(self, make_question):
        question = make_question(1, [1])
        assert is_question_correct(
            question, AnswerRecord(question_id=1, selected_indices=[1])
        )


class TestScoreTest:
    """Tests for score_test."""

    def test_single_correct_question_passes(self, make_question):
        """Scenario: correct set {1}, user selects {1}."""
        question = make_question(1, [1])
        result = score_test(
            5, [question], {1: AnswerRecord(question_id=1, selected_indices=[1])}
        )

        assert result.test_id == 5
        assert result.score == 1
        assert result.total_questions == 1
        assert result.passed

    def test_partial_multi_select_scores_zero(self, make_question):
        """Scenario: correct set {0, 2}, user selects {0}."""
        question = make_question(1, [0, 2])
        result = score_test(
            1, [question], [AnswerRecord(question_id=1, selected_indices=[0])]
        )

        assert result.score == 0
        assert not result.passed

    def test_missing_answer_counts_as_empty(self, sample_questions):
        result = score_test(1, sample_questions, {})

        assert result.score == 0
        assert [a.selected_indices for a in result.user_answers] == [[], [], []]
        assert [a.question_id for a in result.user_answers] == [1, 2, 3]

    def test_empty_test_does_not_pass(self):
        """Test that zero questions score 0 and fail without dividing by zero."""
        result = score_test(1, [], {})

        assert result.score == 0
        assert result.total_questions == 0
        assert result.passed is False

    def test_forty_of_fifty_seven_passes(self, make_question):
        """Scenario: 40/57 rounds to 70% and passes."""
        questions = [make_question(i, [0]) for i in range(1, 58)]
        answers = [
            AnswerRecord(question_id=i, selected_indices=[0] if i <= 40 else [1])
            for i in range(1, 58)
        ]
        result = score_test(1, questions, answers)

        assert result.score == 40
        assert result.percentage == 70
        assert result.passed

    def test_thirty_nine_of_fifty_seven_fails(self, make_question):
        """Scenario: 39/57 rounds to 68% and fails."""
        questions = [make_question(i, [0]) for i in range(1, 58)]
        answers = [
            AnswerRecord(question_id=i, selected_indices=[0] if i <= 39 else [])
            for i in range(1, 58)
        ]
        result = score_test(1, questions, answers)

        assert result.score == 39
        assert result.percentage == 68
        assert not result.passed

    def test_order_independent(self, make_question):
        """Test that permuting questions and answers keeps the score."""
        questions = [make_question(i, [i % 4]) for i in range(1, 21)]
        answers = [
            AnswerRecord(question_id=q.id, selected_indices=[q.id % 3])
            for q in questions
        ]
        baseline = score_test(1, questions, answers)

        rng = random.Random(42)
        shuffled_q = questions[:]
        shuffled_a = answers[:]
        rng.shuffle(shuffled_q)
        rng.shuffle(shuffled_a)
        permuted = score_test(1, shuffled_q, shuffled_a)

        assert permuted.score == baseline.score
        assert permuted.passed == baseline.passed

    def test_answers_are_copied(self, make_question):
        """Test that later edits to live answers do not leak into the result."""
        question = make_question(1, [1])
        live = AnswerRecord(question_id=1, selected_indices=[1])
        result = score_test(1, [question], [live])

        live.selected_indices.append(2)

        assert result.user_answers[0].selected_indices == [1]

    def test_date_taken(self, make_question):
        result = score_test(1, [make_question()], {}, taken_on=date(2024, 3, 9))
        assert result.date_taken == "2024-03-09"


class TestHelpers:
    def test_is_passing_threshold(self):
        assert is_passing(7, 10)
        assert not is_passing(6, 10)
        assert not is_passing(0, 0)

    def test_count_answered(self):
        answers = [
            AnswerRecord(question_id=1, selected_indices=[0]),
            AnswerRecord(question_id=2),
        ]
        assert count_answered(answers) == 1

    def test_review_questions(self, sample_questions):
        answers = [
            AnswerRecord(question_id=1, selected_indices=[1]),
            AnswerRecord(question_id=2, selected_indices=[0]),
        ]
        result = score_test(1, sample_questions, answers)

        statuses = [r.status for r in review_questions(result)]
        assert statuses == [
            ReviewStatus.CORRECT,
            ReviewStatus.INCORRECT,
            ReviewStatus.UNANSWERED,
        ]
