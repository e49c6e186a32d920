"""
Exam scoring.

Scoring is all-or-nothing per question: a question earns its point only when
the selected option set equals the correct option set exactly. Multi-select
questions therefore get no partial credit, and an unanswered question never
scores because every question has at least one correct option.

A test passes when ``score / total_questions >= PASSING_THRESHOLD``.
"""

import logging
from datetime import date
from typing import AbstractSet, Iterable, List, Mapping, Optional, Sequence, Union

from .models import AnswerRecord, Question, QuestionReview, ReviewStatus, TestResult
from .topics import PASSING_THRESHOLD

logger = logging.getLogger(__name__)

AnswerLookup = Union[Mapping[int, AnswerRecord], Iterable[AnswerRecord]]


def is_exact_match(correct: AbstractSet[int], selected: AbstractSet[int]) -> bool:
    """Return True when the selected positions equal the correct positions."""
    return len(correct) == len(selected) and all(i in selected for i in correct)


def is_question_correct(question: Question, answer: Optional[AnswerRecord]) -> bool:
    """Apply the exact-match rule, treating a missing answer as no selection."""
    selected = answer.selected_set if answer is not None else frozenset()
    return is_exact_match(question.correct_set, selected)


def index_answers(answers: AnswerLookup) -> dict[int, AnswerRecord]:
    """Key answer records by question id."""
    if isinstance(answers, Mapping):
        return dict(answers)
    return {answer.question_id: answer for answer in answers}


def count_answered(answers: AnswerLookup) -> int:
    return sum(1 for a in index_answers(answers).values() if a.is_answered)


def is_passing(score: int, total_questions: int) -> bool:
    if total_questions == 0:
        return False
    return score / total_questions >= PASSING_THRESHOLD


def score_test(
    test_id: int,
    questions: Sequence[Question],
    answers: AnswerLookup,
    *,
    taken_on: Optional[date] = None,
) -> TestResult:
    """
    Score a submitted test.

    Args:
        test_id: Identifier of the mock exam that was taken
        questions: Questions in the order they were presented
        answers: Answer records, either keyed by question id or as a sequence
        taken_on: Completion date (default: today, local time)

    Returns:
        An immutable TestResult holding copies of the questions and the final
        answer records in question order. Questions without an answer record
        get an empty one.
    """
    by_question = index_answers(answers)

    score = 0
    frozen_answers: List[AnswerRecord] = []
    for question in questions:
        answer = by_question.get(question.id)
        if is_question_correct(question, answer):
            score += 1
        if answer is None:
            answer = AnswerRecord(question_id=question.id)
        frozen_answers.append(answer.model_copy(deep=True))

    total = len(questions)
    result = TestResult(
        test_id=test_id,
        score=score,
        total_questions=total,
        passed=is_passing(score, total),
        date_taken=(taken_on or date.today()).isoformat(),
        user_answers=frozen_answers,
        questions=list(questions),
    )

    logger.info(
        f"Scored test {test_id}: {score}/{total} "
        f"({result.percentage}%), passed={result.passed}"
    )
    return result


def review_questions(result: TestResult) -> List[QuestionReview]:
    """Per-question outcome of a submitted test, in question order."""
    reviews = []
    for question in result.questions:
        answer = result.answer_for(question.id)
        if answer is None or not answer.is_answered:
            status = ReviewStatus.UNANSWERED
        elif is_question_correct(question, answer):
            status = ReviewStatus.CORRECT
        else:
            status = ReviewStatus.INCORRECT
        reviews.append(
            QuestionReview(
                question_id=question.id, domain=question.domain, status=status
            )
        )
    return reviews
