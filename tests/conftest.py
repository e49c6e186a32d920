"""Pytest configuration and shared fixtures for practice exam tests."""

from datetime import date
from typing import Callable, List, Optional

import pytest

from practice_exam.models import AnswerRecord, Question, TestResult
from practice_exam.topics import EXAM_TOPIC_CONFIG


def build_question(
    question_id: int = 1,
    correct: Optional[List[int]] = None,
    domain: str = EXAM_TOPIC_CONFIG[0].name,
    options: Optional[List[str]] = None,
) -> Question:
    return Question(
        id=question_id,
        question_text=f"Sample question {question_id}?",
        options=options or ["A", "B", "C", "D"],
        correct_answer_indices=correct if correct is not None else [0],
        explanation="Because.",
        domain=domain,
    )


def build_result(
    test_id: int,
    outcomes: List[bool],
    domain: str = EXAM_TOPIC_CONFIG[0].name,
) -> TestResult:
    """A result whose i-th question was answered correctly iff outcomes[i]."""
    questions = [build_question(i + 1, [0], domain) for i in range(len(outcomes))]
    answers = [
        AnswerRecord(question_id=q.id, selected_indices=[0] if ok else [1])
        for q, ok in zip(questions, outcomes)
    ]
    score = sum(outcomes)
    return TestResult(
        test_id=test_id,
        score=score,
        total_questions=len(outcomes),
        passed=bool(outcomes) and score / len(outcomes) >= 0.7,
        date_taken=date(2024, 5, 1).isoformat(),
        user_answers=answers,
        questions=questions,
    )


@pytest.fixture
def make_question() -> Callable[..., Question]:
    """Fixture providing the question factory."""
    return build_question


@pytest.fixture
def make_result() -> Callable[..., TestResult]:
    """Fixture providing the test result factory."""
    return build_result


@pytest.fixture
def sample_questions() -> List[Question]:
    """Three questions: single-select, multi-select, true/false."""
    return [
        build_question(1, [1], EXAM_TOPIC_CONFIG[0].name),
        build_question(2, [0, 2], EXAM_TOPIC_CONFIG[2].name),
        build_question(3, [0], EXAM_TOPIC_CONFIG[6].name, options=["True", "False"]),
    ]


@pytest.fixture
def raw_question_record() -> dict:
    """A question record in the shape the model returns."""
    return {
        "questionText": "Which command initializes a working directory?",
        "codeSnippet": None,
        "options": ["terraform init", "terraform plan", "terraform apply", "terraform fmt"],
        "correctAnswerIndices": [0],
        "explanation": "terraform init prepares the working directory.",
        "domain": EXAM_TOPIC_CONFIG[3].name,
    }


@pytest.fixture
def mock_api_key() -> str:
    """Fixture providing a mock Google API key for testing."""
    return "test-google-api-key-12345"
