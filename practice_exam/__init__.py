"""Terraform Associate practice exam engine."""

from practice_exam.analytics import summarize_history, topic_performance
from practice_exam.generator import GenerationError, QuestionGenerator
from practice_exam.models import (
    AnswerRecord,
    Question,
    SummaryMetrics,
    TestResult,
    TopicConfig,
    TopicStats,
)
from practice_exam.persistence import InMemoryHistoryStore, JsonFileHistoryStore
from practice_exam.scoring import is_exact_match, score_test
from practice_exam.session import SessionStateError, SessionStatus, TestSessionController
from practice_exam.timer import CountdownTimer

__version__ = "0.1.0"

__all__ = [
    "AnswerRecord",
    "CountdownTimer",
    "GenerationError",
    "InMemoryHistoryStore",
    "JsonFileHistoryStore",
    "Question",
    "QuestionGenerator",
    "SessionStateError",
    "SessionStatus",
    "SummaryMetrics",
    "TestResult",
    "TestSessionController",
    "TopicConfig",
    "TopicStats",
    "is_exact_match",
    "score_test",
    "summarize_history",
    "topic_performance",
]
