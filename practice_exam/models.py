"""Data models for practice exams.

Field names are snake_case in Python and camelCase on the wire, so that
generated question payloads and stored history share one JSON shape.
"""

import enum
import math
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


def round_percent(fraction: float) -> int:
    """Round a 0-1 fraction to a whole percentage, halves rounding up."""
    return int(math.floor(fraction * 100 + 0.5))


def _unique(indices: List[int]) -> List[int]:
    return list(dict.fromkeys(indices))


class _ExamModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class Question(_ExamModel):
    """A single multiple-choice question in a practice exam."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="Identifier, unique within one test")
    question_text: str = Field(..., min_length=1)
    code_snippet: Optional[str] = Field(
        None, description="Optional HCL code block shown with the question"
    )
    options: List[str] = Field(..., min_length=2)
    correct_answer_indices: List[int] = Field(
        ..., min_length=1, description="Zero-based positions of the correct options"
    )
    explanation: str = ""
    domain: str = Field(..., description="Exam topic label this question belongs to")

    @field_validator("correct_answer_indices")
    @classmethod
    def dedupe_indices(cls, v: List[int]) -> List[int]:
        """Collapse repeated positions; the indices have set semantics."""
        return _unique(v)

    @field_validator("code_snippet")
    @classmethod
    def blank_snippet_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def indices_within_options(self) -> "Question":
        """Every correct index must point at an existing option."""
        for index in self.correct_answer_indices:
            if not 0 <= index < len(self.options):
                raise ValueError(
                    f"correct_answer_indices contains {index}, "
                    f"but only {len(self.options)} options exist"
                )
        return self

    @property
    def is_multi_select(self) -> bool:
        return len(self.correct_answer_indices) > 1

    @property
    def correct_set(self) -> frozenset[int]:
        return frozenset(self.correct_answer_indices)


class AnswerRecord(_ExamModel):
    """The options a user has selected for one question.

    Records are immutable; ``toggled`` returns the next selection as a new
    record, so a record held by a submitted result can never change.
    """

    model_config = ConfigDict(frozen=True)

    question_id: int
    selected_indices: List[int] = Field(default_factory=list)

    @field_validator("selected_indices")
    @classmethod
    def dedupe_indices(cls, v: List[int]) -> List[int]:
        return _unique(v)

    @property
    def is_answered(self) -> bool:
        return bool(self.selected_indices)

    @property
    def selected_set(self) -> frozenset[int]:
        return frozenset(self.selected_indices)

    def toggled(self, option_index: int, multi_select: bool) -> "AnswerRecord":
        """Return the record after selecting or deselecting an option.

        Single-select questions replace the current selection, so at most one
        option is ever selected. Multi-select questions add the option, or
        remove it when it is already selected.
        """
        if not multi_select:
            selected = [option_index]
        elif option_index in self.selected_indices:
            selected = [i for i in self.selected_indices if i != option_index]
        else:
            selected = [*self.selected_indices, option_index]
        return AnswerRecord(question_id=self.question_id, selected_indices=selected)


class TestResult(_ExamModel):
    """Outcome of one submitted practice test, immutable once created."""

    __test__ = False

    model_config = ConfigDict(frozen=True)

    test_id: int
    score: int = Field(..., ge=0)
    total_questions: int = Field(..., ge=0)
    passed: bool
    date_taken: str
    user_answers: List[AnswerRecord] = Field(default_factory=list)
    questions: List[Question] = Field(default_factory=list)

    @property
    def percentage(self) -> int:
        if self.total_questions == 0:
            return 0
        return round_percent(self.score / self.total_questions)

    def answer_for(self, question_id: int) -> Optional[AnswerRecord]:
        for answer in self.user_answers:
            if answer.question_id == question_id:
                return answer
        return None


class TopicConfig(_ExamModel):
    """One exam objective with its weight and per-exam question count."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    weight: float = Field(..., ge=0.0, le=1.0)
    question_count: int = Field(..., ge=1)


class TopicStats(_ExamModel):
    """Correct and total question counts accumulated for one topic."""

    correct: int = 0
    total: int = 0

    @property
    def percentage(self) -> int:
        if self.total == 0:
            return 0
        return round_percent(self.correct / self.total)


class SummaryMetrics(_ExamModel):
    """Headline numbers shown above the topic breakdown."""

    tests_taken: int = 0
    average_score: int = 0
    pass_rate: int = 0


class ReviewStatus(str, enum.Enum):
    """Outcome of a single question when reviewing a submitted test."""

    CORRECT = "correct"
    INCORRECT = "incorrect"
    UNANSWERED = "unanswered"


class QuestionReview(_ExamModel):
    question_id: int
    domain: str
    status: ReviewStatus
