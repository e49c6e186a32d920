"""
Test session lifecycle.

The controller owns one practice test at a time and moves it through a
small state machine:

    IDLE --start_test--> GENERATING --questions--> IN_PROGRESS
      ^                      |                          |
      |<--------failure------+        submit / timer expiry
      |                                                 v
      +<----return_to_dashboard---- REVIEWING <---------+
                                        |
                                        +--retake--> GENERATING

All mutation happens on the event loop thread. The only suspension point is
the await on the question source while GENERATING; the countdown timer runs
only while IN_PROGRESS and is disposed on every way out of that state.
"""

import asyncio
import enum
import logging
import uuid
from datetime import date
from typing import Callable, Dict, List, Optional, Sequence, Set

from .analytics import topic_performance as aggregate_topics
from .analytics import summarize_history
from .generator import QuestionSource
from .graceful_failure import graceful_failure
from .logging_config import session_id_context
from .models import AnswerRecord, Question, SummaryMetrics, TestResult, TopicStats
from .persistence import HistoryStore
from .scoring import score_test
from .timer import CountdownTimer
from .topics import EXAM_DURATION_SECONDS

logger = logging.getLogger(__name__)

GENERATION_ERROR_MESSAGE = (
    "Failed to generate test. Please check your API key configuration or try again."
)

TimerFactory = Callable[[int, Callable[[], None]], CountdownTimer]


class SessionStatus(str, enum.Enum):
    """Lifecycle states of the session controller."""

    IDLE = "idle"
    GENERATING = "generating"
    IN_PROGRESS = "in_progress"
    REVIEWING = "reviewing"


class SessionStateError(Exception):
    """Raised when an operation is not allowed in the current state."""

    def __init__(self, operation: str, status: SessionStatus):
        self.operation = operation
        self.status = status
        super().__init__(f"Cannot {operation} while {status.value}")


class TestSessionController:
    """Orchestrates generation, answering, scoring and history for one user."""

    __test__ = False

    def __init__(
        self,
        question_source: QuestionSource,
        history_store: HistoryStore,
        *,
        exam_duration_seconds: int = EXAM_DURATION_SECONDS,
        timer_factory: Optional[TimerFactory] = None,
        today: Callable[[], date] = date.today,
    ):
        """
        Args:
            question_source: Produces the questions for a test id
            history_store: Persistence port for the test history
            exam_duration_seconds: Countdown length for each test
            timer_factory: Builds the countdown timer (default: CountdownTimer)
            today: Source of the completion date for results
        """
        self._source = question_source
        self._store = history_store
        self._exam_duration = exam_duration_seconds
        self._timer_factory = timer_factory or CountdownTimer
        self._today = today

        self._status = SessionStatus.IDLE
        self._error: Optional[str] = None
        self._test_id: Optional[int] = None
        self._questions: List[Question] = []
        self._answers: Dict[int, AnswerRecord] = {}
        self._flagged: Set[int] = set()
        self._current_index = 0
        self._result: Optional[TestResult] = None
        self._timer: Optional[CountdownTimer] = None
        # Bumped whenever a pending generation is superseded or abandoned
        self._generation = 0

        self._history: List[TestResult] = self._store.load()

    # ------------------------------------------------------------------
    # State queries
    # ------------------------------------------------------------------

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def test_id(self) -> Optional[int]:
        return self._test_id

    @property
    def questions(self) -> List[Question]:
        """Questions of the active test, or of the reviewed result."""
        if self._status == SessionStatus.REVIEWING and self._result is not None:
            return list(self._result.questions)
        return list(self._questions)

    @property
    def answers(self) -> List[AnswerRecord]:
        """Copies of the answer records; use ``toggle_option`` to change them."""
        if self._status == SessionStatus.REVIEWING and self._result is not None:
            records = self._result.user_answers
        else:
            records = list(self._answers.values())
        return [a.model_copy(deep=True) for a in records]

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def current_question(self) -> Optional[Question]:
        questions = self.questions
        if not questions:
            return None
        return questions[self._current_index]

    @property
    def current_answer(self) -> Optional[AnswerRecord]:
        question = self.current_question
        if question is None:
            return None
        if self._status == SessionStatus.REVIEWING and self._result is not None:
            answer = self._result.answer_for(question.id)
        else:
            answer = self._answers.get(question.id)
        return answer.model_copy(deep=True) if answer is not None else None

    @property
    def answered_count(self) -> int:
        return sum(1 for a in self.answers if a.is_answered)

    @property
    def unanswered_count(self) -> int:
        return len(self.questions) - self.answered_count

    @property
    def progress(self) -> float:
        """Position of the cursor as a fraction of the test (0 when empty)."""
        count = len(self.questions)
        if count == 0:
            return 0.0
        return (self._current_index + 1) / count

    @property
    def flagged_question_ids(self) -> Set[int]:
        return set(self._flagged)

    @property
    def result(self) -> Optional[TestResult]:
        return self._result

    @property
    def history(self) -> List[TestResult]:
        return list(self._history)

    @property
    def remaining_seconds(self) -> Optional[int]:
        if self._timer is None:
            return None
        return self._timer.remaining

    @property
    def timer(self) -> Optional[CountdownTimer]:
        return self._timer

    def summary(self) -> SummaryMetrics:
        return summarize_history(self._history)

    def topic_performance(self) -> Dict[str, TopicStats]:
        return aggregate_topics(self._history)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _require(self, operation: str, *allowed: SessionStatus) -> None:
        if self._status not in allowed:
            raise SessionStateError(operation, self._status)

    async def start_test(self, test_id: int) -> None:
        """Generate a new test and begin it.

        On failure the controller returns to IDLE with ``error`` set. If the
        user abandons the request while it is pending, the late response is
        discarded.

        Raises:
            SessionStateError: Unless the controller is IDLE
        """
        self._require("start a test", SessionStatus.IDLE)
        await self._generate(test_id)

    async def retake(self) -> None:
        """Generate a fresh test for the same test id after reviewing.

        Raises:
            SessionStateError: Unless the controller is REVIEWING
        """
        self._require("retake a test", SessionStatus.REVIEWING)
        await self._generate(self._test_id)

    async def _generate(self, test_id: int) -> None:
        self._generation += 1
        generation = self._generation

        session_id_context.set(uuid.uuid4().hex[:12])
        self._status = SessionStatus.GENERATING
        self._test_id = test_id
        self._error = None
        self._questions = []
        self._answers = {}
        self._flagged = set()
        self._current_index = 0
        self._result = None
        logger.info(f"Generating test {test_id}")

        try:
            questions = await self._source.generate_practice_test(test_id)
        except asyncio.CancelledError:
            if generation == self._generation:
                logger.warning(f"Generation of test {test_id} was cancelled")
                self._fail_generation()
            raise
        except Exception as e:
            if generation != self._generation:
                logger.info(f"Ignoring failure of abandoned generation for test {test_id}: {e}")
                return
            logger.error(f"Failed to generate test {test_id}: {e}", exc_info=True)
            self._fail_generation()
            return

        if generation != self._generation:
            logger.info(f"Discarding late generation response for test {test_id}")
            return

        if not questions:
            logger.error(f"Generation for test {test_id} returned no questions")
            self._fail_generation()
            return

        self._begin(questions)

    def _fail_generation(self) -> None:
        self._error = GENERATION_ERROR_MESSAGE
        self._test_id = None
        self._status = SessionStatus.IDLE

    def _begin(self, questions: Sequence[Question]) -> None:
        self._questions = list(questions)
        self._answers = {
            q.id: AnswerRecord(question_id=q.id) for q in self._questions
        }
        self._current_index = 0
        self._status = SessionStatus.IN_PROGRESS

        self._timer = self._timer_factory(self._exam_duration, self._on_time_up)
        self._timer.start()
        logger.info(
            f"Test {self._test_id} started: {len(self._questions)} questions, "
            f"{self._exam_duration}s"
        )

    def _stop_timer(self) -> None:
        if self._timer is not None:
            self._timer.dispose()
            self._timer = None

    def _on_time_up(self) -> None:
        if self._status != SessionStatus.IN_PROGRESS:
            return
        logger.info(f"Time is up for test {self._test_id}, submitting")
        self.submit()

    def toggle_option(self, question_id: int, option_index: int) -> AnswerRecord:
        """Select or deselect an option of a question in the running test.

        Raises:
            SessionStateError: Unless the controller is IN_PROGRESS
            KeyError: If the question is not part of the test
            IndexError: If the option does not exist
        """
        self._require("change an answer", SessionStatus.IN_PROGRESS)
        question = next((q for q in self._questions if q.id == question_id), None)
        if question is None:
            raise KeyError(f"Question {question_id} is not part of this test")
        if not 0 <= option_index < len(question.options):
            raise IndexError(
                f"Question {question_id} has no option {option_index}"
            )

        answer = self._answers[question_id].toggled(
            option_index, multi_select=question.is_multi_select
        )
        self._answers[question_id] = answer
        return answer.model_copy(deep=True)

    def toggle_flag(self, question_id: int) -> bool:
        """Mark or unmark a question for later review; returns the new flag."""
        self._require("flag a question", SessionStatus.IN_PROGRESS)
        if question_id not in self._answers:
            raise KeyError(f"Question {question_id} is not part of this test")
        if question_id in self._flagged:
            self._flagged.discard(question_id)
            return False
        self._flagged.add(question_id)
        return True

    def go_to(self, index: int) -> int:
        """Move the cursor, clamped to the question range."""
        self._require(
            "navigate", SessionStatus.IN_PROGRESS, SessionStatus.REVIEWING
        )
        last = max(0, len(self.questions) - 1)
        self._current_index = min(max(index, 0), last)
        return self._current_index

    def next_question(self) -> int:
        return self.go_to(self._current_index + 1)

    def previous_question(self) -> int:
        return self.go_to(self._current_index - 1)

    def submit(self) -> TestResult:
        """Score the running test, record it in history and start reviewing.

        Raises:
            SessionStateError: Unless the controller is IN_PROGRESS
        """
        self._require("submit a test", SessionStatus.IN_PROGRESS)
        self._stop_timer()

        result = score_test(
            self._test_id,
            self._questions,
            self._answers,
            taken_on=self._today(),
        )
        self._result = result
        self._history = [result, *self._history]
        with graceful_failure(
            "save test history",
            logger,
            log_level=logging.ERROR,
            exc_info=True,
            context={"test_id": self._test_id},
        ):
            self._store.save(self._history)

        self._current_index = 0
        self._status = SessionStatus.REVIEWING
        return result

    def return_to_dashboard(self) -> None:
        """Go back to IDLE from review, or abandon a pending generation.

        Raises:
            SessionStateError: While a test is IN_PROGRESS
        """
        self._require(
            "return to the dashboard",
            SessionStatus.IDLE,
            SessionStatus.GENERATING,
            SessionStatus.REVIEWING,
        )
        if self._status == SessionStatus.GENERATING:
            self._generation += 1
            logger.info(f"Abandoned generation of test {self._test_id}")
        self._stop_timer()
        self._status = SessionStatus.IDLE
        self._questions = []
        self._answers = {}
        self._flagged = set()
        self._current_index = 0
