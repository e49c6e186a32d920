"""Practice test generation.

A full exam is requested as two independent batches (objectives 1-5 and
6-9) issued concurrently, so neither response runs into model output
limits. Both batches must succeed: the results are concatenated in batch
order and numbered 1..N, and the first failure cancels the other batch
and discards everything.
"""

import asyncio
import logging
import time
from typing import Any, List, Optional, Protocol, Sequence

from pydantic import ValidationError

from .models import Question, TopicConfig
from .prompts import QUESTION_LIST_SCHEMA, build_batch_prompt
from .providers.base import BaseLLMProvider, LLMProviderError
from .topics import EXAM_TOPIC_CONFIG, split_generation_batches

logger = logging.getLogger(__name__)

DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 32768
DEFAULT_BATCH_TIMEOUT_SECONDS = 180.0


class GenerationError(Exception):
    """Raised when a practice test could not be generated."""


class QuestionSource(Protocol):
    """Anything that can produce the questions for a practice test."""

    async def generate_practice_test(self, test_id: int) -> List[Question]:
        ...


def _extract_records(payload: Any) -> List[dict]:
    """Accept a bare JSON array or an object wrapping one under "questions"."""
    if isinstance(payload, dict) and isinstance(payload.get("questions"), list):
        payload = payload["questions"]
    if not isinstance(payload, list):
        raise GenerationError(
            f"Expected a JSON array of questions, got {type(payload).__name__}"
        )
    for record in payload:
        if not isinstance(record, dict):
            raise GenerationError(
                f"Expected question objects, got {type(record).__name__}"
            )
    return payload


class QuestionGenerator:
    """Generates practice tests from an LLM provider."""

    def __init__(
        self,
        provider: BaseLLMProvider,
        topics: Sequence[TopicConfig] = EXAM_TOPIC_CONFIG,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        batch_timeout_seconds: Optional[float] = DEFAULT_BATCH_TIMEOUT_SECONDS,
    ):
        """
        Args:
            provider: LLM provider used for every batch
            topics: Exam objectives to cover, in objective order
            temperature: Sampling temperature for generation
            max_tokens: Output token limit per batch
            batch_timeout_seconds: Timeout for each batch request (None disables)
        """
        self.provider = provider
        self.topics = tuple(topics)
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.batch_timeout_seconds = batch_timeout_seconds

    @property
    def expected_question_count(self) -> int:
        return sum(t.question_count for t in self.topics)

    async def generate_batch(
        self, topics: Sequence[TopicConfig], test_id: int, batch_name: str
    ) -> List[dict]:
        """Request the questions for one batch of topics.

        Returns:
            Raw question records (without ids)

        Raises:
            GenerationError: If the request fails, times out, or the response
                is not a non-empty list of question objects
        """
        prompt = build_batch_prompt(topics, test_id)
        requested = sum(t.question_count for t in topics)
        logger.info(
            f"Requesting batch {batch_name}: {len(topics)} topics, {requested} questions",
            extra={"test_id": test_id, "batch": batch_name},
        )

        start = time.perf_counter()
        try:
            payload = await asyncio.wait_for(
                self.provider.generate_structured_completion_async(
                    prompt,
                    QUESTION_LIST_SCHEMA,
                    temperature=self.temperature,
                    max_tokens=self.max_tokens,
                ),
                timeout=self.batch_timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise GenerationError(
                f"Batch {batch_name} timed out after {self.batch_timeout_seconds}s"
            ) from e
        except LLMProviderError as e:
            logger.error(
                f"Batch {batch_name} failed: {e}",
                extra={
                    "test_id": test_id,
                    "batch": batch_name,
                    "error": e.classified_error.to_dict(),
                },
            )
            raise GenerationError(f"Batch {batch_name} failed: {e}") from e

        records = _extract_records(payload)
        if not records:
            raise GenerationError(f"Batch {batch_name} returned no questions")

        duration_ms = int((time.perf_counter() - start) * 1000)
        logger.info(
            f"Batch {batch_name} returned {len(records)} questions",
            extra={"test_id": test_id, "batch": batch_name, "duration_ms": duration_ms},
        )
        if len(records) != requested:
            logger.warning(
                f"Batch {batch_name} returned {len(records)} questions, "
                f"expected {requested}"
            )
        return records

    async def _run_batch(
        self, topics: Sequence[TopicConfig], test_id: int, batch_name: str
    ) -> List[dict]:
        try:
            return await self.generate_batch(topics, test_id, batch_name)
        except GenerationError:
            raise
        except Exception as e:
            raise GenerationError(f"Batch {batch_name} failed: {e}") from e

    async def generate_practice_test(self, test_id: int) -> List[Question]:
        """
        Generate a full practice test.

        Args:
            test_id: Mock exam number, passed through to the prompt

        Returns:
            Validated questions with sequential ids starting at 1

        Raises:
            GenerationError: If any batch fails or any record is invalid
        """
        batches = split_generation_batches(self.topics)
        batch_names = [chr(ord("A") + i) for i in range(len(batches))]

        tasks = [
            asyncio.ensure_future(self._run_batch(batch, test_id, name))
            for batch, name in zip(batches, batch_names)
        ]
        try:
            # The first failure propagates at once; the rest are cancelled below
            results = await asyncio.gather(*tasks)
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()

        records: List[dict] = []
        for result in results:
            records.extend(result)

        questions = []
        for number, record in enumerate(records, start=1):
            data = {k: v for k, v in record.items() if k != "id"}
            try:
                questions.append(Question.model_validate({**data, "id": number}))
            except ValidationError as e:
                raise GenerationError(f"Question {number} is invalid: {e}") from e

        if len(questions) != self.expected_question_count:
            logger.warning(
                f"Generated {len(questions)} questions for test {test_id}, "
                f"expected {self.expected_question_count}"
            )
        logger.info(f"Generated test {test_id} with {len(questions)} questions")
        return questions
