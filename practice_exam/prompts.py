"""Prompt templates for practice question generation."""

from typing import Any, Dict, Sequence

from .models import TopicConfig
from .topics import EXAM_NAME

# JSON schema for one generated question (camelCase, matching the stored shape)
QUESTION_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "questionText": {
            "type": "string",
            "description": "The text of the exam question.",
        },
        "codeSnippet": {
            "type": "string",
            "nullable": True,
            "description": "Optional Terraform HCL code snippet if relevant. Null if not needed.",
        },
        "options": {
            "type": "array",
            "items": {"type": "string"},
            "description": "A list of possible answers (usually 4, or 2 for True/False).",
        },
        "correctAnswerIndices": {
            "type": "array",
            "items": {"type": "integer"},
            "description": "Array of zero-based indices corresponding to the correct options.",
        },
        "explanation": {
            "type": "string",
            "description": "Detailed explanation of the answer.",
        },
        "domain": {
            "type": "string",
            "description": "The exact Exam Topic name this question belongs to.",
        },
    },
    "required": ["questionText", "options", "correctAnswerIndices", "explanation", "domain"],
}

QUESTION_LIST_SCHEMA: Dict[str, Any] = {
    "type": "array",
    "items": QUESTION_SCHEMA,
    "description": "A list of practice exam questions.",
}

BATCH_PROMPT_TEMPLATE = """You are an exam engine for {exam_name}.
Generate a subset of questions for a practice exam (mock exam #{test_id}).

Requirements:
1. Generate exactly the number of questions requested per topic below.
2. Questions must be strictly aligned with the "003" exam version.
3. Mix of Multiple Choice (single answer), Multiple Select (multiple answers), and True/False.
4. For "Text Match" style questions, present them as Multiple Choice with command/code options.
5. Use HCL code snippets frequently (especially for config/module topics).
6. Set "domain" to the exact topic name as written below.

Topics for this batch:
{topic_lines}

Return ONLY the JSON array."""


def format_topic_line(topic: TopicConfig) -> str:
    return f"- {topic.name} (Generate exactly {topic.question_count} questions)"


def build_batch_prompt(topics: Sequence[TopicConfig], test_id: int) -> str:
    """Build the generation prompt for one batch of exam topics."""
    return BATCH_PROMPT_TEMPLATE.format(
        exam_name=EXAM_NAME,
        test_id=test_id,
        topic_lines="\n".join(format_topic_line(t) for t in topics),
    )
