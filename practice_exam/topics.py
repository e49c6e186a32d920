"""Exam objectives and fixed exam policy for HashiCorp Terraform Associate (003).

The configuration is immutable at runtime: the topic labels are the routing
keys for topic statistics, and the per-topic counts drive question generation.
"""

from typing import List, Sequence, Tuple

from .models import TopicConfig

EXAM_NAME = "HashiCorp Terraform Associate (003)"

EXAM_DURATION_SECONDS = 60 * 60
PASSING_THRESHOLD = 0.70
URGENT_THRESHOLD_SECONDS = 60

# Number of mock exams offered on the dashboard (test ids 1..N)
MOCK_EXAM_COUNT = 10

# Topics 1-5 go in the first generation batch, 6-9 in the second
FIRST_BATCH_SIZE = 5

EXAM_TOPIC_CONFIG: Tuple[TopicConfig, ...] = (
    TopicConfig(
        id="iac-concepts",
        name="1. Understand infrastructure as code (IaC) concepts",
        weight=0.10,
        question_count=6,
    ),
    TopicConfig(
        id="terraform-purpose",
        name="2. Understand the purpose of Terraform (vs other IaC)",
        weight=0.07,
        question_count=4,
    ),
    TopicConfig(
        id="terraform-basics",
        name="3. Understand Terraform basics (providers, resources, data sources)",
        weight=0.10,
        question_count=6,
    ),
    TopicConfig(
        id="terraform-cli",
        name="4. Use Terraform CLI (init, plan, apply, destroy, fmt, validate)",
        weight=0.10,
        question_count=6,
    ),
    TopicConfig(
        id="terraform-modules",
        name="5. Interact with Terraform modules (inputs, outputs, source)",
        weight=0.13,
        question_count=7,
    ),
    TopicConfig(
        id="terraform-workflow",
        name="6. Navigate Terraform workflow (write -> plan -> create)",
        weight=0.25,
        question_count=14,
    ),
    TopicConfig(
        id="terraform-state",
        name="7. Implement and maintain state (backend, locking, remote)",
        weight=0.13,
        question_count=7,
    ),
    TopicConfig(
        id="terraform-config",
        name="8. Read, generate, and modify configuration (variables, locals, loops)",
        weight=0.08,
        question_count=5,
    ),
    TopicConfig(
        id="terraform-cloud",
        name="9. Understand Terraform Cloud capabilities",
        weight=0.04,
        question_count=2,
    ),
)

EXAM_QUESTION_COUNT = sum(t.question_count for t in EXAM_TOPIC_CONFIG)


def topic_labels(topics: Sequence[TopicConfig] = EXAM_TOPIC_CONFIG) -> List[str]:
    return [t.name for t in topics]


def split_generation_batches(
    topics: Sequence[TopicConfig] = EXAM_TOPIC_CONFIG,
    first_batch_size: int = FIRST_BATCH_SIZE,
) -> List[List[TopicConfig]]:
    """Split the topic list into the two independent generation requests.

    Keeps each request small enough to stay clear of model output limits.
    Topic order is preserved, so concatenating the batch results keeps
    questions grouped in objective order.
    """
    batches = [list(topics[:first_batch_size]), list(topics[first_batch_size:])]
    return [batch for batch in batches if batch]
