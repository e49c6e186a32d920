"""
Performance analytics over the stored test history.

Two views are derived on demand and never stored:

1. Summary metrics: tests taken, average score percentage, pass rate.
2. Per-topic breakdown: correct/total counts per exam objective across every
   question of every historical result.

Generated questions carry a free-text ``domain`` label that does not always
match a configured objective label character for character. Resolving a
label to a bucket is delegated to a pluggable TopicMatcher; labels no
matcher can resolve get an ad-hoc bucket keyed by the raw label.

Both folds are sums over the history, so their output does not depend on
history order.
"""

import logging
from typing import Dict, List, Optional, Protocol, Sequence

from .models import SummaryMetrics, TestResult, TopicConfig, TopicStats, round_percent
from .scoring import is_question_correct
from .topics import EXAM_TOPIC_CONFIG

logger = logging.getLogger(__name__)


class TopicMatcher(Protocol):
    """Strategy for routing a question's domain label to a configured topic."""

    def resolve(self, domain: str, topics: Sequence[TopicConfig]) -> Optional[str]:
        """Return the configured label for ``domain``, or None if unmatched."""
        ...


class ExactTopicMatcher:
    """Match only labels identical to a configured label."""

    def resolve(self, domain: str, topics: Sequence[TopicConfig]) -> Optional[str]:
        for topic in topics:
            if topic.name == domain:
                return topic.name
        return None


class ContainmentTopicMatcher:
    """Exact match first, then substring containment in either direction.

    A configured label containing the stored label is tried before a stored
    label containing a configured label, and topics are tried in
    configuration order. Containment can misroute a short label that happens
    to be a substring of an unrelated objective; TopicIdMatcher avoids that.
    """

    def resolve(self, domain: str, topics: Sequence[TopicConfig]) -> Optional[str]:
        if not domain:
            return None
        exact = ExactTopicMatcher().resolve(domain, topics)
        if exact is not None:
            return exact
        for topic in topics:
            if domain in topic.name:
                return topic.name
        for topic in topics:
            if topic.name in domain:
                return topic.name
        return None


class TopicIdMatcher:
    """Match the exact label or the stable topic id (e.g. ``terraform-state``)."""

    def resolve(self, domain: str, topics: Sequence[TopicConfig]) -> Optional[str]:
        key = domain.strip()
        for topic in topics:
            if key == topic.name or key.lower() == topic.id:
                return topic.name
        return None


DEFAULT_TOPIC_MATCHER: TopicMatcher = ContainmentTopicMatcher()


def summarize_history(history: Sequence[TestResult]) -> SummaryMetrics:
    """Average score and pass rate over all results, both 0 for no history."""
    if not history:
        return SummaryMetrics()

    total_fraction = sum(
        r.score / r.total_questions for r in history if r.total_questions
    )
    passed_count = sum(1 for r in history if r.passed)

    return SummaryMetrics(
        tests_taken=len(history),
        average_score=round_percent(total_fraction / len(history)),
        pass_rate=round_percent(passed_count / len(history)),
    )


def topic_performance(
    history: Sequence[TestResult],
    topics: Sequence[TopicConfig] = EXAM_TOPIC_CONFIG,
    matcher: Optional[TopicMatcher] = None,
) -> Dict[str, TopicStats]:
    """
    Fold every historical question into per-topic correct/total counts.

    Args:
        history: Stored test results, in any order
        topics: Configured objectives; each gets a bucket even when empty
        matcher: Label routing strategy (default: ContainmentTopicMatcher)

    Returns:
        Mapping of topic label to TopicStats. Configured topics come first in
        configuration order, followed by ad-hoc labels in first-seen order.
    """
    matcher = matcher or DEFAULT_TOPIC_MATCHER
    stats: Dict[str, TopicStats] = {t.name: TopicStats() for t in topics}

    for result in history:
        for question in result.questions:
            key = matcher.resolve(question.domain, topics)
            if key is None:
                key = question.domain
                if key not in stats:
                    logger.debug(f"Unmatched topic label, using ad-hoc bucket: {key!r}")
            bucket = stats.setdefault(key, TopicStats())
            bucket.total += 1
            if is_question_correct(question, result.answer_for(question.id)):
                bucket.correct += 1

    return stats


def visible_topics(stats: Dict[str, TopicStats]) -> Dict[str, TopicStats]:
    """Drop buckets no question has been routed to."""
    return {label: s for label, s in stats.items() if s.total > 0}


def weakest_topics(stats: Dict[str, TopicStats], limit: int = 3) -> List[str]:
    """Labels with the lowest accuracy first, for study suggestions."""
    ranked = sorted(visible_topics(stats).items(), key=lambda kv: (kv[1].percentage, kv[0]))
    return [label for label, _ in ranked[:limit]]
