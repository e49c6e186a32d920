"""Command line entry point.

Exit Codes:
    0 - Success
    2 - Generation failure
    3 - Configuration error
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .analytics import summarize_history, topic_performance, visible_topics, weakest_topics
from .config import settings
from .generator import GenerationError, QuestionGenerator
from .logging_config import setup_logging
from .persistence import JsonFileHistoryStore
from .providers.google_provider import GoogleProvider
from .topics import EXAM_NAME, MOCK_EXAM_COUNT

EXIT_SUCCESS = 0
EXIT_GENERATION_FAILURE = 2
EXIT_CONFIG_ERROR = 3

logger = logging.getLogger(__name__)


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="practice-exam",
        description=f"{EXAM_NAME} practice exams",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Generate mock exam #3 and write it to a file
  practice-exam generate --test-id 3 --output exam3.json

  # Show average score, pass rate and the per-topic breakdown
  practice-exam stats

  # List stored results, most recent first
  practice-exam history
        """,
    )
    parser.add_argument(
        "--history-file",
        default=None,
        help=f"History store path (default: {settings.history_path})",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--json-logs", action="store_true", help="Emit logs as JSON lines"
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help=f"Also write logs to this file (production default: {settings.log_file})",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser("generate", help="Generate a practice test")
    generate.add_argument(
        "--test-id",
        type=int,
        choices=range(1, MOCK_EXAM_COUNT + 1),
        metavar=f"{{1..{MOCK_EXAM_COUNT}}}",
        default=1,
        help="Mock exam number (default: 1)",
    )
    generate.add_argument(
        "--output", default=None, help="Write questions to this file instead of stdout"
    )

    subparsers.add_parser("stats", help="Show performance analytics")
    subparsers.add_parser("history", help="List stored test results")

    return parser.parse_args(argv)


def run_generate(args: argparse.Namespace) -> int:
    if not settings.google_api_key:
        logger.error("GOOGLE_API_KEY is not set")
        return EXIT_CONFIG_ERROR

    generator = QuestionGenerator(
        GoogleProvider(api_key=settings.google_api_key, model=settings.google_model),
        temperature=settings.generation_temperature,
        max_tokens=settings.generation_max_tokens,
        batch_timeout_seconds=settings.generation_timeout_seconds,
    )
    try:
        questions = asyncio.run(generator.generate_practice_test(args.test_id))
    except GenerationError as e:
        logger.error(f"Generation failed: {e}")
        return EXIT_GENERATION_FAILURE

    payload = json.dumps(
        [q.model_dump(mode="json", by_alias=True) for q in questions], indent=2
    )
    if args.output:
        Path(args.output).write_text(payload + "\n", encoding="utf-8")
        print(f"Wrote {len(questions)} questions to {args.output}")
    else:
        print(payload)
    return EXIT_SUCCESS


def run_stats(store: JsonFileHistoryStore) -> int:
    history = store.load()
    summary = summarize_history(history)

    print(f"Tests taken:   {summary.tests_taken}")
    print(f"Average score: {summary.average_score}%")
    print(f"Pass rate:     {summary.pass_rate}%")

    stats = visible_topics(topic_performance(history))
    if stats:
        print()
        print("Knowledge breakdown:")
        width = max(len(label) for label in stats)
        for label, topic in stats.items():
            print(
                f"  {label:<{width}}  {topic.percentage:>3}%  "
                f"({topic.correct}/{topic.total})"
            )
        weakest = weakest_topics(stats)
        print()
        print("Focus next on: " + "; ".join(weakest))
    return EXIT_SUCCESS


def run_history(store: JsonFileHistoryStore) -> int:
    history = store.load()
    if not history:
        print("No tests taken yet.")
        return EXIT_SUCCESS
    for result in history:
        verdict = "PASS" if result.passed else "FAIL"
        print(
            f"{result.date_taken}  Test #{result.test_id:<3} "
            f"{result.score}/{result.total_questions} ({result.percentage}%)  {verdict}"
        )
    return EXIT_SUCCESS


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point.

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    args = parse_arguments(argv)
    production = settings.env == "production"
    setup_logging(
        log_level="DEBUG" if args.verbose else settings.log_level,
        log_file=args.log_file or settings.log_file,
        enable_file_logging=bool(args.log_file) or production,
        json_format=args.json_logs or production,
    )

    store = JsonFileHistoryStore(
        args.history_file or settings.history_path, key=settings.history_key
    )
    if args.command == "generate":
        return run_generate(args)
    if args.command == "stats":
        return run_stats(store)
    return run_history(store)


if __name__ == "__main__":
    sys.exit(main())
