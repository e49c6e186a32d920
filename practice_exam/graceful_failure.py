"""
Graceful failure utilities.

Non-critical operations (persisting history, notifying a timer consumer)
must never take the exam session down with them. This module centralizes the
"attempt, log, continue" pattern used for those operations.

Usage:
    from practice_exam.graceful_failure import graceful_failure

    with graceful_failure("save test history", logger):
        store.save(history)

    with graceful_failure("load test history", logger, exc_info=True):
        ...
"""

import logging
from contextlib import contextmanager
from typing import Any, Generator, Optional


@contextmanager
def graceful_failure(
    operation_name: str,
    logger: logging.Logger,
    *,
    log_level: int = logging.WARNING,
    exc_info: bool = False,
    context: Optional[dict[str, Any]] = None,
) -> Generator[None, None, None]:
    """Context manager for non-critical operations that should not block execution.

    Args:
        operation_name: Human-readable name of the operation for logging
            (e.g., "save test history").
        logger: The logger instance to use for logging errors.
        log_level: Logging level for error messages. Defaults to WARNING.
        exc_info: Whether to include exception traceback in log. Defaults to False.
        context: Optional dictionary of additional context to include in log message
            (e.g., {"test_id": 3}).

    Example:
        >>> with graceful_failure("save test history", logger, context={"test_id": 3}):
        ...     store.save(history)
    """
    try:
        yield
    except Exception as e:
        if context:
            context_str = ", ".join(f"{k}={v}" for k, v in context.items())
            message = f"Failed to {operation_name} ({context_str}): {e}"
        else:
            message = f"Failed to {operation_name}: {e}"

        logger.log(log_level, message, exc_info=exc_info)
