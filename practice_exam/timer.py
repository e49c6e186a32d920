"""Countdown timer for a timed exam.

The timer runs as an asyncio task on the running event loop, decrementing
its remaining time once per interval. When the remaining time reaches zero it
calls ``on_expire`` exactly once and stops. Disposing the timer cancels the
task; no expiry fires afterwards.
"""

import asyncio
import logging
from typing import Callable, Optional

from .graceful_failure import graceful_failure
from .topics import URGENT_THRESHOLD_SECONDS

logger = logging.getLogger(__name__)


def format_seconds(seconds: int) -> str:
    """Format a second count as ``MM:SS`` (minutes are not wrapped at 60)."""
    minutes, secs = divmod(max(0, seconds), 60)
    return f"{minutes:02d}:{secs:02d}"


class CountdownTimer:
    """Cancellable once-per-interval countdown with a single expiry signal."""

    def __init__(
        self,
        duration_seconds: int,
        on_expire: Callable[[], None],
        *,
        interval: float = 1.0,
    ):
        """
        Args:
            duration_seconds: Whole seconds to count down from
            on_expire: Called once when the remaining time reaches zero
            interval: Wall-clock seconds per tick
        """
        if duration_seconds < 0:
            raise ValueError(f"duration_seconds must be >= 0, got {duration_seconds}")
        if interval <= 0:
            raise ValueError(f"interval must be > 0, got {interval}")

        self.duration_seconds = duration_seconds
        self.interval = interval
        self._on_expire = on_expire
        self._remaining = duration_seconds
        self._expired = False
        self._disposed = False
        self._task: Optional[asyncio.Task] = None

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def expired(self) -> bool:
        return self._expired

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def is_urgent(self) -> bool:
        return self._remaining < URGENT_THRESHOLD_SECONDS

    def format_remaining(self) -> str:
        return format_seconds(self._remaining)

    def start(self) -> None:
        """Schedule the ticking task on the running event loop.

        Raises:
            RuntimeError: If there is no running loop, or the timer was
                already started or disposed.
        """
        if self._disposed:
            raise RuntimeError("Cannot start a disposed timer")
        if self._task is not None:
            raise RuntimeError("Timer already started")
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.debug(f"Countdown started: {self.format_remaining()}")

    def tick(self) -> None:
        """Advance the countdown by one second."""
        if self._disposed or self._expired:
            return
        if self._remaining > 0:
            self._remaining -= 1
        if self._remaining == 0:
            self._expire()

    def dispose(self) -> None:
        """Stop ticking. Safe to call any number of times."""
        if self._disposed:
            return
        self._disposed = True
        if self._task is not None and not self._task.done():
            try:
                current = asyncio.current_task()
            except RuntimeError:
                current = None
            # Disposing from inside on_expire runs on the task itself
            if self._task is not current:
                self._task.cancel()
        logger.debug(f"Countdown disposed with {self._remaining}s remaining")

    def _expire(self) -> None:
        self._expired = True
        logger.info("Countdown expired")
        with graceful_failure("run timer expiry callback", logger, exc_info=True):
            self._on_expire()

    async def _run(self) -> None:
        if self._remaining == 0:
            self._expire()
            return
        while not (self._expired or self._disposed):
            await asyncio.sleep(self.interval)
            self.tick()
