"""Tests for the countdown timer."""

import asyncio
from unittest.mock import MagicMock

import pytest

from practice_exam.timer import CountdownTimer, format_seconds


class TestCountdownTicks:
    """Deterministic tests driving tick() directly."""

    def test_ticking_full_duration_fires_once(self):
        """Test that D ticks from D fire exactly one expiry."""
        on_expire = MagicMock()
        timer = CountdownTimer(5, on_expire)

        for _ in range(5):
            timer.tick()

        assert timer.remaining == 0
        assert timer.expired
        on_expire.assert_called_once()

    def test_extra_ticks_do_not_go_negative_or_refire(self):
        on_expire = MagicMock()
        timer = CountdownTimer(2, on_expire)

        for _ in range(10):
            timer.tick()

        assert timer.remaining == 0
        on_expire.assert_called_once()

    def test_dispose_suppresses_expiry(self):
        on_expire = MagicMock()
        timer = CountdownTimer(3, on_expire)
        timer.tick()
        timer.dispose()

        for _ in range(5):
            timer.tick()

        assert timer.remaining == 2
        on_expire.assert_not_called()

    def test_dispose_is_idempotent(self):
        timer = CountdownTimer(3, MagicMock())
        timer.dispose()
        timer.dispose()

        assert timer.disposed

    def test_callback_errors_are_contained(self):
        """Test that a failing expiry callback does not escape the timer."""
        timer = CountdownTimer(1, MagicMock(side_effect=RuntimeError("boom")))

        timer.tick()

        assert timer.expired

    def test_negative_duration_rejected(self):
        with pytest.raises(ValueError):
            CountdownTimer(-1, MagicMock())

    def test_start_after_dispose_rejected(self):
        timer = CountdownTimer(3, MagicMock())
        timer.dispose()
        with pytest.raises(RuntimeError):
            timer.start()


class TestCountdownDisplay:
    def test_format_seconds(self):
        assert format_seconds(3600) == "60:00"
        assert format_seconds(61) == "01:01"
        assert format_seconds(0) == "00:00"

    def test_urgency_below_one_minute(self):
        timer = CountdownTimer(61, MagicMock())
        assert not timer.is_urgent
        timer.tick()
        assert not timer.is_urgent
        timer.tick()
        assert timer.is_urgent
        assert timer.format_remaining() == "00:59"


class TestCountdownAsync:
    """Tests running the timer on the event loop with a short interval."""

    @pytest.mark.asyncio
    async def test_expires_on_loop(self):
        expired = asyncio.Event()
        timer = CountdownTimer(3, expired.set, interval=0.01)

        timer.start()
        await asyncio.wait_for(expired.wait(), timeout=2)

        assert timer.remaining == 0
        await asyncio.sleep(0.05)
        assert not timer.running

    @pytest.mark.asyncio
    async def test_dispose_cancels_task(self):
        on_expire = MagicMock()
        timer = CountdownTimer(100, on_expire, interval=0.01)

        timer.start()
        await asyncio.sleep(0.05)
        timer.dispose()
        remaining = timer.remaining
        await asyncio.sleep(0.05)

        assert not timer.running
        assert timer.remaining == remaining
        on_expire.assert_not_called()

    @pytest.mark.asyncio
    async def test_zero_duration_expires_immediately(self):
        on_expire = MagicMock()
        timer = CountdownTimer(0, on_expire, interval=10)

        timer.start()
        await asyncio.sleep(0)
        await asyncio.sleep(0)

        on_expire.assert_called_once()

    @pytest.mark.asyncio
    async def test_double_start_rejected(self):
        timer = CountdownTimer(10, MagicMock(), interval=0.01)
        timer.start()
        try:
            with pytest.raises(RuntimeError):
                timer.start()
        finally:
            timer.dispose()

    def test_start_requires_running_loop(self):
        timer = CountdownTimer(10, MagicMock())
        with pytest.raises(RuntimeError):
            timer.start()
