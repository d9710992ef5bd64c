"""Tests for the leading/trailing throttle state machine."""

import asyncio

import pytest

from pitz.store import Throttle, ThrottleState

WINDOW = 0.05


class TestThrottle:
    """Test throttle transitions."""

    @pytest.mark.asyncio
    async def test_leading_call_applies_immediately(self):
        """The first call in an idle window applies at once."""
        applied = []
        throttle = Throttle(applied.append, WINDOW)

        throttle.call({"a": 1})

        assert applied == [{"a": 1}]
        assert throttle.state is ThrottleState.PENDING
        throttle.cancel()

    @pytest.mark.asyncio
    async def test_rapid_calls_coalesce(self):
        """Three rapid calls give one leading and one trailing application."""
        applied = []
        throttle = Throttle(applied.append, WINDOW)

        throttle.call({"v": 1})
        throttle.call({"v": 2})
        throttle.call({"v": 3})

        assert applied == [{"v": 1}]
        assert throttle.pending == {"v": 3}

        await asyncio.sleep(WINDOW * 3)

        assert applied == [{"v": 1}, {"v": 3}]
        throttle.cancel()

    @pytest.mark.asyncio
    async def test_pending_payloads_merge(self):
        """Coalesced payloads for different keys are merged."""
        applied = []
        throttle = Throttle(applied.append, WINDOW)

        throttle.call({"a": 1})
        throttle.call({"b": 2})
        throttle.call({"a": 3})
        await asyncio.sleep(WINDOW * 3)

        assert applied == [{"a": 1}, {"b": 2, "a": 3}]
        throttle.cancel()

    @pytest.mark.asyncio
    async def test_returns_to_idle(self):
        """A window with nothing pending returns to idle."""
        applied = []
        throttle = Throttle(applied.append, WINDOW)

        throttle.call({"a": 1})
        await asyncio.sleep(WINDOW * 3)

        assert throttle.state is ThrottleState.IDLE
        assert throttle.deadline is None

        throttle.call({"a": 2})
        assert applied == [{"a": 1}, {"a": 2}]
        throttle.cancel()

    @pytest.mark.asyncio
    async def test_trailing_fire_opens_new_window(self):
        """A call right after a trailing fire is coalesced again."""
        applied = []
        throttle = Throttle(applied.append, WINDOW)

        throttle.call({"a": 1})
        throttle.call({"a": 2})
        throttle.fire()

        assert applied == [{"a": 1}, {"a": 2}]
        assert throttle.state is ThrottleState.PENDING

        throttle.call({"a": 3})
        assert applied == [{"a": 1}, {"a": 2}]
        throttle.cancel()

    @pytest.mark.asyncio
    async def test_flush(self):
        """flush() applies pending updates and goes idle."""
        applied = []
        throttle = Throttle(applied.append, WINDOW)

        throttle.call({"a": 1})
        throttle.call({"a": 2})
        throttle.flush()

        assert applied == [{"a": 1}, {"a": 2}]
        assert throttle.state is ThrottleState.IDLE

    @pytest.mark.asyncio
    async def test_zero_window(self):
        """A zero window applies every call immediately."""
        applied = []
        throttle = Throttle(applied.append, 0)

        throttle.call({"a": 1})
        throttle.call({"a": 2})

        assert applied == [{"a": 1}, {"a": 2}]
        assert throttle.state is ThrottleState.IDLE

    def test_negative_window_rejected(self):
        """Negative windows are invalid."""
        with pytest.raises(ValueError):
            Throttle(lambda payload: None, -1)
