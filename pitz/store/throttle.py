"""
Leading + Trailing Throttle

Coalesces bursts of snapshot updates into at most one immediate and one
delayed application per window.

States:
    IDLE     no window open; the next call applies immediately
    PENDING  a window is open until `deadline`; calls merge their payload
             into `pending` (later keys overwrite earlier ones)

Transitions:
    call(payload)  IDLE    -> apply(payload), open window -> PENDING
                   PENDING -> merge into pending          -> PENDING
    fire()         PENDING with pending    -> apply(pending), open new window -> PENDING
                   PENDING without pending -> IDLE

A window of zero disables coalescing: every call applies immediately.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class ThrottleState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"


class Throttle:
    """
    Explicit leading/trailing throttle driven by the running event loop.

    Args:
        apply: Called with the merged payload on every leading or trailing fire
        window_s: Length of the suppression window in seconds
    """

    def __init__(self, apply: Callable[[dict[str, Any]], None], window_s: float):
        if window_s < 0:
            raise ValueError(f"Throttle window must be >= 0, got {window_s}")
        self._apply = apply
        self._window_s = window_s
        self._state = ThrottleState.IDLE
        self._pending: dict[str, Any] | None = None
        self._deadline: float | None = None
        self._handle: asyncio.TimerHandle | None = None

    @property
    def state(self) -> ThrottleState:
        return self._state

    @property
    def window_s(self) -> float:
        return self._window_s

    @property
    def deadline(self) -> float | None:
        """Loop time at which the open window closes, or None when idle."""
        return self._deadline

    @property
    def pending(self) -> dict[str, Any] | None:
        """Copy of the coalesced payload awaiting the trailing fire."""
        return dict(self._pending) if self._pending is not None else None

    def call(self, payload: Mapping[str, Any]) -> None:
        """Apply now if idle, otherwise merge into the pending payload."""
        if self._state is ThrottleState.IDLE:
            self._apply(dict(payload))
            self._open_window()
            return

        if self._pending is None:
            self._pending = {}
        self._pending.update(payload)
        logger.debug(f"Coalesced update for {list(payload)} ({len(self._pending)} keys pending)")

    def fire(self) -> None:
        """Close the current window (normally invoked by the loop timer)."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        pending, self._pending = self._pending, None
        if pending is None:
            self._state = ThrottleState.IDLE
            self._deadline = None
            return

        self._apply(pending)
        self._open_window()

    def flush(self) -> None:
        """Apply any pending payload now and return to IDLE."""
        pending, self._pending = self._pending, None
        self.cancel()
        if pending is not None:
            self._apply(pending)

    def cancel(self) -> None:
        """Stop the timer and discard any pending payload."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._pending = None
        self._state = ThrottleState.IDLE
        self._deadline = None

    def _open_window(self) -> None:
        if self._window_s == 0:
            return
        loop = asyncio.get_running_loop()
        self._deadline = loop.time() + self._window_s
        self._handle = loop.call_later(self._window_s, self.fire)
        self._state = ThrottleState.PENDING
