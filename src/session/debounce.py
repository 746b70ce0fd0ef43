"""Cancellable delayed callbacks on the running event loop."""

from __future__ import annotations

import asyncio
from typing import Callable

from core.constants import FILTER_DEBOUNCE_SECONDS


class Debouncer:
    """Collapse bursts of scheduling requests into one delayed call.

    Each ``schedule`` cancels the pending call, so only the last request
    of a burst runs, ``delay`` seconds after it was made.
    """

    def __init__(self, delay: float = FILTER_DEBOUNCE_SECONDS) -> None:
        self._delay = delay
        self._handle: asyncio.TimerHandle | None = None

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def pending(self) -> bool:
        """Whether a scheduled call has neither run nor been cancelled."""
        return self._handle is not None

    def schedule(self, callback: Callable[[], None]) -> asyncio.TimerHandle:
        """Replace any pending call with ``callback``.

        Args:
            callback: Zero-argument callable to run after the delay.

        Returns:
            Handle for the newly scheduled call.

        Raises:
            RuntimeError: If no event loop is running.
        """
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self._delay, self._fire, callback)
        return self._handle

    def cancel(self) -> None:
        """Cancel the pending call, if any."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, callback: Callable[[], None]) -> None:
        self._handle = None
        callback()
