"""Trailing-edge debounce for search-box input.

Every keystroke re-arms a single timer. Only when the input has been quiet
for ``debounce_delay_ms`` does the callback run, and it runs with the text of
the most recent keystroke. Earlier keystrokes inside the same window never
reach the callback.

There is no leading-edge trigger and no maximum wait: input that keeps
arriving faster than the delay postpones the search indefinitely.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_DELAY_MS = 500


class SearchScheduler:
    """Owns the one pending timer between keystrokes and the search callback.

    The callback is called synchronously from the event loop when the timer
    fires; callers that need to do I/O should spawn a task from it.

    Use the scheduler as a context manager (sync or async) so that any armed
    timer is cancelled when the owning scope goes away.
    """

    def __init__(
        self,
        callback: Callable[[str], None],
        debounce_delay_ms: int = DEFAULT_DEBOUNCE_DELAY_MS,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        if debounce_delay_ms < 0:
            raise ValueError(f"debounce_delay_ms must be >= 0, got {debounce_delay_ms}")
        self.debounce_delay_ms = debounce_delay_ms
        self._callback = callback
        self._loop = loop
        self._timer: Optional[asyncio.TimerHandle] = None

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def on_input(self, text: str) -> None:
        """Replace any pending search with one for ``text``."""
        self.cancel()
        loop = self._loop or asyncio.get_running_loop()
        self._timer = loop.call_later(self.debounce_delay_ms / 1000, self._fire, text)
        logger.debug("debounce armed q=%r delay=%sms", text, self.debounce_delay_ms)

    def cancel(self) -> None:
        if self._timer is None:
            return
        self._timer.cancel()
        self._timer = None
        logger.debug("debounce cancelled")

    def reset(self) -> None:
        """Teardown hook; after this no previously armed timer can fire."""
        self.cancel()

    def _fire(self, text: str) -> None:
        self._timer = None
        logger.debug("debounce fired q=%r", text)
        self._callback(text)

    def __enter__(self) -> "SearchScheduler":
        return self

    def __exit__(self, *exc_info) -> None:
        self.reset()

    async def __aenter__(self) -> "SearchScheduler":
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.reset()
