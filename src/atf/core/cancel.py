"""CancelToken — one-shot cooperative cancellation for a single run.

The flag is monotonic: once cancelled it never resets. Waiters observe it
either as a level (`cancelled`) or as a broadcast (`await wait()`).
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from atf.core.exceptions import CancelledStepError

logger = logging.getLogger(__name__)


class CancelToken:
    """Cancellation signal shared by every step and wait of one run."""

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._listeners: list[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        """Flip the token. Idempotent; listeners fire once."""
        if self._event.is_set():
            return
        self._event.set()
        listeners, self._listeners = self._listeners, []
        for listener in listeners:
            try:
                listener()
            except Exception:
                logger.exception("Cancel listener raised")

    async def wait(self, timeout: float | None = None) -> bool:
        """Suspend until cancelled, or until `timeout` seconds pass.

        Every waiter wakes on cancel(). Returns True if the token fired.
        """
        if self._event.is_set():
            return True
        if timeout is None:
            await self._event.wait()
            return True
        try:
            await asyncio.wait_for(self._event.wait(), timeout=timeout)
        except TimeoutError:
            return False
        return True

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Register a callback fired on cancel. Returns an unsubscribe function.

        If already cancelled, the callback fires immediately.
        """
        if self.cancelled:
            listener()
            return lambda: None
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise CancelledStepError
