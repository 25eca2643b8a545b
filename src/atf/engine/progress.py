"""ProgressReporter — tick-based sleep with progress feedback.

A sleep is split into 5..50 ticks (about one per 100ms). A ProgressValue is
published before every tick and cleared to None when the sleep ends, however
it ends.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import timedelta
from typing import TYPE_CHECKING

from atf.core.models import ProgressValue

if TYPE_CHECKING:
    from atf.core.cancel import CancelToken

logger = logging.getLogger(__name__)

ProgressSink = Callable[[ProgressValue | None], None]

TICK_MS = 100
MIN_TICKS = 5
MAX_TICKS = 50


def tick_count(seconds: float) -> int:
    """Number of ticks for a duration, clamped to [MIN_TICKS, MAX_TICKS]."""
    return int(max(MIN_TICKS, min(MAX_TICKS, seconds * 1000 / TICK_MS)))


def _bar(count: int, total: int) -> str:
    return "[" + "█" * count + "_" * (total - count) + "]"


class ProgressReporter:
    """Publishes sleep progress to a sink (usually the controller)."""

    def __init__(self, publish: ProgressSink | None = None) -> None:
        self._publish = publish or (lambda _value: None)

    async def sleep(
        self,
        duration: float | timedelta,
        *,
        cancel: CancelToken | None = None,
        error: bool = False,
        message: str | None = None,
    ) -> bool:
        """Sleep for `duration`, ticking progress.

        Args:
            duration: Seconds or timedelta.
            cancel: Token that interrupts the sleep within one tick.
            error: True when the duration is an error timeout (wait-for).
            message: Optional log line describing the sleep.

        Returns:
            True if the full duration elapsed, False if cancelled.
        """
        seconds = duration.total_seconds() if isinstance(duration, timedelta) else float(duration)
        if seconds <= 0:
            return True

        ticks = tick_count(seconds)
        tick = seconds / ticks
        if message:
            logger.debug(message)
        else:
            logger.debug("Sleeping for %d millis...", int(seconds * 1000))

        try:
            for i in range(ticks):
                logger.debug(_bar(i, ticks))
                self._publish(ProgressValue(value=i, max=ticks, error=error))
                if cancel is None:
                    await asyncio.sleep(tick)
                elif await cancel.wait(tick):
                    return False
            logger.debug(_bar(ticks, ticks))
            self._publish(ProgressValue(value=ticks, max=ticks, error=error))
            return True
        finally:
            self._publish(None)
