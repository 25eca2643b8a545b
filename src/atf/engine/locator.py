"""TargetLocator — bounded-time search for an element by testable id.

The driver is polled at a fixed interval while a progress sleep of the full
timeout runs alongside. Whichever finishes first wins; the other task is
cancelled. The cancel token supersedes both.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta
from typing import TYPE_CHECKING

from atf.core.exceptions import (
    AmbiguousTargetError,
    ATFError,
    CancelledStepError,
    TimeoutExceededError,
)

if TYPE_CHECKING:
    from atf.core.cancel import CancelToken
    from atf.core.models import Element
    from atf.engine.base import BaseDriver
    from atf.engine.progress import ProgressReporter

logger = logging.getLogger(__name__)


class Locator:
    """Every element that matched a testable id on the winning poll."""

    def __init__(self, testable_id: str, elements: list[Element]) -> None:
        self.testable_id = testable_id
        self.elements = elements

    def __len__(self) -> int:
        return len(self.elements)

    def single(self) -> Element:
        """The unique match. Raises AmbiguousTargetError if several matched."""
        if len(self.elements) > 1:
            raise AmbiguousTargetError(self.testable_id, len(self.elements))
        return self.elements[0]


class TargetLocator:
    """Wait-for implementation shared by all targeted steps."""

    def __init__(
        self,
        driver: BaseDriver,
        progress: ProgressReporter,
        poll_interval: float = 0.1,
        default_timeout: float = 10.0,
    ) -> None:
        self._driver = driver
        self._progress = progress
        self._poll_interval = poll_interval
        self._default_timeout = default_timeout

    async def wait_for(
        self,
        testable_id: str,
        *,
        cancel_token: CancelToken,
        timeout: float | timedelta | None = None,
    ) -> Locator:
        """Wait until at least one element is keyed by testable_id.

        Args:
            testable_id: Identifier to look up.
            cancel_token: Run cancel token.
            timeout: Seconds or timedelta; defaults to the configured timeout.

        Returns:
            Locator over the matches.

        Raises:
            TimeoutExceededError: Nothing matched before the timeout.
            CancelledStepError: The token fired first.
        """
        if isinstance(timeout, timedelta):
            seconds = timeout.total_seconds()
        else:
            seconds = self._default_timeout if timeout is None else float(timeout)
        name = f"wait_for('{testable_id}')"
        cancel_token.raise_if_cancelled()

        poller = asyncio.ensure_future(self._poll(testable_id))
        sleeper = asyncio.ensure_future(
            self._progress.sleep(seconds, error=True, message=f"[{name}]: {seconds:g} seconds"),
        )
        canceller = asyncio.ensure_future(cancel_token.wait())
        tasks = (poller, sleeper, canceller)
        try:
            done, _pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

        try:
            if cancel_token.cancelled:
                raise CancelledStepError
            if poller not in done:
                raise TimeoutExceededError(testable_id, seconds)
            elements = poller.result()
        except ATFError as e:
            logger.info("ERROR: [%s] -- %s", name, e)
            raise

        await self._flash(testable_id, elements[0])
        return Locator(testable_id, elements)

    async def _poll(self, testable_id: str) -> list[Element]:
        # Re-query every tick; the host tree may change shape between polls.
        while True:
            elements = await self._driver.locate(testable_id)
            if elements:
                return elements
            await asyncio.sleep(self._poll_interval)

    async def _flash(self, testable_id: str, element: Element) -> None:
        logger.debug("flash: [%s]", testable_id)
        try:
            await self._driver.flash(element)
        except Exception:
            logger.debug("flash failed: [%s]", testable_id, exc_info=True)
