"""scroll_until_visible — drag a scroll container until a target appears.

The container is either named by `scrollableId` or, when absent, the
outermost scrollable the driver can find. Each iteration drags the
container by `increment` pixels against its axis direction, lets it
settle, and re-checks for the target. A negative increment scrolls
backward.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, ClassVar

from pydantic import Field

from atf.core.coercion import duration_to_seconds, parse_float
from atf.core.exceptions import (
    CancelledStepError,
    MalformedStepError,
    ScrollableNotFoundError,
    ScrollTimeoutExceededError,
)
from atf.core.models import AxisDirection, Offset, ProgressValue
from atf.steps.base import OptionalText, Text, TestStep, Timeout

if TYPE_CHECKING:
    from atf.core.cancel import CancelToken
    from atf.core.controller import TestController
    from atf.core.models import Element, TestReport

logger = logging.getLogger(__name__)

DEFAULT_INCREMENT = 200.0


def scroll_offset(direction: AxisDirection, increment: float) -> Offset:
    """Drag vector that moves content along `direction`.

    A positive increment scrolls forward, a negative one backward.
    """
    if direction == AxisDirection.DOWN:
        return Offset(dx=0.0, dy=-increment)
    if direction == AxisDirection.UP:
        return Offset(dx=0.0, dy=increment)
    if direction == AxisDirection.LEFT:
        return Offset(dx=increment, dy=0.0)
    return Offset(dx=-increment, dy=0.0)


class ScrollUntilVisibleStep(TestStep):
    step_id: ClassVar[str] = "scroll_until_visible"
    # Index layout: bit 0 = no timeout, bit 1 = no increment, bit 2 = no scrollableId.
    behavior_driven_descriptions: ClassVar[tuple[str, ...]] = (
        "scroll the `{{scrollableId}}` widget by `{{increment}}` pixels until the "
        "`{{testableId}}` widget is visible and fail if it cannot be found in "
        "`{{timeout}}` seconds.",
        "scroll the `{{scrollableId}}` widget by `{{increment}}` pixels until the "
        "`{{testableId}}` widget is visible.",
        "scroll the `{{scrollableId}}` widget until the `{{testableId}}` widget is "
        "visible and fail if it cannot be found in `{{timeout}}` seconds.",
        "scroll the `{{scrollableId}}` widget until the `{{testableId}}` widget is visible.",
        "scroll by `{{increment}}` pixels until the `{{testableId}}` widget is visible "
        "and fail if it cannot be found in `{{timeout}}` seconds.",
        "scroll by `{{increment}}` pixels until the `{{testableId}}` widget is visible.",
        "scroll until the `{{testableId}}` widget is visible and fail if it cannot be "
        "found in `{{timeout}}` seconds.",
        "scroll until the `{{testableId}}` widget is visible.",
    )

    testable_id: Text = Field(..., min_length=1)
    scrollable_id: OptionalText = None
    increment: OptionalText = None
    timeout: Timeout = None

    async def execute(
        self,
        *,
        cancel_token: CancelToken,
        report: TestReport,
        controller: TestController,
    ) -> None:
        testable_id = controller.resolve_variable(self.testable_id)
        scrollable_id = controller.resolve_variable(self.scrollable_id)
        increment = self._resolve_increment(controller)
        timeout = (
            self.timeout.total_seconds()
            if self.timeout is not None
            else controller.delays.default_timeout
        )
        self.log(
            f"scroll_until_visible('{testable_id}', '{scrollable_id}', {increment:g})",
            controller=controller,
        )

        scrollable = await self._find_scrollable(
            scrollable_id, cancel_token=cancel_token, controller=controller
        )
        offset = scroll_offset(scrollable.axis_direction, increment)

        found = await self._scroll(
            testable_id,
            scrollable,
            offset,
            timeout,
            cancel_token=cancel_token,
            controller=controller,
        )
        if not found:
            raise ScrollTimeoutExceededError(testable_id, timeout)

        locator = await self.wait_for(testable_id, cancel_token=cancel_token, controller=controller)
        element = locator.single()
        cancel_token.raise_if_cancelled()
        await controller.driver.scroll_into_view(element)

    def _resolve_increment(self, controller: TestController) -> float:
        if self.increment is None:
            return DEFAULT_INCREMENT
        text = controller.resolve_variable(self.increment)
        increment = parse_float(text)
        if increment is None:
            logger.warning(
                "scroll: increment %r is not a number, using %g", text, DEFAULT_INCREMENT
            )
            return DEFAULT_INCREMENT
        if increment == 0:
            msg = f"increment must not be zero, got {text!r}"
            raise MalformedStepError(msg, self.step_id)
        return increment

    async def _find_scrollable(
        self,
        scrollable_id: str | None,
        *,
        cancel_token: CancelToken,
        controller: TestController,
    ) -> Element:
        container = None
        if scrollable_id is not None:
            locator = await self.wait_for(
                scrollable_id, cancel_token=cancel_token, controller=controller
            )
            container = locator.single()
        cancel_token.raise_if_cancelled()

        scrollable = await controller.driver.find_scrollable(container)
        cancel_token.raise_if_cancelled()
        if scrollable is None or scrollable.axis_direction is None:
            raise ScrollableNotFoundError(scrollable_id)
        return scrollable

    async def _scroll(
        self,
        testable_id: str,
        scrollable: Element,
        offset: Offset,
        timeout: float,
        *,
        cancel_token: CancelToken,
        controller: TestController,
    ) -> bool:
        """Drag until the target is present or the deadline passes.

        The deadline is checked before each drag, so a slow drag can overrun
        `timeout` by at most one drag plus one settle delay.
        """
        driver = controller.driver
        loop = asyncio.get_running_loop()
        start = loop.time()
        deadline = start + timeout
        iterations = 0
        try:
            found = bool(await driver.locate(testable_id))
            while not found and loop.time() < deadline:
                cancel_token.raise_if_cancelled()
                elapsed = loop.time() - start
                controller.progress = ProgressValue(
                    value=min(100, int(elapsed / timeout * 100)),
                    max=100,
                    error=True,
                )
                await driver.drag(scrollable, offset)
                iterations += 1
                if await cancel_token.wait(controller.delays.scroll_settle):
                    raise CancelledStepError
                found = bool(await driver.locate(testable_id))
        finally:
            controller.progress = None
        logger.debug("scroll: [%s] found=%s after %d drag(s)", testable_id, found, iterations)
        return found

    def describe(self, controller: TestController) -> str:
        index = 0
        if self.timeout is None:
            index += 1
        if self.increment is None:
            index += 2
        if self.scrollable_id is None:
            index += 4
        return self.render(
            self.behavior_driven_descriptions[index],
            controller,
            testableId=self.testable_id,
            scrollableId=self.scrollable_id,
            increment=self.increment,
            timeout=duration_to_seconds(self.timeout),
        )
