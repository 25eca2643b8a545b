"""Single-target gestures: tap, double_tap, long_press."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, ClassVar

from pydantic import Field

from atf.core.coercion import duration_to_seconds
from atf.steps.base import Text, TestStep, Timeout

if TYPE_CHECKING:
    from atf.core.cancel import CancelToken
    from atf.core.controller import TestController
    from atf.core.models import Element, TestReport
    from atf.engine.base import BaseDriver


class GestureStep(TestStep):
    """Locate exactly one target, settle, then perform a gesture on it."""

    testable_id: Text = Field(..., min_length=1)
    timeout: Timeout = None

    @abstractmethod
    async def perform(self, driver: BaseDriver, element: Element) -> None: ...

    async def execute(
        self,
        *,
        cancel_token: CancelToken,
        report: TestReport,
        controller: TestController,
    ) -> None:
        testable_id = controller.resolve_variable(self.testable_id)
        self.log(f"{self.step_id}('{testable_id}')", controller=controller)

        locator = await self.wait_for(
            testable_id,
            cancel_token=cancel_token,
            controller=controller,
            timeout=self.timeout,
        )
        await self.post_found_sleep(cancel_token=cancel_token, controller=controller)
        element = locator.single()
        cancel_token.raise_if_cancelled()
        await self.perform(controller.driver, element)

    def describe(self, controller: TestController) -> str:
        index = 0 if self.timeout is not None else 1
        return self.render(
            self.behavior_driven_descriptions[index],
            controller,
            testableId=self.testable_id,
            timeout=duration_to_seconds(self.timeout),
        )


class TapStep(GestureStep):
    step_id: ClassVar[str] = "tap"
    behavior_driven_descriptions: ClassVar[tuple[str, ...]] = (
        "tap the `{{testableId}}` widget and fail if it cannot be found in "
        "`{{timeout}}` seconds.",
        "tap the `{{testableId}}` widget.",
    )

    async def perform(self, driver: BaseDriver, element: Element) -> None:
        await driver.tap(element)


class DoubleTapStep(GestureStep):
    step_id: ClassVar[str] = "double_tap"
    behavior_driven_descriptions: ClassVar[tuple[str, ...]] = (
        "double tap the `{{testableId}}` widget and fail if it cannot be found in "
        "`{{timeout}}` seconds.",
        "double tap the `{{testableId}}` widget.",
    )

    async def perform(self, driver: BaseDriver, element: Element) -> None:
        await driver.double_tap(element)


class LongPressStep(GestureStep):
    step_id: ClassVar[str] = "long_press"
    behavior_driven_descriptions: ClassVar[tuple[str, ...]] = (
        "long press the `{{testableId}}` widget and fail if it cannot be found in "
        "`{{timeout}}` seconds.",
        "long press the `{{testableId}}` widget.",
    )

    async def perform(self, driver: BaseDriver, element: Element) -> None:
        await driver.long_press(element)
