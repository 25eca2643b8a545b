"""drag — drag a target by a fixed offset."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from pydantic import Field

from atf.core.coercion import duration_to_seconds
from atf.core.models import Offset
from atf.steps.base import Number, Text, TestStep, Timeout

if TYPE_CHECKING:
    from atf.core.cancel import CancelToken
    from atf.core.controller import TestController
    from atf.core.models import TestReport


class DragStep(TestStep):
    step_id: ClassVar[str] = "drag"
    behavior_driven_descriptions: ClassVar[tuple[str, ...]] = (
        "drag the `{{testableId}}` widget `{{dx}}` pixels horizontally and `{{dy}}` "
        "pixels vertically and fail if it cannot be found in `{{timeout}}` seconds.",
        "drag the `{{testableId}}` widget `{{dx}}` pixels horizontally and `{{dy}}` "
        "pixels vertically.",
    )

    testable_id: Text = Field(..., min_length=1)
    dx: Number = 0.0
    dy: Number = 0.0
    timeout: Timeout = None

    async def execute(
        self,
        *,
        cancel_token: CancelToken,
        report: TestReport,
        controller: TestController,
    ) -> None:
        testable_id = controller.resolve_variable(self.testable_id)
        self.log(f"drag('{testable_id}', {self.dx:g}, {self.dy:g})", controller=controller)

        locator = await self.wait_for(
            testable_id,
            cancel_token=cancel_token,
            controller=controller,
            timeout=self.timeout,
        )
        await self.post_found_sleep(cancel_token=cancel_token, controller=controller)
        element = locator.single()
        cancel_token.raise_if_cancelled()
        await controller.driver.drag(element, Offset(dx=self.dx, dy=self.dy))

    def describe(self, controller: TestController) -> str:
        index = 0 if self.timeout is not None else 1
        return self.render(
            self.behavior_driven_descriptions[index],
            controller,
            testableId=self.testable_id,
            dx=f"{self.dx:g}",
            dy=f"{self.dy:g}",
            timeout=duration_to_seconds(self.timeout),
        )
