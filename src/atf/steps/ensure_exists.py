"""ensure_exists — fail unless exactly one target appears in time."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from pydantic import Field

from atf.core.coercion import duration_to_seconds
from atf.steps.base import Text, TestStep, Timeout

if TYPE_CHECKING:
    from atf.core.cancel import CancelToken
    from atf.core.controller import TestController
    from atf.core.models import TestReport


class EnsureExistsStep(TestStep):
    step_id: ClassVar[str] = "ensure_exists"
    behavior_driven_descriptions: ClassVar[tuple[str, ...]] = (
        "ensure the `{{testableId}}` widget exists or fail if it cannot be found in "
        "`{{timeout}}` seconds.",
        "ensure the `{{testableId}}` widget exists.",
    )

    testable_id: Text = Field(..., min_length=1)
    timeout: Timeout = None

    async def execute(
        self,
        *,
        cancel_token: CancelToken,
        report: TestReport,
        controller: TestController,
    ) -> None:
        testable_id = controller.resolve_variable(self.testable_id)
        self.log(f"ensure_exists('{testable_id}')", controller=controller)

        locator = await self.wait_for(
            testable_id,
            cancel_token=cancel_token,
            controller=controller,
            timeout=self.timeout,
        )
        locator.single()

    def describe(self, controller: TestController) -> str:
        index = 0 if self.timeout is not None else 1
        return self.render(
            self.behavior_driven_descriptions[index],
            controller,
            testableId=self.testable_id,
            timeout=duration_to_seconds(self.timeout),
        )