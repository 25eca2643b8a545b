"""assert_error — compare a target's error text against an expected literal."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from pydantic import Field

from atf.core.exceptions import AssertionFailedError
from atf.core.variables import stringify
from atf.steps.assert_value import describe_assertion, values_match
from atf.steps.base import FlagDefaultTrue, OptionalText, Text, TestStep, Timeout

if TYPE_CHECKING:
    from atf.core.cancel import CancelToken
    from atf.core.controller import TestController
    from atf.core.models import DelaysConfig, TestReport


class AssertErrorStep(TestStep):
    """Fails unless the target's error text matches (or differs)."""

    step_id: ClassVar[str] = "assert_error"
    behavior_driven_descriptions: ClassVar[tuple[str, ...]] = (
        "assert that the `{{testableId}}` widget's error `{{equals}}` `null` and fail "
        "if the widget cannot be found in `{{timeout}}` seconds.",
        "assert that the `{{testableId}}` widget's error `{{equals}}` `null`.",
        "assert that the `{{testableId}}` widget's error `{{equals}}` `{{error}}` using a "
        "case `{{caseSensitive}}` comparison and fail if the widget cannot be found in "
        "`{{timeout}}` seconds.",
        "assert that the `{{testableId}}` widget's error `{{equals}}` `{{error}}` using a "
        "case `{{caseSensitive}}` comparison.",
    )

    testable_id: Text = Field(..., min_length=1)
    error: OptionalText = None
    equals: FlagDefaultTrue = True
    case_sensitive: FlagDefaultTrue = True
    timeout: Timeout = None

    async def execute(
        self,
        *,
        cancel_token: CancelToken,
        report: TestReport,
        controller: TestController,
    ) -> None:
        testable_id = controller.resolve_variable(self.testable_id)
        expected = controller.resolve_variable(self.error)
        self.log(
            f"assert_error('{testable_id}', '{expected}', "
            f"'{self.equals}', '{self.case_sensitive}')",
            controller=controller,
        )

        locator = await self.wait_for(
            testable_id,
            cancel_token=cancel_token,
            controller=controller,
            timeout=self.timeout,
        )
        await self.post_found_sleep(cancel_token=cancel_token, controller=controller)
        element = locator.single()
        cancel_token.raise_if_cancelled()

        actual = await controller.driver.read_error(element)
        if values_match(actual, expected, case_sensitive=self.case_sensitive) != self.equals:
            msg = (
                f"testableId: [{testable_id}] -- actualError: [{stringify(actual)}] "
                f"{'!=' if self.equals else '=='} [{stringify(expected)}] "
                f"(caseSensitive = [{stringify(self.case_sensitive)}])."
            )
            raise AssertionFailedError(msg)

    def describe(self, controller: TestController) -> str:
        return describe_assertion(self, controller, self.error)

    def post_step_delay(self, delays: DelaysConfig) -> float:
        return 0.0
