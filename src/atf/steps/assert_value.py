"""assert_value — compare a target's value against an expected literal."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import Field

from atf.core.coercion import duration_to_seconds
from atf.core.exceptions import AssertionFailedError
from atf.core.variables import stringify
from atf.steps.base import FlagDefaultTrue, OptionalText, Text, TestStep, Timeout

if TYPE_CHECKING:
    from atf.core.cancel import CancelToken
    from atf.core.controller import TestController
    from atf.core.models import DelaysConfig, TestReport


def values_match(actual: Any, expected: str | None, *, case_sensitive: bool) -> bool:
    """String comparison of a host value against an expected literal.

    None only matches None. Case-insensitive comparison folds both sides.
    """
    if actual is None or expected is None:
        return actual is None and expected is None
    actual_text = stringify(actual)
    if not case_sensitive:
        return actual_text.casefold() == expected.casefold()
    return actual_text == expected


def describe_assertion(step: TestStep, controller: TestController, expected: str | None) -> str:
    """Pick and fill one of the four assertion descriptions.

    Index layout: [timeout, no value], [no timeout, no value],
    [timeout, value], [no timeout, value].
    """
    timeout = getattr(step, "timeout", None)
    index = 0 if timeout is not None else 1
    if expected is not None:
        index += 2
    return step.render(
        step.behavior_driven_descriptions[index],
        controller,
        testableId=step.testable_id,
        value=expected,
        error=expected,
        equals="equals" if step.equals else "does not equal",
        caseSensitive="sensitive" if step.case_sensitive else "insensitive",
        timeout=duration_to_seconds(timeout),
    )


class AssertValueStep(TestStep):
    """Fails unless the target's value matches (or, with equals=False, differs)."""

    step_id: ClassVar[str] = "assert_value"
    behavior_driven_descriptions: ClassVar[tuple[str, ...]] = (
        "assert that the `{{testableId}}` widget's value `{{equals}}` `null` and fail "
        "if the widget cannot be found in `{{timeout}}` seconds.",
        "assert that the `{{testableId}}` widget's value `{{equals}}` `null`.",
        "assert that the `{{testableId}}` widget's value `{{equals}}` `{{value}}` using a "
        "case `{{caseSensitive}}` comparison and fail if the widget cannot be found in "
        "`{{timeout}}` seconds.",
        "assert that the `{{testableId}}` widget's value `{{equals}}` `{{value}}` using a "
        "case `{{caseSensitive}}` comparison.",
    )

    testable_id: Text = Field(..., min_length=1)
    value: OptionalText = None
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
        expected = controller.resolve_variable(self.value)
        self.log(
            f"assert_value('{testable_id}', '{expected}', "
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

        actual = await controller.driver.read_value(element)
        if values_match(actual, expected, case_sensitive=self.case_sensitive) != self.equals:
            msg = (
                f"testableId: [{testable_id}] -- actualValue: [{stringify(actual)}] "
                f"{'!=' if self.equals else '=='} [{stringify(expected)}] "
                f"(caseSensitive = [{stringify(self.case_sensitive)}])."
            )
            raise AssertionFailedError(msg)

    def describe(self, controller: TestController) -> str:
        return describe_assertion(self, controller, self.value)

    def post_step_delay(self, delays: DelaysConfig) -> float:
        return 0.0
