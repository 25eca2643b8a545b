"""set_value — write a typed literal into a target."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from pydantic import Field

from atf.core.coercion import coerce_value, duration_to_seconds
from atf.core.exceptions import MalformedStepError
from atf.core.models import ValueType
from atf.steps.base import OptionalText, Text, TestStep, Timeout, TypeTag

if TYPE_CHECKING:
    from atf.core.cancel import CancelToken
    from atf.core.controller import TestController
    from atf.core.models import TestReport


class SetValueStep(TestStep):
    """Sets the value on the target, coercing it to `type` first.

    `type` is one of bool, int, double or String (the default).
    """

    step_id: ClassVar[str] = "set_value"
    behavior_driven_descriptions: ClassVar[tuple[str, ...]] = (
        "set the `{{testableId}}` widget's value to `{{value}}` using a(n) `{{type}}` "
        "type and fail if the widget cannot be found in `{{timeout}}` seconds.",
        "set the `{{testableId}}` widget's value to `{{value}}` using a(n) `{{type}}` type.",
    )

    testable_id: Text = Field(..., min_length=1)
    value: OptionalText = None
    type: TypeTag = ValueType.STRING.value
    timeout: Timeout = None

    async def execute(
        self,
        *,
        cancel_token: CancelToken,
        report: TestReport,
        controller: TestController,
    ) -> None:
        testable_id = controller.resolve_variable(self.testable_id)
        value_type = self.value_type(controller.resolve_variable(self.type))
        value = controller.resolve_variable(self.value)
        self.log(
            f"set_value('{testable_id}', '{value}', '{value_type.value}')",
            controller=controller,
        )
        try:
            typed = coerce_value(value, value_type)
        except ValueError as e:
            raise MalformedStepError(str(e), self.step_id) from e

        locator = await self.wait_for(
            testable_id,
            cancel_token=cancel_token,
            controller=controller,
            timeout=self.timeout,
        )
        await self.post_found_sleep(cancel_token=cancel_token, controller=controller)
        element = locator.single()
        cancel_token.raise_if_cancelled()
        await controller.driver.write_value(element, typed)

    def describe(self, controller: TestController) -> str:
        index = 0 if self.timeout is not None else 1
        return self.render(
            self.behavior_driven_descriptions[index],
            controller,
            testableId=self.testable_id,
            value=self.value,
            type=self.type,
            timeout=duration_to_seconds(self.timeout),
        )
