"""Variable steps: set and remove run-local or global variables."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from pydantic import Field

from atf.core.coercion import coerce_value
from atf.core.exceptions import MalformedStepError
from atf.core.models import ValueType, VariableScope
from atf.steps.base import OptionalText, Text, TestStep, TypeTag

if TYPE_CHECKING:
    from atf.core.cancel import CancelToken
    from atf.core.controller import TestController
    from atf.core.models import DelaysConfig, TestReport


class _VariableStep(TestStep):
    scope: ClassVar[VariableScope] = VariableScope.LOCAL

    variable_name: Text = Field(..., min_length=1)

    def describe(self, controller: TestController) -> str:
        return self.render(
            self.behavior_driven_descriptions[0],
            controller,
            variableName=self.variable_name,
            value=getattr(self, "value", None),
            type=getattr(self, "type", None),
        )

    def pre_step_delay(self, delays: DelaysConfig) -> float:
        return 0.0

    def post_step_delay(self, delays: DelaysConfig) -> float:
        return 0.0


class SetVariableStep(_VariableStep):
    """Sets a run-local variable. The value is resolved before it is stored."""

    step_id: ClassVar[str] = "set_variable"
    behavior_driven_descriptions: ClassVar[tuple[str, ...]] = (
        "set the `{{variableName}}` variable to the `{{value}}` value using a(n) "
        "`{{type}}` type.",
    )

    value: OptionalText = None
    type: TypeTag = ValueType.STRING.value

    async def execute(
        self,
        *,
        cancel_token: CancelToken,
        report: TestReport,
        controller: TestController,
    ) -> None:
        name = controller.resolve_variable(self.variable_name)
        value_type = self.value_type(controller.resolve_variable(self.type))
        value = controller.resolve_value(self.value)
        self.log(
            f"{self.step_id}('{name}', '{value}', '{value_type.value}')",
            controller=controller,
        )
        try:
            typed = coerce_value(value, value_type)
        except ValueError as e:
            raise MalformedStepError(str(e), self.step_id) from e
        controller.set_variable(name, typed, scope=self.scope)


class SetGlobalVariableStep(SetVariableStep):
    """Sets a variable that outlives the run."""

    step_id: ClassVar[str] = "set_global_variable"
    behavior_driven_descriptions: ClassVar[tuple[str, ...]] = (
        "set the `{{variableName}}` global variable to the `{{value}}` value using a(n) "
        "`{{type}}` type.",
    )
    scope: ClassVar[VariableScope] = VariableScope.GLOBAL


class RemoveVariableStep(_VariableStep):
    step_id: ClassVar[str] = "remove_variable"
    behavior_driven_descriptions: ClassVar[tuple[str, ...]] = (
        "remove the `{{variableName}}` variable.",
    )

    async def execute(
        self,
        *,
        cancel_token: CancelToken,
        report: TestReport,
        controller: TestController,
    ) -> None:
        name = controller.resolve_variable(self.variable_name)
        self.log(f"{self.step_id}('{name}')", controller=controller)
        controller.remove_variable(name, scope=self.scope)


class RemoveGlobalVariableStep(RemoveVariableStep):
    step_id: ClassVar[str] = "remove_global_variable"
    behavior_driven_descriptions: ClassVar[tuple[str, ...]] = (
        "remove the `{{variableName}}` global variable.",
    )
    scope: ClassVar[VariableScope] = VariableScope.GLOBAL
