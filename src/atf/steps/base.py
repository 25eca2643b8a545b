"""TestStep — abstract base for every step type.

A step is an immutable Pydantic model. Its fields use snake_case in Python
and camelCase on the wire (`testableId`, `caseSensitive`, ...). Subclasses
implement execute() and describe(); from_data()/to_data() come for free.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from datetime import timedelta
from typing import TYPE_CHECKING, Annotated, Any, ClassVar, Self

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    PlainSerializer,
    ValidationError,
)
from pydantic.alias_generators import to_camel

from atf.core.coercion import (
    duration_to_seconds,
    parse_bool,
    parse_duration_seconds,
    parse_float,
)
from atf.core.exceptions import MalformedStepError
from atf.core.models import ValueType
from atf.core.variables import has_variables, stringify

if TYPE_CHECKING:
    from atf.core.cancel import CancelToken
    from atf.core.controller import TestController
    from atf.core.models import DelaysConfig, TestReport
    from atf.engine.locator import Locator

logger = logging.getLogger(__name__)


def _to_text(value: Any) -> Any:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, bool | int | float):
        return stringify(value)
    return value


def _flag_default_true(value: Any) -> bool:
    return parse_bool(value, default=True)


def _flag_default_false(value: Any) -> bool:
    return parse_bool(value, default=False)


def _to_number(value: Any) -> float:
    number = parse_float(value)
    if number is None:
        msg = f"not a number: {value!r}"
        raise ValueError(msg)
    return number


def _type_tag(value: Any) -> Any:
    if value is None:
        return ValueType.STRING.value
    if isinstance(value, str) and not has_variables(value):
        ValueType(value)
    return value


# Field types shared by the built-in steps.
Text = Annotated[str, BeforeValidator(_to_text)]
OptionalText = Annotated[str | None, BeforeValidator(_to_text)]
FlagDefaultTrue = Annotated[bool, BeforeValidator(_flag_default_true)]
FlagDefaultFalse = Annotated[bool, BeforeValidator(_flag_default_false)]
Timeout = Annotated[
    timedelta | None,
    BeforeValidator(parse_duration_seconds),
    PlainSerializer(duration_to_seconds, return_type=int | float | None),
]
Duration = Annotated[
    timedelta,
    BeforeValidator(parse_duration_seconds),
    PlainSerializer(duration_to_seconds, return_type=int | float),
]
Number = Annotated[float, BeforeValidator(_to_number)]
# One of ValueType, or a template resolved at run time.
TypeTag = Annotated[str, BeforeValidator(_type_tag)]


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "values"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


class TestStep(BaseModel, ABC):
    """Abstract step that all other test steps must extend."""

    __test__ = False

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
    )

    step_id: ClassVar[str] = ""

    # Behavior-driven descriptions. Placeholders use the mustache form
    # `{{field}}`; describe() fills them and then resolves run variables.
    behavior_driven_descriptions: ClassVar[tuple[str, ...]] = (
        "run an unknown step of `{{stepId}}` type and using `{{values}}` as the parameters.",
    )

    # ------------------------------------------------------------------
    # Data
    # ------------------------------------------------------------------

    @classmethod
    def from_data(cls, raw: Mapping[str, Any] | None) -> Self:
        """Build a step from its `values` map.

        Raises:
            MalformedStepError: A required field is missing or not coercible.
        """
        if raw is not None and not isinstance(raw, Mapping):
            msg = f"values must be a mapping, got {type(raw).__name__}"
            raise MalformedStepError(msg, cls.step_id)
        try:
            return cls.model_validate(dict(raw or {}))
        except ValidationError as e:
            raise MalformedStepError(_format_validation_error(e), cls.step_id) from e

    def to_data(self) -> dict[str, Any]:
        """JSON-compatible `values` map; from_data(to_data()) == self."""
        return self.model_dump(by_alias=True, mode="json")

    # ------------------------------------------------------------------
    # Behavior
    # ------------------------------------------------------------------

    @abstractmethod
    async def execute(
        self,
        *,
        cancel_token: CancelToken,
        report: TestReport,
        controller: TestController,
    ) -> None:
        """Run the step. Raises a typed StepExecutionError on failure."""
        ...

    def describe(self, controller: TestController) -> str:
        """Behavior-driven description with variables resolved."""
        return self.render(
            self.behavior_driven_descriptions[0],
            controller,
            stepId=self.step_id,
            values=json.dumps(self.to_data()),
        )

    @staticmethod
    def render(template: str, controller: TestController, **values: Any) -> str:
        """Fill `{{key}}` placeholders, then resolve any run variables left."""
        result = template
        for key, value in values.items():
            result = result.replace(f"{{{{{key}}}}}", stringify(value))
        return controller.describe_variables(result)

    # ------------------------------------------------------------------
    # Helpers for subclasses
    # ------------------------------------------------------------------

    def log(self, message: str, *, controller: TestController) -> None:
        """Log a message and post it as the controller status."""
        logger.info(message)
        controller.status = message

    async def sleep(
        self,
        duration: float | timedelta,
        *,
        cancel_token: CancelToken,
        controller: TestController,
        error: bool = False,
        message: str | None = None,
    ) -> None:
        """Progress sleep that raises CancelledStepError if the run was cancelled."""
        await controller.sleep(duration, cancel_token=cancel_token, error=error, message=message)
        cancel_token.raise_if_cancelled()

    async def wait_for(
        self,
        testable_id: str,
        *,
        cancel_token: CancelToken,
        controller: TestController,
        timeout: timedelta | None = None,
    ) -> Locator:
        return await controller.wait_for(testable_id, cancel_token=cancel_token, timeout=timeout)

    async def post_found_sleep(
        self,
        *,
        cancel_token: CancelToken,
        controller: TestController,
    ) -> None:
        """Settle delay after a target is found, before acting on it."""
        await self.sleep(
            controller.delays.post_found_target,
            cancel_token=cancel_token,
            controller=controller,
        )

    def pre_step_delay(self, delays: DelaysConfig) -> float:
        """Delay before execute(). Steps that do not touch the app return 0."""
        return delays.pre_step

    def post_step_delay(self, delays: DelaysConfig) -> float:
        """Delay after execute(). Steps that do not touch the app return 0."""
        return delays.post_step

    def value_type(self, tag: str) -> ValueType:
        """Parse a resolved type tag. Raises MalformedStepError if unknown."""
        try:
            return ValueType(tag)
        except ValueError as e:
            msg = f"unknown type: {tag!r}"
            raise MalformedStepError(msg, self.step_id) from e
