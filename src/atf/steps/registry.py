"""StepRegistry — step id to factory dispatch table."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from atf.core.exceptions import MalformedStepError, UnknownStepTypeError

if TYPE_CHECKING:
    from atf.core.models import StepRecord
    from atf.steps.base import TestStep

logger = logging.getLogger(__name__)

StepFactory = Callable[[Mapping[str, Any] | None], "TestStep"]


class StepRegistry:
    """Maps step ids to factories that deserialize raw values."""

    def __init__(self) -> None:
        self._factories: dict[str, StepFactory] = {}

    @classmethod
    def with_builtins(cls) -> StepRegistry:
        """Registry holding every built-in step type."""
        from atf.steps import STEP_REGISTRY

        registry = cls()
        for step_id, step_cls in STEP_REGISTRY.items():
            registry.register(step_id, step_cls.from_data)
        return registry

    def register(self, step_id: str, factory: StepFactory) -> None:
        """Register (or replace) the factory for step_id."""
        if step_id in self._factories:
            logger.debug("Replacing step factory: %s", step_id)
        self._factories[step_id] = factory

    def has(self, step_id: str) -> bool:
        return step_id in self._factories

    @property
    def step_ids(self) -> list[str]:
        return sorted(self._factories)

    def create(self, step_id: str, raw: Mapping[str, Any] | None) -> TestStep:
        """Build a step from raw values.

        Raises:
            UnknownStepTypeError: No factory for step_id.
            MalformedStepError: The factory rejected the values.
        """
        factory = self._factories.get(step_id)
        if factory is None:
            raise UnknownStepTypeError(step_id)
        step = factory(raw)
        if step is None:
            msg = "factory returned no step"
            raise MalformedStepError(msg, step_id)
        return step

    def from_record(self, record: StepRecord) -> TestStep:
        return self.create(record.id, record.values)
