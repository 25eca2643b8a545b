"""Built-in step registry."""

from __future__ import annotations

from atf.steps.assert_error import AssertErrorStep
from atf.steps.assert_value import AssertValueStep
from atf.steps.base import TestStep
from atf.steps.comment import CommentStep
from atf.steps.drag import DragStep
from atf.steps.ensure_exists import EnsureExistsStep
from atf.steps.gestures import DoubleTapStep, LongPressStep, TapStep
from atf.steps.registry import StepRegistry
from atf.steps.scroll_until_visible import ScrollUntilVisibleStep
from atf.steps.set_value import SetValueStep
from atf.steps.sleep import SleepStep
from atf.steps.variables import (
    RemoveGlobalVariableStep,
    RemoveVariableStep,
    SetGlobalVariableStep,
    SetVariableStep,
)

STEP_REGISTRY: dict[str, type[TestStep]] = {
    step.step_id: step
    for step in (
        AssertValueStep,
        AssertErrorStep,
        SetValueStep,
        TapStep,
        DoubleTapStep,
        LongPressStep,
        DragStep,
        EnsureExistsStep,
        ScrollUntilVisibleStep,
        SleepStep,
        CommentStep,
        SetVariableStep,
        SetGlobalVariableStep,
        RemoveVariableStep,
        RemoveGlobalVariableStep,
    )
}

__all__ = [
    "STEP_REGISTRY",
    "AssertErrorStep",
    "AssertValueStep",
    "CommentStep",
    "DoubleTapStep",
    "DragStep",
    "EnsureExistsStep",
    "LongPressStep",
    "RemoveGlobalVariableStep",
    "RemoveVariableStep",
    "ScrollUntilVisibleStep",
    "SetGlobalVariableStep",
    "SetValueStep",
    "SetVariableStep",
    "SleepStep",
    "StepRegistry",
    "TapStep",
    "TestStep",
]
