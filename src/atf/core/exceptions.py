"""ATF custom exception hierarchy.

All exceptions inherit from ATFError.
StepExecutionError subclasses carry an ErrorKind that the controller records
in StepResult; they fail the step, they never crash the run.
"""

from __future__ import annotations

from atf.core.models import ErrorKind


class ATFError(Exception):
    """Base exception for all ATF errors."""

    kind: ErrorKind = ErrorKind.INTERNAL


class ConfigError(ATFError):
    """Configuration file load/validation error."""


class TestLoadError(ATFError):
    """Test definition file read/parse error."""

    __test__ = False


class DriverError(ATFError):
    """Driver error (browser launch failure, lost page, etc.)."""

    kind = ErrorKind.DRIVER


class MalformedStepError(ATFError):
    """A step record has a missing or non-coercible parameter."""

    kind = ErrorKind.MALFORMED_STEP

    def __init__(self, message: str, step_id: str) -> None:
        self.step_id = step_id
        super().__init__(f"Malformed step '{step_id}': {message}")


class UnknownStepTypeError(ATFError):
    """No factory is registered for a step id."""

    kind = ErrorKind.UNKNOWN_STEP_TYPE

    def __init__(self, step_id: str) -> None:
        self.step_id = step_id
        super().__init__(f"Unknown step type: '{step_id}'")


class VariableError(ATFError):
    """Variable resolution error."""

    kind = ErrorKind.UNKNOWN_VARIABLE


class UnknownVariableError(VariableError):
    """Strict-mode resolution hit a name that is not set in any scope."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown variable: '{name}'")


class StepExecutionError(ATFError):
    """Step execution error. Recorded in StepResult, does not crash the run."""

    def __init__(self, message: str, kind: ErrorKind | None = None) -> None:
        if kind is not None:
            self.kind = kind
        super().__init__(message)


class TargetNotFoundError(StepExecutionError):
    """The target could not be located."""

    kind = ErrorKind.TARGET_NOT_FOUND

    def __init__(self, testable_id: str, message: str | None = None) -> None:
        self.testable_id = testable_id
        super().__init__(message or f"testableId: [{testable_id}] -- not found.")


class TimeoutExceededError(TargetNotFoundError):
    """wait-for exhausted its timeout without a match."""

    kind = ErrorKind.TIMEOUT_EXCEEDED

    def __init__(self, testable_id: str, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(
            testable_id,
            f"testableId: [{testable_id}] -- Timeout exceeded ({timeout:g}s).",
        )


class AmbiguousTargetError(StepExecutionError):
    """More than one element matched where exactly one is required."""

    kind = ErrorKind.AMBIGUOUS_TARGET

    def __init__(self, testable_id: str, count: int) -> None:
        self.testable_id = testable_id
        self.count = count
        super().__init__(
            f"testableId: [{testable_id}] -- found ({count}) elements; expected only one."
        )


class ScrollableNotFoundError(StepExecutionError):
    """Neither an explicit nor an implicit scroll container could be found."""

    kind = ErrorKind.SCROLLABLE_NOT_FOUND

    def __init__(self, scrollable_id: str | None) -> None:
        self.scrollable_id = scrollable_id
        super().__init__(f"scrollableId: [{scrollable_id}] -- Scrollable could not be found.")


class ScrollTimeoutExceededError(StepExecutionError):
    """The scroll loop exhausted its timeout without revealing the target."""

    kind = ErrorKind.SCROLL_TIMEOUT_EXCEEDED

    def __init__(self, testable_id: str, timeout: float) -> None:
        self.testable_id = testable_id
        self.timeout = timeout
        super().__init__(
            f"testableId: [{testable_id}] -- time out ({timeout:g}s) trying to "
            "scroll element to visible."
        )


class AssertionFailedError(StepExecutionError):
    """A comparison contradicted the step's expectation."""

    kind = ErrorKind.ASSERTION_FAILED


class UnsupportedCapabilityError(StepExecutionError):
    """The target cannot report or accept a value/error."""

    kind = ErrorKind.UNSUPPORTED_CAPABILITY

    def __init__(self, testable_id: str, capability: str) -> None:
        self.testable_id = testable_id
        self.capability = capability
        super().__init__(
            f"testableId: [{testable_id}] -- element does not support [{capability}]."
        )


class CancelledStepError(StepExecutionError):
    """Cooperative cancellation observed at a suspension point."""

    kind = ErrorKind.CANCELLED

    def __init__(self, message: str = "[CANCELLED]: step was cancelled by the test") -> None:
        super().__init__(message)
