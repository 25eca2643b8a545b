"""Tests for exception hierarchy."""

import pytest

from atf.core.exceptions import (
    AmbiguousTargetError,
    AssertionFailedError,
    ATFError,
    CancelledStepError,
    ConfigError,
    DriverError,
    MalformedStepError,
    ScrollableNotFoundError,
    ScrollTimeoutExceededError,
    StepExecutionError,
    TargetNotFoundError,
    TestLoadError,
    TimeoutExceededError,
    UnknownStepTypeError,
    UnknownVariableError,
    UnsupportedCapabilityError,
    VariableError,
)
from atf.core.models import ErrorKind


class TestExceptionHierarchy:
    def test_all_inherit_from_atf_error(self) -> None:
        exceptions = [
            ConfigError,
            TestLoadError,
            DriverError,
            MalformedStepError,
            UnknownStepTypeError,
            VariableError,
            UnknownVariableError,
            StepExecutionError,
            TargetNotFoundError,
            TimeoutExceededError,
            AmbiguousTargetError,
            ScrollableNotFoundError,
            ScrollTimeoutExceededError,
            AssertionFailedError,
            UnsupportedCapabilityError,
            CancelledStepError,
        ]
        for exc_cls in exceptions:
            assert issubclass(exc_cls, ATFError)

    def test_atf_error_is_exception(self) -> None:
        assert issubclass(ATFError, Exception)

    def test_step_failures_are_step_execution_errors(self) -> None:
        for exc_cls in (
            TargetNotFoundError,
            AmbiguousTargetError,
            ScrollableNotFoundError,
            ScrollTimeoutExceededError,
            AssertionFailedError,
            UnsupportedCapabilityError,
            CancelledStepError,
        ):
            assert issubclass(exc_cls, StepExecutionError)

    def test_timeout_is_target_not_found(self) -> None:
        with pytest.raises(TargetNotFoundError):
            raise TimeoutExceededError("button", 1)

    def test_catch_base(self) -> None:
        with pytest.raises(ATFError):
            raise ConfigError("bad config")


class TestErrorKinds:
    @pytest.mark.parametrize(
        ("error", "kind"),
        [
            (MalformedStepError("missing testableId", "tap"), ErrorKind.MALFORMED_STEP),
            (UnknownStepTypeError("swipe"), ErrorKind.UNKNOWN_STEP_TYPE),
            (UnknownVariableError("user"), ErrorKind.UNKNOWN_VARIABLE),
            (TargetNotFoundError("x"), ErrorKind.TARGET_NOT_FOUND),
            (TimeoutExceededError("x", 2), ErrorKind.TIMEOUT_EXCEEDED),
            (AmbiguousTargetError("x", 2), ErrorKind.AMBIGUOUS_TARGET),
            (ScrollableNotFoundError(None), ErrorKind.SCROLLABLE_NOT_FOUND),
            (ScrollTimeoutExceededError("x", 2), ErrorKind.SCROLL_TIMEOUT_EXCEEDED),
            (AssertionFailedError("mismatch"), ErrorKind.ASSERTION_FAILED),
            (UnsupportedCapabilityError("x", "value"), ErrorKind.UNSUPPORTED_CAPABILITY),
            (CancelledStepError(), ErrorKind.CANCELLED),
            (DriverError("lost page"), ErrorKind.DRIVER),
            (ConfigError("bad"), ErrorKind.INTERNAL),
        ],
    )
    def test_kind(self, error: ATFError, kind: ErrorKind) -> None:
        assert error.kind == kind

    def test_explicit_kind_overrides_class_kind(self) -> None:
        err = StepExecutionError("oops", kind=ErrorKind.DRIVER)
        assert err.kind == ErrorKind.DRIVER
        assert StepExecutionError.kind == ErrorKind.INTERNAL


class TestMessages:
    def test_malformed_step(self) -> None:
        err = MalformedStepError("testableId: Field required", "tap")
        assert err.step_id == "tap"
        assert str(err) == "Malformed step 'tap': testableId: Field required"

    def test_unknown_variable(self) -> None:
        err = UnknownVariableError("user")
        assert err.name == "user"
        assert "'user'" in str(err)

    def test_timeout_exceeded(self) -> None:
        err = TimeoutExceededError("submit", 1.0)
        assert str(err) == "testableId: [submit] -- Timeout exceeded (1s)."
        assert err.testable_id == "submit"
        assert err.timeout == 1.0

    def test_ambiguous_target(self) -> None:
        err = AmbiguousTargetError("row", 3)
        assert err.count == 3
        assert "(3)" in str(err)

    def test_cancelled_default_message(self) -> None:
        assert "CANCELLED" in str(CancelledStepError())
