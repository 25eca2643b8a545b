"""TestController — runs step sequences against a host driver.

Owns the variable scopes, the progress/status surface and the cancel token
of the current run. Step failures are recorded in the TestReport; only
loading errors (before the first step) and host task cancellation escape
execute().
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Iterable, Sequence
from datetime import timedelta
from typing import TYPE_CHECKING, Any

from atf.core.cancel import CancelToken
from atf.core.exceptions import ATFError, CancelledStepError, VariableError
from atf.core.models import (
    ErrorKind,
    ProgressValue,
    RunnerConfig,
    StepRecord,
    StepResult,
    StepStatus,
    TestReport,
    TestSuiteReport,
    VariableScope,
)
from atf.core.variables import VariableResolver
from atf.engine.locator import TargetLocator
from atf.engine.progress import ProgressReporter
from atf.steps.registry import StepRegistry

if TYPE_CHECKING:
    from atf.core.events import EventEmitter
    from atf.core.models import DelaysConfig, Test
    from atf.engine.base import BaseDriver
    from atf.engine.locator import Locator
    from atf.steps.base import TestStep

logger = logging.getLogger(__name__)


class TestController:
    """Drives one test at a time through an injected BaseDriver.

    Args:
        driver: Host driver. Started and stopped by the caller.
        config: Runner policy and delays.
        registry: Step factories; defaults to the built-in steps.
        emitter: Receives step and progress events.
        resolver: Variable store; one is created (and seeded with
            config.variables as globals) when omitted.
    """

    __test__ = False

    def __init__(
        self,
        driver: BaseDriver,
        config: RunnerConfig | None = None,
        registry: StepRegistry | None = None,
        emitter: EventEmitter | None = None,
        resolver: VariableResolver | None = None,
    ) -> None:
        self.driver = driver
        self.config = config or RunnerConfig()
        self.registry = registry or StepRegistry.with_builtins()
        self.emitter = emitter
        self.resolver = resolver or VariableResolver(strict=self.config.strict_variables)
        for name, value in self.config.variables.items():
            self.resolver.set(name, value, VariableScope.GLOBAL)

        self._progress: ProgressValue | None = None
        self._status = ""
        self._token: CancelToken | None = None
        self._running = False
        self._reporter = ProgressReporter(self._publish_progress)
        self._locator = TargetLocator(
            driver,
            self._reporter,
            poll_interval=self.config.delays.poll_interval,
            default_timeout=self.config.delays.default_timeout,
        )

    # ------------------------------------------------------------------
    # Variables
    # ------------------------------------------------------------------

    def set_variable(
        self, name: str, value: Any, scope: VariableScope = VariableScope.LOCAL
    ) -> None:
        self.resolver.set(name, value, scope)

    def get_variable(self, name: str, scope: VariableScope | None = None) -> Any:
        return self.resolver.get(name, scope)

    def remove_variable(self, name: str, scope: VariableScope = VariableScope.LOCAL) -> None:
        self.resolver.remove(name, scope)

    def resolve_variable(self, template: str | None) -> str | None:
        """Substitute {{name}} tokens. Strict mode raises UnknownVariableError."""
        return self.resolver.resolve(template)

    def resolve_value(self, template: str | None) -> Any:
        return self.resolver.resolve_value(template)

    def describe_variables(self, text: str) -> str:
        """Lenient resolution for display; never raises."""
        try:
            return self.resolver.resolve(text, strict=False) or ""
        except VariableError:
            return text

    @property
    def variables(self) -> dict[str, Any]:
        return self.resolver.snapshot()

    # ------------------------------------------------------------------
    # Progress / status
    # ------------------------------------------------------------------

    @property
    def progress(self) -> ProgressValue | None:
        return self._progress

    @progress.setter
    def progress(self, value: ProgressValue | None) -> None:
        self._publish_progress(value)

    def _publish_progress(self, value: ProgressValue | None) -> None:
        self._progress = value
        if value is not None and self.emitter is not None:
            self.emitter.progress(self._status, value.value, value.max)

    @property
    def status(self) -> str:
        return self._status

    @status.setter
    def status(self, message: str) -> None:
        self._status = message

    @property
    def delays(self) -> DelaysConfig:
        return self.config.delays

    @property
    def running(self) -> bool:
        return self._running

    # ------------------------------------------------------------------
    # Waits
    # ------------------------------------------------------------------

    async def sleep(
        self,
        duration: float | timedelta,
        *,
        cancel_token: CancelToken | None = None,
        error: bool = False,
        message: str | None = None,
    ) -> bool:
        """Progress sleep. Returns False if the token cut it short."""
        return await self._reporter.sleep(
            duration, cancel=cancel_token, error=error, message=message
        )

    async def wait_for(
        self,
        testable_id: str,
        *,
        cancel_token: CancelToken,
        timeout: float | timedelta | None = None,
    ) -> Locator:
        return await self._locator.wait_for(
            testable_id, cancel_token=cancel_token, timeout=timeout
        )

    def cancel(self) -> None:
        """Cancel the current run, if any. Takes effect at the next suspension point."""
        if self._token is not None and not self._token.cancelled:
            logger.info("Cancelling current test run")
            self._token.cancel()

    # ------------------------------------------------------------------
    # Running
    # ------------------------------------------------------------------

    def _to_step(self, step: TestStep | StepRecord) -> tuple[TestStep, str | None]:
        if isinstance(step, StepRecord):
            return self.registry.from_record(step), step.image
        return step, None

    async def execute(
        self,
        steps: Iterable[TestStep | StepRecord],
        *,
        name: str = "test",
        suite_name: str | None = None,
        version: int = 0,
        reset: bool = True,
        stop_on_failure: bool | None = None,
    ) -> TestReport:
        """Run steps in order and return the finished report.

        Args:
            steps: Step instances or raw records. Records are converted up
                front, so a malformed record fails before anything runs.
            name: Test name recorded in the report.
            suite_name: Optional suite name.
            version: Test version.
            reset: Clear run-local variables first.
            stop_on_failure: Overrides config.stop_on_first_failure.

        Raises:
            ATFError: Another run is in progress.
            MalformedStepError / UnknownStepTypeError: A record did not load.
        """
        if self._running:
            msg = "A test is already running"
            raise ATFError(msg)
        prepared = [self._to_step(step) for step in steps]
        stop = self.config.stop_on_first_failure if stop_on_failure is None else stop_on_failure

        if reset:
            self.resolver.clear_local()
        report = TestReport(name=name, suite_name=suite_name, version=version)
        token = CancelToken()
        self._token = token
        self._running = True
        self.status = ""
        logger.info("Test [%s] started: %d step(s)", name, len(prepared))

        try:
            for index, (step, image) in enumerate(prepared):
                result = await self._run_step(index, len(prepared), step, image, token, report)
                report.append(result)
                if self.emitter is not None:
                    self.emitter.step_result(
                        index + 1,
                        result.status == StepStatus.PASSED,
                        result.description,
                        result.error_message,
                    )
                if result.status == StepStatus.CANCELLED:
                    report.cancelled = True
                    break
                if result.status != StepStatus.PASSED and stop:
                    break
        except asyncio.CancelledError:
            token.cancel()
            report.cancelled = True
            raise
        finally:
            self._running = False
            self._token = None
            self.progress = None

        report.finish()
        logger.info(
            "Test [%s] finished: %d/%d passed%s",
            name,
            report.passed_steps,
            len(report.steps),
            " (cancelled)" if report.cancelled else "",
        )
        return report

    async def _run_step(
        self,
        index: int,
        total: int,
        step: TestStep,
        image: str | None,
        token: CancelToken,
        report: TestReport,
    ) -> StepResult:
        description = step.describe(self)
        if self.emitter is not None:
            self.emitter.step_start(index + 1, total, description)

        status = StepStatus.PASSED
        error_kind: ErrorKind | None = None
        error_message: str | None = None
        start = time.monotonic()
        try:
            token.raise_if_cancelled()
            await self.sleep(step.pre_step_delay(self.delays), cancel_token=token)
            token.raise_if_cancelled()
            await step.execute(cancel_token=token, report=report, controller=self)
            await self.sleep(step.post_step_delay(self.delays), cancel_token=token)
            token.raise_if_cancelled()
        except ATFError as e:
            if isinstance(e, CancelledStepError) or token.cancelled:
                status = StepStatus.CANCELLED
                error_kind = ErrorKind.CANCELLED
            else:
                status = StepStatus.FAILED
                error_kind = e.kind
            error_message = str(e)
            logger.info("Step %d [%s] %s: %s", index + 1, step.step_id, status, e)
        except Exception as e:
            logger.exception("Step %d [%s] raised unexpectedly", index + 1, step.step_id)
            status = StepStatus.CANCELLED if token.cancelled else StepStatus.ERROR
            error_kind = ErrorKind.CANCELLED if token.cancelled else ErrorKind.INTERNAL
            error_message = str(e) or type(e).__name__

        return StepResult(
            index=index,
            step_id=step.step_id,
            description=description,
            status=status,
            error_kind=error_kind,
            error_message=error_message,
            image=image,
            elapsed_ms=(time.monotonic() - start) * 1000,
        )

    async def run_test(self, test: Test, *, reset: bool = True) -> TestReport:
        return await self.execute(
            test.steps,
            name=test.name,
            suite_name=test.suite_name,
            version=test.version,
            reset=reset,
        )

    async def run_tests(self, tests: Sequence[Test]) -> TestSuiteReport:
        """Run tests back to back. Run-local variables reset per test; globals persist.

        A cancelled test ends the suite.
        """
        suite = TestSuiteReport()
        for test in tests:
            if self.emitter is not None:
                self.emitter.section(test.name)
            report = await self.run_test(test)
            suite.reports.append(report)
            if report.cancelled:
                break
        return suite
