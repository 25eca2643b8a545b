"""sleep — pause the run, with progress, for a fixed duration."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from atf.core.coercion import duration_to_seconds
from atf.steps.base import Duration, TestStep

if TYPE_CHECKING:
    from atf.core.cancel import CancelToken
    from atf.core.controller import TestController
    from atf.core.models import DelaysConfig, TestReport


class SleepStep(TestStep):
    step_id: ClassVar[str] = "sleep"
    behavior_driven_descriptions: ClassVar[tuple[str, ...]] = (
        "sleep for `{{timeout}}` seconds.",
    )

    timeout: Duration

    async def execute(
        self,
        *,
        cancel_token: CancelToken,
        report: TestReport,
        controller: TestController,
    ) -> None:
        self.log(f"sleep({self.timeout.total_seconds():g})", controller=controller)
        await self.sleep(self.timeout, cancel_token=cancel_token, controller=controller)

    def describe(self, controller: TestController) -> str:
        return self.render(
            self.behavior_driven_descriptions[0],
            controller,
            timeout=duration_to_seconds(self.timeout),
        )

    def pre_step_delay(self, delays: DelaysConfig) -> float:
        return 0.0

    def post_step_delay(self, delays: DelaysConfig) -> float:
        return 0.0
