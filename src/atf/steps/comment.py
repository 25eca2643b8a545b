"""comment — write a note into the log and the report."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from atf.steps.base import Text, TestStep

if TYPE_CHECKING:
    from atf.core.cancel import CancelToken
    from atf.core.controller import TestController
    from atf.core.models import DelaysConfig, TestReport


class CommentStep(TestStep):
    step_id: ClassVar[str] = "comment"
    behavior_driven_descriptions: ClassVar[tuple[str, ...]] = ("comment: `{{comment}}`",)

    comment: Text

    async def execute(
        self,
        *,
        cancel_token: CancelToken,
        report: TestReport,
        controller: TestController,
    ) -> None:
        text = controller.resolve_variable(self.comment)
        self.log(f"comment: {text}", controller=controller)
        report.append_log(text)

    def describe(self, controller: TestController) -> str:
        return self.render(self.behavior_driven_descriptions[0], controller, comment=self.comment)

    def pre_step_delay(self, delays: DelaysConfig) -> float:
        return 0.0

    def post_step_delay(self, delays: DelaysConfig) -> float:
        return 0.0
