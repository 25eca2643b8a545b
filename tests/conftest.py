"""Shared fixtures: an in-memory host driver and a fast controller."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

import pytest

from atf.core.controller import TestController
from atf.core.events import MessageBuffer
from atf.core.exceptions import UnsupportedCapabilityError
from atf.core.models import (
    AxisDirection,
    DelaysConfig,
    Element,
    Offset,
    Rect,
    RunnerConfig,
)
from atf.engine.base import BaseDriver


@dataclass
class FakeWidget:
    testable_id: str
    count: int = 1
    value: Any = None
    error: Any = None
    supports_value: bool = True
    # Seconds after registration before the widget shows up.
    delay: float = 0.0
    # Scroll offset at which the widget is built; None means always built.
    # Negative offsets lie behind the start and need a backward scroll.
    revealed_at: float | None = None
    created_at: float = field(default=0.0)


class FakeDriver(BaseDriver):
    """In-memory host: widgets keyed by testable id, one vertical scroll container."""

    def __init__(self) -> None:
        self.widgets: dict[str, FakeWidget] = {}
        self.calls: list[tuple[str, Any]] = []
        self.locate_count = 0
        self.scroll_offset = 0.0
        self.scroll_axis: AxisDirection | None = AxisDirection.DOWN
        self.started = False

    def add(self, testable_id: str, **kwargs: Any) -> FakeWidget:
        widget = FakeWidget(testable_id, **kwargs)
        try:
            widget.created_at = asyncio.get_running_loop().time()
        except RuntimeError:
            widget.created_at = 0.0
        self.widgets[testable_id] = widget
        return widget

    def _visible(self, widget: FakeWidget) -> bool:
        if widget.delay > 0:
            now = asyncio.get_running_loop().time()
            if now - widget.created_at < widget.delay:
                return False
        if widget.revealed_at is None:
            return True
        if widget.revealed_at < 0:
            return self.scroll_offset <= widget.revealed_at
        return self.scroll_offset >= widget.revealed_at

    async def start(self) -> None:
        self.started = True

    async def stop(self) -> None:
        self.started = False

    async def locate(self, testable_id: str) -> list[Element]:
        self.locate_count += 1
        widget = self.widgets.get(testable_id)
        if widget is None or not self._visible(widget):
            return []
        return [
            Element(
                testable_id=testable_id,
                rect=Rect(x=0, y=i * 20, width=100, height=20),
                handle=(testable_id, i),
            )
            for i in range(widget.count)
        ]

    async def tap(self, element: Element) -> None:
        self.calls.append(("tap", element.testable_id))

    async def double_tap(self, element: Element) -> None:
        self.calls.append(("double_tap", element.testable_id))

    async def long_press(self, element: Element) -> None:
        self.calls.append(("long_press", element.testable_id))

    async def drag(self, element: Element, offset: Offset) -> None:
        self.calls.append(("drag", (element.testable_id, offset.dx, offset.dy)))
        # Content moves opposite to the drag; forward is along the axis.
        if element.axis_direction == AxisDirection.DOWN:
            self.scroll_offset -= offset.dy
        elif element.axis_direction == AxisDirection.UP:
            self.scroll_offset += offset.dy
        elif element.axis_direction == AxisDirection.RIGHT:
            self.scroll_offset -= offset.dx
        elif element.axis_direction == AxisDirection.LEFT:
            self.scroll_offset += offset.dx

    async def read_value(self, element: Element) -> Any:
        widget = self.widgets[element.testable_id]
        if not widget.supports_value:
            raise UnsupportedCapabilityError(element.testable_id, "value")
        return widget.value

    async def write_value(self, element: Element, value: Any) -> None:
        widget = self.widgets[element.testable_id]
        if not widget.supports_value:
            raise UnsupportedCapabilityError(element.testable_id, "value")
        widget.value = value
        self.calls.append(("write_value", (element.testable_id, value)))

    async def read_error(self, element: Element) -> Any:
        return self.widgets[element.testable_id].error

    async def flash(self, element: Element) -> None:
        self.calls.append(("flash", element.testable_id))

    async def scroll_into_view(self, element: Element) -> None:
        self.calls.append(("scroll_into_view", element.testable_id))

    async def find_scrollable(self, container: Element | None) -> Element | None:
        self.calls.append(("find_scrollable", container.testable_id if container else None))
        if self.scroll_axis is None:
            return None
        return Element(
            testable_id=container.testable_id if container else "",
            rect=Rect(width=400, height=800),
            axis_direction=self.scroll_axis,
            handle="scrollable",
        )

    def gestures(self) -> list[tuple[str, Any]]:
        return [c for c in self.calls if c[0] not in ("flash", "find_scrollable")]


@pytest.fixture
def driver() -> FakeDriver:
    return FakeDriver()


@pytest.fixture
def runner_config() -> RunnerConfig:
    return RunnerConfig(
        delays=DelaysConfig(
            default_timeout=1.0,
            poll_interval=0.01,
            post_found_target=0.0,
            pre_step=0.0,
            post_step=0.0,
            scroll_settle=0.01,
        )
    )


@pytest.fixture
def events() -> MessageBuffer:
    return MessageBuffer()


@pytest.fixture
def controller(
    driver: FakeDriver, runner_config: RunnerConfig, events: MessageBuffer
) -> TestController:
    return TestController(driver, runner_config, emitter=events)
