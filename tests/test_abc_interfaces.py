"""Tests for ABC interfaces — verify contracts and prevent direct instantiation."""

from __future__ import annotations

from typing import Any

import pytest

from atf.core.events import EventEmitter
from atf.core.models import Element, Offset
from atf.engine.base import BaseDriver
from atf.steps.base import TestStep

# ── BaseDriver ──


class TestBaseDriver:
    def test_cannot_instantiate(self) -> None:
        with pytest.raises(TypeError, match="abstract method"):
            BaseDriver()  # type: ignore[abstract]

    def test_has_all_abstract_methods(self) -> None:
        expected = {
            "start",
            "stop",
            "locate",
            "tap",
            "double_tap",
            "long_press",
            "drag",
            "read_value",
            "write_value",
            "read_error",
            "flash",
            "scroll_into_view",
            "find_scrollable",
        }
        assert expected == BaseDriver.__abstractmethods__

    def test_concrete_impl_works(self) -> None:
        class DummyDriver(BaseDriver):
            async def start(self) -> None: ...
            async def stop(self) -> None: ...
            async def locate(self, testable_id: str) -> list[Element]:
                return []

            async def tap(self, element: Element) -> None: ...
            async def double_tap(self, element: Element) -> None: ...
            async def long_press(self, element: Element) -> None: ...
            async def drag(self, element: Element, offset: Offset) -> None: ...
            async def read_value(self, element: Element) -> Any: ...
            async def write_value(self, element: Element, value: Any) -> None: ...
            async def read_error(self, element: Element) -> Any: ...
            async def flash(self, element: Element) -> None: ...
            async def scroll_into_view(self, element: Element) -> None: ...
            async def find_scrollable(self, container: Element | None) -> Element | None:
                return None

        assert isinstance(DummyDriver(), BaseDriver)


# ── TestStep ──


class TestTestStep:
    def test_cannot_instantiate(self) -> None:
        with pytest.raises(TypeError):
            TestStep()  # type: ignore[abstract]

    def test_execute_is_abstract(self) -> None:
        assert "execute" in TestStep.__abstractmethods__


# ── EventEmitter ──


class TestEventEmitter:
    def test_cannot_instantiate(self) -> None:
        with pytest.raises(TypeError, match="abstract method"):
            EventEmitter()  # type: ignore[abstract]

    def test_has_all_abstract_methods(self) -> None:
        expected = {
            "info",
            "success",
            "warning",
            "error",
            "step_start",
            "step_result",
            "progress",
            "section",
        }
        assert expected == EventEmitter.__abstractmethods__
