"""PlaywrightDriver — web host driver.

Implements BaseDriver using the Playwright async API. Elements are keyed by
the `data-testid` attribute (configurable). Gestures go through the page
mouse at the element's center; scroll containers are scrolled with the
wheel, since a mouse drag selects text on the web instead of scrolling.
"""

from __future__ import annotations

import asyncio
from typing import Any

from playwright.async_api import (
    Browser,
    BrowserContext,
    ElementHandle,
    Page,
    Playwright,
    async_playwright,
)

from atf.core.exceptions import DriverError, UnsupportedCapabilityError
from atf.core.models import AxisDirection, DriverConfig, Element, Offset, Rect
from atf.core.variables import stringify
from atf.engine.base import BaseDriver

LONG_PRESS_SECONDS = 0.6
FLASH_MS = 300
DRAG_STEPS = 10

_FORM_TAGS = frozenset({"input", "textarea", "select"})
_NO_VALUE_TAGS = frozenset({"img", "svg", "canvas", "video", "audio", "iframe"})
_CHECKABLE_TYPES = frozenset({"checkbox", "radio"})

# Returns {el, axis, isDocument} for the first scrollable element in
# document order (outermost first) under root, or {el: null}.
_FIND_SCROLLABLE_JS = """
(root) => {
  const doc = document.scrollingElement || document.documentElement;
  const scope = root || doc;
  const free = (el, overflow) => el === doc || overflow === 'auto' || overflow === 'scroll';
  for (const el of [scope, ...scope.querySelectorAll('*')]) {
    const style = getComputedStyle(el);
    if (el.scrollHeight > el.clientHeight && free(el, style.overflowY)) {
      return {el, axis: 'down', isDocument: el === doc};
    }
    if (el.scrollWidth > el.clientWidth && free(el, style.overflowX)) {
      return {el, axis: 'right', isDocument: el === doc};
    }
  }
  return {el: null, axis: null, isDocument: false};
}
"""

_DESCRIBE_JS = """
(el) => ({
  tag: el.tagName.toLowerCase(),
  type: (el.getAttribute('type') || '').toLowerCase(),
  editable: el.isContentEditable,
})
"""

_FLASH_JS = f"""
(el) => {{
  const previous = el.style.outline;
  el.style.outline = '2px solid #ff4081';
  setTimeout(() => {{ el.style.outline = previous; }}, {FLASH_MS});
}}
"""


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


class PlaywrightDriver(BaseDriver):
    """Playwright-based web host driver."""

    def __init__(self, config: DriverConfig | None = None, url: str = "") -> None:
        self._config = config or DriverConfig()
        self._url = url
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._page: Page | None = None

    @property
    def page(self) -> Page:
        """Current Playwright page. Raises DriverError if not started."""
        if self._page is None:
            msg = "PlaywrightDriver not started. Call start() first."
            raise DriverError(msg)
        return self._page

    async def start(self) -> None:
        """Launch browser, create page and open the configured URL."""
        try:
            pw = await async_playwright().start()
            self._playwright = pw

            browser_type = getattr(pw, self._config.browser, None)
            if browser_type is None:
                msg = f"Unknown browser: {self._config.browser}"
                raise DriverError(msg)

            self._browser = await browser_type.launch(headless=self._config.headless)
            self._context = await self._browser.new_context(
                viewport={
                    "width": self._config.viewport_width,
                    "height": self._config.viewport_height,
                },
                ignore_https_errors=True,
            )
            self._context.set_default_timeout(self._config.timeout_ms)
            self._page = await self._context.new_page()
        except DriverError:
            raise
        except Exception as e:
            msg = f"Failed to start PlaywrightDriver: {e}"
            raise DriverError(msg) from e

        if self._url:
            await self.navigate(self._url)

    async def stop(self) -> None:
        """Close browser and cleanup."""
        try:
            if self._context:
                await self._context.close()
            if self._browser:
                await self._browser.close()
            if self._playwright:
                await self._playwright.stop()
        except Exception as e:
            msg = f"Failed to stop PlaywrightDriver: {e}"
            raise DriverError(msg) from e
        finally:
            self._page = None
            self._context = None
            self._browser = None
            self._playwright = None

    async def navigate(self, url: str) -> None:
        """Navigate to URL."""
        try:
            await self.page.goto(url, wait_until="domcontentloaded")
        except Exception as e:
            msg = f"Navigation to {url} failed: {e}"
            raise DriverError(msg) from e

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def selector(self, testable_id: str) -> str:
        return f'[{self._config.test_id_attribute}="{_escape(testable_id)}"]'

    async def locate(self, testable_id: str) -> list[Element]:
        """Every rendered element keyed by testable_id. Hidden ones are skipped."""
        handles = await self.page.query_selector_all(self.selector(testable_id))
        elements: list[Element] = []
        for handle in handles:
            box = await handle.bounding_box()
            if box is None or box["width"] == 0 or box["height"] == 0:
                continue
            elements.append(
                Element(
                    testable_id=testable_id,
                    rect=Rect(x=box["x"], y=box["y"], width=box["width"], height=box["height"]),
                    handle=handle,
                )
            )
        return elements

    @staticmethod
    def _handle(element: Element) -> ElementHandle:
        if element.handle is None:
            msg = f"Element [{element.testable_id}] has no page handle"
            raise DriverError(msg)
        return element.handle

    # ------------------------------------------------------------------
    # Gestures
    # ------------------------------------------------------------------

    async def tap(self, element: Element) -> None:
        x, y = element.rect.center
        await self.page.mouse.click(x, y)

    async def double_tap(self, element: Element) -> None:
        x, y = element.rect.center
        await self.page.mouse.dblclick(x, y)

    async def long_press(self, element: Element) -> None:
        x, y = element.rect.center
        mouse = self.page.mouse
        await mouse.move(x, y)
        await mouse.down()
        await asyncio.sleep(LONG_PRESS_SECONDS)
        await mouse.up()

    async def drag(self, element: Element, offset: Offset) -> None:
        """Drag from the element's center by offset.

        A scroll container is scrolled by the wheel instead, in the direction
        a touch drag by the same offset would move its content.
        """
        x, y = element.rect.center
        mouse = self.page.mouse
        await mouse.move(x, y)
        if element.axis_direction is not None:
            await mouse.wheel(-offset.dx, -offset.dy)
            return
        await mouse.down()
        await mouse.move(x + offset.dx, y + offset.dy, steps=DRAG_STEPS)
        await mouse.up()

    # ------------------------------------------------------------------
    # Values
    # ------------------------------------------------------------------

    async def _describe(self, element: Element) -> dict[str, Any]:
        return await self._handle(element).evaluate(_DESCRIBE_JS)

    async def read_value(self, element: Element) -> Any:
        handle = self._handle(element)
        info = await self._describe(element)
        if info["tag"] in _FORM_TAGS:
            if info["type"] in _CHECKABLE_TYPES:
                return await handle.is_checked()
            return await handle.input_value()
        data_value = await handle.get_attribute("data-value")
        if data_value is not None:
            return data_value
        if info["tag"] in _NO_VALUE_TAGS:
            raise UnsupportedCapabilityError(element.testable_id, "value")
        return await handle.inner_text()

    async def write_value(self, element: Element, value: Any) -> None:
        handle = self._handle(element)
        info = await self._describe(element)
        if info["tag"] in _FORM_TAGS:
            if info["type"] in _CHECKABLE_TYPES:
                await handle.set_checked(bool(value))
            elif info["tag"] == "select":
                await handle.select_option("" if value is None else stringify(value))
            else:
                await handle.fill("" if value is None else stringify(value))
            return
        if info["editable"]:
            await handle.fill("" if value is None else stringify(value))
            return
        raise UnsupportedCapabilityError(element.testable_id, "value")

    async def read_error(self, element: Element) -> Any:
        """Error text from the aria-errormessage target, else data-error, else None."""
        handle = self._handle(element)
        error_id = await handle.get_attribute("aria-errormessage")
        if error_id:
            target = await self.page.query_selector(f'[id="{_escape(error_id)}"]')
            if target is not None:
                text = await target.inner_text()
                return text or None
        return await handle.get_attribute("data-error")

    # ------------------------------------------------------------------
    # Viewport
    # ------------------------------------------------------------------

    async def flash(self, element: Element) -> None:
        await self._handle(element).evaluate(_FLASH_JS)

    async def scroll_into_view(self, element: Element) -> None:
        await self._handle(element).scroll_into_view_if_needed()

    async def find_scrollable(self, container: Element | None) -> Element | None:
        root = self._handle(container) if container is not None else None
        result = await self.page.evaluate_handle(_FIND_SCROLLABLE_JS, root)
        try:
            handle = (await result.get_property("el")).as_element()
            if handle is None:
                return None
            axis = await (await result.get_property("axis")).json_value()
            is_document = await (await result.get_property("isDocument")).json_value()
        finally:
            await result.dispose()

        if is_document:
            viewport = self.page.viewport_size or {
                "width": self._config.viewport_width,
                "height": self._config.viewport_height,
            }
            rect = Rect(width=viewport["width"], height=viewport["height"])
        else:
            box = await handle.bounding_box()
            if box is None:
                return None
            rect = Rect(x=box["x"], y=box["y"], width=box["width"], height=box["height"])
        return Element(
            testable_id=container.testable_id if container is not None else "",
            rect=rect,
            axis_direction=AxisDirection(axis),
            handle=handle,
        )
