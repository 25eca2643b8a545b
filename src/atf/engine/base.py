"""BaseDriver ABC — host capability interface.

PlaywrightDriver etc. implement this. Provides element lookup by testable id
plus gestures and value access on located elements. The engine never looks
inside the host's own structures; everything goes through this surface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from atf.core.models import Element, Offset


class BaseDriver(ABC):
    """Target locator + gesture/value driver abstract interface."""

    @abstractmethod
    async def start(self) -> None:
        """Initialize driver (launch browser etc.)."""
        ...

    @abstractmethod
    async def stop(self) -> None:
        """Shut down driver (close browser etc.)."""
        ...

    @abstractmethod
    async def locate(self, testable_id: str) -> list[Element]:
        """Return every element currently keyed by testable_id (possibly none)."""
        ...

    @abstractmethod
    async def tap(self, element: Element) -> None:
        """Tap at the element's center."""
        ...

    @abstractmethod
    async def double_tap(self, element: Element) -> None:
        """Double-tap at the element's center."""
        ...

    @abstractmethod
    async def long_press(self, element: Element) -> None:
        """Long-press at the element's center."""
        ...

    @abstractmethod
    async def drag(self, element: Element, offset: Offset) -> None:
        """Drag from the element's center by offset."""
        ...

    @abstractmethod
    async def read_value(self, element: Element) -> Any:
        """Return the element's value. Raises UnsupportedCapabilityError if it has none."""
        ...

    @abstractmethod
    async def write_value(self, element: Element, value: Any) -> None:
        """Set the element's value. Raises UnsupportedCapabilityError if not settable."""
        ...

    @abstractmethod
    async def read_error(self, element: Element) -> Any:
        """Return the element's error text. Raises UnsupportedCapabilityError if none."""
        ...

    @abstractmethod
    async def flash(self, element: Element) -> None:
        """Briefly highlight the element (cosmetic)."""
        ...

    @abstractmethod
    async def scroll_into_view(self, element: Element) -> None:
        """Ask the host to align the element inside its viewport."""
        ...

    @abstractmethod
    async def find_scrollable(self, container: Element | None) -> Element | None:
        """Scroll container within `container`, or the outermost one when None.

        The returned element must carry an axis_direction.
        """
        ...
