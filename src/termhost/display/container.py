"""Screen regions that a display surface can be attached to.

A Region is a node in a small region tree (window section -> terminal
container). It carries a pixel size, a style mapping, and event
listeners. Size changes are reported to ResizeObserver callbacks, which
is how the session keeps the widget's grid fitted to its container.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

Listener = Callable[["RegionEvent"], Awaitable[None] | None]


@dataclass
class RegionEvent:
    """An event dispatched to region listeners (contextmenu, focus, ...)."""

    type: str
    target: Region | None = None
    default_prevented: bool = False
    propagation_stopped: bool = False

    def prevent_default(self) -> None:
        self.default_prevented = True

    def stop_propagation(self) -> None:
        self.propagation_stopped = True


@dataclass(eq=False)
class Region:
    """A rectangular screen region in the region tree."""

    kind: str = "div"
    width: int = 0
    height: int = 0
    parent: Region | None = None
    mounted: bool = True
    style: dict[str, str] = field(default_factory=dict)
    _listeners: dict[str, list[Listener]] = field(default_factory=dict, repr=False)
    _resize_callbacks: list[Callable[[Region], None]] = field(default_factory=list, repr=False)

    def closest(self, kind: str) -> Region | None:
        """Return the nearest region of the given kind, starting with self."""
        node: Region | None = self
        while node is not None:
            if node.kind == kind:
                return node
            node = node.parent
        return None

    def add_event_listener(self, event_type: str, listener: Listener) -> None:
        self._listeners.setdefault(event_type, []).append(listener)

    def remove_event_listener(self, event_type: str, listener: Listener) -> None:
        listeners = self._listeners.get(event_type, [])
        if listener in listeners:
            listeners.remove(listener)

    def listener_count(self, event_type: str) -> int:
        return len(self._listeners.get(event_type, []))

    async def dispatch(self, event: RegionEvent) -> RegionEvent:
        """Deliver an event to this region's listeners, then bubble to the parent."""
        if event.target is None:
            event.target = self
        node: Region | None = self
        while node is not None and not event.propagation_stopped:
            for listener in list(node._listeners.get(event.type, [])):
                result = listener(event)
                if inspect.isawaitable(result):
                    await result
            node = node.parent
        return event

    def resize(self, width: int, height: int) -> None:
        """Change the region size and notify resize observers."""
        if (width, height) == (self.width, self.height):
            return
        self.width = width
        self.height = height
        logger.debug("Region %s resized to %dx%d", self.kind, width, height)
        for callback in list(self._resize_callbacks):
            callback(self)


class ResizeObserver:
    """Calls back on every size change of the observed regions."""

    def __init__(self, callback: Callable[[Region], None]) -> None:
        self._callback = callback
        self._observed: list[Region] = []

    def observe(self, region: Region) -> None:
        if region in self._observed:
            return
        region._resize_callbacks.append(self._callback)
        self._observed.append(region)

    def disconnect(self) -> None:
        for region in self._observed:
            if self._callback in region._resize_callbacks:
                region._resize_callbacks.remove(self._callback)
        self._observed.clear()


def create_window(width: int, height: int) -> Region:
    """Build a window section with a mounted terminal container inside it."""
    section = Region(kind="section", width=width, height=height)
    return Region(kind="div", width=width, height=height, parent=section)
