"""Abstract base classes for terminal display surfaces and their addons.

All display widgets must conform to DisplaySurface, so the session
controller can drive any rendering backend (an in-memory screen buffer,
a stdio passthrough, a real terminal emulator) through the same
open / write / focus / selection / dispose primitives.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable

from termhost.config.settings import DisplayConfig
from termhost.display.container import Region
from termhost.errors import DisplayError

logger = logging.getLogger(__name__)


class Addon(ABC):
    """A capability module that attaches to a display surface.

    The surface calls activate() exactly once from load_addon() and
    dispose() when the surface itself is disposed.
    """

    @abstractmethod
    def activate(self, surface: DisplaySurface) -> None:
        ...

    def dispose(self) -> None:
        """Detach from the surface. Default is a no-op."""


class DisplaySurface(ABC):
    """Abstract interface for a terminal display widget.

    Example usage::

        surface = BufferDisplay(DisplayConfig())
        surface.load_addon(editor)
        surface.open(container)
        surface.write("hello\\r\\n")
        surface.dispose()
    """

    def __init__(self, config: DisplayConfig | None = None) -> None:
        self._config = config or DisplayConfig()
        self._addons: list[Addon] = []
        self._data_listeners: list[Callable[[str], None]] = []
        self._element: Region | None = None
        self._disposed = False
        self._focused = False
        self._cols = 80
        self._rows = 24

    @property
    def config(self) -> DisplayConfig:
        return self._config

    @property
    def element(self) -> Region | None:
        """The container the surface has been opened into, if any."""
        return self._element

    @property
    def is_open(self) -> bool:
        return self._element is not None and not self._disposed

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    @property
    def has_focus(self) -> bool:
        return self._focused

    @property
    def cols(self) -> int:
        return self._cols

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def addons(self) -> list[Addon]:
        return list(self._addons)

    def load_addon(self, addon: Addon) -> None:
        """Attach an addon. Each addon instance is activated once."""
        if addon in self._addons:
            return
        self._addons.append(addon)
        addon.activate(self)
        logger.debug("Loaded addon %s", type(addon).__name__)

    def open(self, element: Region) -> None:
        """Attach the surface to a container region."""
        if self._disposed:
            raise DisplayError("Cannot open a disposed display surface")
        if self._element is not None:
            raise DisplayError("Display surface is already attached to a container")
        self._element = element
        logger.info("Display surface opened into %s (%dx%d px)", element.kind, element.width, element.height)

    def on_data(self, listener: Callable[[str], None]) -> None:
        """Register a listener for keystroke data typed into the surface."""
        self._data_listeners.append(listener)

    def input(self, data: str) -> None:
        """Deliver keystroke data as if typed by the user."""
        if not self.is_open:
            logger.debug("Dropping input for a surface that is not open")
            return
        for listener in list(self._data_listeners):
            listener(data)

    def focus(self) -> None:
        if self.is_open:
            self._focused = True

    def blur(self) -> None:
        self._focused = False

    def resize(self, cols: int, rows: int) -> None:
        """Change the character grid. Implementations may reflow content."""
        self._cols = max(1, cols)
        self._rows = max(1, rows)

    def dispose(self) -> None:
        """Dispose the surface and all loaded addons."""
        if self._disposed:
            return
        for addon in self._addons:
            addon.dispose()
        self._addons.clear()
        self._data_listeners.clear()
        self._disposed = True
        self._focused = False
        self._element = None
        logger.info("Display surface disposed")

    @abstractmethod
    def write(self, data: str) -> None:
        """Write raw output (may contain control sequences) to the surface."""
        ...

    @abstractmethod
    def get_selection(self) -> str:
        """Return the currently selected text, or an empty string."""
        ...

    @abstractmethod
    def clear_selection(self) -> None:
        ...

    @abstractmethod
    def clear(self) -> None:
        """Clear the visible screen and scrollback."""
        ...
