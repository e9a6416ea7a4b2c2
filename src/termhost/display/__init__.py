"""Display Surface module for termhost.

Provides the display widget interface, the region tree it attaches to,
and the resize-fitting addon.

Public API:
    DisplaySurface -- Abstract base class
    Addon -- Abstract addon base class
    Region, ResizeObserver -- Container regions and size observation
    BufferDisplay -- In-memory screen buffer implementation
    FitAddon -- Resize addon
"""

from termhost.display.base import Addon, DisplaySurface
from termhost.display.container import Region, RegionEvent, ResizeObserver

__all__ = [
    "Addon",
    "BufferDisplay",
    "DisplaySurface",
    "FitAddon",
    "Region",
    "RegionEvent",
    "ResizeObserver",
]


def __getattr__(name: str) -> type:
    """Lazy import for the bundled implementations, which the addon loader imports on demand."""
    if name == "BufferDisplay":
        from termhost.display.buffer import BufferDisplay
        return BufferDisplay
    if name == "FitAddon":
        from termhost.display.fit import FitAddon
        return FitAddon
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
