"""Resize addon that fits the character grid to the container size."""

from __future__ import annotations

import logging
import math

from termhost.display.base import Addon, DisplaySurface

logger = logging.getLogger(__name__)

# Advance width of a monospace glyph relative to the font size
CHAR_WIDTH_RATIO = 0.6
MINIMUM_COLS = 2
MINIMUM_ROWS = 1


class FitAddon(Addon):
    """Recomputes rows/cols from the container's pixel size.

    fit() is cheap and idempotent: the surface is only resized when the
    proposed grid differs from the current one.
    """

    def __init__(self) -> None:
        self._surface: DisplaySurface | None = None
        self.fit_count = 0

    def activate(self, surface: DisplaySurface) -> None:
        self._surface = surface

    def dispose(self) -> None:
        self._surface = None

    def propose_dimensions(self) -> tuple[int, int] | None:
        """Return (cols, rows) for the current container, or None when detached."""
        surface = self._surface
        if surface is None or not surface.is_open or surface.element is None:
            return None
        config = surface.config
        cell_width = config.font_size * CHAR_WIDTH_RATIO
        cell_height = config.font_size * config.line_height
        cols = max(MINIMUM_COLS, math.floor(surface.element.width / cell_width))
        rows = max(MINIMUM_ROWS, math.floor(surface.element.height / cell_height))
        return cols, rows

    def fit(self) -> None:
        dimensions = self.propose_dimensions()
        if dimensions is None:
            return
        self.fit_count += 1
        cols, rows = dimensions
        surface = self._surface
        if surface is not None and (surface.cols, surface.rows) != (cols, rows):
            surface.resize(cols, rows)
            logger.debug("Fitted display to %dx%d", cols, rows)


CAPABILITIES = {"FitAddon": FitAddon}
