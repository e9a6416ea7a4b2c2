"""In-memory screen buffer display surface.

Keeps the terminal output as a list of lines with bounded scrollback,
interpreting the small subset of control sequences the line editor
emits (carriage return, line feed, backspace, cursor left/right, erase
to end of line, clear screen) and stripping everything else. The
rendered screen is the last `rows` lines truncated to `cols`.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from termhost.config.settings import DisplayConfig
from termhost.display.base import DisplaySurface

logger = logging.getLogger(__name__)

# CSI sequences (e.g., colors, cursor movement)
_CSI = re.compile(r"\x1b\[([0-9;?]*)([a-zA-Z@`])")
# OSC sequences (e.g., window title)
_OSC = re.compile(r"\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)")
# Charset selection and keypad modes
_OTHER_ESC = re.compile(r"\x1b[()][AB012]|\x1b[>=]")
_TOKEN = re.compile(r"\x1b\[[0-9;?]*[a-zA-Z@`]|[\r\n\b]|[^\x1b\r\n\b]+")
# Control characters except the ones handled above and tab
_CONTROL = re.compile(r"[\x00-\x07\x0b\x0c\x0e-\x1f\x7f]")


class BufferDisplay(DisplaySurface):
    """Display surface that renders into an in-memory line buffer."""

    def __init__(
        self,
        config: DisplayConfig | None = None,
        on_write: Callable[[str], None] | None = None,
    ) -> None:
        super().__init__(config)
        self._lines: list[str] = [""]
        self._col = 0
        self._selection: tuple[int, int] | None = None
        self._on_write = on_write
        self._muted = False

    @property
    def lines(self) -> list[str]:
        return list(self._lines)

    @property
    def cursor(self) -> tuple[int, int]:
        """(row, column) of the cursor within the buffer."""
        return len(self._lines) - 1, self._col

    @property
    def text(self) -> str:
        return "\n".join(self._lines)

    def write(self, data: str) -> None:
        if self._disposed:
            return
        if self._on_write is not None and not self._muted:
            self._on_write(data)

        data = _OSC.sub("", data)
        data = _OTHER_ESC.sub("", data)
        for token in _TOKEN.findall(data):
            if token == "\r":
                self._col = 0
            elif token == "\n":
                self._lines.append("")
                self._col = 0
            elif token == "\b":
                self._col = max(0, self._col - 1)
            elif token.startswith("\x1b["):
                self._apply_csi(token)
            else:
                self._put_text(_CONTROL.sub("", token))

        self._trim_scrollback()

    @contextmanager
    def muted(self) -> Iterator[None]:
        """Suppress the write passthrough while still updating the buffer."""
        self._muted = True
        try:
            yield
        finally:
            self._muted = False

    def get_screen_content(self) -> str:
        """Get the current terminal screen content."""
        visible = self._lines[-self._rows:]
        # Pad with empty lines if fewer than rows
        while len(visible) < self._rows:
            visible.insert(0, "")
        # Truncate lines to cols
        visible = [line[:self._cols] for line in visible]
        return "\n".join(visible)

    def select(self, column: int, row: int, length: int) -> None:
        """Select `length` characters of buffer text starting at (row, column)."""
        row = max(0, min(row, len(self._lines) - 1))
        offset = sum(len(line) + 1 for line in self._lines[:row]) + max(0, column)
        self._selection = (offset, offset + max(0, length))

    def select_all(self) -> None:
        self._selection = (0, len(self.text))

    def get_selection(self) -> str:
        if self._selection is None:
            return ""
        start, end = self._selection
        return self.text[start:end]

    def clear_selection(self) -> None:
        self._selection = None

    def clear(self) -> None:
        self._lines = [""]
        self._col = 0
        self._selection = None

    def _put_text(self, text: str) -> None:
        line = self._lines[-1]
        if self._col > len(line):
            line = line + " " * (self._col - len(line))
        self._lines[-1] = line[:self._col] + text + line[self._col + len(text):]
        self._col += len(text)

    def _apply_csi(self, sequence: str) -> None:
        match = _CSI.fullmatch(sequence)
        if match is None:
            return
        params, final = match.groups()
        count = int(params) if params.isdigit() else 1
        if final == "C":
            self._col += count
        elif final == "D":
            self._col = max(0, self._col - count)
        elif final == "K":
            self._lines[-1] = self._lines[-1][:self._col]
        elif final == "J" and params in ("2", "3"):
            self.clear()
        elif final == "H" and not params:
            self._col = 0

    def _trim_scrollback(self) -> None:
        limit = self._config.scrollback + self._rows
        if len(self._lines) > limit:
            dropped = len(self._lines) - limit
            self._lines = self._lines[dropped:]
            self._selection = None
            logger.debug("Trimmed %d lines of scrollback", dropped)


CAPABILITIES = {"Terminal": BufferDisplay}
