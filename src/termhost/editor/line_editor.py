"""Line-editor addon providing local echo, history and an async read primitive.

The editor owns the input line while a read is pending: keystrokes fed
through feed() are echoed to the display surface, edited in place, and
the line is delivered to the awaiting read() when Enter is pressed.
At most one read may be outstanding at a time.
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
from collections.abc import Callable

from termhost.display.base import Addon, DisplaySurface
from termhost.editor.history import History
from termhost.errors import EditorError, ReadAborted

logger = logging.getLogger(__name__)

AutocompleteHandler = Callable[..., list[str]]

# Escape sequences for the editing keys, as sent by xterm-compatible terminals
KEY_SEQUENCES = {
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1b[C": "right",
    "\x1b[D": "left",
    "\x1b[H": "home",
    "\x1b[F": "end",
    "\x1b[1~": "home",
    "\x1b[4~": "end",
    "\x1b[3~": "delete",
    "\x1bOH": "home",
    "\x1bOF": "end",
}

_KEY_TOKEN = re.compile(r"\x1b\[[0-9;]*[A-Za-z~]|\x1bO[A-Za-z]|\x1b|[\s\S]")


class LineEditor(Addon):
    """Local-echo line editor attached to a display surface."""

    def __init__(self, history_size: int = 1000) -> None:
        self.history = History(history_size)
        self._surface: DisplaySurface | None = None
        self._pending: asyncio.Future[str] | None = None
        self._prompt = ""
        self._input = ""
        self._cursor = 0
        self._type_ahead = ""
        self._pending_insert = ""
        self._reading = asyncio.Event()
        self._autocomplete: list[tuple[AutocompleteHandler, tuple]] = []

    # ------------------------------------------------------------------
    # Addon lifecycle
    # ------------------------------------------------------------------

    def activate(self, surface: DisplaySurface) -> None:
        self._surface = surface
        surface.on_data(self.feed)

    def dispose(self) -> None:
        self.abort_read("Line editor disposed")
        self._surface = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def is_reading(self) -> bool:
        return self._pending is not None and not self._pending.done()

    @property
    def input(self) -> str:
        return self._input

    @property
    def cursor(self) -> int:
        return self._cursor

    async def wait_until_reading(self) -> None:
        """Suspend until a read is pending."""
        await self._reading.wait()

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    async def read(self, prompt: str) -> str:
        """Render `prompt` and suspend until a full line is entered.

        Raises:
            EditorError: If another read is already outstanding.
            ReadAborted: If the read is abandoned via abort_read().
        """
        if self.is_reading:
            raise EditorError("A read is already in progress")

        loop = asyncio.get_running_loop()
        self._pending = loop.create_future()
        self._prompt = prompt
        self._input = ""
        self._cursor = 0
        self.history.rewind()
        self._write(prompt)
        self._reading.set()

        if self._pending_insert:
            inserted, self._pending_insert = self._pending_insert, ""
            self.handle_cursor_insert(inserted)

        if self._type_ahead:
            queued, self._type_ahead = self._type_ahead, ""
            self.feed(queued)

        try:
            return await self._pending
        finally:
            self._pending = None
            self._reading.clear()

    def abort_read(self, reason: str = "Read aborted") -> None:
        """Abandon the pending read, if any."""
        if self._pending is not None and not self._pending.done():
            self._pending.set_exception(ReadAborted(reason))
            logger.debug("Pending read aborted: %s", reason)
        self._type_ahead = ""
        self._pending_insert = ""

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def print(self, message: str) -> None:
        normalized = re.sub(r"[\r\n]+", "\n", message)
        self._write(normalized.replace("\n", "\r\n"))

    def println(self, message: str) -> None:
        self.print(message + "\n")

    def print_wide(self, items: list[str], padding: int = 2) -> None:
        """Print items in columns that fit the display width."""
        if not items:
            return
        width = max(len(item) for item in items) + padding
        cols = self._surface.cols if self._surface is not None else 80
        per_line = max(1, cols // width)
        for start in range(0, len(items), per_line):
            row = items[start:start + per_line]
            self.println("".join(item.ljust(width) for item in row).rstrip())

    # ------------------------------------------------------------------
    # Input handling
    # ------------------------------------------------------------------

    def handle_cursor_insert(self, text: str) -> None:
        """Insert text at the cursor of the current input line.

        Between reads the text is held and inserted after the next prompt.
        """
        if not self.is_reading:
            self._pending_insert += text
            return
        self._input = self._input[:self._cursor] + text + self._input[self._cursor:]
        self._cursor += len(text)
        self._redraw()

    def feed(self, data: str) -> None:
        """Process keystroke data typed into the display."""
        if not self.is_reading:
            self._type_ahead += data
            return

        tokens = _KEY_TOKEN.findall(data)
        for index, token in enumerate(tokens):
            if not self.is_reading:
                self._type_ahead += "".join(tokens[index:])
                return
            self._handle_key(token)

    def _handle_key(self, token: str) -> None:
        key = KEY_SEQUENCES.get(token)
        if key == "up":
            entry = self.history.previous()
            if entry is not None:
                self._set_input(entry)
        elif key == "down":
            entry = self.history.next()
            if entry is not None:
                self._set_input(entry)
        elif key == "left":
            self._move_cursor(self._cursor - 1)
        elif key == "right":
            self._move_cursor(self._cursor + 1)
        elif key == "home":
            self._move_cursor(0)
        elif key == "end":
            self._move_cursor(len(self._input))
        elif key == "delete":
            if self._cursor < len(self._input):
                self._input = self._input[:self._cursor] + self._input[self._cursor + 1:]
                self._redraw()
        elif token in ("\r", "\n"):
            self._submit()
        elif token in ("\x7f", "\b"):
            if self._cursor > 0:
                self._input = self._input[:self._cursor - 1] + self._input[self._cursor:]
                self._cursor -= 1
                self._redraw()
        elif token == "\t":
            self._complete()
        elif token == "\x03":
            # Ctrl+C abandons the line and re-renders the prompt
            self._move_cursor(len(self._input))
            self._write("^C\r\n" + self._prompt.lstrip("\r\n"))
            self._input = ""
            self._cursor = 0
            self.history.rewind()
        elif token.startswith("\x1b") or (len(token) == 1 and ord(token) < 32):
            logger.debug("Ignoring unhandled key %r", token)
        else:
            self.handle_cursor_insert(token)

    def _submit(self) -> None:
        line = self._input
        self.history.push(line)
        self._write("\r\n")
        self._input = ""
        self._cursor = 0
        self._reading.clear()
        if self._pending is not None and not self._pending.done():
            self._pending.set_result(line)

    def _set_input(self, value: str) -> None:
        self._input = value
        self._cursor = len(value)
        self._redraw()

    def _move_cursor(self, position: int) -> None:
        position = max(0, min(position, len(self._input)))
        if position != self._cursor:
            self._cursor = position
            self._redraw()

    def _redraw(self) -> None:
        prompt_line = self._prompt.split("\n")[-1].replace("\r", "")
        output = "\r" + prompt_line + self._input + "\x1b[K"
        back = len(self._input) - self._cursor
        if back:
            output += f"\x1b[{back}D"
        self._write(output)

    def _write(self, data: str) -> None:
        if self._surface is not None and not self._surface.is_disposed:
            self._surface.write(data)

    # ------------------------------------------------------------------
    # Autocomplete
    # ------------------------------------------------------------------

    def add_autocomplete_handler(self, handler: AutocompleteHandler, *args: object) -> None:
        self._autocomplete.append((handler, args))

    def remove_autocomplete_handler(self, handler: AutocompleteHandler) -> None:
        self._autocomplete = [(h, a) for h, a in self._autocomplete if h is not handler]

    def clear_autocomplete_handlers(self) -> None:
        self._autocomplete.clear()

    def candidates(self, index: int, tokens: list[str]) -> list[str]:
        """Collect candidates for the token at `index` from all handlers."""
        fragment = tokens[index] if index < len(tokens) else ""
        found: list[str] = []
        for handler, args in self._autocomplete:
            for candidate in handler(index, tokens, *args):
                if candidate.startswith(fragment) and candidate not in found:
                    found.append(candidate)
        return found

    def _complete(self) -> None:
        head = self._input[:self._cursor]
        tokens = head.split()
        if not tokens or head.endswith(" "):
            tokens.append("")
        index = len(tokens) - 1
        fragment = tokens[index]
        found = self.candidates(index, tokens)
        if not found:
            return
        if len(found) == 1:
            self.handle_cursor_insert(found[0][len(fragment):] + " ")
            return
        prefix = os.path.commonprefix(found)
        if len(prefix) > len(fragment):
            self.handle_cursor_insert(prefix[len(fragment):])
            return
        self._write("\r\n")
        self.print_wide(found)
        self._write(self._prompt.lstrip("\r\n"))
        self._redraw()


CAPABILITIES = {"LineEditor": LineEditor}
