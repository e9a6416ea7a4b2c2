"""Clipboard collaborators and the container's context-menu handler.

Clipboard access is best effort: every operation returns a
ClipboardResult and the context-menu handler ignores failures.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable

from termhost.display.base import DisplaySurface
from termhost.display.container import RegionEvent
from termhost.domain.models import ClipboardResult
from termhost.editor.line_editor import LineEditor

logger = logging.getLogger(__name__)


class Clipboard(ABC):
    """Abstract system clipboard."""

    @abstractmethod
    async def read_text(self) -> ClipboardResult:
        ...

    @abstractmethod
    async def write_text(self, text: str) -> ClipboardResult:
        ...


class MemoryClipboard(Clipboard):
    """A process-local clipboard, shared by every session of a host."""

    def __init__(self, text: str = "") -> None:
        self._text = text

    @property
    def text(self) -> str:
        return self._text

    async def read_text(self) -> ClipboardResult:
        return ClipboardResult.success(self._text)

    async def write_text(self, text: str) -> ClipboardResult:
        self._text = text
        return ClipboardResult.success(text)


class UnavailableClipboard(Clipboard):
    """Stands for an environment without clipboard access."""

    async def read_text(self) -> ClipboardResult:
        return ClipboardResult.failure("Clipboard is not available")

    async def write_text(self, text: str) -> ClipboardResult:
        return ClipboardResult.failure("Clipboard is not available")


async def best_effort(operation: Awaitable[ClipboardResult]) -> ClipboardResult:
    """Await a clipboard operation, turning any exception into a failure result."""
    try:
        return await operation
    except Exception as e:
        return ClipboardResult.failure(str(e) or type(e).__name__)


class ContextMenuHandler:
    """Copy the selection, or paste the clipboard into the input line."""

    def __init__(self, display: DisplaySurface, editor: LineEditor, clipboard: Clipboard) -> None:
        self._display = display
        self._editor = editor
        self._clipboard = clipboard

    async def __call__(self, event: RegionEvent) -> None:
        event.prevent_default()
        event.stop_propagation()

        selection = self._display.get_selection()
        if selection:
            result = await best_effort(self._clipboard.write_text(selection))
            self._display.clear_selection()
        else:
            result = await best_effort(self._clipboard.read_text())
            if result.ok and result.text:
                self._editor.handle_cursor_insert(result.text)

        if not result.ok:
            logger.debug("Clipboard operation skipped: %s", result.error)
