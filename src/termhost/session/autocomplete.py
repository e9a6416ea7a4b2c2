"""Autocomplete provider fed by directory listings."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from termhost.editor.line_editor import LineEditor
from termhost.errors import FileSystemError
from termhost.session.cwd import DirectoryView
from termhost.system.filesystem import FileSystem

logger = logging.getLogger(__name__)


class AutocompleteProvider:
    """Supplies the line editor with completion candidates.

    The first token completes against the interpreter's command names
    (falling back to directory entries when there are none); later tokens
    complete against the latest successful listing of the working directory.
    """

    def __init__(self, editor: LineEditor, commands: Sequence[str] = ()) -> None:
        self._editor = editor
        self._commands = list(commands)
        self._entries: list[str] = []
        self._generation = 0
        editor.add_autocomplete_handler(self._candidates)

    @property
    def entries(self) -> list[str]:
        return list(self._entries)

    def supply(self, entries: Sequence[str]) -> None:
        self._entries = list(entries)

    def detach(self) -> None:
        self._editor.remove_autocomplete_handler(self._candidates)

    async def refresh(self, filesystem: FileSystem, cwd: DirectoryView) -> bool:
        """List the working directory and supply its entries.

        Returns False when the listing failed or was overtaken by a newer
        refresh; the previous entries are kept in that case.
        """
        self._generation += 1
        generation = self._generation
        path = cwd.path
        try:
            entries = await filesystem.list_directory(path)
        except FileSystemError as e:
            logger.warning("Autocomplete listing of %s failed: %s", path, e)
            return False
        if generation != self._generation:
            return False
        self.supply(entries)
        logger.debug("Autocomplete supplied %d entries from %s", len(entries), path)
        return True

    def _candidates(self, index: int, tokens: list[str]) -> list[str]:
        if index == 0 and self._commands:
            return list(self._commands)
        return list(self._entries)
