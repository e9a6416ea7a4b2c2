"""Current working directory cell shared by the loop, interpreter and autocomplete.

The interpreter holds the writable WorkingDirectory; everything else gets
a DirectoryView, which can only read. The value is never empty.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class DirectoryView:
    """Read-only view of a working directory cell."""

    def __init__(self, cell: WorkingDirectory) -> None:
        self._cell = cell

    @property
    def path(self) -> str:
        return self._cell.path

    def __str__(self) -> str:
        return self._cell.path


class WorkingDirectory:
    """Owned, mutable working directory. Only the interpreter writes to it."""

    def __init__(self, path: str) -> None:
        if not path:
            raise ValueError("Working directory cannot be empty")
        self._path = path
        self._view = DirectoryView(self)

    @property
    def path(self) -> str:
        return self._path

    @property
    def view(self) -> DirectoryView:
        return self._view

    def change(self, path: str) -> None:
        if not path:
            raise ValueError("Working directory cannot be empty")
        if path != self._path:
            logger.debug("Working directory %s -> %s", self._path, path)
        self._path = path

    def __str__(self) -> str:
        return self._path
