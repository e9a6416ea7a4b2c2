"""Filesystem collaborators used for directory listings and `cd`.

Paths are absolute POSIX-style virtual paths ("/Users/Public"). The
session only needs listings; the reference interpreter also checks
whether a path is a directory.
"""

from __future__ import annotations

import asyncio
import logging
import posixpath
from abc import ABC, abstractmethod
from pathlib import Path

from termhost.errors import FileSystemError

logger = logging.getLogger(__name__)


def normalize_path(path: str, cwd: str = "/") -> str:
    """Resolve `path` against `cwd` into a normalized absolute virtual path."""
    joined = posixpath.join(cwd, path) if not path.startswith("/") else path
    normalized = posixpath.normpath(joined)
    # normpath keeps a leading double slash
    return "/" + normalized.lstrip("/")


class FileSystem(ABC):
    """Abstract interface for the session's virtual filesystem.

    Implementations must be safe to use from several sessions sharing
    one event loop.
    """

    @abstractmethod
    async def list_directory(self, path: str) -> list[str]:
        """Return the entry names in a directory, sorted.

        Raises:
            FileSystemError: If the path does not exist or is not a directory.
        """
        ...

    @abstractmethod
    async def is_directory(self, path: str) -> bool:
        ...


class MemoryFileSystem(FileSystem):
    """A filesystem held entirely in memory."""

    def __init__(self) -> None:
        self._directories: dict[str, set[str]] = {"/": set()}
        self._files: set[str] = set()

    def add_directory(self, path: str) -> None:
        path = normalize_path(path)
        parts = [part for part in path.split("/") if part]
        current = "/"
        for part in parts:
            self._directories.setdefault(current, set()).add(part)
            current = posixpath.join(current, part)
            if current in self._files:
                raise FileSystemError(f"Not a directory: {current}", path=current)
            self._directories.setdefault(current, set())

    def add_file(self, path: str) -> None:
        path = normalize_path(path)
        parent, name = posixpath.split(path)
        if path in self._directories:
            raise FileSystemError(f"Is a directory: {path}", path=path)
        self.add_directory(parent)
        self._directories[parent].add(name)
        self._files.add(path)

    async def list_directory(self, path: str) -> list[str]:
        path = normalize_path(path)
        if path not in self._directories:
            raise FileSystemError(f"No such directory: {path}", path=path)
        return sorted(self._directories[path])

    async def is_directory(self, path: str) -> bool:
        return normalize_path(path) in self._directories


class LocalFileSystem(FileSystem):
    """Maps the virtual root onto a directory of the host filesystem.

    Blocking calls run in a worker thread so the event loop keeps
    serving other sessions.
    """

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root).resolve()

    @property
    def root(self) -> Path:
        return self._root

    def _resolve(self, path: str) -> Path:
        relative = normalize_path(path).lstrip("/")
        resolved = (self._root / relative).resolve()
        if resolved != self._root and self._root not in resolved.parents:
            raise FileSystemError(f"Path escapes the filesystem root: {path}", path=path)
        return resolved

    async def list_directory(self, path: str) -> list[str]:
        target = self._resolve(path)

        def _list() -> list[str]:
            return sorted(entry.name for entry in target.iterdir())

        try:
            return await asyncio.to_thread(_list)
        except OSError as e:
            raise FileSystemError(f"Cannot list {path}: {e}", path=path) from e

    async def is_directory(self, path: str) -> bool:
        try:
            target = self._resolve(path)
        except FileSystemError:
            return False
        return await asyncio.to_thread(target.is_dir)
