"""Bounded, ordered command history with a navigation cursor."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable


class History:
    """Keeps at most `size` entries; the oldest entry is evicted first.

    The navigation cursor sits one past the newest entry after every
    push or rewind, so previous() walks back from the most recent line.
    """

    def __init__(self, size: int = 1000) -> None:
        if size <= 0:
            raise ValueError(f"History size must be positive, got {size}")
        self._entries: deque[str] = deque(maxlen=size)
        self._cursor = 0

    @property
    def size(self) -> int:
        return self._entries.maxlen or 0

    @property
    def entries(self) -> list[str]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def push(self, entry: str) -> None:
        """Append an entry, skipping blanks and repeats of the newest entry."""
        entry = entry.strip()
        if not entry:
            return
        if self._entries and self._entries[-1] == entry:
            self.rewind()
            return
        self._entries.append(entry)
        self.rewind()

    def replace(self, entries: Iterable[str]) -> None:
        """Replace the whole log, keeping only the newest `size` entries."""
        self._entries.clear()
        self._entries.extend(entries)
        self.rewind()

    def rewind(self) -> None:
        self._cursor = len(self._entries)

    def previous(self) -> str | None:
        if not self._entries:
            return None
        self._cursor = max(0, self._cursor - 1)
        return self._entries[self._cursor]

    def next(self) -> str | None:
        if not self._entries:
            return None
        self._cursor = min(len(self._entries), self._cursor + 1)
        if self._cursor == len(self._entries):
            return ""
        return self._entries[self._cursor]
