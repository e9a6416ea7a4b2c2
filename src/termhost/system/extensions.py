"""Extension registry: file extension -> "open" command template."""

from __future__ import annotations

import logging
import posixpath
from collections.abc import Mapping

logger = logging.getLogger(__name__)


def get_extension(target: str) -> str:
    """Return the lower-cased extension of a path or URL, including the dot.

    Query strings and fragments are ignored; dotfiles have no extension.
    """
    path = target.split("?", 1)[0].split("#", 1)[0].rstrip("/")
    return posixpath.splitext(posixpath.basename(path))[1].lower()


class ExtensionRegistry:
    """Maps file extensions to the command that opens them."""

    def __init__(self, commands: Mapping[str, str] | None = None) -> None:
        self._commands: dict[str, str] = {}
        for extension, command in (commands or {}).items():
            self.register(extension, command)

    def register(self, extension: str, command: str) -> None:
        extension = extension.lower()
        if not extension.startswith("."):
            extension = "." + extension
        self._commands[extension] = command

    def command_for(self, extension: str) -> str | None:
        """Return the open command for an extension, or None if none is registered."""
        return self._commands.get(extension.lower()) or None

    def __len__(self) -> int:
        return len(self._commands)
