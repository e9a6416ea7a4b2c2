"""Command interpreter interface and a small reference interpreter.

A session never parses commands itself: each entered line is handed to
CommandInterpreter.execute(), which must always settle. The interpreter
writes its own output and error messages to the display and is the only
component allowed to change the working directory.
"""

from __future__ import annotations

import logging
import os
import shlex
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from termhost import __license__, __version__
from termhost.display.base import DisplaySurface
from termhost.editor.line_editor import LineEditor
from termhost.errors import FileSystemError
from termhost.session.cwd import WorkingDirectory
from termhost.system.filesystem import FileSystem, normalize_path

logger = logging.getLogger(__name__)


def display_license() -> str:
    return f"{__license__} License"


def display_version() -> str:
    """Package version, suffixed with the build id when one is set."""
    build_id = os.environ.get("TERMHOST_BUILD_ID", "")
    return f"{__version__}-{build_id}" if build_id else __version__


@dataclass
class InterpreterContext:
    """Everything a per-session interpreter may touch."""

    process_id: str
    cwd: WorkingDirectory
    display: DisplaySurface
    editor: LineEditor
    filesystem: FileSystem
    home: str


class CommandInterpreter(ABC):
    """Abstract interface for executing one line of input.

    Example usage::

        class EchoInterpreter(CommandInterpreter):
            async def execute(self, line):
                self.context.editor.println(line)
    """

    def __init__(self, context: InterpreterContext) -> None:
        self.context = context

    @property
    def commands(self) -> list[str]:
        """Command names offered to autocomplete for the first token."""
        return []

    @abstractmethod
    async def execute(self, line: str) -> None:
        """Execute a line. Must settle; failures are reported to the display."""
        ...


InterpreterFactory = Callable[[InterpreterContext], CommandInterpreter]

CommandHandler = Callable[[list[str]], Awaitable[None]]


class BasicInterpreter(CommandInterpreter):
    """Reference interpreter with a handful of navigation commands."""

    def __init__(self, context: InterpreterContext) -> None:
        super().__init__(context)
        self._handlers: dict[str, CommandHandler] = {
            "cd": self._cd,
            "clear": self._clear,
            "cls": self._clear,
            "dir": self._ls,
            "echo": self._echo,
            "help": self._help,
            "history": self._history,
            "license": self._license,
            "ls": self._ls,
            "pwd": self._pwd,
            "ver": self._version,
            "version": self._version,
        }

    @property
    def commands(self) -> list[str]:
        return sorted(self._handlers)

    async def execute(self, line: str) -> None:
        try:
            tokens = shlex.split(line)
        except ValueError as e:
            self._println(f"Syntax error: {e}")
            return
        if not tokens:
            return

        name, args = tokens[0], tokens[1:]
        handler = self._handlers.get(name.lower())
        if handler is None:
            self._println(f"{name}: command not found")
            return

        try:
            await handler(args)
        except FileSystemError as e:
            self._println(f"{name}: {e}")
        except Exception as e:
            logger.error("Command %r failed in %s: %s", name, self.context.process_id, e)
            self._println(f"{name}: {e}")

    def _println(self, message: str) -> None:
        self.context.editor.println(message)

    async def _cd(self, args: list[str]) -> None:
        target = args[0] if args else self.context.home
        path = normalize_path(target, self.context.cwd.path)
        if not await self.context.filesystem.is_directory(path):
            self._println(f"cd: {target}: No such file or directory")
            return
        self.context.cwd.change(path)

    async def _ls(self, args: list[str]) -> None:
        path = normalize_path(args[0], self.context.cwd.path) if args else self.context.cwd.path
        entries = await self.context.filesystem.list_directory(path)
        self.context.editor.print_wide(entries)

    async def _pwd(self, args: list[str]) -> None:
        self._println(self.context.cwd.path)

    async def _echo(self, args: list[str]) -> None:
        self._println(" ".join(args))

    async def _clear(self, args: list[str]) -> None:
        self.context.display.clear()

    async def _history(self, args: list[str]) -> None:
        for number, entry in enumerate(self.context.editor.history.entries, start=1):
            self._println(f"{number:>5}  {entry}")

    async def _version(self, args: list[str]) -> None:
        self._println(display_version())

    async def _license(self, args: list[str]) -> None:
        self._println(display_license())

    async def _help(self, args: list[str]) -> None:
        self.context.editor.print_wide(self.commands)
