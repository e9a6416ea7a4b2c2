"""Shared test fixtures for the termhost test suite.

Provides common fixtures used across unit tests: configuration, an
in-memory filesystem, a process table, a recording command interpreter,
and a factory for fully wired terminal sessions.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

import pytest

from termhost.config.settings import DEFAULT_LIBRARIES, DisplayConfig, SessionConfig
from termhost.display.buffer import BufferDisplay
from termhost.display.container import Region, create_window
from termhost.editor.line_editor import LineEditor
from termhost.session.clipboard import MemoryClipboard
from termhost.session.controller import TerminalSession
from termhost.session.loader import AddonLoader
from termhost.system.extensions import ExtensionRegistry
from termhost.system.filesystem import MemoryFileSystem
from termhost.system.interpreter import CommandInterpreter, InterpreterContext
from termhost.system.processes import ProcessTable


class RecordingInterpreter(CommandInterpreter):
    """Interpreter that records every executed line and echoes it back."""

    def __init__(self, context: InterpreterContext) -> None:
        super().__init__(context)
        self.lines: list[str] = []

    @property
    def commands(self) -> list[str]:
        return ["cat", "cd", "edit", "ls"]

    async def execute(self, line: str) -> None:
        self.lines.append(line)
        if line.startswith("cd "):
            self.context.cwd.change(line[3:].strip())
        elif line == "fail":
            raise RuntimeError("interpreter exploded")
        elif line == "hang":
            await asyncio.Event().wait()
        self.context.editor.println(f"ran {line}")


# ---------------------------------------------------------------------------
# Configuration Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def display_config() -> DisplayConfig:
    return DisplayConfig()


@pytest.fixture
def session_config() -> SessionConfig:
    """Session settings with a fixed identity for predictable prompts."""
    return SessionConfig(username="user", hostname="localhost", home="/Users/Public")


# ---------------------------------------------------------------------------
# Collaborator Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def filesystem() -> MemoryFileSystem:
    """An in-memory filesystem with a populated home directory."""
    fs = MemoryFileSystem()
    fs.add_file("/Users/Public/notes.txt")
    fs.add_file("/Users/Public/names.md")
    fs.add_directory("/Users/Public/docs")
    fs.add_file("/Users/Public/docs/report.txt")
    return fs


@pytest.fixture
def processes() -> ProcessTable:
    return ProcessTable()


@pytest.fixture
def extensions() -> ExtensionRegistry:
    return ExtensionRegistry({".txt": "edit", ".md": "edit", ".py": "python"})


@pytest.fixture
def loader() -> AddonLoader:
    return AddonLoader()


@pytest.fixture
def clipboard() -> MemoryClipboard:
    return MemoryClipboard()


@pytest.fixture
def container() -> Region:
    """A mounted terminal container inside a window section."""
    return create_window(800, 480)


@pytest.fixture
def opened_display(container: Region) -> tuple[BufferDisplay, LineEditor]:
    """A buffer display opened into a container with a line editor attached."""
    display = BufferDisplay()
    editor = LineEditor()
    display.load_addon(editor)
    display.open(container)
    return display, editor


# ---------------------------------------------------------------------------
# Session Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def interpreters() -> list[RecordingInterpreter]:
    """Every interpreter created by the session factory, in creation order."""
    return []


@pytest.fixture
def make_session(
    processes: ProcessTable,
    filesystem: MemoryFileSystem,
    extensions: ExtensionRegistry,
    loader: AddonLoader,
    clipboard: MemoryClipboard,
    display_config: DisplayConfig,
    session_config: SessionConfig,
    interpreters: list[RecordingInterpreter],
) -> Callable[..., TerminalSession]:
    """Factory opening a process record and building its TerminalSession."""

    def factory(context: InterpreterContext) -> RecordingInterpreter:
        interpreter = RecordingInterpreter(context)
        interpreters.append(interpreter)
        return interpreter

    def make(
        process_id: str = "term-1",
        url: str = "",
        libraries: list[str] | None = None,
        **kwargs: object,
    ) -> TerminalSession:
        processes.open(
            process_id,
            url=url,
            libraries=list(DEFAULT_LIBRARIES) if libraries is None else libraries,
        )
        return TerminalSession(
            process_id,
            processes=processes,
            filesystem=filesystem,
            interpreter_factory=factory,
            extensions=extensions,
            loader=loader,
            clipboard=clipboard,
            display_config=display_config,
            session_config=session_config,
            **kwargs,
        )

    return make


@pytest.fixture
def eventually() -> Callable[[Callable[[], bool]], Awaitable[None]]:
    """Wait (up to two seconds) until a condition holds."""

    async def wait(condition: Callable[[], bool], timeout: float = 2.0) -> None:
        async def poll() -> None:
            while not condition():
                await asyncio.sleep(0.005)

        await asyncio.wait_for(poll(), timeout)

    return wait
