"""Session host: owns the process table and one controller per process.

The host is what the CLI and the HTTP endpoint drive. It creates a
window region for each new session, forwards launch targets and
foreground changes through the process table, and closes sessions by
flagging their records and waiting for the controllers to dispose.
"""

from __future__ import annotations

import itertools
import logging
from typing import Any

from termhost.config.settings import Settings
from termhost.display.container import create_window
from termhost.errors import SessionError
from termhost.session.clipboard import Clipboard, MemoryClipboard
from termhost.session.controller import TerminalSession
from termhost.session.loader import AddonLoader
from termhost.system.extensions import ExtensionRegistry
from termhost.system.filesystem import FileSystem, MemoryFileSystem
from termhost.system.interpreter import BasicInterpreter, InterpreterFactory
from termhost.system.processes import ProcessTable

logger = logging.getLogger(__name__)


class SessionHost:
    """Creates, tracks and closes terminal sessions."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        filesystem: FileSystem | None = None,
        clipboard: Clipboard | None = None,
        interpreter_factory: InterpreterFactory = BasicInterpreter,
        loader: AddonLoader | None = None,
        widget_options: dict[str, Any] | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.processes = ProcessTable()
        self.loader = loader or AddonLoader()
        self.extensions = ExtensionRegistry(self.settings.extensions)
        self.clipboard = clipboard or MemoryClipboard()
        self._interpreter_factory = interpreter_factory
        self._widget_options = dict(widget_options or {})
        self._sessions: dict[str, TerminalSession] = {}
        self._ids = itertools.count(1)

        if filesystem is None:
            filesystem = MemoryFileSystem()
            filesystem.add_directory(self.settings.session.home)
        self.filesystem = filesystem

    def __contains__(self, process_id: object) -> bool:
        return process_id in self._sessions

    @property
    def sessions(self) -> list[TerminalSession]:
        return [self._sessions[key] for key in sorted(self._sessions)]

    def get(self, process_id: str) -> TerminalSession:
        try:
            return self._sessions[process_id]
        except KeyError:
            raise SessionError(f"Unknown session: {process_id}", process_id=process_id) from None

    async def open_session(
        self,
        process_id: str | None = None,
        *,
        url: str = "",
        libraries: list[str] | None = None,
        width: int | None = None,
        height: int | None = None,
    ) -> TerminalSession:
        """Open a process record, start its controller and mount it in a new window."""
        if process_id is None:
            process_id = f"terminal-{next(self._ids)}"
            while process_id in self.processes:
                process_id = f"terminal-{next(self._ids)}"

        display_config = self.settings.display
        self.processes.open(
            process_id,
            url=url,
            libraries=libraries if libraries is not None else self.settings.session.libraries,
        )
        session = TerminalSession(
            process_id,
            processes=self.processes,
            filesystem=self.filesystem,
            interpreter_factory=self._interpreter_factory,
            extensions=self.extensions,
            loader=self.loader,
            clipboard=self.clipboard,
            display_config=display_config,
            session_config=self.settings.session,
            widget_options=self._widget_options,
        )
        self._sessions[process_id] = session

        await session.start()
        session.mount(
            create_window(
                width or display_config.container_width,
                height or display_config.container_height,
            )
        )
        self.processes.set_foreground(process_id)
        logger.info("Session %s opened (%s)", process_id, session.state.value)
        return session

    def launch(self, process_id: str, target: str) -> None:
        """Hand a launch target (URL or file path) to a running session."""
        self.get(process_id)
        self.processes.set_url(process_id, target)

    def foreground(self, process_id: str) -> None:
        self.get(process_id)
        self.processes.set_foreground(process_id)

    async def close_session(self, process_id: str) -> None:
        session = self.get(process_id)
        self.processes.close(process_id)
        await session.wait_closed()
        self.processes.remove(process_id)
        del self._sessions[process_id]
        logger.info("Session %s closed", process_id)

    async def close_all(self) -> None:
        for process_id in list(self._sessions):
            await self.close_session(process_id)
