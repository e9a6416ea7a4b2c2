"""Session loop: the read-evaluate-print cycle of one terminal session.

Runs an optional initial command, then repeatedly reads a line from the
line editor and hands it to the command interpreter. A read is never
issued while an execution is pending and vice versa.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from termhost.domain.models import PromptContext
from termhost.editor.line_editor import LineEditor
from termhost.errors import ReadAborted
from termhost.session.cwd import DirectoryView
from termhost.system.interpreter import CommandInterpreter

logger = logging.getLogger(__name__)


class SessionLoop:
    """Alternates editor reads with interpreter executions until stopped.

    Example usage::

        loop = SessionLoop(editor, interpreter, cwd.view, "user", "localhost")
        task = asyncio.create_task(loop.run("edit notes.txt"))
        ...
        loop.stop()
    """

    def __init__(
        self,
        editor: LineEditor,
        interpreter: CommandInterpreter,
        cwd: DirectoryView,
        username: str,
        hostname: str,
        after_execute: Callable[[], None] | None = None,
    ) -> None:
        self._editor = editor
        self._interpreter = interpreter
        self._cwd = cwd
        self._username = username
        self._hostname = hostname
        self._after_execute = after_execute
        self._running = False
        self._executing = False
        self._stopped = False

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_executing(self) -> bool:
        return self._executing

    @property
    def is_stopped(self) -> bool:
        return self._stopped

    def prompt(self) -> str:
        """Render the prompt from the current working directory."""
        return PromptContext(
            username=self._username,
            hostname=self._hostname,
            cwd=self._cwd.path,
        ).render()

    async def run(self, initial_command: str | None = None) -> None:
        """Run the loop until stop() is called or the read is aborted."""
        self._running = True
        logger.info("Session loop started at %s", self._cwd.path)
        try:
            if initial_command and not self._stopped:
                self._editor.println(f"\r\n{self.prompt()}{initial_command}\r\n")
                self._editor.history.replace([initial_command])
                await self._execute(initial_command)

            while not self._stopped:
                try:
                    line = await self._editor.read(f"\r\n{self.prompt()}")
                except ReadAborted as e:
                    logger.debug("Read aborted: %s", e)
                    break
                if self._stopped:
                    break
                await self._execute(line)
        finally:
            self._running = False
            logger.info("Session loop stopped")

    def stop(self) -> None:
        """Request the loop to end, abandoning any pending read."""
        self._stopped = True
        self._editor.abort_read("Session loop stopped")

    async def _execute(self, line: str) -> None:
        self._executing = True
        try:
            await self._interpreter.execute(line)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error("Command %r failed: %s", line, e)
        finally:
            self._executing = False

        if self._after_execute is not None and not self._stopped:
            self._after_execute()
