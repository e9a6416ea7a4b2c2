"""Exception hierarchy for termhost.

Every error raised by the package derives from TermhostError and records
which component raised it, so callers can log or route failures without
matching on message text.
"""

from __future__ import annotations


class TermhostError(Exception):
    """Base class for all termhost errors."""

    def __init__(self, message: str, component: str = "") -> None:
        super().__init__(message)
        self.component = component


class DisplayError(TermhostError):
    """Raised when a display surface is used before it is opened or after disposal."""

    def __init__(self, message: str) -> None:
        super().__init__(message, component="display")


class EditorError(TermhostError):
    """Raised when the line editor is misused (e.g. a second concurrent read)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, component="editor")


class ReadAborted(EditorError):
    """Raised inside a pending read when the editor abandons it."""


class SessionError(TermhostError):
    """Raised by the session host for unknown or duplicate sessions."""

    def __init__(self, message: str, process_id: str = "") -> None:
        super().__init__(message, component="session")
        self.process_id = process_id


class FileSystemError(TermhostError):
    """Raised when a filesystem operation fails."""

    def __init__(self, message: str, path: str = "") -> None:
        super().__init__(message, component="filesystem")
        self.path = path


class TerminalClientError(TermhostError):
    """Raised when the HTTP terminal client cannot reach or drive the endpoint."""

    def __init__(self, message: str) -> None:
        super().__init__(message, component="client")
