"""Core domain models for termhost.

These models represent the data flowing between the session controller
and its collaborators: process records owned by the process table, the
prompt context rendered each loop iteration, clipboard results, and the
status snapshots the HTTP endpoint reports.
"""

from __future__ import annotations

import enum

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class LifecycleState(str, enum.Enum):
    """States of the one-shot session lifecycle gate."""

    IDLE = "idle"  # Waiting for capabilities or the container
    READY = "ready"  # All preconditions hold; initialization is due
    INITIALIZED = "initialized"  # Widget opened, addons attached
    DISPOSED = "disposed"  # Closed; nothing may run again


# ---------------------------------------------------------------------------
# Process table
# ---------------------------------------------------------------------------


class ProcessRecord(BaseModel):
    """Per-session record kept by the process table."""

    model_config = ConfigDict(validate_assignment=True)

    process_id: str = Field(description="Identifier of the session's process")
    title: str = Field(default="Terminal")
    closing: bool = Field(default=False, description="Set by the process manager when the window closes")
    libraries: list[str] = Field(
        default_factory=list, description="Capability bundles to load before constructing the widget"
    )
    url: str = Field(default="", description="Launch target (URL or file path); cleared once consumed")


# ---------------------------------------------------------------------------
# Prompt
# ---------------------------------------------------------------------------


class PromptContext(BaseModel):
    """The values a prompt line is composed from."""

    model_config = ConfigDict(frozen=True)

    username: str
    hostname: str
    cwd: str

    def render(self) -> str:
        return f"{self.username}@{self.hostname}:{self.cwd}$ "


# ---------------------------------------------------------------------------
# Clipboard
# ---------------------------------------------------------------------------


class ClipboardResult(BaseModel):
    """Outcome of a best-effort clipboard operation.

    Failure is an ordinary, ignorable value rather than an exception.
    """

    model_config = ConfigDict(frozen=True)

    ok: bool
    text: str = ""
    error: str = ""

    @classmethod
    def success(cls, text: str = "") -> ClipboardResult:
        return cls(ok=True, text=text)

    @classmethod
    def failure(cls, error: str) -> ClipboardResult:
        return cls(ok=False, error=error)


# ---------------------------------------------------------------------------
# Status snapshots
# ---------------------------------------------------------------------------


class SessionStatus(BaseModel):
    """A point-in-time view of one session, as reported by the host."""

    process_id: str
    state: LifecycleState
    loading: bool
    prompted: bool
    cwd: str
    cols: int = 0
    rows: int = 0
    reading: bool = False
