"""Session module for termhost.

Everything that runs one terminal session: the lifecycle gate, the
addon loader, the read-evaluate-print loop, autocomplete, clipboard
handling, launch targets and the controller tying them together.

Public API:
    TerminalSession -- Session controller
    AddonLoader, CapabilityRegistry -- Capability bundle loading
    LifecycleGate, GateConditions, next_state -- Lifecycle gate
    SessionLoop -- Read-evaluate-print loop
    WorkingDirectory, DirectoryView -- Shared working directory cell
"""

from termhost.session.cwd import DirectoryView, WorkingDirectory
from termhost.session.lifecycle import GateConditions, LifecycleGate, next_state

__all__ = [
    "AddonLoader",
    "CapabilityRegistry",
    "DirectoryView",
    "GateConditions",
    "LifecycleGate",
    "SessionLoop",
    "TerminalSession",
    "WorkingDirectory",
    "next_state",
]


def __getattr__(name: str) -> type:
    """Lazy import for the modules that depend on the interpreter and editor."""
    if name == "TerminalSession":
        from termhost.session.controller import TerminalSession
        return TerminalSession
    if name == "SessionLoop":
        from termhost.session.loop import SessionLoop
        return SessionLoop
    if name in ("AddonLoader", "CapabilityRegistry"):
        from termhost.session import loader
        return getattr(loader, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
