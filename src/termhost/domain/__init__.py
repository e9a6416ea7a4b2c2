"""Domain models for termhost.

This package contains the core data structures and enumerations shared
by the session controller, the host and the HTTP endpoint. All models
use Pydantic v2 for validation and serialization.
"""

from termhost.domain.models import (
    ClipboardResult,
    LifecycleState,
    ProcessRecord,
    PromptContext,
    SessionStatus,
)

__all__ = [
    "ClipboardResult",
    "LifecycleState",
    "ProcessRecord",
    "PromptContext",
    "SessionStatus",
]
