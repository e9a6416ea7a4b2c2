"""Launch target handling: initial commands and starting directories.

A session may be launched with a target (a URL or a file path). Before
the line editor exists the target is turned into an initial command
using the extension registry; once the editor is active the target is
inserted into the current input line instead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from termhost.editor.line_editor import LineEditor
from termhost.system.extensions import ExtensionRegistry, get_extension

logger = logging.getLogger(__name__)


def quote_target(target: str) -> str:
    """Wrap a target in double quotes when it contains a space."""
    return f'"{target}"' if " " in target else target


def derive_initial_command(target: str, registry: ExtensionRegistry) -> str | None:
    """Compose `{command} {target}` from the target's registered open command."""
    command = registry.command_for(get_extension(target))
    if not command:
        logger.debug("No open command registered for %r", target)
        return None
    return f"{command} {quote_target(target)}"


def initial_directory(target: str, home: str) -> str:
    """A target without an extension names the directory to start in."""
    if target and not get_extension(target):
        return target
    return home


@dataclass(frozen=True)
class LaunchOutcome:
    initial_command: str | None = None
    inserted: str | None = None


def resolve_launch_target(
    target: str,
    editor: LineEditor | None,
    registry: ExtensionRegistry,
) -> LaunchOutcome:
    """Insert the target into an active editor, or derive an initial command."""
    if editor is not None:
        text = quote_target(target)
        editor.handle_cursor_insert(text)
        return LaunchOutcome(inserted=text)
    return LaunchOutcome(initial_command=derive_initial_command(target, registry))
