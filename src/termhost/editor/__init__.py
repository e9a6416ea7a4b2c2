"""Line-editor module for termhost.

Public API:
    LineEditor -- Local-echo line editor addon with an async read primitive
    History -- Bounded command history
"""

from termhost.editor.history import History
from termhost.editor.line_editor import LineEditor

__all__ = ["History", "LineEditor"]
