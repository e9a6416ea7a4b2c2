"""termhost -- Asynchronous terminal session controller.

This package hosts interactive command shell sessions: it attaches a
terminal display widget to a container region, wires the line-editor
and resize-fitting addons, and drives a read-evaluate-print loop
against a pluggable command interpreter until the session is closed.
"""

__version__ = "0.1.0"
__license__ = "MIT"
