"""HTTP client for driving remote termhost sessions."""

from termhost.client.http import HttpTerminalClient

__all__ = ["HttpTerminalClient"]
