"""HTTP client for a remote termhost endpoint.

Drives sessions over HTTP: submitting lines, typing text and keys, and
reading back the visible screen.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from termhost.errors import TerminalClientError

logger = logging.getLogger(__name__)


class HttpTerminalClient:
    """Async client for the termhost HTTP endpoint.

    Example usage::

        async with HttpTerminalClient("http://localhost:8080") as client:
            await client.open_session("term-1")
            screen = await client.send_line("term-1", "ls")
            print(screen)
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8080",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    async def __aenter__(self) -> HttpTerminalClient:
        await self.connect()
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.disconnect()

    async def connect(self) -> None:
        """Create the HTTP client and verify endpoint connectivity."""
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
        )
        try:
            resp = await self._client.get("/health")
            resp.raise_for_status()
            logger.info("Connected to endpoint at %s", self._base_url)
        except Exception as e:
            await self._client.aclose()
            self._client = None
            raise TerminalClientError(f"Failed to connect to endpoint: {e}") from e

    async def disconnect(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("Disconnected from endpoint")

    async def open_session(self, process_id: str | None = None, url: str = "") -> dict[str, Any]:
        payload: dict[str, Any] = {"url": url}
        if process_id is not None:
            payload["process_id"] = process_id
        resp = await self._request("POST", "/sessions", payload)
        return resp.json()

    async def close_session(self, process_id: str) -> None:
        await self._request("DELETE", f"/sessions/{process_id}")
        logger.debug("Closed session %s", process_id)

    async def send_line(self, process_id: str, line: str) -> str:
        """Submit a line and return the screen once the session prompts again."""
        resp = await self._request("POST", f"/sessions/{process_id}/line", {"line": line})
        logger.debug("Sent line to %s: %s", process_id, line[:50])
        return resp.json()["content"]

    async def send_text(self, process_id: str, text: str) -> None:
        await self._request("POST", f"/sessions/{process_id}/text", {"text": text})
        logger.debug("Sent text to %s: %s", process_id, text[:50])

    async def send_keystroke(self, process_id: str, key: str) -> None:
        await self._request("POST", f"/sessions/{process_id}/keystroke", {"key": key})
        logger.debug("Sent keystroke to %s: %s", process_id, key)

    async def launch(self, process_id: str, target: str) -> dict[str, Any]:
        resp = await self._request("POST", f"/sessions/{process_id}/launch", {"target": target})
        return resp.json()

    async def get_screen(self, process_id: str) -> str:
        resp = await self._request("GET", f"/sessions/{process_id}/screen")
        return resp.json()["content"]

    async def _request(
        self, method: str, path: str, payload: dict[str, Any] | None = None
    ) -> httpx.Response:
        if self._client is None:
            raise TerminalClientError("Not connected to endpoint")
        try:
            resp = await self._client.request(method, path, json=payload)
            resp.raise_for_status()
            return resp
        except httpx.HTTPError as e:
            raise TerminalClientError(f"HTTP request to {path} failed: {e}") from e
