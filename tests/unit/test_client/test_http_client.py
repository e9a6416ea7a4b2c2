"""Tests for the HttpTerminalClient."""

from __future__ import annotations

import json

import httpx
import pytest

from termhost.client.http import HttpTerminalClient
from termhost.errors import TerminalClientError


class RecordingTransport:
    """Builds an httpx.MockTransport that records requests."""

    def __init__(self, health_status: int = 200) -> None:
        self.requests: list[httpx.Request] = []
        self.health_status = health_status

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path == "/health":
            return httpx.Response(self.health_status, json={"status": "ok"})
        if path == "/sessions/missing/line":
            return httpx.Response(404, json={"detail": "Unknown session: missing"})
        if path.endswith("/line") or path.endswith("/screen"):
            return httpx.Response(200, json={"process_id": "t1", "content": "user@localhost:/$ ", "cwd": "/"})
        return httpx.Response(200, json={"status": "ok"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


class TestHttpTerminalClient:
    """Test the HTTP terminal client."""

    def test_init_defaults(self) -> None:
        client = HttpTerminalClient()
        assert client._base_url == "http://localhost:8080"
        assert client._timeout == 10.0
        assert client.is_connected is False

    def test_init_custom_url(self) -> None:
        client = HttpTerminalClient(base_url="http://192.168.1.100:9090/")
        assert client._base_url == "http://192.168.1.100:9090"

    @pytest.mark.asyncio
    async def test_connect_checks_health(self) -> None:
        recorder = RecordingTransport()
        async with HttpTerminalClient(transport=recorder.transport) as client:
            assert client.is_connected
        assert client.is_connected is False
        assert recorder.requests[0].url.path == "/health"

    @pytest.mark.asyncio
    async def test_connect_failure(self) -> None:
        recorder = RecordingTransport(health_status=503)
        client = HttpTerminalClient(transport=recorder.transport)
        with pytest.raises(TerminalClientError) as exc_info:
            await client.connect()
        assert exc_info.value.component == "client"
        assert client.is_connected is False

    @pytest.mark.asyncio
    async def test_requires_connection(self) -> None:
        with pytest.raises(TerminalClientError):
            await HttpTerminalClient().send_text("t1", "ls")

    @pytest.mark.asyncio
    async def test_send_line_returns_screen(self) -> None:
        recorder = RecordingTransport()
        async with HttpTerminalClient(transport=recorder.transport) as client:
            screen = await client.send_line("t1", "ls")
        assert screen == "user@localhost:/$ "
        request = recorder.requests[-1]
        assert request.method == "POST"
        assert request.url.path == "/sessions/t1/line"
        assert json.loads(request.content) == {"line": "ls"}

    @pytest.mark.asyncio
    async def test_payloads(self) -> None:
        recorder = RecordingTransport()
        async with HttpTerminalClient(transport=recorder.transport) as client:
            await client.open_session("t1", url="notes.txt")
            await client.send_text("t1", "pwd")
            await client.send_keystroke("t1", "Enter")
            await client.launch("t1", "my file.txt")
            await client.get_screen("t1")
            await client.close_session("t1")

        sent = [(r.method, r.url.path) for r in recorder.requests[1:]]
        assert sent == [
            ("POST", "/sessions"),
            ("POST", "/sessions/t1/text"),
            ("POST", "/sessions/t1/keystroke"),
            ("POST", "/sessions/t1/launch"),
            ("GET", "/sessions/t1/screen"),
            ("DELETE", "/sessions/t1"),
        ]
        assert json.loads(recorder.requests[1].content) == {"url": "notes.txt", "process_id": "t1"}
        assert json.loads(recorder.requests[3].content) == {"key": "Enter"}

    @pytest.mark.asyncio
    async def test_http_errors_are_wrapped(self) -> None:
        recorder = RecordingTransport()
        async with HttpTerminalClient(transport=recorder.transport) as client:
            with pytest.raises(TerminalClientError):
                await client.send_line("missing", "ls")
