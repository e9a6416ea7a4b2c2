"""Tests for the SessionHost."""

from __future__ import annotations

import pytest

from termhost.config.settings import Settings
from termhost.domain.models import LifecycleState
from termhost.errors import SessionError
from termhost.system.host import SessionHost


@pytest.fixture
def host() -> SessionHost:
    settings = Settings()
    settings.session.username = "user"
    settings.session.hostname = "localhost"
    return SessionHost(settings)


class TestSessionHost:
    """Test opening, driving and closing sessions."""

    @pytest.mark.asyncio
    async def test_open_session_initializes_and_prompts(self, host: SessionHost) -> None:
        session = await host.open_session()
        await session.editor.wait_until_reading()

        assert session.process_id == "terminal-1"
        assert session.state is LifecycleState.INITIALIZED
        assert host.processes.foreground_id == "terminal-1"
        assert session.display.lines[-1] == "user@localhost:/Users/Public$ "
        await host.close_all()

    @pytest.mark.asyncio
    async def test_generated_ids_skip_taken_ones(self, host: SessionHost) -> None:
        await host.open_session("terminal-1")
        second = await host.open_session()
        assert second.process_id == "terminal-2"
        await host.close_all()

    @pytest.mark.asyncio
    async def test_launch_and_foreground_require_known_session(self, host: SessionHost) -> None:
        with pytest.raises(SessionError):
            host.launch("missing", "notes.txt")
        with pytest.raises(SessionError):
            host.foreground("missing")

    @pytest.mark.asyncio
    async def test_close_session_removes_it(self, host: SessionHost) -> None:
        session = await host.open_session("term-1")
        await host.close_session("term-1")

        assert session.state is LifecycleState.DISPOSED
        assert session.display.is_disposed
        assert "term-1" not in host
        assert "term-1" not in host.processes
        with pytest.raises(SessionError):
            host.get("term-1")

    @pytest.mark.asyncio
    async def test_sessions_share_clipboard(self, host: SessionHost) -> None:
        first = await host.open_session("a")
        second = await host.open_session("b")
        await first.editor.wait_until_reading()
        await second.editor.wait_until_reading()

        first.display.select(0, 1, 28)
        await first.open_context_menu()
        await second.open_context_menu()

        assert second.editor.input == "user@localhost:/Users/Public"
        await host.close_all()

    @pytest.mark.asyncio
    async def test_closed_sessions_leave_no_listeners(self, host: SessionHost) -> None:
        for _ in range(3):
            session = await host.open_session(libraries=["termhost.no_such_bundle"])
            assert session.display is None
            await host.close_session(session.process_id)
        ready = await host.open_session("ready")
        await ready.editor.wait_until_reading()
        await host.close_session("ready")

        assert host.processes._foreground_listeners == []
        assert host.processes._listeners == {}
