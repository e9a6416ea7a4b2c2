"""FastAPI HTTP server exposing a session host.

Each session is addressed by its process id. Input can be sent as a
complete line (the response waits until the session is reading again),
as raw text, or as named keystrokes; the visible screen is returned as
plain text.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from termhost import __version__
from termhost.config.settings import Settings, load_settings
from termhost.display.buffer import BufferDisplay
from termhost.domain.models import SessionStatus
from termhost.errors import SessionError
from termhost.session.controller import TerminalSession
from termhost.system.host import SessionHost
from termhost.utils.logging import setup_logging

logger = logging.getLogger(__name__)


class SessionCreateRequest(BaseModel):
    process_id: str | None = Field(default=None, description="Identifier for the new session")
    url: str = Field(default="", description="Launch target (URL or file path)")
    width: int | None = Field(default=None, gt=0)
    height: int | None = Field(default=None, gt=0)


class LineRequest(BaseModel):
    line: str = Field(description="Command line to submit")


class TextInputRequest(BaseModel):
    text: str = Field(description="Text to type")


class KeystrokeRequest(BaseModel):
    key: str = Field(description="Key name (e.g., 'Enter', 'Tab', 'a', 'ctrl+c')")


class ResizeRequest(BaseModel):
    width: int = Field(gt=0, description="Container width in pixels")
    height: int = Field(gt=0, description="Container height in pixels")


class LaunchRequest(BaseModel):
    target: str = Field(min_length=1, description="URL or file path to open")


class ScreenResponse(BaseModel):
    process_id: str
    content: str
    cwd: str


class EndpointStatus(BaseModel):
    status: str = "ok"
    version: str = __version__
    sessions: int = 0


# Key name to the sequence the line editor understands
KEY_MAP = {
    "Enter": "\r",
    "Return": "\r",
    "Tab": "\t",
    "Space": " ",
    "Backspace": "\x7f",
    "Delete": "\x1b[3~",
    "Escape": "\x1b",
    "Up": "\x1b[A",
    "Down": "\x1b[B",
    "Right": "\x1b[C",
    "Left": "\x1b[D",
    "Home": "\x1b[H",
    "End": "\x1b[F",
}


def key_to_data(key: str) -> str | None:
    """Translate a key name (or `ctrl+<letter>`) to terminal input data."""
    if key.lower().startswith("ctrl+"):
        letter = key[5:].lower()
        if len(letter) == 1 and letter.isalpha():
            return chr(ord(letter) - ord("a") + 1)
        return None
    return KEY_MAP.get(key, key if len(key) == 1 else None)


def create_app(
    host: SessionHost | None = None,
    settings: Settings | None = None,
    line_timeout: float = 5.0,
) -> FastAPI:
    """Create and configure the FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if app.state.host is None:
            app.state.host = SessionHost(settings)
        logger.info("Endpoint started")
        yield
        await app.state.host.close_all()
        logger.info("Endpoint stopped")

    app = FastAPI(
        title="termhost Endpoint",
        description="HTTP access to terminal sessions",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.host = host

    def _session(process_id: str) -> TerminalSession:
        try:
            return app.state.host.get(process_id)
        except SessionError as e:
            raise HTTPException(status_code=404, detail=str(e)) from e

    def _send(session: TerminalSession, data: str) -> None:
        try:
            session.send_input(data)
        except SessionError as e:
            raise HTTPException(status_code=409, detail=str(e)) from e

    async def _wait_for_prompt(session: TerminalSession) -> None:
        editor = session.editor
        if editor is None:
            return
        try:
            await asyncio.wait_for(editor.wait_until_reading(), line_timeout)
        except asyncio.TimeoutError:
            logger.warning("Session %s did not return to the prompt", session.process_id)

    def _screen(session: TerminalSession) -> ScreenResponse:
        display = session.display
        content = display.get_screen_content() if isinstance(display, BufferDisplay) else ""
        return ScreenResponse(process_id=session.process_id, content=content, cwd=session.cwd)

    @app.get("/health")
    async def health_check() -> EndpointStatus:
        return EndpointStatus(sessions=len(app.state.host.sessions))

    @app.post("/sessions", status_code=201)
    async def create_session(request: SessionCreateRequest) -> SessionStatus:
        h: SessionHost = app.state.host
        if request.process_id is not None and request.process_id in h:
            raise HTTPException(status_code=409, detail=f"Session already exists: {request.process_id}")
        session = await h.open_session(
            request.process_id, url=request.url, width=request.width, height=request.height
        )
        await _wait_for_prompt(session)
        return session.status()

    @app.get("/sessions")
    async def list_sessions() -> list[SessionStatus]:
        return [session.status() for session in app.state.host.sessions]

    @app.get("/sessions/{process_id}")
    async def get_session(process_id: str) -> SessionStatus:
        return _session(process_id).status()

    @app.get("/sessions/{process_id}/screen")
    async def get_screen(process_id: str) -> ScreenResponse:
        return _screen(_session(process_id))

    @app.post("/sessions/{process_id}/line")
    async def submit_line(process_id: str, request: LineRequest) -> ScreenResponse:
        session = _session(process_id)
        await _wait_for_prompt(session)
        _send(session, request.line + "\r")
        await _wait_for_prompt(session)
        return _screen(session)

    @app.post("/sessions/{process_id}/text")
    async def receive_text(process_id: str, request: TextInputRequest) -> dict[str, str]:
        _send(_session(process_id), request.text)
        return {"status": "ok", "length": str(len(request.text))}

    @app.post("/sessions/{process_id}/keystroke")
    async def receive_keystroke(process_id: str, request: KeystrokeRequest) -> dict[str, str]:
        session = _session(process_id)
        data = key_to_data(request.key)
        if data is None:
            return {"status": "ignored", "reason": f"Unknown key: {request.key}"}
        _send(session, data)
        return {"status": "ok", "key": request.key}

    @app.post("/sessions/{process_id}/resize")
    async def resize_session(process_id: str, request: ResizeRequest) -> SessionStatus:
        session = _session(process_id)
        try:
            session.resize(request.width, request.height)
        except SessionError as e:
            raise HTTPException(status_code=409, detail=str(e)) from e
        return session.status()

    @app.post("/sessions/{process_id}/context-menu")
    async def open_context_menu(process_id: str) -> dict[str, str]:
        session = _session(process_id)
        try:
            await session.open_context_menu()
        except SessionError as e:
            raise HTTPException(status_code=409, detail=str(e)) from e
        return {"status": "ok"}

    @app.post("/sessions/{process_id}/launch")
    async def launch_target(process_id: str, request: LaunchRequest) -> SessionStatus:
        session = _session(process_id)
        app.state.host.launch(process_id, request.target)
        return session.status()

    @app.post("/sessions/{process_id}/foreground")
    async def bring_to_foreground(process_id: str) -> SessionStatus:
        session = _session(process_id)
        app.state.host.foreground(process_id)
        return session.status()

    @app.delete("/sessions/{process_id}")
    async def close_session(process_id: str) -> dict[str, str]:
        _session(process_id)
        await app.state.host.close_session(process_id)
        return {"status": "closed", "process_id": process_id}

    return app


def main(config_path: str | None = None) -> None:
    """Entry point for running the endpoint server standalone."""
    settings = load_settings(config_path)
    setup_logging(settings.logging)
    app = create_app(settings=settings)
    uvicorn.run(app, host=settings.endpoint.host, port=settings.endpoint.port)


if __name__ == "__main__":
    main()
