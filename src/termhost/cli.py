"""Command-line interface for termhost.

Provides the main entry point for running a terminal session on the
current terminal, serving sessions over HTTP, or driving a remote
session.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="termhost",
        description="Terminal session controller",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: config/termhost.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    shell_parser = subparsers.add_parser("shell", help="Run a terminal session on stdin/stdout")
    shell_parser.add_argument(
        "target", nargs="?", default="",
        help="File or directory to launch the session with",
    )
    shell_parser.add_argument(
        "--root", type=Path, default=None,
        help="Host directory to expose as the session filesystem (default: in-memory)",
    )

    subparsers.add_parser("endpoint", help="Start the HTTP endpoint server")

    send_parser = subparsers.add_parser("send", help="Submit a line to a remote session")
    send_parser.add_argument("session", help="Process id of the remote session")
    send_parser.add_argument("line", help="Command line to submit")
    send_parser.add_argument(
        "--open", action="store_true",
        help="Open the session first",
    )

    return parser.parse_args(argv)


async def _run_shell(settings, args) -> None:
    """Run one session with stdin as keyboard and stdout as screen."""
    from termhost.display.buffer import BufferDisplay
    from termhost.domain.models import LifecycleState
    from termhost.system.filesystem import LocalFileSystem
    from termhost.system.host import SessionHost

    def write(data: str) -> None:
        sys.stdout.write(data)
        sys.stdout.flush()

    filesystem = None
    if args.root is not None:
        filesystem = LocalFileSystem(args.root)
        settings.session.home = "/"

    host = SessionHost(settings, filesystem=filesystem, widget_options={"on_write": write})
    session = await host.open_session("shell", url=args.target)
    if session.state is not LifecycleState.INITIALIZED:
        logger.error("Session could not be initialized (%s)", session.state.value)
        await host.close_all()
        return

    loop = asyncio.get_running_loop()
    try:
        while session.state is LifecycleState.INITIALIZED:
            await session.editor.wait_until_reading()
            line = await loop.run_in_executor(None, sys.stdin.readline)
            if not line:
                break
            display = session.display
            # The local terminal has already echoed the typed line
            if isinstance(display, BufferDisplay):
                with display.muted():
                    session.send_input(line.rstrip("\r\n") + "\r")
            else:
                session.send_input(line.rstrip("\r\n") + "\r")
    finally:
        write("\n")
        await host.close_all()


async def _send(settings, args) -> None:
    """Submit one line to a remote session and print its screen."""
    from termhost.client.http import HttpTerminalClient

    ep = settings.endpoint
    async with HttpTerminalClient(base_url=ep.base_url, timeout=ep.timeout) as client:
        if args.open:
            await client.open_session(args.session)
        screen = await client.send_line(args.session, args.line)
    print(screen)


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the termhost CLI."""
    args = parse_args(argv)

    if args.command is None:
        parse_args(["--help"])
        return

    from termhost.config.settings import load_settings
    from termhost.errors import TermhostError
    from termhost.utils.logging import setup_logging

    settings = load_settings(args.config)

    if args.verbose:
        settings.logging.level = "DEBUG"

    setup_logging(settings.logging)

    try:
        if args.command == "shell":
            logger.info("Starting shell session")
            asyncio.run(_run_shell(settings, args))

        elif args.command == "endpoint":
            logger.info("Starting endpoint server")
            from termhost.endpoint.server import create_app
            import uvicorn
            ep = settings.endpoint
            uvicorn.run(create_app(settings=settings), host=ep.host, port=ep.port)

        elif args.command == "send":
            asyncio.run(_send(settings, args))

    except TermhostError as e:
        logger.error("%s", e)
        sys.exit(1)
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
