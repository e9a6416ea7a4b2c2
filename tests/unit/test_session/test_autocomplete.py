"""Tests for the autocomplete provider."""

from __future__ import annotations

import asyncio

import pytest

from termhost.display.buffer import BufferDisplay
from termhost.editor.line_editor import LineEditor
from termhost.errors import FileSystemError
from termhost.session.autocomplete import AutocompleteProvider
from termhost.session.cwd import WorkingDirectory
from termhost.system.filesystem import FileSystem, MemoryFileSystem


class GatedFileSystem(FileSystem):
    """Listings of paths in `gates` wait until their event is set."""

    def __init__(self, listings: dict[str, list[str]]) -> None:
        self.listings = listings
        self.gates: dict[str, asyncio.Event] = {}

    async def list_directory(self, path: str) -> list[str]:
        gate = self.gates.get(path)
        if gate is not None:
            await gate.wait()
        return list(self.listings[path])

    async def is_directory(self, path: str) -> bool:
        return path in self.listings


@pytest.fixture
def editor(opened_display: tuple[BufferDisplay, LineEditor]) -> LineEditor:
    return opened_display[1]


class TestAutocompleteProvider:
    """Test that candidates follow the latest successful listing."""

    @pytest.mark.asyncio
    async def test_refresh_supplies_listing(self, editor: LineEditor, filesystem: MemoryFileSystem) -> None:
        provider = AutocompleteProvider(editor, ["cat", "cd"])
        cwd = WorkingDirectory("/Users/Public")
        assert await provider.refresh(filesystem, cwd.view) is True
        assert provider.entries == ["docs", "names.md", "notes.txt"]
        assert editor.candidates(1, ["cat", "no"]) == ["notes.txt"]

    @pytest.mark.asyncio
    async def test_first_token_completes_commands(self, editor: LineEditor) -> None:
        provider = AutocompleteProvider(editor, ["cat", "cd", "ls"])
        provider.supply(["cdrom"])
        assert editor.candidates(0, ["c"]) == ["cat", "cd"]

    @pytest.mark.asyncio
    async def test_first_token_uses_entries_without_commands(self, editor: LineEditor) -> None:
        provider = AutocompleteProvider(editor)
        provider.supply(["docs", "notes.txt"])
        assert editor.candidates(0, ["d"]) == ["docs"]

    @pytest.mark.asyncio
    async def test_follows_directory_change(self, editor: LineEditor, filesystem: MemoryFileSystem) -> None:
        provider = AutocompleteProvider(editor)
        cwd = WorkingDirectory("/Users/Public")
        await provider.refresh(filesystem, cwd.view)
        cwd.change("/Users/Public/docs")
        await provider.refresh(filesystem, cwd.view)
        assert editor.candidates(1, ["cat", ""]) == ["report.txt"]

    @pytest.mark.asyncio
    async def test_failed_listing_keeps_previous_entries(self, editor: LineEditor, filesystem: MemoryFileSystem) -> None:
        provider = AutocompleteProvider(editor)
        cwd = WorkingDirectory("/Users/Public")
        await provider.refresh(filesystem, cwd.view)
        cwd.change("/missing")
        assert await provider.refresh(filesystem, cwd.view) is False
        assert provider.entries == ["docs", "names.md", "notes.txt"]

    @pytest.mark.asyncio
    async def test_stale_listing_is_discarded(self, editor: LineEditor) -> None:
        fs = GatedFileSystem({"/old": ["old.txt"], "/new": ["new.txt"]})
        fs.gates["/old"] = asyncio.Event()
        provider = AutocompleteProvider(editor)
        cwd = WorkingDirectory("/old")

        slow = asyncio.create_task(provider.refresh(fs, cwd.view))
        await asyncio.sleep(0)
        cwd.change("/new")
        assert await provider.refresh(fs, cwd.view) is True
        fs.gates["/old"].set()

        assert await slow is False
        assert provider.entries == ["new.txt"]

    def test_detach_removes_handler(self, editor: LineEditor) -> None:
        provider = AutocompleteProvider(editor)
        provider.supply(["notes.txt"])
        provider.detach()
        assert editor.candidates(0, ["n"]) == []

    @pytest.mark.asyncio
    async def test_filesystem_error_type(self, filesystem: MemoryFileSystem) -> None:
        with pytest.raises(FileSystemError):
            await filesystem.list_directory("/nowhere")
