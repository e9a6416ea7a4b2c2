"""Tests for the LineEditor addon."""

from __future__ import annotations

import asyncio

import pytest

from termhost.display.buffer import BufferDisplay
from termhost.editor.line_editor import LineEditor
from termhost.errors import EditorError, ReadAborted


@pytest.fixture
def display(opened_display: tuple[BufferDisplay, LineEditor]) -> BufferDisplay:
    return opened_display[0]


@pytest.fixture
def editor(opened_display: tuple[BufferDisplay, LineEditor]) -> LineEditor:
    return opened_display[1]


async def start_read(editor: LineEditor, prompt: str = "$ ") -> asyncio.Task[str]:
    task = asyncio.create_task(editor.read(prompt))
    await editor.wait_until_reading()
    return task


class TestLineEditorReading:
    """Test the read primitive and keystroke handling."""

    @pytest.mark.asyncio
    async def test_read_returns_submitted_line(self, display: BufferDisplay, editor: LineEditor) -> None:
        task = await start_read(editor)
        display.input("ls -l\r")
        assert await task == "ls -l"
        assert editor.history.entries == ["ls -l"]
        assert display.lines[0] == "$ ls -l"

    @pytest.mark.asyncio
    async def test_second_concurrent_read_rejected(self, editor: LineEditor) -> None:
        task = await start_read(editor)
        with pytest.raises(EditorError):
            await editor.read("$ ")
        editor.abort_read()
        with pytest.raises(ReadAborted):
            await task

    @pytest.mark.asyncio
    async def test_type_ahead_is_kept_for_next_read(self, display: BufferDisplay, editor: LineEditor) -> None:
        display.input("first\rsecond\r")
        assert await editor.read("$ ") == "first"
        assert await editor.read("$ ") == "second"

    @pytest.mark.asyncio
    async def test_editing_keys(self, display: BufferDisplay, editor: LineEditor) -> None:
        task = await start_read(editor)
        display.input("helo")
        display.input("\x1b[D")
        display.input("l")
        display.input("\x1b[F!\x7f")
        display.input("\x1b[Hsay ")
        display.input("\r")
        assert await task == "say hello"

    @pytest.mark.asyncio
    async def test_history_navigation(self, display: BufferDisplay, editor: LineEditor) -> None:
        display.input("one\rtwo\r")
        await editor.read("$ ")
        await editor.read("$ ")
        task = await start_read(editor)
        display.input("\x1b[A\x1b[A")
        assert editor.input == "one"
        display.input("\x1b[B")
        assert editor.input == "two"
        display.input("\r")
        assert await task == "two"

    @pytest.mark.asyncio
    async def test_ctrl_c_abandons_line(self, display: BufferDisplay, editor: LineEditor) -> None:
        task = await start_read(editor)
        display.input("oops\x03")
        assert editor.input == ""
        assert "^C" in display.text
        display.input("ok\r")
        assert await task == "ok"

    @pytest.mark.asyncio
    async def test_dispose_aborts_pending_read(self, display: BufferDisplay, editor: LineEditor) -> None:
        task = await start_read(editor)
        display.dispose()
        with pytest.raises(ReadAborted):
            await task


class TestLineEditorOutput:
    """Test printing and cursor insertion."""

    def test_println_normalizes_newlines(self, display: BufferDisplay, editor: LineEditor) -> None:
        editor.println("a\nb\r\n\nc")
        assert display.lines == ["a", "b", "c", ""]

    def test_print_wide_uses_columns(self, display: BufferDisplay, editor: LineEditor) -> None:
        display.resize(20, 24)
        editor.print_wide(["alpha", "beta", "gamma", "delta"])
        assert display.lines[:2] == ["alpha  beta", "gamma  delta"]

    @pytest.mark.asyncio
    async def test_cursor_insert_while_reading(self, display: BufferDisplay, editor: LineEditor) -> None:
        task = await start_read(editor)
        display.input("cat ")
        editor.handle_cursor_insert('"my notes.txt"')
        assert editor.input == 'cat "my notes.txt"'
        display.input("\r")
        assert await task == 'cat "my notes.txt"'

    @pytest.mark.asyncio
    async def test_cursor_insert_between_reads_is_deferred(self, editor: LineEditor) -> None:
        editor.handle_cursor_insert("later")
        task = await start_read(editor)
        assert editor.input == "later"
        editor.abort_read()
        with pytest.raises(ReadAborted):
            await task


class TestLineEditorAutocomplete:
    """Test tab completion through autocomplete handlers."""

    @pytest.mark.asyncio
    async def test_single_candidate_completes(self, display: BufferDisplay, editor: LineEditor) -> None:
        editor.add_autocomplete_handler(lambda index, tokens: ["notes.txt", "docs"])
        task = await start_read(editor)
        display.input("cat no\t")
        assert editor.input == "cat notes.txt "
        editor.abort_read()
        with pytest.raises(ReadAborted):
            await task

    @pytest.mark.asyncio
    async def test_common_prefix_then_listing(self, display: BufferDisplay, editor: LineEditor) -> None:
        editor.add_autocomplete_handler(lambda index, tokens: ["notes.txt", "names.md"])
        task = await start_read(editor)
        display.input("cat n\t")
        assert editor.input == "cat n"
        assert "notes.txt" in display.text
        assert "names.md" in display.text
        editor.abort_read()
        with pytest.raises(ReadAborted):
            await task

    def test_handler_arguments_and_removal(self, editor: LineEditor) -> None:
        def handler(index: int, tokens: list[str], extra: str) -> list[str]:
            return [extra]

        editor.add_autocomplete_handler(handler, "extra-value")
        assert editor.candidates(0, ["ex"]) == ["extra-value"]
        editor.remove_autocomplete_handler(handler)
        assert editor.candidates(0, ["ex"]) == []
