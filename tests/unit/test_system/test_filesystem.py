"""Tests for the filesystem collaborators."""

from __future__ import annotations

from pathlib import Path

import pytest

from termhost.errors import FileSystemError
from termhost.system.filesystem import LocalFileSystem, MemoryFileSystem, normalize_path


class TestNormalizePath:
    @pytest.mark.parametrize(
        ("path", "cwd", "expected"),
        [
            ("docs", "/Users/Public", "/Users/Public/docs"),
            ("..", "/Users/Public", "/Users"),
            ("/tmp/../etc", "/", "/etc"),
            ("//twice", "/", "/twice"),
            (".", "/", "/"),
        ],
    )
    def test_normalize(self, path: str, cwd: str, expected: str) -> None:
        assert normalize_path(path, cwd) == expected


class TestMemoryFileSystem:
    @pytest.mark.asyncio
    async def test_listing(self, filesystem: MemoryFileSystem) -> None:
        assert await filesystem.list_directory("/Users") == ["Public"]
        assert await filesystem.list_directory("/Users/Public/docs") == ["report.txt"]

    @pytest.mark.asyncio
    async def test_is_directory(self, filesystem: MemoryFileSystem) -> None:
        assert await filesystem.is_directory("/Users/Public/docs")
        assert not await filesystem.is_directory("/Users/Public/notes.txt")

    @pytest.mark.asyncio
    async def test_listing_a_file_fails(self, filesystem: MemoryFileSystem) -> None:
        with pytest.raises(FileSystemError) as exc_info:
            await filesystem.list_directory("/Users/Public/notes.txt")
        assert exc_info.value.path == "/Users/Public/notes.txt"

    def test_file_over_directory_rejected(self, filesystem: MemoryFileSystem) -> None:
        with pytest.raises(FileSystemError):
            filesystem.add_file("/Users/Public/docs")


class TestLocalFileSystem:
    @pytest.mark.asyncio
    async def test_lists_host_directory(self, tmp_path: Path) -> None:
        (tmp_path / "b.txt").write_text("b")
        (tmp_path / "a").mkdir()
        fs = LocalFileSystem(tmp_path)
        assert await fs.list_directory("/") == ["a", "b.txt"]
        assert await fs.is_directory("/a")
        assert not await fs.is_directory("/b.txt")

    @pytest.mark.asyncio
    async def test_missing_directory(self, tmp_path: Path) -> None:
        fs = LocalFileSystem(tmp_path)
        with pytest.raises(FileSystemError):
            await fs.list_directory("/missing")

    @pytest.mark.asyncio
    async def test_root_cannot_be_escaped(self, tmp_path: Path) -> None:
        fs = LocalFileSystem(tmp_path / "root")
        (tmp_path / "root").mkdir()
        assert await fs.list_directory("/../..") == []
