"""Tests for the scoped filesystem writer."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from dnt import CapabilityPolicy
from dnt.errors import CapabilityDeniedError
from dnt.fs import BYTE_ORDER_MARK, ScopedFileWriter


class TestScopedFileWriter:
    """Tests for ScopedFileWriter."""

    def test_creates_parent_directories(self, tmp_path: Path) -> None:
        writer = ScopedFileWriter()
        path = writer.write(tmp_path / "a" / "b" / "c.js", "x")
        assert path.read_text() == "x"
        assert writer.written_files == [path]

    def test_creates_each_directory_once(self, tmp_path: Path) -> None:
        writer = ScopedFileWriter()
        with patch.object(Path, "mkdir", autospec=True, side_effect=Path.mkdir) as mkdir:
            writer.write(tmp_path / "esm" / "a.js", "a")
            writer.write(tmp_path / "esm" / "b.js", "b")
            writer.write(tmp_path / "umd" / "a.js", "a")
        assert mkdir.call_count == 2
        assert writer.created_directories == {tmp_path / "esm", tmp_path / "umd"}

    def test_overwrites_existing_file(self, tmp_path: Path) -> None:
        writer = ScopedFileWriter()
        writer.write(tmp_path / "a.js", "old content")
        writer.write(tmp_path / "a.js", "new")
        assert (tmp_path / "a.js").read_text() == "new"

    def test_byte_order_mark(self, tmp_path: Path) -> None:
        writer = ScopedFileWriter()
        writer.write(tmp_path / "a.js", "x", write_bom=True)
        assert (tmp_path / "a.js").read_bytes() == b"\xef\xbb\xbfx"
        assert (tmp_path / "a.js").read_text(encoding="utf-8").startswith(BYTE_ORDER_MARK)

    def test_preserves_line_endings(self, tmp_path: Path) -> None:
        writer = ScopedFileWriter()
        writer.write(tmp_path / "a.js", "a\r\nb\n")
        assert (tmp_path / "a.js").read_bytes() == b"a\r\nb\n"

    def test_write_callback(self, tmp_path: Path) -> None:
        writer = ScopedFileWriter()
        writer.write_callback(str(tmp_path / "a.d.ts"), "export {};", True)
        assert (tmp_path / "a.d.ts").read_bytes().startswith(b"\xef\xbb\xbf")

    def test_denied_write(self, tmp_path: Path) -> None:
        writer = ScopedFileWriter(CapabilityPolicy.for_output_dir(tmp_path / "npm"))
        with pytest.raises(CapabilityDeniedError):
            writer.write(tmp_path / "elsewhere.js", "x")
        assert not (tmp_path / "elsewhere.js").exists()

    @pytest.mark.asyncio
    async def test_remove(self, tmp_path: Path) -> None:
        writer = ScopedFileWriter()
        path = writer.write(tmp_path / "a.js", "x")
        await writer.remove(path)
        assert not path.exists()

    @pytest.mark.asyncio
    async def test_remove_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            await ScopedFileWriter().remove(tmp_path / "missing.js")
