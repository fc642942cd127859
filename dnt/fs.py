"""
Scoped filesystem writer.

One writer is created per build. It remembers which directories it already
created so repeated writes into the same directory issue a single mkdir.
"""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path

from .capabilities import CapabilityPolicy

logger = logging.getLogger(__name__)

BYTE_ORDER_MARK = "\ufeff"


class ScopedFileWriter:
    """Write text files, creating parent directories on demand."""

    def __init__(self, capabilities: CapabilityPolicy | None = None) -> None:
        self.capabilities = capabilities or CapabilityPolicy()
        self.created_directories: set[Path] = set()
        self.written_files: list[Path] = []

    def write(self, path: str | Path, text: str, *, write_bom: bool = False) -> Path:
        """
        Write `text` to `path`, replacing any existing file.

        Args:
            path: Destination file
            text: File content
            write_bom: Prefix the content with a byte-order mark

        Returns:
            The written path
        """
        file_path = Path(path)
        self.capabilities.check_write(file_path)

        directory = file_path.parent
        if directory not in self.created_directories:
            directory.mkdir(parents=True, exist_ok=True)
            self.created_directories.add(directory)

        if write_bom:
            text = BYTE_ORDER_MARK + text
        with open(file_path, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        self.written_files.append(file_path)
        return file_path

    def write_callback(self, file_path: str, data: str, write_byte_order_mark: bool) -> None:
        """Adapter for the compiler's write-file callback."""
        self.write(file_path, data, write_bom=write_byte_order_mark)

    async def remove(self, path: str | Path) -> None:
        """Delete the file at `path`."""
        self.capabilities.check_write(path)
        logger.debug(f"Removing {path}")
        await asyncio.to_thread(os.remove, path)
