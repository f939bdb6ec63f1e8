"""Filesystem access used by the traversal, in blocking and asyncio flavours."""

import asyncio
import os
from pathlib import Path
from typing import Iterator, Optional, Tuple

import aiofiles.os

from .formats import DEFAULT_SNIFF_BYTES, FileFormat, detect_format


def classify_entry(entry: os.DirEntry) -> Tuple[bool, bool]:
    """Return (is_dir, is_symlink) for a directory entry without following links."""
    return entry.is_dir(follow_symlinks=False), entry.is_symlink()


class BlockingFileSystem:
    """Filesystem calls that block the calling thread."""

    def __init__(self, sniff_bytes: int = DEFAULT_SNIFF_BYTES):
        self.sniff_bytes = sniff_bytes

    def open_dir(self, path: Path) -> Iterator[os.DirEntry]:
        return os.scandir(path)

    def next_entry(self, handle: Iterator[os.DirEntry]) -> Optional[os.DirEntry]:
        return next(handle, None)

    def close_dir(self, handle) -> None:
        handle.close()

    def classify(self, entry: os.DirEntry) -> Tuple[bool, bool]:
        return classify_entry(entry)

    def stat(self, entry: os.DirEntry) -> os.stat_result:
        return entry.stat(follow_symlinks=False)

    def detect_format(self, path: Path) -> FileFormat:
        return detect_format(path, self.sniff_bytes)


class AsyncFileSystem:
    """
    Filesystem calls that suspend the calling task instead of blocking it.

    Directory opening and stat go through aiofiles; reading entries and
    classifying them run in the default executor.
    """

    def __init__(self, sniff_bytes: int = DEFAULT_SNIFF_BYTES, offload_format_detection: bool = True):
        self.sniff_bytes = sniff_bytes
        self.offload_format_detection = offload_format_detection

    async def open_dir(self, path: Path) -> Iterator[os.DirEntry]:
        return await aiofiles.os.scandir(path)

    async def next_entry(self, handle: Iterator[os.DirEntry]) -> Optional[os.DirEntry]:
        return await asyncio.to_thread(next, handle, None)

    async def close_dir(self, handle) -> None:
        handle.close()

    async def classify(self, entry: os.DirEntry) -> Tuple[bool, bool]:
        return await asyncio.to_thread(classify_entry, entry)

    async def stat(self, entry: os.DirEntry) -> os.stat_result:
        return await aiofiles.os.stat(entry.path, follow_symlinks=False)

    async def detect_format(self, path: Path) -> FileFormat:
        if self.offload_format_detection:
            return await asyncio.to_thread(detect_format, path, self.sniff_bytes)
        return detect_format(path, self.sniff_bytes)
