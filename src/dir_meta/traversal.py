"""
Recursive directory walking.

The walk algorithm is written once, as a generator that yields the
filesystem operations it needs and receives their results (or has the
OSError thrown back into it). A blocking driver and an asyncio driver
execute those operations against BlockingFileSystem and AsyncFileSystem.
"""

import logging
import os
import stat
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Generator, List, Optional, Tuple, Union

from .config import ScanConfig
from .exceptions import RootOpenError
from .formats import FileFormat
from .fs import AsyncFileSystem, BlockingFileSystem
from .models import DirectoryMetadata, FileMetadata, TraversalError
from .utils import maybe_timestamp

logger = logging.getLogger(__name__)

_WRITE_BITS = stat.S_IWUSR | stat.S_IWGRP | stat.S_IWOTH


@dataclass(frozen=True)
class FsCall:
    """A filesystem operation requested by the walk algorithm."""
    op: str
    args: Tuple[Any, ...] = ()


WalkSteps = Generator[FsCall, Any, Any]


@dataclass
class _WalkState:
    """Accumulator shared by every level of a single walk."""
    name: str
    path: Path
    track_size: bool
    subdirectories: List[Path] = field(default_factory=list)
    files: List[FileMetadata] = field(default_factory=list)
    total_size: int = 0
    errors: List[TraversalError] = field(default_factory=list)
    open_handles: List[Any] = field(default_factory=list)

    def record_error(self, path: Path, error: OSError, message: str) -> None:
        traversal_error = TraversalError.from_os_error(path, error, message)
        self.errors.append(traversal_error)
        logger.debug(f"Recorded {traversal_error.kind.value} error: {message}")

    def close_handles(self) -> None:
        """Close listings left open by a walk that stopped early."""
        while self.open_handles:
            self.open_handles.pop().close()

    def freeze(self) -> DirectoryMetadata:
        return DirectoryMetadata(
            name=self.name,
            path=self.path,
            subdirectories=tuple(self.subdirectories),
            files=tuple(self.files),
            total_size=self.total_size if self.track_size else None,
            errors=tuple(self.errors),
        )


def _collect_file(state: _WalkState, entry: os.DirEntry, path: Path, is_symlink: bool, config: ScanConfig) -> WalkSteps:
    """Fetch the metadata of one non-directory entry, best effort."""
    size = created = accessed = modified = None
    read_only = False

    if config.needs_stat:
        try:
            st = yield FsCall("stat", (entry,))
        except OSError as error:
            logger.debug(f"Unable to access metadata of file `{path}`: {error}")
        else:
            read_only = not st.st_mode & _WRITE_BITS
            if config.track_size:
                size = st.st_size
                state.total_size += size
            if config.track_times:
                accessed = maybe_timestamp(st.st_atime)
                modified = maybe_timestamp(st.st_mtime)
                created = maybe_timestamp(getattr(st, "st_birthtime", None))

    file_format = FileFormat.UNKNOWN
    if config.detect_format:
        file_format = yield FsCall("detect_format", (path,))

    return FileMetadata(
        name=entry.name,
        path=path,
        size=size,
        created=created,
        accessed=accessed,
        modified=modified,
        read_only=read_only,
        is_symlink=is_symlink,
        format=file_format,
    )


def _walk_directory(state: _WalkState, path: Path, handle: Any, config: ScanConfig) -> WalkSteps:
    """Enumerate one opened directory, then descend into its subdirectories."""
    directories: List[Path] = []
    state.open_handles.append(handle)

    while True:
        try:
            entry = yield FsCall("next_entry", (handle,))
        except OSError as error:
            state.record_error(path, error, f"Unable to read entries of `{path}`: {error}")
            break
        if entry is None:
            break

        entry_path = Path(entry.path)
        try:
            is_dir, is_symlink = yield FsCall("classify", (entry,))
        except OSError as error:
            state.record_error(entry_path, error, f"Unable to check if `{entry_path}` is a directory")
            continue

        if is_dir:
            directories.append(entry_path)
        else:
            file_meta = yield from _collect_file(state, entry, entry_path, is_symlink, config)
            state.files.append(file_meta)

    yield FsCall("close_dir", (handle,))
    state.open_handles.remove(handle)

    for directory in directories:
        try:
            sub_handle = yield FsCall("open_dir", (directory,))
        except OSError as error:
            state.record_error(directory, error, f"Unable to read directory `{directory}`: {error.strerror or error}")
            continue
        state.subdirectories.append(directory)
        yield from _walk_directory(state, directory, sub_handle, config)


def _drive_blocking(steps: WalkSteps, fs: BlockingFileSystem) -> None:
    """Run walk steps, calling the filesystem directly."""
    result: Any = None
    failure: Optional[OSError] = None
    try:
        while True:
            try:
                call = steps.send(result) if failure is None else steps.throw(failure)
            except StopIteration:
                return
            result, failure = None, None
            try:
                result = getattr(fs, call.op)(*call.args)
            except OSError as error:
                failure = error
    finally:
        steps.close()


async def _drive_async(steps: WalkSteps, fs: AsyncFileSystem) -> None:
    """Run walk steps, awaiting every filesystem call."""
    result: Any = None
    failure: Optional[OSError] = None
    try:
        while True:
            try:
                call = steps.send(result) if failure is None else steps.throw(failure)
            except StopIteration:
                return
            result, failure = None, None
            try:
                result = await getattr(fs, call.op)(*call.args)
            except OSError as error:
                failure = error
    finally:
        steps.close()


class DirectoryWalker:
    """
    Collects the metadata of a directory tree.

    Only a failure to open the root raises; everything that goes wrong
    below the root is recorded in DirectoryMetadata.errors.
    """

    def __init__(self, config: Optional[ScanConfig] = None):
        """
        Initialize the walker.

        Args:
            config: Which metadata to collect
        """
        self.config = config or ScanConfig()

    def _new_state(self, root: Path) -> _WalkState:
        return _WalkState(
            name=DirectoryMetadata.name_for(root),
            path=root,
            track_size=self.config.track_size,
        )

    @staticmethod
    def _root_error(root: Path, error: OSError) -> RootOpenError:
        return RootOpenError.from_os_error(
            error,
            path=root,
            message=f"Unable to open directory `{root}`: {error.strerror or error}",
        )

    def _finish(self, state: _WalkState, started: float) -> DirectoryMetadata:
        result = state.freeze()
        elapsed = time.perf_counter() - started
        logger.info(
            f"Walked {result.path}: {result.file_count} files, "
            f"{result.directory_count} directories, {len(result.errors)} errors "
            f"in {elapsed:.3f}s"
        )
        return result

    def walk(self, root: Union[str, os.PathLike]) -> DirectoryMetadata:
        """
        Walk a directory tree, blocking the calling thread.

        Args:
            root: Directory to walk

        Returns:
            The metadata of the whole tree

        Raises:
            RootOpenError: If the root cannot be opened as a directory
        """
        root = Path(root)
        fs = BlockingFileSystem(self.config.format_sniff_bytes)
        started = time.perf_counter()

        try:
            handle = fs.open_dir(root)
        except OSError as error:
            raise self._root_error(root, error) from error

        state = self._new_state(root)
        try:
            _drive_blocking(_walk_directory(state, root, handle, self.config), fs)
        finally:
            state.close_handles()
        return self._finish(state, started)

    async def walk_async(self, root: Union[str, os.PathLike]) -> DirectoryMetadata:
        """
        Walk a directory tree without blocking the event loop.

        Sibling directories are still visited one at a time.

        Args:
            root: Directory to walk

        Returns:
            The metadata of the whole tree

        Raises:
            RootOpenError: If the root cannot be opened as a directory
        """
        root = Path(root)
        fs = AsyncFileSystem(
            self.config.format_sniff_bytes,
            offload_format_detection=self.config.offload_format_detection,
        )
        started = time.perf_counter()

        try:
            handle = await fs.open_dir(root)
        except OSError as error:
            raise self._root_error(root, error) from error

        state = self._new_state(root)
        try:
            await _drive_async(_walk_directory(state, root, handle, self.config), fs)
        finally:
            state.close_handles()
        return self._finish(state, started)


def walk(root: Union[str, os.PathLike], config: Optional[ScanConfig] = None) -> DirectoryMetadata:
    """Walk ``root`` with a blocking DirectoryWalker."""
    return DirectoryWalker(config).walk(root)


async def walk_async(root: Union[str, os.PathLike], config: Optional[ScanConfig] = None) -> DirectoryMetadata:
    """Walk ``root`` with an asyncio DirectoryWalker."""
    return await DirectoryWalker(config).walk_async(root)
