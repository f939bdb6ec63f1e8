"""
Directory Metadata Package

Recursively collects the metadata of a directory tree and watches paths
for filesystem changes.

Features:
- Blocking and asyncio walks sharing one traversal algorithm
- File sizes, timestamps, read-only and symlink flags, content formats
- Per-entry failures recorded instead of aborting the walk
- Human readable sizes, dates and elapsed times
- inotify watches delivering normalized events over a channel
"""

from .models import (
    ErrorKind,
    TraversalError,
    FileMetadata,
    DirectoryMetadata,
    WatchMask,
    WatcherEvent,
    RawEvent,
    WatcherOutcome,
    translate_mask,
)

from .formats import FileFormat, detect_format

from .config import ScanConfig, WatcherConfig

from .exceptions import (
    DirMetaError,
    RootOpenError,
    WatchError,
    PathNotSetError,
    WatchRemovedError,
    ChannelClosedError,
)

from .channel import Sender, Receiver, channel
from .traversal import DirectoryWalker, walk, walk_async
from .fs_watcher import InotifyBackend, Watcher


__all__ = [
    # Models
    "ErrorKind",
    "TraversalError",
    "FileMetadata",
    "DirectoryMetadata",
    "WatchMask",
    "WatcherEvent",
    "RawEvent",
    "WatcherOutcome",
    "translate_mask",
    # Formats
    "FileFormat",
    "detect_format",
    # Config
    "ScanConfig",
    "WatcherConfig",
    # Exceptions
    "DirMetaError",
    "RootOpenError",
    "WatchError",
    "PathNotSetError",
    "WatchRemovedError",
    "ChannelClosedError",
    # Channel
    "Sender",
    "Receiver",
    "channel",
    # Traversal
    "DirectoryWalker",
    "walk",
    "walk_async",
    # Watching
    "InotifyBackend",
    "Watcher",
]

__version__ = "0.6.0"
