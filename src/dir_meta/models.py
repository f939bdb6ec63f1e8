"""Data models for the dir_meta package."""

import errno
import os
from dataclasses import dataclass
from datetime import datetime
from enum import Enum, IntFlag
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union

from .formats import FileFormat
from .utils import (
    DateTimeString,
    format_bytes,
    format_local_12h,
    format_local_24h,
    humanize_elapsed,
)


class ErrorKind(Enum):
    """Categories of I/O failure, mirroring the OS error categories."""
    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    NOT_A_DIRECTORY = "not_a_directory"
    IS_A_DIRECTORY = "is_a_directory"
    ALREADY_EXISTS = "already_exists"
    INTERRUPTED = "interrupted"
    TIMED_OUT = "timed_out"
    WOULD_BLOCK = "would_block"
    STORAGE_FULL = "storage_full"
    TOO_MANY_OPEN_FILES = "too_many_open_files"
    OTHER = "other"

    @classmethod
    def from_errno(cls, code: Optional[int]) -> "ErrorKind":
        """Map an errno value to an ErrorKind."""
        return _ERRNO_KINDS.get(code, cls.OTHER)

    @classmethod
    def from_os_error(cls, error: OSError) -> "ErrorKind":
        """Map an OSError to an ErrorKind."""
        return cls.from_errno(error.errno)


_ERRNO_KINDS = {
    errno.ENOENT: ErrorKind.NOT_FOUND,
    errno.EACCES: ErrorKind.PERMISSION_DENIED,
    errno.EPERM: ErrorKind.PERMISSION_DENIED,
    errno.ENOTDIR: ErrorKind.NOT_A_DIRECTORY,
    errno.EISDIR: ErrorKind.IS_A_DIRECTORY,
    errno.EEXIST: ErrorKind.ALREADY_EXISTS,
    errno.EINTR: ErrorKind.INTERRUPTED,
    errno.ETIMEDOUT: ErrorKind.TIMED_OUT,
    errno.EAGAIN: ErrorKind.WOULD_BLOCK,
    errno.ENOSPC: ErrorKind.STORAGE_FULL,
    errno.EMFILE: ErrorKind.TOO_MANY_OPEN_FILES,
    errno.ENFILE: ErrorKind.TOO_MANY_OPEN_FILES,
}


@dataclass(frozen=True)
class TraversalError:
    """
    An error encountered while accessing a file or sub-directory.

    Attributes:
        path: The entry, or parent directory, where the error occurred
        kind: Category of the failure
        message: Human-readable description including the path
    """
    path: Path
    kind: ErrorKind
    message: str

    @classmethod
    def from_os_error(cls, path: Path, error: OSError, message: Optional[str] = None) -> "TraversalError":
        """Build a TraversalError from an OSError raised for ``path``."""
        return cls(
            path=path,
            kind=ErrorKind.from_os_error(error),
            message=message or str(error),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "path": str(self.path),
            "kind": self.kind.value,
            "message": self.message,
        }


@dataclass(frozen=True)
class FileMetadata:
    """
    Metadata of a single file found during a walk.

    Attributes:
        name: Base name of the file
        path: Path of the file, joined onto the walked root
        size: Size in bytes, None if not tracked or stat failed
        created: Birth time, None where the platform does not report it
        accessed: Last access time
        modified: Last modification time
        read_only: Whether no write permission bit is set
        is_symlink: Whether the entry is a symbolic link
        format: Detected content format
    """
    name: str
    path: Path
    size: Optional[int] = None
    created: Optional[datetime] = None
    accessed: Optional[datetime] = None
    modified: Optional[datetime] = None
    read_only: bool = False
    is_symlink: bool = False
    format: FileFormat = FileFormat.UNKNOWN

    def human_size(self) -> str:
        """Size of the file in human readable format."""
        return format_bytes(self.size or 0)

    @staticmethod
    def _render(timestamp: Optional[datetime], formatter: Callable):
        if timestamp is None:
            return None
        return formatter(timestamp)

    def created_24hr(self) -> Optional[DateTimeString]:
        return self._render(self.created, format_local_24h)

    def created_am_pm(self) -> Optional[DateTimeString]:
        return self._render(self.created, format_local_12h)

    def created_elapsed_human(self) -> Optional[str]:
        """Time passed since the file was created, e.g. ``3s 120ms``."""
        return self._render(self.created, humanize_elapsed)

    def accessed_24hr(self) -> Optional[DateTimeString]:
        return self._render(self.accessed, format_local_24h)

    def accessed_am_pm(self) -> Optional[DateTimeString]:
        return self._render(self.accessed, format_local_12h)

    def accessed_elapsed_human(self) -> Optional[str]:
        """Time passed since the file was last accessed."""
        return self._render(self.accessed, humanize_elapsed)

    def modified_24hr(self) -> Optional[DateTimeString]:
        return self._render(self.modified, format_local_24h)

    def modified_am_pm(self) -> Optional[DateTimeString]:
        return self._render(self.modified, format_local_12h)

    def modified_elapsed_human(self) -> Optional[str]:
        """Time passed since the file was last modified."""
        return self._render(self.modified, humanize_elapsed)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        def iso(timestamp: Optional[datetime]) -> Optional[str]:
            return timestamp.isoformat() if timestamp else None

        return {
            "name": self.name,
            "path": str(self.path),
            "size": self.size,
            "created": iso(self.created),
            "accessed": iso(self.accessed),
            "modified": iso(self.modified),
            "read_only": self.read_only,
            "is_symlink": self.is_symlink,
            "format": self.format.name,
        }


@dataclass(frozen=True)
class DirectoryMetadata:
    """
    The metadata of a directory and of everything below it.

    Files and sub-directories are flattened across the whole subtree.

    Attributes:
        name: Base name of the directory
        path: Path the walk was started from
        subdirectories: Every directory discovered and opened, in discovery order
        files: Every non-directory entry discovered
        total_size: Sum of all file sizes, None if size tracking was disabled
        errors: Failures recorded during the walk
    """
    name: str
    path: Path
    subdirectories: Tuple[Path, ...] = ()
    files: Tuple[FileMetadata, ...] = ()
    total_size: Optional[int] = None
    errors: Tuple[TraversalError, ...] = ()

    @staticmethod
    def name_for(path: Path) -> str:
        """Base name for a directory path, also for paths like ``.`` or ``/``."""
        return path.name or path.resolve().name or str(path)

    @property
    def file_count(self) -> int:
        return len(self.files)

    @property
    def directory_count(self) -> int:
        return len(self.subdirectories)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def find_by_name(self, name: str) -> List[FileMetadata]:
        """
        Get all files with the given base name.

        Multiple files can share a name when they live in different
        directories, so every match is returned.
        """
        return [file for file in self.files if file.name == name]

    def find_by_path(self, path: Union[str, os.PathLike]) -> Optional[FileMetadata]:
        """Get a file by its exact path."""
        wanted = Path(path)
        for file in self.files:
            if file.path == wanted:
                return file
        return None

    def human_size(self) -> str:
        """Total size of the directory in human readable format."""
        return format_bytes(self.total_size or 0)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "path": str(self.path),
            "subdirectories": [str(directory) for directory in self.subdirectories],
            "files": [file.to_dict() for file in self.files],
            "total_size": self.total_size,
            "errors": [error.to_dict() for error in self.errors],
        }


class WatchMask(IntFlag):
    """Interest bits passed to the notification subsystem when adding a watch."""
    ACCESS = 0x00000001
    MODIFY = 0x00000002
    ATTRIB = 0x00000004
    CLOSE_WRITE = 0x00000008
    CLOSE_NOWRITE = 0x00000010
    OPEN = 0x00000020
    MOVED_FROM = 0x00000040
    MOVED_TO = 0x00000080
    CREATE = 0x00000100
    DELETE = 0x00000200
    DELETE_SELF = 0x00000400
    MOVE_SELF = 0x00000800
    ONLYDIR = 0x01000000
    DONT_FOLLOW = 0x02000000
    EXCL_UNLINK = 0x04000000
    ONESHOT = 0x80000000

    CLOSE = CLOSE_WRITE | CLOSE_NOWRITE
    MOVE = MOVED_FROM | MOVED_TO
    ALL_EVENTS = (
        ACCESS | MODIFY | ATTRIB | CLOSE_WRITE | CLOSE_NOWRITE | OPEN
        | MOVED_FROM | MOVED_TO | CREATE | DELETE | DELETE_SELF | MOVE_SELF
    )

    @classmethod
    def parse(cls, names: str) -> "WatchMask":
        """
        Build a mask from a comma separated list of names.

        Args:
            names: e.g. "create,delete" or "modify, move_self"

        Raises:
            ValueError: If a name is not a known mask bit
        """
        mask = cls(0)
        for name in names.split(","):
            name = name.strip().upper().replace("-", "_")
            if not name:
                continue
            try:
                mask |= cls[name]
            except KeyError:
                raise ValueError(f"Unknown watch mask name: {name.lower()}") from None
        return mask


# Bits only ever reported by the kernel, never requested
IN_UNMOUNT = 0x00002000
IN_Q_OVERFLOW = 0x00004000
IN_IGNORED = 0x00008000
IN_ISDIR = 0x40000000


class WatcherEvent(Enum):
    """Normalized kinds of filesystem change events."""
    ACCESS = "access"
    ATTRIBUTE_CHANGE = "attribute_change"
    CLOSE_WRITE = "close_write"
    CLOSE_NO_WRITE = "close_no_write"
    CREATE = "create"
    DELETE = "delete"
    DELETE_SELF = "delete_self"
    MODIFY = "modify"
    MOVE_SELF = "move_self"
    MOVED_FROM = "moved_from"
    MOVED_TO = "moved_to"
    OPEN = "open"
    WATCH_REMOVED = "watch_removed"
    IS_DIRECTORY = "is_directory"
    QUEUE_OVERFLOW = "queue_overflow"
    UNMOUNTED = "unmounted"
    UNSUPPORTED = "unsupported"


_EVENT_FOR_BIT = {
    WatchMask.ACCESS: WatcherEvent.ACCESS,
    WatchMask.ATTRIB: WatcherEvent.ATTRIBUTE_CHANGE,
    WatchMask.CLOSE_WRITE: WatcherEvent.CLOSE_WRITE,
    WatchMask.CLOSE_NOWRITE: WatcherEvent.CLOSE_NO_WRITE,
    WatchMask.CREATE: WatcherEvent.CREATE,
    WatchMask.DELETE: WatcherEvent.DELETE,
    WatchMask.DELETE_SELF: WatcherEvent.DELETE_SELF,
    WatchMask.MODIFY: WatcherEvent.MODIFY,
    WatchMask.MOVE_SELF: WatcherEvent.MOVE_SELF,
    WatchMask.MOVED_FROM: WatcherEvent.MOVED_FROM,
    WatchMask.MOVED_TO: WatcherEvent.MOVED_TO,
    WatchMask.OPEN: WatcherEvent.OPEN,
    IN_IGNORED: WatcherEvent.WATCH_REMOVED,
    IN_Q_OVERFLOW: WatcherEvent.QUEUE_OVERFLOW,
    IN_UNMOUNT: WatcherEvent.UNMOUNTED,
}


def translate_mask(mask: int) -> WatcherEvent:
    """
    Translate a raw event mask into a WatcherEvent.

    The directory flag is ignored unless it is the only bit set. Anything
    other than exactly one known event bit maps to UNSUPPORTED.
    """
    if mask == IN_ISDIR:
        return WatcherEvent.IS_DIRECTORY
    return _EVENT_FOR_BIT.get(mask & ~IN_ISDIR, WatcherEvent.UNSUPPORTED)


@dataclass(frozen=True)
class RawEvent:
    """
    A raw event record as read from the notification subsystem.

    Attributes:
        wd: Watch descriptor the event belongs to
        mask: Raw event bits
        cookie: Rename correlation id
        name: Child name as bytes, None when the watched object itself changed
    """
    wd: int
    mask: int
    cookie: int = 0
    name: Optional[bytes] = None


@dataclass(frozen=True)
class WatcherOutcome:
    """
    A normalized filesystem change event.

    Attributes:
        watch_id: Identifies the watch this event originates from
        event_kind: What kind of event this is
        cookie: Connects a MOVED_FROM/MOVED_TO pair belonging to one rename
        name: Name of the child the event concerns, None when the event
            concerns the watched file or directory itself
        is_directory: Whether the subject of the event is a directory
    """
    watch_id: int
    event_kind: WatcherEvent
    cookie: int = 0
    name: Optional[str] = None
    is_directory: bool = False

    @classmethod
    def from_raw(cls, event: RawEvent) -> "WatcherOutcome":
        """Normalize a raw event record."""
        return cls(
            watch_id=event.wd,
            event_kind=translate_mask(event.mask),
            cookie=event.cookie,
            name=os.fsdecode(event.name) if event.name else None,
            is_directory=bool(event.mask & IN_ISDIR),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "watch_id": self.watch_id,
            "event_kind": self.event_kind.value,
            "cookie": self.cookie,
            "name": self.name,
            "is_directory": self.is_directory,
        }
