"""Custom exceptions for the dir_meta package."""

from pathlib import Path
from typing import Optional

from .models import ErrorKind


class DirMetaError(Exception):
    """Base exception for all dir_meta errors."""

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.OTHER,
        path: Optional[Path] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.path = path

    @classmethod
    def from_os_error(cls, error: OSError, path: Optional[Path] = None, message: Optional[str] = None):
        """Wrap an OSError, keeping its category and the affected path."""
        if path is None and error.filename is not None:
            path = Path(error.filename)
        return cls(
            message or str(error),
            kind=ErrorKind.from_os_error(error),
            path=path,
        )


class RootOpenError(DirMetaError):
    """The root of a walk could not be opened as a directory."""
    pass


class WatchError(DirMetaError):
    """Error while setting up or running a filesystem watch."""
    pass


class PathNotSetError(WatchError):
    """A watch was started without a path."""

    def __init__(self, message: str = "The path was not found, maybe you didn't specify it"):
        super().__init__(message, kind=ErrorKind.NOT_FOUND)


class WatchRemovedError(WatchError):
    """The watch was removed by the OS (watched object deleted or unmounted)."""
    pass


class ChannelClosedError(DirMetaError):
    """The other end of a channel has been closed."""
    pass
