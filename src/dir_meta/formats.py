"""Content-based file format detection on top of libmagic."""

import os
import stat
from enum import Enum
from pathlib import Path
from typing import Optional, Union

import magic

DEFAULT_SNIFF_BYTES = 8192

# Opening a FIFO without O_NONBLOCK waits for a writer
_OPEN_FLAGS = os.O_RDONLY | getattr(os, "O_NONBLOCK", 0)


class FileFormat(Enum):
    """Formats recognised by detect_format, valued by media type."""
    EMPTY = "application/x-empty"
    PLAIN_TEXT = "text/plain"
    PNG = "image/png"
    JPEG = "image/jpeg"
    GIF = "image/gif"
    BMP = "image/bmp"
    WEBP = "image/webp"
    PDF = "application/pdf"
    ZIP = "application/zip"
    GZIP = "application/gzip"
    BZIP2 = "application/x-bzip2"
    XZ = "application/x-xz"
    SEVEN_ZIP = "application/x-7z-compressed"
    TAR = "application/x-tar"
    ELF = "application/x-executable"
    PE = "application/vnd.microsoft.portable-executable"
    MP3 = "audio/mpeg"
    FLAC = "audio/flac"
    OGG = "audio/ogg"
    WAV = "audio/wav"
    MP4 = "video/mp4"
    SQLITE = "application/vnd.sqlite3"
    UNKNOWN = "application/octet-stream"

    @property
    def media_type(self) -> str:
        return self.value


_MEDIA_TYPES = {member.value: member for member in FileFormat}

# Names older or newer libmagic releases report for the same formats
_MEDIA_TYPES.update({
    "image/x-ms-bmp": FileFormat.BMP,
    "application/x-gzip": FileFormat.GZIP,
    "application/x-sharedlib": FileFormat.ELF,
    "application/x-pie-executable": FileFormat.ELF,
    "application/x-object": FileFormat.ELF,
    "application/x-dosexec": FileFormat.PE,
    "audio/x-flac": FileFormat.FLAC,
    "application/ogg": FileFormat.OGG,
    "audio/x-wav": FileFormat.WAV,
    "application/x-sqlite3": FileFormat.SQLITE,
    "application/json": FileFormat.PLAIN_TEXT,
})


def format_for_media_type(media_type: str) -> FileFormat:
    """
    Map a media type reported by libmagic to a FileFormat.

    Text types without a member of their own count as plain text.
    """
    file_format = _MEDIA_TYPES.get(media_type)
    if file_format is not None:
        return file_format
    if media_type.startswith("text/"):
        return FileFormat.PLAIN_TEXT
    return FileFormat.UNKNOWN


def _read_head(path: Union[str, Path], sniff_bytes: int) -> Optional[bytes]:
    """Read the leading bytes of a regular file, None for any other kind of file."""
    fd = os.open(path, _OPEN_FLAGS)
    try:
        if not stat.S_ISREG(os.fstat(fd).st_mode):
            return None
        return os.read(fd, sniff_bytes)
    finally:
        os.close(fd)


def detect_format(path: Union[str, Path], sniff_bytes: int = DEFAULT_SNIFF_BYTES) -> FileFormat:
    """
    Detect the format of a file from its leading bytes.

    Only regular files are read; links are followed. Pipes, sockets and
    devices are never opened for reading.

    Args:
        path: Path to the file
        sniff_bytes: Number of leading bytes handed to libmagic

    Returns:
        The detected format, FileFormat.UNKNOWN if the file cannot be read,
        is not a regular file or is not recognised
    """
    try:
        head = _read_head(path, sniff_bytes)
    except OSError:
        return FileFormat.UNKNOWN

    if head is None:
        return FileFormat.UNKNOWN
    if not head:
        return FileFormat.EMPTY

    try:
        media_type = magic.from_buffer(head, mime=True)
    except magic.MagicException:
        return FileFormat.UNKNOWN

    return format_for_media_type(media_type)
