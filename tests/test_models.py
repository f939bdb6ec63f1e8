"""Tests for data models."""

import errno
from datetime import timedelta
from pathlib import Path

import pytest

from dir_meta.formats import FileFormat
from dir_meta.models import (
    IN_IGNORED,
    IN_ISDIR,
    IN_Q_OVERFLOW,
    IN_UNMOUNT,
    DirectoryMetadata,
    ErrorKind,
    FileMetadata,
    RawEvent,
    TraversalError,
    WatcherEvent,
    WatcherOutcome,
    WatchMask,
    translate_mask,
)
from dir_meta.utils import EPOCH


class TestErrorKind:
    """Tests for ErrorKind mapping."""

    def test_from_errno(self):
        assert ErrorKind.from_errno(errno.ENOENT) is ErrorKind.NOT_FOUND
        assert ErrorKind.from_errno(errno.EACCES) is ErrorKind.PERMISSION_DENIED
        assert ErrorKind.from_errno(errno.ENOTDIR) is ErrorKind.NOT_A_DIRECTORY

    def test_unknown_errno(self):
        assert ErrorKind.from_errno(None) is ErrorKind.OTHER
        assert ErrorKind.from_errno(-1) is ErrorKind.OTHER

    def test_from_os_error(self):
        error = PermissionError(errno.EACCES, "Permission denied")
        assert ErrorKind.from_os_error(error) is ErrorKind.PERMISSION_DENIED


class TestTraversalError:
    """Tests for TraversalError."""

    def test_from_os_error(self):
        error = FileNotFoundError(errno.ENOENT, "No such file or directory")
        traversal_error = TraversalError.from_os_error(Path("/tmp/x"), error, "Unable to read `/tmp/x`")
        assert traversal_error.kind is ErrorKind.NOT_FOUND
        assert traversal_error.message == "Unable to read `/tmp/x`"

    def test_to_dict(self):
        traversal_error = TraversalError(Path("/tmp/x"), ErrorKind.OTHER, "boom")
        assert traversal_error.to_dict() == {"path": "/tmp/x", "kind": "other", "message": "boom"}


class TestFileMetadata:
    """Tests for FileMetadata accessors."""

    def test_human_size(self):
        assert FileMetadata(name="a", path=Path("a"), size=1536).human_size() == "1.5 KB"

    def test_human_size_without_size(self):
        assert FileMetadata(name="a", path=Path("a")).human_size() == "0 B"

    def test_time_accessors_absent(self):
        file = FileMetadata(name="a", path=Path("a"))
        assert file.created_24hr() is None
        assert file.accessed_am_pm() is None
        assert file.modified_elapsed_human() is None

    def test_time_accessors_present(self):
        modified = EPOCH + timedelta(days=365)
        file = FileMetadata(name="a", path=Path("a"), modified=modified, accessed=modified)
        local = modified.astimezone()
        assert file.modified_24hr().time == f"{local:%H:%M:%S}"
        assert file.accessed_am_pm().date == file.accessed_24hr().date
        assert "days" in file.modified_elapsed_human()

    def test_to_dict(self):
        file = FileMetadata(
            name="a.txt",
            path=Path("root/a.txt"),
            size=5,
            modified=EPOCH,
            format=FileFormat.PLAIN_TEXT,
        )
        data = file.to_dict()
        assert data["path"] == "root/a.txt"
        assert data["size"] == 5
        assert data["modified"] == "1970-01-01T00:00:00+00:00"
        assert data["created"] is None
        assert data["format"] == "PLAIN_TEXT"


class TestDirectoryMetadata:
    """Tests for DirectoryMetadata lookups."""

    def _tree(self):
        return DirectoryMetadata(
            name="root",
            path=Path("root"),
            subdirectories=(Path("root/sub"),),
            files=(
                FileMetadata(name="a.txt", path=Path("root/a.txt"), size=5),
                FileMetadata(name="a.txt", path=Path("root/sub/a.txt"), size=10),
                FileMetadata(name="b.txt", path=Path("root/sub/b.txt"), size=1),
            ),
            total_size=16,
        )

    def test_counts(self):
        tree = self._tree()
        assert tree.file_count == 3
        assert tree.directory_count == 1
        assert not tree.has_errors

    def test_find_by_name_returns_all_matches(self):
        matches = self._tree().find_by_name("a.txt")
        assert [m.path for m in matches] == [Path("root/a.txt"), Path("root/sub/a.txt")]

    def test_find_by_name_no_match(self):
        assert self._tree().find_by_name("missing") == []

    def test_find_by_path(self):
        tree = self._tree()
        assert tree.find_by_path("root/sub/b.txt").size == 1
        assert tree.find_by_path(Path("root/a.txt")).size == 5
        assert tree.find_by_path("root/nope") is None

    def test_human_size(self):
        assert self._tree().human_size() == "16 B"
        assert DirectoryMetadata(name="x", path=Path("x")).human_size() == "0 B"

    def test_name_for(self):
        assert DirectoryMetadata.name_for(Path("/tmp/stuff")) == "stuff"
        assert DirectoryMetadata.name_for(Path("/")) == "/"

    def test_to_dict(self):
        data = self._tree().to_dict()
        assert data["subdirectories"] == ["root/sub"]
        assert len(data["files"]) == 3
        assert data["total_size"] == 16
        assert data["errors"] == []


class TestWatchMask:
    """Tests for WatchMask parsing."""

    def test_parse(self):
        assert WatchMask.parse("create,delete") == WatchMask.CREATE | WatchMask.DELETE

    def test_parse_tolerates_case_and_spaces(self):
        assert WatchMask.parse(" Modify , move-self") == WatchMask.MODIFY | WatchMask.MOVE_SELF

    def test_parse_composite(self):
        assert WatchMask.parse("move") == WatchMask.MOVED_FROM | WatchMask.MOVED_TO

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="bogus"):
            WatchMask.parse("create,bogus")

    def test_inotify_values(self):
        assert int(WatchMask.CREATE) == 0x100
        assert int(WatchMask.DELETE_SELF) == 0x400


class TestTranslateMask:
    """Tests for raw mask translation."""

    SINGLE_BITS = [
        (WatchMask.ACCESS, WatcherEvent.ACCESS),
        (WatchMask.MODIFY, WatcherEvent.MODIFY),
        (WatchMask.ATTRIB, WatcherEvent.ATTRIBUTE_CHANGE),
        (WatchMask.CLOSE_WRITE, WatcherEvent.CLOSE_WRITE),
        (WatchMask.CLOSE_NOWRITE, WatcherEvent.CLOSE_NO_WRITE),
        (WatchMask.OPEN, WatcherEvent.OPEN),
        (WatchMask.MOVED_FROM, WatcherEvent.MOVED_FROM),
        (WatchMask.MOVED_TO, WatcherEvent.MOVED_TO),
        (WatchMask.CREATE, WatcherEvent.CREATE),
        (WatchMask.DELETE, WatcherEvent.DELETE),
        (WatchMask.DELETE_SELF, WatcherEvent.DELETE_SELF),
        (WatchMask.MOVE_SELF, WatcherEvent.MOVE_SELF),
        (IN_IGNORED, WatcherEvent.WATCH_REMOVED),
        (IN_Q_OVERFLOW, WatcherEvent.QUEUE_OVERFLOW),
        (IN_UNMOUNT, WatcherEvent.UNMOUNTED),
    ]

    @pytest.mark.parametrize("bit,expected", SINGLE_BITS)
    def test_single_bits(self, bit, expected):
        assert translate_mask(int(bit)) is expected

    @pytest.mark.parametrize("bit,expected", SINGLE_BITS)
    def test_single_bits_on_directories(self, bit, expected):
        assert translate_mask(int(bit) | IN_ISDIR) is expected

    def test_bare_directory_flag(self):
        assert translate_mask(IN_ISDIR) is WatcherEvent.IS_DIRECTORY

    @pytest.mark.parametrize("mask", [0, 0x10000000, int(WatchMask.CREATE | WatchMask.DELETE), 0xFFFFFFFF])
    def test_unsupported(self, mask):
        assert translate_mask(mask) is WatcherEvent.UNSUPPORTED


class TestWatcherOutcome:
    """Tests for WatcherOutcome normalization."""

    def test_from_raw(self):
        outcome = WatcherOutcome.from_raw(RawEvent(wd=1, mask=int(WatchMask.CREATE), cookie=0, name=b"x"))
        assert outcome == WatcherOutcome(watch_id=1, event_kind=WatcherEvent.CREATE, name="x")

    def test_from_raw_directory(self):
        outcome = WatcherOutcome.from_raw(RawEvent(wd=1, mask=int(WatchMask.DELETE) | IN_ISDIR, name=b"d"))
        assert outcome.event_kind is WatcherEvent.DELETE
        assert outcome.is_directory

    def test_from_raw_without_name(self):
        outcome = WatcherOutcome.from_raw(RawEvent(wd=2, mask=int(WatchMask.DELETE_SELF)))
        assert outcome.name is None

    def test_cookie_preserved(self):
        outcome = WatcherOutcome.from_raw(RawEvent(wd=1, mask=int(WatchMask.MOVED_FROM), cookie=42, name=b"old"))
        assert outcome.cookie == 42

    def test_to_dict(self):
        outcome = WatcherOutcome(watch_id=1, event_kind=WatcherEvent.MODIFY, name="f")
        assert outcome.to_dict() == {
            "watch_id": 1,
            "event_kind": "modify",
            "cookie": 0,
            "name": "f",
            "is_directory": False,
        }
