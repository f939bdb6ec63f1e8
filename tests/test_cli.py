"""Tests for the command line interface."""

import json

import pytest

from dir_meta.cli import main


@pytest.fixture
def tree(tmp_path):
    root = tmp_path / "root"
    (root / "sub").mkdir(parents=True)
    (root / "a.txt").write_bytes(b"12345")
    (root / "sub" / "a.txt").write_bytes(b"0123456789")
    return root


class TestScanCommand:
    """Tests for `dir-meta scan`."""

    def test_summary(self, tree, capsys):
        assert main(["scan", str(tree)]) == 0
        out = capsys.readouterr().out
        assert "=== root ===" in out
        assert "Files: 2" in out
        assert "Directories: 1" in out
        assert "Total size: 15 B" in out
        assert "Errors: 0" in out

    def test_summary_async(self, tree, capsys):
        assert main(["scan", "--async", str(tree)]) == 0
        assert "Files: 2" in capsys.readouterr().out

    def test_json(self, tree, capsys):
        assert main(["scan", "--json", "--no-times", str(tree)]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["total_size"] == 15
        assert data["subdirectories"] == [str(tree / "sub")]
        assert {f["size"] for f in data["files"]} == {5, 10}
        assert all(f["modified"] is None for f in data["files"])

    def test_no_size(self, tree, capsys):
        assert main(["scan", "--no-size", str(tree)]) == 0
        assert "Total size" not in capsys.readouterr().out

    def test_find(self, tree, capsys):
        assert main(["scan", "--find", "a.txt", str(tree)]) == 0
        out = capsys.readouterr().out
        assert str(tree / "a.txt") in out
        assert str(tree / "sub" / "a.txt") in out
        assert "Format: PLAIN_TEXT" in out

    def test_find_without_match(self, tree, capsys):
        assert main(["scan", "--find", "nothing", str(tree)]) == 0
        assert "No file named 'nothing'" in capsys.readouterr().out

    def test_missing_root(self, tmp_path):
        assert main(["scan", str(tmp_path / "missing")]) == 1

    def test_flag_wins_over_environment(self, tree, monkeypatch, capsys):
        monkeypatch.setenv("DIR_META_TRACK_SIZE", "1")
        monkeypatch.setenv("DIR_META_TRACK_TIMES", "true")
        assert main(["scan", "--json", "--no-size", "--no-times", str(tree)]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["total_size"] is None
        assert all(f["size"] is None and f["modified"] is None for f in data["files"])

    def test_environment_applies_without_flag(self, tree, monkeypatch, capsys):
        monkeypatch.setenv("DIR_META_TRACK_SIZE", "0")
        assert main(["scan", "--json", str(tree)]) == 0
        assert json.loads(capsys.readouterr().out)["total_size"] is None

    def test_bad_env_flag(self, tree, monkeypatch):
        monkeypatch.setenv("DIR_META_TRACK_SIZE", "sometimes")
        assert main(["scan", str(tree)]) == 2


class TestWatchCommand:
    """Tests for `dir-meta watch`."""

    def test_unknown_event_name(self, tmp_path):
        assert main(["watch", "--events", "create,teleport", str(tmp_path)]) == 2

    def test_missing_path(self, tmp_path):
        assert main(["watch", str(tmp_path / "missing")]) == 1

    def test_requires_subcommand(self):
        with pytest.raises(SystemExit):
            main([])
