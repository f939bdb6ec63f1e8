"""Tests for config module."""

import pytest

from dir_meta.config import ScanConfig, WatcherConfig
from dir_meta.formats import DEFAULT_SNIFF_BYTES
from dir_meta.models import WatchMask


class TestScanConfig:
    """Tests for ScanConfig class."""

    def test_default_values(self):
        config = ScanConfig()
        assert config.track_size is True
        assert config.track_times is True
        assert config.detect_format is True
        assert config.offload_format_detection is True
        assert config.format_sniff_bytes == DEFAULT_SNIFF_BYTES

    def test_needs_stat(self):
        assert ScanConfig().needs_stat
        assert ScanConfig(track_size=False).needs_stat
        assert not ScanConfig(track_size=False, track_times=False).needs_stat

    def test_from_env_overrides(self, monkeypatch):
        monkeypatch.setenv("DIR_META_TRACK_SIZE", "false")
        monkeypatch.setenv("DIR_META_DETECT_FORMAT", "0")
        config = ScanConfig.from_env()
        assert config.track_size is False
        assert config.detect_format is False
        assert config.track_times is True

    def test_from_env_keeps_base(self, monkeypatch):
        monkeypatch.delenv("DIR_META_TRACK_TIMES", raising=False)
        monkeypatch.setenv("DIR_META_OFFLOAD_FORMAT", "Yes")
        base = ScanConfig(track_times=False, offload_format_detection=False, format_sniff_bytes=64)
        config = ScanConfig.from_env(base)
        assert config.track_times is False
        assert config.offload_format_detection is True
        assert config.format_sniff_bytes == 64

    def test_from_env_rejects_garbage(self, monkeypatch):
        monkeypatch.setenv("DIR_META_TRACK_SIZE", "maybe")
        with pytest.raises(ValueError, match="DIR_META_TRACK_SIZE"):
            ScanConfig.from_env()


class TestWatcherConfig:
    """Tests for WatcherConfig class."""

    def test_default_values(self):
        config = WatcherConfig()
        assert config.event_buffer_size == 4096
        assert config.default_mask == WatchMask.MODIFY | WatchMask.CREATE | WatchMask.DELETE | WatchMask.DELETE_SELF

    def test_custom_values(self):
        config = WatcherConfig(event_buffer_size=1024, default_mask=WatchMask.CREATE)
        assert config.event_buffer_size == 1024
        assert config.default_mask == WatchMask.CREATE
