"""Configuration for the dir_meta package."""

import os
from dataclasses import dataclass, field
from typing import Optional

from .formats import DEFAULT_SNIFF_BYTES
from .models import WatchMask

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _env_flag(name: str, default: bool) -> bool:
    """Read a boolean flag from the environment."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


@dataclass
class ScanConfig:
    """
    Configuration options for directory walks.

    Size tracking, time tracking and format detection are independent;
    any combination may be enabled.

    Attributes:
        track_size: Record file sizes and the total size of the tree
        track_times: Record created/accessed/modified timestamps
        detect_format: Sniff the content format of every file
        offload_format_detection: In async walks, run format detection in a
            worker thread instead of on the event loop
        format_sniff_bytes: Number of leading bytes read for format detection
    """
    track_size: bool = True
    track_times: bool = True
    detect_format: bool = True
    offload_format_detection: bool = True
    format_sniff_bytes: int = DEFAULT_SNIFF_BYTES

    @property
    def needs_stat(self) -> bool:
        """Whether entries have to be stat'ed at all."""
        return self.track_size or self.track_times

    @classmethod
    def from_env(cls, base: Optional["ScanConfig"] = None) -> "ScanConfig":
        """
        Build a config with overrides from DIR_META_* environment variables.

        Args:
            base: Config providing the values for unset variables

        Raises:
            ValueError: If a variable is set to something that is not a boolean
        """
        base = base or cls()
        return cls(
            track_size=_env_flag("DIR_META_TRACK_SIZE", base.track_size),
            track_times=_env_flag("DIR_META_TRACK_TIMES", base.track_times),
            detect_format=_env_flag("DIR_META_DETECT_FORMAT", base.detect_format),
            offload_format_detection=_env_flag(
                "DIR_META_OFFLOAD_FORMAT", base.offload_format_detection
            ),
            format_sniff_bytes=base.format_sniff_bytes,
        )


@dataclass
class WatcherConfig:
    """
    Configuration options for filesystem watches.

    Attributes:
        event_buffer_size: Bytes read from the notification subsystem at once
        default_mask: Mask used when watch() is called without one
    """
    event_buffer_size: int = 4096
    default_mask: WatchMask = field(
        default_factory=lambda: (
            WatchMask.MODIFY | WatchMask.CREATE | WatchMask.DELETE | WatchMask.DELETE_SELF
        )
    )
