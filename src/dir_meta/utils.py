"""Size and time formatting helpers."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_SIZE_UNITS = ["KB", "MB", "GB", "TB", "PB"]


@dataclass(frozen=True)
class DateTimeString:
    """A date and a time rendered as separate human-readable strings."""
    date: str
    time: str

    def __str__(self) -> str:
        return f"{self.date} {self.time}"


def format_bytes(size: int) -> str:
    """
    Format a byte count as a human-readable string.

    Args:
        size: Number of bytes

    Returns:
        Formatted string like "512 B", "1.5 KB" or "2.00 GB"
    """
    if size < 1024:
        return f"{size} B"

    value = float(size)
    for unit in _SIZE_UNITS:
        value /= 1024
        if value < 1024 or unit == _SIZE_UNITS[-1]:
            break

    if unit in ("KB", "MB"):
        return f"{value:.1f} {unit}"
    return f"{value:.2f} {unit}"


def to_timestamp(seconds: float) -> datetime:
    """Convert seconds since the UNIX epoch to an aware UTC datetime."""
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def maybe_timestamp(seconds: Optional[float]) -> Optional[datetime]:
    """Like to_timestamp, but passes None through for unsupported queries."""
    if seconds is None:
        return None
    try:
        return to_timestamp(seconds)
    except (OverflowError, OSError, ValueError):
        return None


def _format_date(local: datetime) -> str:
    return f"{local:%A}, {local.day} {local:%B}, {local:%Y}"


def format_local_24h(timestamp: datetime) -> DateTimeString:
    """Render a timestamp in local time using a 24 hour clock."""
    local = timestamp.astimezone()
    return DateTimeString(date=_format_date(local), time=f"{local:%H:%M:%S}")


def format_local_12h(timestamp: datetime) -> DateTimeString:
    """Render a timestamp in local time using a 12 hour clock, e.g. ``3:07 PM``."""
    local = timestamp.astimezone()
    hour = local.hour % 12 or 12
    return DateTimeString(date=_format_date(local), time=f"{hour}:{local:%M %p}")


def duration_between(earlier: datetime, later: datetime) -> Optional[timedelta]:
    """Return ``later - earlier``, or None if ``earlier`` is after ``later``."""
    delta = later - earlier
    if delta < timedelta(0):
        return None
    return delta


def duration_since_epoch(timestamp: datetime) -> Optional[timedelta]:
    """Return the time elapsed between the UNIX epoch and ``timestamp``."""
    return duration_between(EPOCH, timestamp)


def duration_from_now(timestamp: datetime, now: Optional[datetime] = None) -> Optional[timedelta]:
    """Return the time elapsed since ``timestamp``, None for future timestamps."""
    return duration_between(timestamp, now or datetime.now(timezone.utc))


def humanize_duration(duration: timedelta) -> str:
    """
    Format a duration as a compact human-readable string.

    Args:
        duration: A non-negative duration

    Returns:
        String like "1day 2h 3m 4s 5ms", or "0s" for an empty duration
    """
    total_ms = int(duration / timedelta(milliseconds=1))
    days, remainder = divmod(total_ms, 86_400_000)
    hours, remainder = divmod(remainder, 3_600_000)
    minutes, remainder = divmod(remainder, 60_000)
    seconds, millis = divmod(remainder, 1000)

    parts = []
    if days:
        parts.append(f"{days}day" if days == 1 else f"{days}days")
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if seconds:
        parts.append(f"{seconds}s")
    if millis:
        parts.append(f"{millis}ms")

    return " ".join(parts) or "0s"


def humanize_between(earlier: datetime, later: datetime) -> Optional[str]:
    """Human-readable duration between two timestamps."""
    duration = duration_between(earlier, later)
    return humanize_duration(duration) if duration is not None else None


def humanize_since_epoch(timestamp: datetime) -> Optional[str]:
    """Human-readable duration between the UNIX epoch and ``timestamp``."""
    return humanize_between(EPOCH, timestamp)


def humanize_elapsed(timestamp: datetime, now: Optional[datetime] = None) -> Optional[str]:
    """Human-readable time passed since ``timestamp``, e.g. ``3s 120ms``."""
    duration = duration_from_now(timestamp, now)
    return humanize_duration(duration) if duration is not None else None
