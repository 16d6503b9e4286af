"""Datetime utility functions."""

from datetime import UTC, datetime, timedelta


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


def now_millis() -> int:
    """Return current time as epoch milliseconds."""
    return int(utc_now().timestamp() * 1000)


def days_ago_millis(days: int, now: int | None = None) -> int:
    """Epoch milliseconds ``days`` days before ``now`` (defaults to current time)."""
    if now is None:
        now = now_millis()
    return now - int(timedelta(days=days).total_seconds() * 1000)
