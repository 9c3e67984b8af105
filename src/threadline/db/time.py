"""Time utilities for database models."""

from datetime import UTC, datetime, timedelta


def utcnow() -> datetime:
    """Return the current UTC time as a naive datetime.

    Stored timestamps are naive UTC so values read back from any backend
    compare cleanly with freshly created ones.
    """
    return datetime.now(UTC).replace(tzinfo=None)


def hours_before(moment: datetime, hours: float) -> datetime:
    """Return the instant ``hours`` before ``moment``."""
    return moment - timedelta(hours=hours)
