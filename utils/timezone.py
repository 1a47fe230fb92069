"""UTC time helpers. Checkout timestamps are always timezone-aware UTC."""

from datetime import datetime, timezone


def now_utc() -> datetime:
    """
    Current time in UTC.

    Used for event timestamps and checkout snapshots instead of datetime.now().
    """
    return datetime.now(timezone.utc)
