# thumbnail_ingest/utils/time_utils.py
"""
Time utilities.

All timestamps written to the store are timezone-aware UTC values.
"""

from datetime import datetime, timezone
from typing import Optional

UTC_TIMEZONE = timezone.utc


def utc_now() -> datetime:
    """
    Get current UTC timestamp (timezone-aware).

    Returns:
        Current UTC datetime object
    """
    return datetime.now(UTC_TIMEZONE)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes coming back from the database."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC_TIMEZONE)
    return value.astimezone(UTC_TIMEZONE)


def format_duration(seconds: float) -> str:
    """Render a duration for log output, e.g. ``1m 05.2s``."""
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes, remainder = divmod(seconds, 60)
    return f"{int(minutes)}m {remainder:04.1f}s"
