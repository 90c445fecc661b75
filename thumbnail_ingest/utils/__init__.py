# thumbnail_ingest/utils/__init__.py
"""Small shared helpers."""

from .chunking import chunk_rows, count_chunks
from .time_utils import ensure_utc, format_duration, utc_now

__all__ = [
    "chunk_rows",
    "count_chunks",
    "ensure_utc",
    "format_duration",
    "utc_now",
]
