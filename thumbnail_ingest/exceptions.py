# thumbnail_ingest/exceptions.py
"""
Pipeline exceptions.

- SourceError aborts a pass before any row is processed.
- FetchError is per row; the batch processor records it in the failure
  ledger and never lets it escape.

Store failures live in ``database.exceptions`` next to the operations that
raise them.
"""

from typing import Any, Dict, Optional


class IngestError(Exception):
    """Base exception for all pipeline failures outside the database layer."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class SourceError(IngestError):
    """The input source is missing, oversized, empty or lacks required columns."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.path = path

    def __str__(self):
        if self.path:
            return f"{super().__str__()} ({self.path})"
        return super().__str__()


class FetchError(IngestError):
    """Download, decode or resize of one record's image failed."""

    def __init__(
        self,
        record_id: str,
        message: str,
        url: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            f"Failed to process thumbnail for ID {record_id}: {message}", details
        )
        self.record_id = record_id
        self.reason = message
        self.url = url
