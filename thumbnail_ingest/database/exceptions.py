# thumbnail_ingest/database/exceptions.py
"""
Database Operation Exceptions - Clean Error Handling Pattern

Database operations raise these exceptions and never log; the service layer
catches them and decides how to log and whether to continue.

Usage Examples:
    # In database operations file:
    try:
        cur.execute(query, params)
        return cur.fetchone()
    except (psycopg.Error, KeyError, ValueError) as e:
        raise ImageOperationError(
            "Failed to retrieve image", operation="find_image"
        ) from e

    # In service layer:
    try:
        record = self.image_ops.find_image(record_id)
    except StoreError as e:
        logger.error(f"Store error for {record_id}", exception=e)
        raise
"""

from typing import Any, Dict, Optional


class DatabaseOperationError(Exception):
    """
    Base exception for all database operation failures.

    Provides a clean interface for database errors without requiring
    logging dependencies in the database layer.
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.operation = operation
        self.details = details or {}

    def __str__(self):
        if self.operation:
            return f"{self.operation}: {super().__str__()}"
        return super().__str__()


class StoreConnectionError(DatabaseOperationError):
    """The store connection pool could not be established. Fatal to the run."""

    pass


class SchemaOperationError(DatabaseOperationError):
    """Creating or verifying the store tables failed."""

    pass


class StoreError(DatabaseOperationError):
    """A lookup or write against the store failed for a single record."""

    pass


class ImageOperationError(StoreError):
    """Image collection operation errors."""

    pass


class FailedImageOperationError(StoreError):
    """Failure ledger operation errors."""

    pass

