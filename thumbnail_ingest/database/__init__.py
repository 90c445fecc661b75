"""
Database package.

Composition-based operations over a single connection pool per run.

Usage:
    from thumbnail_ingest.database import SyncDatabase, SyncImageOperations

    db = SyncDatabase(settings.database_url)
    db.initialize()
    image_ops = SyncImageOperations(db)
"""

from .core import SyncDatabase
from .exceptions import (
    DatabaseOperationError,
    FailedImageOperationError,
    ImageOperationError,
    SchemaOperationError,
    StoreConnectionError,
    StoreError,
)
from .failed_image_operations import SyncFailedImageOperations
from .image_operations import SyncImageOperations
from .schema_manager import SchemaManager

__all__ = [
    "SyncDatabase",
    "SyncImageOperations",
    "SyncFailedImageOperations",
    "SchemaManager",
    "DatabaseOperationError",
    "StoreError",
    "StoreConnectionError",
    "SchemaOperationError",
    "ImageOperationError",
    "FailedImageOperationError",
]
