# thumbnail_ingest/database/schema_manager.py
"""
Database schema management.

The store holds two keyed collections; both are created idempotently at
startup so a fresh database needs no separate migration step.
"""

from typing import List

import psycopg

from ..constants import FAILED_IMAGES_TABLE, IMAGES_TABLE
from .core import SyncDatabase
from .exceptions import SchemaOperationError

SCHEMA_STATEMENTS: List[str] = [
    f"""
    CREATE TABLE IF NOT EXISTS {IMAGES_TABLE} (
        id TEXT PRIMARY KEY,
        index INTEGER NOT NULL,
        thumbnail BYTEA NOT NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
    f"""
    CREATE TABLE IF NOT EXISTS {FAILED_IMAGES_TABLE} (
        id TEXT PRIMARY KEY,
        index INTEGER NOT NULL,
        url TEXT NOT NULL,
        error TEXT NOT NULL,
        attempts INTEGER NOT NULL DEFAULT 1 CHECK (attempts >= 1),
        last_attempt TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
    f"""
    CREATE INDEX IF NOT EXISTS idx_{FAILED_IMAGES_TABLE}_last_attempt
    ON {FAILED_IMAGES_TABLE} (last_attempt DESC)
    """,
]


class SchemaManager:
    """Creates the store tables when they are missing."""

    def __init__(self, db: SyncDatabase) -> None:
        self.db = db

    def ensure_schema(self) -> None:
        """
        Create the ``images`` and ``failed_images`` tables if absent.

        Raises:
            SchemaOperationError: If any statement fails
        """
        try:
            with self.db.get_connection() as conn:
                with conn.cursor() as cur:
                    for statement in SCHEMA_STATEMENTS:
                        cur.execute(statement)
        except psycopg.Error as e:
            raise SchemaOperationError(
                f"Failed to create store tables: {e}", operation="ensure_schema"
            ) from e
