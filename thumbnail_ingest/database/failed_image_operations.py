# thumbnail_ingest/database/failed_image_operations.py
"""
Failed Image Operations - Database layer for the failure ledger.

Responsibilities:
- Atomic create-or-increment of a failure entry per id
- Removal of an entry once its id succeeds
- Retrieval of entries still eligible for retry, and of all entries for inspection
"""

from typing import Any, Dict, List

import psycopg

from ..constants import FAILED_IMAGES_TABLE
from ..models.image_models import FailedRecord
from ..utils.time_utils import ensure_utc, utc_now
from .core import SyncDatabase
from .exceptions import FailedImageOperationError


class FailedImageQueryBuilder:
    """Centralized query builder for failure ledger operations."""

    @staticmethod
    def get_base_select_fields():
        """Get standard fields for failure ledger queries."""
        return "id, index, url, error, attempts, last_attempt"

    @staticmethod
    def build_upsert_failure_query():
        """
        Single-statement read-modify-write.

        Concurrent failures for the same id serialize on the row lock taken by
        ON CONFLICT, so no increment is lost.
        """
        return f"""
            INSERT INTO {FAILED_IMAGES_TABLE} (id, index, url, error, attempts, last_attempt)
            VALUES (%s, %s, %s, %s, 1, %s)
            ON CONFLICT (id) DO UPDATE
            SET attempts = {FAILED_IMAGES_TABLE}.attempts + 1,
                index = EXCLUDED.index,
                url = EXCLUDED.url,
                error = EXCLUDED.error,
                last_attempt = EXCLUDED.last_attempt
            RETURNING attempts
        """

    @staticmethod
    def build_delete_failure_query():
        return f"DELETE FROM {FAILED_IMAGES_TABLE} WHERE id = %s"

    @staticmethod
    def build_retryable_failures_query():
        fields = FailedImageQueryBuilder.get_base_select_fields()
        return f"""
            SELECT {fields}
            FROM {FAILED_IMAGES_TABLE}
            WHERE attempts < %s
            ORDER BY last_attempt DESC
        """

    @staticmethod
    def build_all_failures_query():
        fields = FailedImageQueryBuilder.get_base_select_fields()
        return f"""
            SELECT {fields}
            FROM {FAILED_IMAGES_TABLE}
            ORDER BY last_attempt DESC
        """


def _to_failed_record(row: Dict[str, Any]) -> FailedRecord:
    data = dict(row)
    data["last_attempt"] = ensure_utc(data["last_attempt"])
    return FailedRecord(**data)


class SyncFailedImageOperations:
    """Synchronous operations on the ``failed_images`` ledger."""

    def __init__(self, db: SyncDatabase) -> None:
        """Initialize with sync database instance."""
        self.db = db

    def upsert_failure(
        self, record_id: str, index: int, url: str, error_message: str
    ) -> int:
        """
        Record a failed attempt for an id.

        Creates the entry with ``attempts = 1`` or increments an existing one,
        overwriting index, url, error and last_attempt.

        Returns:
            The attempt count after this failure
        """
        try:
            with self.db.get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        FailedImageQueryBuilder.build_upsert_failure_query(),
                        (record_id, index, url, error_message, utc_now()),
                    )
                    row = cur.fetchone()

            if row is None:
                raise ValueError("upsert returned no row")
            return int(row["attempts"])

        except (psycopg.Error, KeyError, ValueError) as e:
            raise FailedImageOperationError(
                f"Failed to record failure for {record_id}: {e}",
                operation="upsert_failure",
            ) from e

    def delete_failure(self, record_id: str) -> bool:
        """
        Remove the ledger entry for an id. No-op when there is none.

        Returns:
            True if an entry was deleted
        """
        try:
            with self.db.get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        FailedImageQueryBuilder.build_delete_failure_query(),
                        (record_id,),
                    )
                    return cur.rowcount > 0

        except psycopg.Error as e:
            raise FailedImageOperationError(
                f"Failed to delete failure for {record_id}: {e}",
                operation="delete_failure",
            ) from e

    def list_failures(self, max_attempts: int) -> List[FailedRecord]:
        """
        Entries with ``attempts < max_attempts``, most recent first.
        """
        try:
            with self.db.get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        FailedImageQueryBuilder.build_retryable_failures_query(),
                        (max_attempts,),
                    )
                    rows = cur.fetchall()
            return [_to_failed_record(row) for row in rows]

        except (psycopg.Error, KeyError, ValueError) as e:
            raise FailedImageOperationError(
                f"Failed to list retryable failures: {e}", operation="list_failures"
            ) from e

    def get_failed_images(self) -> List[FailedRecord]:
        """Every ledger entry, most recent first, including exhausted ones."""
        try:
            with self.db.get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(FailedImageQueryBuilder.build_all_failures_query())
                    rows = cur.fetchall()
            return [_to_failed_record(row) for row in rows]

        except (psycopg.Error, KeyError, ValueError) as e:
            raise FailedImageOperationError(
                f"Failed to list failures: {e}", operation="get_failed_images"
            ) from e
