# thumbnail_ingest/database/image_operations.py
"""
Image Operations - Database layer for the ``images`` collection.

Responsibilities:
- Lookup of an existing thumbnail record by id
- Create-or-update of a thumbnail record in one statement
"""

from typing import Optional

import psycopg

from ..constants import IMAGES_TABLE
from ..models.image_models import ImageRecord
from ..utils.time_utils import ensure_utc, utc_now
from .core import SyncDatabase
from .exceptions import ImageOperationError


class ImageQueryBuilder:
    """Centralized query builder for image operations."""

    @staticmethod
    def get_base_select_fields():
        """Get standard fields for image queries."""
        return "id, index, thumbnail, created_at, updated_at"

    @staticmethod
    def build_find_by_id_query():
        fields = ImageQueryBuilder.get_base_select_fields()
        return f"SELECT {fields} FROM {IMAGES_TABLE} WHERE id = %s"

    @staticmethod
    def build_upsert_query():
        """
        Insert or overwrite index + thumbnail for an id.

        ``xmax = 0`` is true only for a freshly inserted tuple, which tells the
        caller whether the record was created or updated.
        """
        return f"""
            INSERT INTO {IMAGES_TABLE} (id, index, thumbnail, created_at, updated_at)
            VALUES (%s, %s, %s, %s, %s)
            ON CONFLICT (id) DO UPDATE
            SET index = EXCLUDED.index,
                thumbnail = EXCLUDED.thumbnail,
                updated_at = EXCLUDED.updated_at
            RETURNING (xmax = 0) AS inserted
        """

    @staticmethod
    def build_count_query():
        return f"SELECT COUNT(*) AS count FROM {IMAGES_TABLE}"


class SyncImageOperations:
    """Synchronous operations on the ``images`` collection."""

    def __init__(self, db: SyncDatabase) -> None:
        """Initialize with sync database instance."""
        self.db = db

    def find_image(self, record_id: str) -> Optional[ImageRecord]:
        """
        Look up the stored thumbnail for an id.

        Args:
            record_id: Record identifier

        Returns:
            ImageRecord if one exists, None otherwise
        """
        try:
            with self.db.get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        ImageQueryBuilder.build_find_by_id_query(), (record_id,)
                    )
                    row = cur.fetchone()

            if not row:
                return None
            data = dict(row)
            data["thumbnail"] = bytes(data["thumbnail"])
            data["created_at"] = ensure_utc(data.get("created_at"))
            data["updated_at"] = ensure_utc(data.get("updated_at"))
            return ImageRecord(**data)

        except (psycopg.Error, KeyError, ValueError) as e:
            raise ImageOperationError(
                f"Failed to find image {record_id}: {e}", operation="find_image"
            ) from e

    def upsert_image(self, record_id: str, index: int, thumbnail: bytes) -> bool:
        """
        Create the record, or overwrite index and thumbnail if it exists.

        Args:
            record_id: Record identifier
            index: Display order
            thumbnail: Encoded thumbnail bytes

        Returns:
            True if the record was created, False if an existing one was updated
        """
        try:
            current_time = utc_now()
            with self.db.get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        ImageQueryBuilder.build_upsert_query(),
                        (record_id, index, thumbnail, current_time, current_time),
                    )
                    row = cur.fetchone()

            if row is None:
                raise ValueError("upsert returned no row")
            return bool(row["inserted"])

        except (psycopg.Error, KeyError, ValueError) as e:
            raise ImageOperationError(
                f"Failed to upsert image {record_id}: {e}", operation="upsert_image"
            ) from e

    def count_images(self) -> int:
        """Total number of stored thumbnails."""
        try:
            with self.db.get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(ImageQueryBuilder.build_count_query())
                    row = cur.fetchone()
            return int(row["count"]) if row else 0

        except (psycopg.Error, KeyError, ValueError) as e:
            raise ImageOperationError(
                f"Failed to count images: {e}", operation="count_images"
            ) from e
