# thumbnail_ingest/services/record_store.py
"""
Record Store - single seam between the pipeline and the two store collections.

Wraps the image and failure-ledger operations so the batch processor and
retry service never touch SQL or the connection pool directly. Errors are
not swallowed here: every method raises ``StoreError`` subclasses and the
caller decides whether the failure is per-row or fatal.
"""

from typing import List, Optional

from ..database.core import SyncDatabase
from ..database.failed_image_operations import SyncFailedImageOperations
from ..database.image_operations import SyncImageOperations
from ..enums import LogEmoji, LoggerName, LogSource
from ..models.image_models import FailedRecord, ImageRecord
from .logger import get_service_logger

logger = get_service_logger(LoggerName.RECORD_STORE, LogSource.DATABASE)


class RecordStore:
    """Store adapter for ``images`` and ``failed_images``."""

    def __init__(
        self,
        db: SyncDatabase,
        image_ops: Optional[SyncImageOperations] = None,
        failed_image_ops: Optional[SyncFailedImageOperations] = None,
    ) -> None:
        self.db = db
        self.image_ops = image_ops or SyncImageOperations(db)
        self.failed_image_ops = failed_image_ops or SyncFailedImageOperations(db)

    def find_image(self, record_id: str) -> Optional[ImageRecord]:
        return self.image_ops.find_image(record_id)

    def upsert_image(self, record_id: str, index: int, thumbnail: bytes) -> bool:
        """Returns True when a new record was created."""
        created = self.image_ops.upsert_image(record_id, index, thumbnail)
        logger.debug(
            f"{'Created' if created else 'Updated'} image record {record_id}",
            emoji=LogEmoji.CREATE if created else LogEmoji.UPDATE,
        )
        return created

    def delete_failure(self, record_id: str) -> bool:
        deleted = self.failed_image_ops.delete_failure(record_id)
        if deleted:
            logger.debug(
                f"Cleared failure ledger entry for {record_id}", emoji=LogEmoji.DELETE
            )
        return deleted

    def upsert_failure(
        self, record_id: str, index: int, url: str, error_message: str
    ) -> int:
        """Returns the attempt count after recording this failure."""
        return self.failed_image_ops.upsert_failure(
            record_id, index, url, error_message
        )

    def list_failures(self, max_attempts: int) -> List[FailedRecord]:
        return self.failed_image_ops.list_failures(max_attempts)

    def get_failed_images(self) -> List[FailedRecord]:
        return self.failed_image_ops.get_failed_images()

    def count_images(self) -> int:
        return self.image_ops.count_images()
