# thumbnail_ingest/services/retry_service.py
"""
Retry Service - re-runs failure ledger entries below the attempt cutoff.

Entries that reached ``max_attempts`` are left in the ledger for inspection
and are never picked up again automatically.
"""

from typing import Optional

from ..constants import DEFAULT_MAX_RETRY_ATTEMPTS
from ..enums import LogEmoji, LoggerName, LogSource
from ..models.image_models import ProcessingResult
from .batch_processor import BatchProcessor, ProgressCallback
from .logger import get_service_logger
from .record_store import RecordStore

logger = get_service_logger(LoggerName.RETRY_SERVICE, LogSource.PIPELINE)


class RetryService:
    def __init__(self, record_store: RecordStore, batch_processor: BatchProcessor):
        self.record_store = record_store
        self.batch_processor = batch_processor

    def retry_failed(
        self,
        max_attempts: int = DEFAULT_MAX_RETRY_ATTEMPTS,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> ProcessingResult:
        """
        Retry every ledger entry with ``attempts < max_attempts``.

        Args:
            max_attempts: Attempt cutoff; entries at or above it are skipped
            progress_callback: Forwarded to the batch processor

        Returns:
            ProcessingResult of the retry pass (zero result when nothing is
            eligible)
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        failures = self.record_store.list_failures(max_attempts)
        if not failures:
            logger.info("No failed images to retry", emoji=LogEmoji.RETRY)
            return ProcessingResult.empty()

        logger.info(
            f"Retrying {len(failures)} failed images (max_attempts={max_attempts})",
            extra_context={"count": len(failures), "max_attempts": max_attempts},
            emoji=LogEmoji.RETRY,
        )
        rows = [failure.to_input_row() for failure in failures]
        return self.batch_processor.process_images(rows, progress_callback)

