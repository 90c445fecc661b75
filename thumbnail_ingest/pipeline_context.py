# thumbnail_ingest/pipeline_context.py
"""
Pipeline Context - owns everything one run needs.

Settings, the connection pool and the pipeline components are built once on
entry and released on exit, whatever way the block is left:

    with PipelineContext(settings) as ctx:
        result = ctx.run_pass()
        retried = ctx.run_retry()
"""

from pathlib import Path
from typing import List, Optional, Sequence, Union

from .config import Settings
from .database import SchemaManager, StoreError, SyncDatabase
from .enums import LogEmoji, LoggerName, LogLevel, LogSource
from .models.image_models import FailedRecord, InputRow, ProcessingResult
from .services.batch_processor import BatchProcessor, ProgressCallback
from .services.logger import get_service_logger
from .services.record_store import RecordStore
from .services.retry_service import RetryService
from .services.row_source import CsvRowSource
from .services.thumbnail_pipeline import ThumbnailFetcher, create_thumbnail_fetcher

logger = get_service_logger(LoggerName.PIPELINE_CONTEXT, LogSource.SYSTEM)


class PipelineContext:
    """Scoped acquisition of the store pool and pipeline components."""

    def __init__(
        self,
        settings: Settings,
        db: Optional[SyncDatabase] = None,
        fetcher: Optional[ThumbnailFetcher] = None,
    ):
        """
        Args:
            settings: Immutable run configuration
            db: Database to use instead of one built from ``settings``
            fetcher: Fetcher to use instead of one built from ``settings``
        """
        self.settings = settings
        self.db = db or SyncDatabase(
            settings.database_url,
            pool_size=settings.db_pool_size,
            pool_timeout=settings.db_pool_timeout,
        )
        self.fetcher = fetcher or create_thumbnail_fetcher(settings)
        self.record_store = RecordStore(self.db)
        self.batch_processor = BatchProcessor(
            self.record_store,
            self.fetcher,
            batch_size=settings.batch_size,
            max_workers=settings.max_workers,
        )
        self.retry_service = RetryService(self.record_store, self.batch_processor)

    def __enter__(self) -> "PipelineContext":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def open(self) -> None:
        """
        Open the pool and make sure the store tables exist.

        Raises:
            StoreConnectionError: If the store cannot be reached
            SchemaOperationError: If the tables cannot be created
        """
        self.db.initialize()
        try:
            SchemaManager(self.db).ensure_schema()
        except Exception:
            self.close()
            raise
        logger.info("Connected to image store", emoji=LogEmoji.CONNECTION)

    def close(self) -> None:
        """Release the pool and HTTP sessions. Safe to call more than once."""
        was_open = self.db.is_initialized
        if was_open:
            logger.debug("Store pool statistics", extra_context=self.db.get_pool_stats())
        self.fetcher.close()
        self.db.close()
        if was_open:
            logger.info("Disconnected from image store", emoji=LogEmoji.DISCONNECTED)

    def request_stop(self) -> None:
        """Stop the running pass before its next chunk."""
        self.batch_processor.request_stop()

    def read_rows(self, csv_path: Optional[Union[str, Path]] = None) -> List[InputRow]:
        source = CsvRowSource(
            csv_path or self.settings.csv_path,
            max_file_size=self.settings.max_file_size,
        )
        return source.read()

    def run_pass(
        self,
        rows: Optional[Sequence[InputRow]] = None,
        csv_path: Optional[Union[str, Path]] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> ProcessingResult:
        """
        Run one ingestion pass.

        Args:
            rows: Rows to process; read from the CSV when omitted
            csv_path: CSV to read instead of ``settings.csv_path``
            progress_callback: Called with a ChunkProgress after every chunk

        Raises:
            SourceError: If the CSV cannot be read (nothing is processed)
        """
        if rows is None:
            rows = self.read_rows(csv_path)
        result = self.batch_processor.process_images(rows, progress_callback)
        self._log_store_size()
        return result

    def _log_store_size(self) -> None:
        if self.settings.log_level != LogLevel.DEBUG:
            return
        try:
            count = self.record_store.count_images()
        except StoreError as e:
            logger.warning("Could not count stored thumbnails", exception=e)
            return
        logger.debug(f"Store now holds {count} thumbnails", emoji=LogEmoji.DATABASE)

    def run_retry(
        self,
        max_attempts: Optional[int] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> ProcessingResult:
        """Retry ledger entries below ``max_attempts`` (defaults to settings)."""
        if max_attempts is None:
            max_attempts = self.settings.max_retry_attempts
        return self.retry_service.retry_failed(max_attempts, progress_callback)

    def list_failures(self, max_attempts: Optional[int] = None) -> List[FailedRecord]:
        """Ledger entries, most recent first; all of them when no cutoff is given."""
        if max_attempts is None:
            return self.record_store.get_failed_images()
        return self.record_store.list_failures(max_attempts)
