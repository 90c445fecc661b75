# thumbnail_ingest/services/batch_processor.py
"""
Batch Processor

Runs one pass over a list of rows: chunk the rows, and for every row look up
the stored image, fetch a fresh thumbnail, upsert it and clear any failure
ledger entry. A failing row is recorded in the ledger and never aborts its
chunk or the chunks after it.

Rows inside a chunk run sequentially unless ``max_workers`` > 1, in which case
rows are grouped by id and each group is handled by a single worker thread so
two writers never race on the same id. Chunk boundaries are hard
synchronisation points; a stop request is honoured only between chunks.
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, List, Optional, Sequence

from ..enums import LogEmoji, LoggerName, LogSource, RowOutcome
from ..models.image_models import ChunkProgress, InputRow, ProcessingResult
from ..utils.chunking import chunk_rows, count_chunks
from ..utils.time_utils import format_duration
from .logger import get_service_logger
from .record_store import RecordStore
from .thumbnail_pipeline.thumbnail_fetcher import ThumbnailFetcher

logger = get_service_logger(LoggerName.BATCH_PROCESSOR, LogSource.PIPELINE)

ProgressCallback = Callable[[ChunkProgress], None]


class BatchProcessor:
    """Chunked, failure-tolerant thumbnail ingestion over a row list."""

    def __init__(
        self,
        record_store: RecordStore,
        fetcher: ThumbnailFetcher,
        batch_size: int,
        max_workers: int = 1,
    ):
        """
        Args:
            record_store: Store adapter for images and the failure ledger
            fetcher: Downloads and thumbnails a single row's image
            batch_size: Maximum rows per chunk
            max_workers: Concurrent id groups per chunk (1 = sequential)
        """
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.record_store = record_store
        self.fetcher = fetcher
        self.batch_size = batch_size
        self.max_workers = max_workers
        self._stop_event = threading.Event()

    def request_stop(self) -> None:
        """
        Ask the current pass to stop before its next chunk.

        Only sets an event, so it is safe to call from a signal handler.
        """
        self._stop_event.set()

    @property
    def stop_requested(self) -> bool:
        return self._stop_event.is_set()

    def process_images(
        self,
        rows: Sequence[InputRow],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> ProcessingResult:
        """
        Process every row in chunks of ``batch_size``.

        Args:
            rows: Validated rows, processed in input order
            progress_callback: Called with a ChunkProgress after every chunk

        Returns:
            ProcessingResult for this pass only. ``cancelled`` is set when a
            stop request cut the pass short; counts then cover the chunks
            that ran. A stop request is consumed when the pass returns.
        """
        total_rows = len(rows)
        if total_rows == 0:
            logger.info("No rows to process")
            self._stop_event.clear()
            return ProcessingResult.empty()

        total_chunks = count_chunks(total_rows, self.batch_size)
        logger.info(
            f"Processing {total_rows} rows in {total_chunks} chunks "
            f"(batch_size={self.batch_size}, workers={self.max_workers})",
            emoji=LogEmoji.PROCESSING,
        )

        started = time.monotonic()
        executor = (
            ThreadPoolExecutor(
                max_workers=self.max_workers, thread_name_prefix="thumbnail-ingest"
            )
            if self.max_workers > 1
            else None
        )
        processed = 0
        failed = 0
        cancelled = False
        try:
            for chunk_index, chunk in enumerate(
                chunk_rows(rows, self.batch_size), start=1
            ):
                if self._stop_event.is_set():
                    cancelled = True
                    break

                outcomes = self._process_chunk(chunk, executor)
                chunk_failed = outcomes.count(RowOutcome.FAILED)
                failed += chunk_failed
                processed += len(outcomes) - chunk_failed

                progress = ChunkProgress(
                    chunk_index=chunk_index,
                    total_chunks=total_chunks,
                    processed=processed,
                    failed=failed,
                    total_rows=total_rows,
                )
                logger.info(
                    f"Batch {chunk_index}/{total_chunks} completed "
                    f"({progress.completed_rows}/{total_rows} rows, "
                    f"{processed} processed, {failed} failed)",
                    extra_context=progress.model_dump(),
                    emoji=LogEmoji.CHART,
                )
                if progress_callback is not None:
                    progress_callback(progress)
        finally:
            if executor is not None:
                executor.shutdown(wait=True)
            self._stop_event.clear()

        result = ProcessingResult(
            total=processed + failed,
            processed=processed,
            failed=failed,
            cancelled=cancelled,
        )
        elapsed = format_duration(time.monotonic() - started)
        if cancelled:
            logger.warning(
                f"Pass stopped early after {result.total}/{total_rows} rows: "
                f"{processed} processed, {failed} failed in {elapsed}",
                extra_context=result.model_dump(),
                emoji=LogEmoji.CANCELED,
            )
        else:
            logger.info(
                f"Pass completed in {elapsed}: {processed} processed, {failed} failed",
                extra_context=result.model_dump(),
                emoji=LogEmoji.COMPLETED,
            )
        return result

    def _process_chunk(
        self, chunk: List[InputRow], executor: Optional[ThreadPoolExecutor]
    ) -> List[RowOutcome]:
        if executor is None:
            return [self._process_row(row) for row in chunk]

        groups: Dict[str, List[InputRow]] = {}
        for row in chunk:
            groups.setdefault(row.id, []).append(row)

        futures = [executor.submit(self._process_group, group) for group in groups.values()]
        outcomes: List[RowOutcome] = []
        for future in futures:
            outcomes.extend(future.result())
        return outcomes

    def _process_group(self, group: List[InputRow]) -> List[RowOutcome]:
        """Rows sharing an id, handled in input order by one worker."""
        return [self._process_row(row) for row in group]

    def _process_row(self, row: InputRow) -> RowOutcome:
        try:
            existing = self.record_store.find_image(row.id)
            if existing is not None:
                logger.debug(f"Refreshing existing image {row.id}")
            thumbnail = self.fetcher.fetch(row.id, row.url)
            created = self.record_store.upsert_image(row.id, row.index, thumbnail)
            self.record_store.delete_failure(row.id)
        except Exception as e:
            self._record_failure(row, e)
            return RowOutcome.FAILED

        if created:
            logger.info(f"Created new image {row.id}", emoji=LogEmoji.CREATE)
            return RowOutcome.CREATED
        logger.info(f"Updated image {row.id}", emoji=LogEmoji.UPDATE)
        return RowOutcome.UPDATED

    def _record_failure(self, row: InputRow, error: Exception) -> None:
        message = str(error) or type(error).__name__
        logger.error(
            f"Failed to process image {row.id}",
            exception=error,
            error_context={"id": row.id, "url": row.url},
            emoji=LogEmoji.FAILED,
        )
        try:
            attempts = self.record_store.upsert_failure(
                row.id, row.index, row.url, message
            )
        except Exception as ledger_error:
            logger.error(
                f"Could not record failure for image {row.id}",
                exception=ledger_error,
                error_context={"id": row.id, "url": row.url},
            )
            return
        logger.debug(
            f"Failure ledger entry for {row.id} now at {attempts} attempts",
            extra_context={"id": row.id, "attempts": attempts},
        )
