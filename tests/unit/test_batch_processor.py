# tests/unit/test_batch_processor.py
"""
Tests for BatchProcessor: chunking, ledger bookkeeping, idempotence,
cancellation and per-id serialisation under concurrency.
"""

import threading
import time

import pytest

from thumbnail_ingest.models.image_models import InputRow
from thumbnail_ingest.services.batch_processor import BatchProcessor


@pytest.mark.unit
class TestBatchProcessor:
    @pytest.fixture
    def processor(self, record_store, fetcher):
        return BatchProcessor(record_store, fetcher, batch_size=2)

    def test_empty_input_returns_zero_result(self, processor, fetcher):
        notifications = []
        result = processor.process_images([], notifications.append)

        assert (result.total, result.processed, result.failed) == (0, 0, 0)
        assert notifications == []
        assert fetcher.calls == []

    def test_every_row_lands_in_exactly_one_collection(
        self, processor, record_store, fetcher, make_rows
    ):
        rows = make_rows(4)
        fetcher.failing_urls = {rows[1].url, rows[3].url}

        result = processor.process_images(rows)

        assert (result.total, result.processed, result.failed) == (4, 2, 2)
        assert set(record_store.images) == {"img-0", "img-2"}
        assert set(record_store.failures) == {"img-1", "img-3"}
        assert not set(record_store.images) & set(record_store.failures)

    def test_successful_row_stores_thumbnail_and_index(
        self, processor, record_store, make_rows
    ):
        row = make_rows(1)[0]
        processor.process_images([row])

        stored = record_store.images[row.id]
        assert stored.index == row.index
        assert stored.thumbnail == f"thumb:{row.url}".encode()

    def test_row_steps_run_in_order(self, processor, record_store, make_rows):
        processor.process_images(make_rows(1))

        assert [name for name, _ in record_store.calls] == [
            "find_image",
            "upsert_image",
            "delete_failure",
        ]

    def test_chunking_reports_cumulative_progress(
        self, processor, fetcher, make_rows
    ):
        rows = make_rows(5)
        fetcher.failing_urls = {rows[2].url}
        notifications = []

        result = processor.process_images(rows, notifications.append)

        assert len(notifications) == 3
        assert [n.chunk_index for n in notifications] == [1, 2, 3]
        assert all(n.total_chunks == 3 and n.total_rows == 5 for n in notifications)
        assert [n.completed_rows for n in notifications] == [2, 4, 5]
        processed = [n.processed for n in notifications]
        failed = [n.failed for n in notifications]
        assert processed == sorted(processed)
        assert failed == sorted(failed)
        assert processed[-1] + failed[-1] == 5
        assert (result.processed, result.failed) == (4, 1)

    def test_reprocessing_is_idempotent(self, processor, record_store, make_rows):
        rows = make_rows(3)

        first = processor.process_images(rows)
        snapshot = {k: (v.index, v.thumbnail) for k, v in record_store.images.items()}
        second = processor.process_images(rows)

        assert first.processed == second.processed == 3
        assert {
            k: (v.index, v.thumbnail) for k, v in record_store.images.items()
        } == snapshot
        assert record_store.failures == {}

    def test_result_is_per_pass_not_cumulative(self, processor, make_rows):
        processor.process_images(make_rows(3))
        result = processor.process_images(make_rows(1, prefix="other"))
        assert result.total == 1

    def test_repeated_failures_accumulate_attempts(
        self, processor, record_store, fetcher, make_rows
    ):
        row = make_rows(1)[0]
        fetcher.failing_urls = {row.url}

        for _ in range(3):
            processor.process_images([row])

        failure = record_store.failures[row.id]
        assert failure.attempts == 3
        assert "HTTP 404" in failure.error
        assert failure.url == row.url

    def test_recovery_clears_ledger_entry(
        self, processor, record_store, fetcher, make_rows
    ):
        row = make_rows(1)[0]
        fetcher.failing_urls = {row.url}
        processor.process_images([row])
        assert row.id in record_store.failures

        fetcher.failing_urls = set()
        result = processor.process_images([row])

        assert result.processed == 1
        assert row.id in record_store.images
        assert row.id not in record_store.failures

    def test_store_write_failure_is_recorded_per_row(
        self, processor, record_store, make_rows
    ):
        rows = make_rows(3)
        record_store.fail_image_writes_for = {rows[1].id}

        result = processor.process_images(rows)

        assert (result.processed, result.failed) == (2, 1)
        assert "connection lost" in record_store.failures[rows[1].id].error
        assert rows[1].id not in record_store.images

    def test_ledger_failure_still_counts_row_as_failed(
        self, processor, record_store, fetcher, make_rows
    ):
        rows = make_rows(3)
        fetcher.failing_urls = {rows[0].url}
        record_store.fail_ledger_writes = True

        result = processor.process_images(rows)

        assert (result.total, result.processed, result.failed) == (3, 2, 1)
        assert record_store.failures == {}

    def test_unexpected_fetch_exception_does_not_abort_pass(
        self, processor, record_store, fetcher, make_rows
    ):
        rows = make_rows(3)

        def explode(record_id, url):
            if record_id == rows[0].id:
                raise RuntimeError("decoder crashed")

        fetcher.on_fetch = explode
        result = processor.process_images(rows)

        assert (result.processed, result.failed) == (2, 1)
        assert record_store.failures[rows[0].id].error == "decoder crashed"

    def test_stop_request_is_honoured_between_chunks(
        self, processor, fetcher, make_rows
    ):
        rows = make_rows(6)
        notifications = []

        def stop_after_first_chunk(progress):
            notifications.append(progress)
            processor.request_stop()

        result = processor.process_images(rows, stop_after_first_chunk)

        assert result.cancelled is True
        assert (result.total, result.processed, result.failed) == (2, 2, 0)
        assert len(notifications) == 1
        assert len(fetcher.calls) == 2
        assert processor.stop_requested is False

    def test_stop_mid_chunk_finishes_the_chunk(self, processor, fetcher, make_rows):
        rows = make_rows(4)

        def stop_on_first_row(record_id, url):
            if record_id == rows[0].id:
                processor.request_stop()

        fetcher.on_fetch = stop_on_first_row
        result = processor.process_images(rows)

        assert result.cancelled is True
        assert result.total == 2
        assert len(fetcher.calls) == 2

    def test_next_pass_runs_after_a_stopped_pass(self, processor, fetcher, make_rows):
        rows = make_rows(4)
        processor.process_images(rows, lambda progress: processor.request_stop())

        result = processor.process_images(rows)

        assert result.cancelled is False
        assert (result.total, result.processed) == (4, 4)
        assert len(fetcher.calls) == 6

    def test_stop_before_empty_pass_is_consumed(self, processor, make_rows):
        processor.request_stop()
        processor.process_images([])

        assert processor.stop_requested is False
        assert processor.process_images(make_rows(2)).cancelled is False

    def test_invalid_configuration_is_rejected(self, record_store, fetcher):
        with pytest.raises(ValueError):
            BatchProcessor(record_store, fetcher, batch_size=0)
        with pytest.raises(ValueError):
            BatchProcessor(record_store, fetcher, batch_size=1, max_workers=0)


@pytest.mark.unit
class TestConcurrentBatchProcessor:
    def test_counts_match_sequential_run(self, record_store, fetcher, make_rows):
        rows = make_rows(10)
        fetcher.failing_urls = {rows[3].url, rows[7].url}
        processor = BatchProcessor(record_store, fetcher, batch_size=4, max_workers=4)

        result = processor.process_images(rows)

        assert (result.total, result.processed, result.failed) == (10, 8, 2)
        assert len(record_store.images) == 8
        assert set(record_store.failures) == {rows[3].id, rows[7].id}

    def test_rows_with_same_id_never_run_concurrently(self, record_store, fetcher):
        rows = [
            InputRow(id="dup", index=i, url=f"https://x/dup-{i}.png") for i in range(4)
        ] + [InputRow(id=f"u{i}", index=i, url=f"https://x/u{i}.png") for i in range(4)]
        active = {}
        overlaps = []
        lock = threading.Lock()

        def track(record_id, url):
            with lock:
                active[record_id] = active.get(record_id, 0) + 1
                if active[record_id] > 1:
                    overlaps.append(record_id)
            time.sleep(0.01)
            with lock:
                active[record_id] -= 1

        fetcher.on_fetch = track
        processor = BatchProcessor(record_store, fetcher, batch_size=8, max_workers=4)

        result = processor.process_images(rows)

        assert result.processed == 8
        assert overlaps == []
        # Last row for the duplicated id wins because its group runs in order.
        assert record_store.images["dup"].index == 3
        dup_urls = [url for record_id, url in fetcher.calls if record_id == "dup"]
        assert dup_urls == [f"https://x/dup-{i}.png" for i in range(4)]
