# tests/conftest.py
"""
Pytest configuration and shared fixtures for thumbnail_ingest tests.

The record store and fetcher fakes keep everything in memory so the batch
processor, retry service and CLI can be exercised without PostgreSQL or the
network.
"""

import threading
from datetime import datetime, timedelta, timezone
from io import BytesIO
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest
from PIL import Image

from thumbnail_ingest.database.exceptions import (
    FailedImageOperationError,
    ImageOperationError,
)
from thumbnail_ingest.exceptions import FetchError
from thumbnail_ingest.models.image_models import FailedRecord, ImageRecord, InputRow


class InMemoryRecordStore:
    """Dict-backed stand-in for RecordStore with the same method surface."""

    def __init__(self):
        self.images: Dict[str, ImageRecord] = {}
        self.failures: Dict[str, FailedRecord] = {}
        self.fail_image_writes_for: set = set()
        self.fail_ledger_writes = False
        self.calls: List[tuple] = []
        self._lock = threading.Lock()
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def _tick(self) -> datetime:
        self._clock += timedelta(seconds=1)
        return self._clock

    def find_image(self, record_id: str) -> Optional[ImageRecord]:
        with self._lock:
            self.calls.append(("find_image", record_id))
            return self.images.get(record_id)

    def upsert_image(self, record_id: str, index: int, thumbnail: bytes) -> bool:
        with self._lock:
            self.calls.append(("upsert_image", record_id))
            if record_id in self.fail_image_writes_for:
                raise ImageOperationError(
                    f"Failed to upsert image {record_id}: connection lost",
                    operation="upsert_image",
                )
            now = self._tick()
            existing = self.images.get(record_id)
            self.images[record_id] = ImageRecord(
                id=record_id,
                index=index,
                thumbnail=thumbnail,
                created_at=existing.created_at if existing else now,
                updated_at=now,
            )
            return existing is None

    def delete_failure(self, record_id: str) -> bool:
        with self._lock:
            self.calls.append(("delete_failure", record_id))
            return self.failures.pop(record_id, None) is not None

    def upsert_failure(
        self, record_id: str, index: int, url: str, error_message: str
    ) -> int:
        with self._lock:
            self.calls.append(("upsert_failure", record_id))
            if self.fail_ledger_writes:
                raise FailedImageOperationError(
                    "ledger unavailable", operation="upsert_failure"
                )
            existing = self.failures.get(record_id)
            attempts = existing.attempts + 1 if existing else 1
            self.failures[record_id] = FailedRecord(
                id=record_id,
                index=index,
                url=url,
                error=error_message,
                attempts=attempts,
                last_attempt=self._tick(),
            )
            return attempts

    def list_failures(self, max_attempts: int) -> List[FailedRecord]:
        with self._lock:
            self.calls.append(("list_failures", max_attempts))
            return sorted(
                (f for f in self.failures.values() if f.attempts < max_attempts),
                key=lambda f: f.last_attempt,
                reverse=True,
            )

    def get_failed_images(self) -> List[FailedRecord]:
        with self._lock:
            return sorted(
                self.failures.values(), key=lambda f: f.last_attempt, reverse=True
            )

    def count_images(self) -> int:
        return len(self.images)


class FakeFetcher:
    """Returns deterministic thumbnail bytes; URLs in ``failing_urls`` raise."""

    def __init__(self):
        self.failing_urls: set = set()
        self.calls: List[tuple] = []
        self.on_fetch: Optional[Callable[[str, str], None]] = None
        self.closed = False
        self._lock = threading.Lock()

    def fetch(self, record_id: str, url: str) -> bytes:
        with self._lock:
            self.calls.append((record_id, url))
        if self.on_fetch is not None:
            self.on_fetch(record_id, url)
        if url in self.failing_urls:
            raise FetchError(record_id, "HTTP 404", url=url)
        return f"thumb:{url}".encode()

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def record_store():
    return InMemoryRecordStore()


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def make_rows():
    """Factory for valid rows: make_rows(3) -> ids img-0..img-2."""

    def _make_rows(count: int, prefix: str = "img") -> List[InputRow]:
        return [
            InputRow(
                id=f"{prefix}-{i}",
                index=i,
                url=f"https://images.example.com/{prefix}-{i}.jpg",
            )
            for i in range(count)
        ]

    return _make_rows


@pytest.fixture
def image_bytes():
    """Factory for encoded test images generated with PIL."""

    def _image_bytes(
        size=(640, 480), fmt: str = "JPEG", mode: str = "RGB", color="red"
    ) -> bytes:
        img = Image.new(mode, size, color=color)
        buffer = BytesIO()
        img.save(buffer, fmt)
        return buffer.getvalue()

    return _image_bytes


@pytest.fixture
def write_csv(tmp_path):
    """Write CSV text to a temporary file and return its path."""

    def _write_csv(text: str, name: str = "data.csv") -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write_csv
