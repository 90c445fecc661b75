# thumbnail_ingest/services/thumbnail_pipeline/thumbnail_fetcher.py
"""
Thumbnail Fetcher

Downloads a remote image and hands the bytes to the ThumbnailGenerator.

Every failure mode (network error, timeout, non-2xx status, oversized body,
undecodable image) surfaces as a single ``FetchError`` carrying the record id;
no partial or placeholder thumbnail is ever returned.
"""

import threading
import time
from typing import List, Optional

import requests

from ...constants import (
    DEFAULT_FETCH_TIMEOUT_SECONDS,
    DEFAULT_MAX_FILE_SIZE,
    DOWNLOAD_CHUNK_SIZE,
)
from ...enums import LogEmoji, LoggerName, LogSource
from ...exceptions import FetchError
from ..logger import get_service_logger
from .generators.thumbnail_generator import ThumbnailGenerator
from .utils.constants import HTTP_USER_AGENT

logger = get_service_logger(LoggerName.THUMBNAIL_PIPELINE, LogSource.PIPELINE)


class ResponseTooLargeError(ValueError):
    """The response body is larger than the configured ceiling."""

    pass


class ThumbnailFetcher:
    """
    HTTP download + thumbnail generation for a single record.

    Sessions are kept per thread so the fetcher can be shared by the batch
    processor's worker pool.
    """

    def __init__(
        self,
        generator: Optional[ThumbnailGenerator] = None,
        timeout: float = DEFAULT_FETCH_TIMEOUT_SECONDS,
        max_bytes: int = DEFAULT_MAX_FILE_SIZE,
        session: Optional[requests.Session] = None,
    ):
        """
        Args:
            generator: Thumbnail generator (defaults to a 100px JPEG generator)
            timeout: Overall seconds allowed for one download
            max_bytes: Largest accepted response body
            session: Shared session to use instead of per-thread sessions
        """
        self.generator = generator or ThumbnailGenerator()
        self.timeout = timeout
        self.max_bytes = max_bytes
        self._shared_session = session
        self._local = threading.local()
        self._sessions: List[requests.Session] = []
        self._sessions_lock = threading.Lock()

    def _get_session(self) -> requests.Session:
        if self._shared_session is not None:
            return self._shared_session
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            session.headers.update({"User-Agent": HTTP_USER_AGENT})
            self._local.session = session
            with self._sessions_lock:
                self._sessions.append(session)
        return session

    def download(self, url: str) -> bytes:
        """
        GET ``url`` and return the body.

        Raises:
            requests.RequestException: Network failures, timeouts, HTTP errors
            ResponseTooLargeError: Body larger than ``max_bytes``
            ValueError: Empty body
        """
        started = time.monotonic()
        with self._get_session().get(url, timeout=self.timeout, stream=True) as resp:
            resp.raise_for_status()

            declared = resp.headers.get("Content-Length")
            if declared and declared.isdigit() and int(declared) > self.max_bytes:
                raise ResponseTooLargeError(
                    f"Response size {declared} exceeds limit of {self.max_bytes} bytes"
                )

            body = bytearray()
            for chunk in resp.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                body.extend(chunk)
                if len(body) > self.max_bytes:
                    raise ResponseTooLargeError(
                        f"Response body exceeds limit of {self.max_bytes} bytes"
                    )
                if time.monotonic() - started > self.timeout:
                    raise requests.Timeout(
                        f"Download exceeded timeout of {self.timeout}s"
                    )

        if not body:
            raise ValueError("Empty response body")
        return bytes(body)

    def fetch(self, record_id: str, url: str) -> bytes:
        """
        Download ``url`` and return the encoded thumbnail.

        Args:
            record_id: Record identifier, carried on the error
            url: Absolute image URL

        Raises:
            FetchError: On any download, decode or encode failure
        """
        try:
            data = self.download(url)
            thumbnail = self.generator.generate(data)
        except (requests.RequestException, ValueError, OSError) as e:
            raise FetchError(record_id, str(e) or type(e).__name__, url=url) from e

        logger.debug(
            f"Generated thumbnail for {record_id} ({len(thumbnail)} bytes)",
            extra_context={"id": record_id, "url": url, "bytes": len(thumbnail)},
            emoji=LogEmoji.THUMBNAIL,
        )
        return thumbnail

    def close(self) -> None:
        """Close the sessions this fetcher created."""
        with self._sessions_lock:
            for session in self._sessions:
                session.close()
            self._sessions.clear()
        self._local = threading.local()
