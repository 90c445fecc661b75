# thumbnail_ingest/services/thumbnail_pipeline/__init__.py
"""
Thumbnail Pipeline Module

Download remote images and turn them into fixed-size square thumbnails.
"""

from ...config import Settings
from .generators import ThumbnailGenerator
from .thumbnail_fetcher import ResponseTooLargeError, ThumbnailFetcher


def create_thumbnail_fetcher(settings: Settings) -> ThumbnailFetcher:
    """Build a fetcher wired to the run configuration."""
    generator = ThumbnailGenerator(
        size=settings.thumbnail_size,
        output_format=settings.thumbnail_format,
        quality=settings.thumbnail_quality,
    )
    return ThumbnailFetcher(
        generator=generator,
        timeout=settings.fetch_timeout_seconds,
        max_bytes=settings.max_file_size,
    )


__all__ = [
    "ThumbnailFetcher",
    "ThumbnailGenerator",
    "ResponseTooLargeError",
    "create_thumbnail_fetcher",
]
