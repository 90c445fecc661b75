# thumbnail_ingest/services/thumbnail_pipeline/generators/__init__.py
"""
Thumbnail Generation Components

- ThumbnailGenerator: square cover-fit thumbnails from raw image bytes
"""

from .thumbnail_generator import ThumbnailGenerator

__all__ = [
    "ThumbnailGenerator",
]
