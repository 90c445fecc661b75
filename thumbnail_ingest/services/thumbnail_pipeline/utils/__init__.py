# thumbnail_ingest/services/thumbnail_pipeline/utils/__init__.py
"""
Thumbnail Utility Functions and Constants

Shared utilities for the thumbnail pipeline:
- Cover-fit geometry
- Decoding and encoding helpers
- Constants and format tables
"""

from .constants import (
    FORMAT_COMPATIBLE_MODES,
    FORMAT_FALLBACK_MODES,
    HTTP_USER_AGENT,
    LOSSY_FORMATS,
    MAX_IMAGE_PIXELS,
)
from .thumbnail_utils import (
    calculate_cover_crop_box,
    convert_for_format,
    decode_image,
    encode_image,
    needs_enlargement,
)

__all__ = [
    "calculate_cover_crop_box",
    "convert_for_format",
    "decode_image",
    "encode_image",
    "needs_enlargement",
    "FORMAT_COMPATIBLE_MODES",
    "FORMAT_FALLBACK_MODES",
    "HTTP_USER_AGENT",
    "LOSSY_FORMATS",
    "MAX_IMAGE_PIXELS",
]
