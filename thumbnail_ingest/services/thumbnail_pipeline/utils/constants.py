# thumbnail_ingest/services/thumbnail_pipeline/utils/constants.py
"""
Thumbnail Pipeline Constants
"""

# Image modes each output format can store without conversion
FORMAT_COMPATIBLE_MODES = {
    "JPEG": {"RGB", "L"},
    "PNG": {"RGB", "RGBA", "L", "LA"},
    "WEBP": {"RGB", "RGBA"},
}

# Mode to convert to when the source mode is not compatible
FORMAT_FALLBACK_MODES = {
    "JPEG": "RGB",
    "PNG": "RGBA",
    "WEBP": "RGBA",
}

# Formats that accept a quality parameter on save
LOSSY_FORMATS = {"JPEG", "WEBP"}

# Decompression bomb guard: refuse images above this many pixels
MAX_IMAGE_PIXELS = 100_000_000

HTTP_USER_AGENT = "thumbnail-ingest/1.0"
