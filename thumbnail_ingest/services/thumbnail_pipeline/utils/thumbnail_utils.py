# thumbnail_ingest/services/thumbnail_pipeline/utils/thumbnail_utils.py
"""
Thumbnail Utility Functions
"""

from io import BytesIO
from typing import Tuple

from PIL import Image, UnidentifiedImageError

from .constants import (
    FORMAT_COMPATIBLE_MODES,
    FORMAT_FALLBACK_MODES,
    LOSSY_FORMATS,
    MAX_IMAGE_PIXELS,
)


def calculate_cover_crop_box(
    source_size: Tuple[int, int], target_size: Tuple[int, int]
) -> Tuple[int, int, int, int]:
    """
    Centred crop box for a source that is smaller than the target on some axis.

    Used when a cover fit would need to enlarge the image: the image keeps its
    resolution and only the overflowing axis is cropped.

    Args:
        source_size: (width, height) of source image
        target_size: (width, height) of target thumbnail

    Returns:
        (left, upper, right, lower) box in source coordinates
    """
    source_width, source_height = source_size
    target_width, target_height = target_size

    crop_width = min(source_width, target_width)
    crop_height = min(source_height, target_height)
    left = (source_width - crop_width) // 2
    upper = (source_height - crop_height) // 2
    return (left, upper, left + crop_width, upper + crop_height)


def needs_enlargement(source_size: Tuple[int, int], target_size: Tuple[int, int]) -> bool:
    """True when a cover fit would have to upscale the source on some axis."""
    return source_size[0] < target_size[0] or source_size[1] < target_size[1]


def decode_image(data: bytes) -> Image.Image:
    """
    Decode raw bytes into a fully loaded PIL image.

    Raises:
        ValueError: If the bytes are not a decodable image or are too large
    """
    if not data:
        raise ValueError("Invalid image data: empty body")
    try:
        img = Image.open(BytesIO(data))
        width, height = img.size
        if width * height > MAX_IMAGE_PIXELS:
            raise ValueError(
                f"Image too large to process: {width}x{height} pixels"
            )
        img.load()
        return img
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
        raise ValueError(f"Invalid image data: {exc}") from exc


def convert_for_format(img: Image.Image, output_format: str) -> Image.Image:
    """Convert the image mode if the output format cannot store it."""
    if img.mode in FORMAT_COMPATIBLE_MODES[output_format]:
        return img
    if img.mode == "P" and "transparency" in img.info:
        img = img.convert("RGBA")
        if img.mode in FORMAT_COMPATIBLE_MODES[output_format]:
            return img
    return img.convert(FORMAT_FALLBACK_MODES[output_format])


def encode_image(img: Image.Image, output_format: str, quality: int) -> bytes:
    """Encode an image to bytes in the given format."""
    img = convert_for_format(img, output_format)
    buffer = BytesIO()
    save_kwargs = {"optimize": True}
    if output_format in LOSSY_FORMATS:
        save_kwargs["quality"] = quality
    img.save(buffer, output_format, **save_kwargs)
    return buffer.getvalue()
