# thumbnail_ingest/services/thumbnail_pipeline/generators/thumbnail_generator.py
"""
Thumbnail Generator Component

Turns raw image bytes into a square, cover-fitted thumbnail.
"""

from typing import Tuple

from PIL import Image, ImageOps

from ....constants import DEFAULT_THUMBNAIL_QUALITY, DEFAULT_THUMBNAIL_SIZE
from ....enums import LoggerName, LogSource, ThumbnailFormat
from ...logger import get_service_logger
from ..utils.thumbnail_utils import (
    calculate_cover_crop_box,
    decode_image,
    encode_image,
    needs_enlargement,
)

logger = get_service_logger(LoggerName.THUMBNAIL_PIPELINE, LogSource.PIPELINE)


class ThumbnailGenerator:
    """
    Component responsible for generating square cover-fit thumbnails.

    Cover fit: the image is scaled so it fills the square and the overflow is
    cropped around the centre. Images are never enlarged; a source smaller
    than the square on an axis keeps its resolution on that axis.
    """

    def __init__(
        self,
        size: int = DEFAULT_THUMBNAIL_SIZE,
        output_format: ThumbnailFormat = ThumbnailFormat.JPEG,
        quality: int = DEFAULT_THUMBNAIL_QUALITY,
    ):
        """
        Initialize thumbnail generator.

        Args:
            size: Edge length of the square thumbnail in pixels
            output_format: Encoding of the generated bytes
            quality: Compression quality for lossy formats (1-95)
        """
        if size < 1:
            raise ValueError("Thumbnail size must be at least 1 pixel")
        self.target_size: Tuple[int, int] = (size, size)
        self.output_format = ThumbnailFormat(output_format)
        self.quality = max(1, min(95, quality))

        logger.debug(
            f"ThumbnailGenerator initialized (size={self.target_size}, "
            f"format={self.output_format.value}, quality={self.quality})"
        )

    def generate(self, data: bytes) -> bytes:
        """
        Generate a thumbnail from encoded image bytes.

        Args:
            data: Encoded source image

        Returns:
            Encoded thumbnail bytes

        Raises:
            ValueError: If the data is not a decodable image
        """
        with decode_image(data) as img:
            thumbnail = self.fit(img)
            return encode_image(thumbnail, self.output_format.value, self.quality)

    def fit(self, img: Image.Image) -> Image.Image:
        """Apply the cover fit to an already decoded image."""
        if needs_enlargement(img.size, self.target_size):
            return img.crop(calculate_cover_crop_box(img.size, self.target_size))
        return ImageOps.fit(
            img,
            self.target_size,
            method=Image.Resampling.LANCZOS,
            centering=(0.5, 0.5),
        )
