"""
Image Normalizer

Prepares selfies, event photos and probe images for the face directory:

1. Apply EXIF orientation
2. Convert to RGB
3. Fit inside IMAGE_MAX_DIMENSION x IMAGE_MAX_DIMENSION (never enlarge)
4. Re-encode as JPEG at IMAGE_JPEG_QUALITY, stepping quality down by 10
   (floor 50) while the payload exceeds IMAGE_MAX_BYTES

Decoding and encoding are CPU bound, so normalize() runs them in the
default executor.
"""
import asyncio
import io
import logging
from typing import Optional

from PIL import Image, ImageOps, UnidentifiedImageError

from photospotter.core.config import settings
from photospotter.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

QUALITY_STEP = 10
MIN_QUALITY = 50


class ImageNormalizer:
    """Bounded-size JPEG re-encoder."""

    def __init__(
        self,
        max_dimension: Optional[int] = None,
        quality: Optional[int] = None,
        max_bytes: Optional[int] = None,
    ):
        self.max_dimension = max_dimension or settings.IMAGE_MAX_DIMENSION
        self.quality = quality or settings.IMAGE_JPEG_QUALITY
        self.max_bytes = max_bytes or settings.IMAGE_MAX_BYTES

    def normalize_sync(self, image_bytes: bytes) -> bytes:
        """
        Normalize an image synchronously.

        Raises:
            ValidationError: If the bytes are empty, cannot be decoded, or stay
                above max_bytes at the minimum quality
        """
        if not image_bytes:
            raise ValidationError("Image is empty")

        try:
            image = Image.open(io.BytesIO(image_bytes))
            image = ImageOps.exif_transpose(image)
            if image.mode != "RGB":
                image = image.convert("RGB")
        except (UnidentifiedImageError, OSError) as e:
            raise ValidationError(
                "Invalid image data",
                details={"error_type": type(e).__name__},
            ) from e

        original_size = image.size
        # thumbnail() preserves aspect ratio and only ever shrinks
        image.thumbnail((self.max_dimension, self.max_dimension), Image.Resampling.LANCZOS)

        quality = self.quality
        while True:
            buffer = io.BytesIO()
            image.save(buffer, "JPEG", quality=quality)
            data = buffer.getvalue()
            if len(data) <= self.max_bytes:
                break
            if quality - QUALITY_STEP < MIN_QUALITY:
                raise ValidationError(
                    "Image too large after compression",
                    details={"size_bytes": len(data), "max_bytes": self.max_bytes},
                )
            quality -= QUALITY_STEP

        logger.debug(
            f"Normalized image {original_size} -> {image.size}",
            extra={
                "event_type": "image_normalized",
                "input_bytes": len(image_bytes),
                "output_bytes": len(data),
                "quality": quality,
            }
        )
        return data

    async def normalize(self, image_bytes: bytes) -> bytes:
        """Normalize an image without blocking the event loop."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.normalize_sync, image_bytes)
