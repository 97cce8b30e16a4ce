"""Unit tests for ImageNormalizer"""
import io

import pytest
from PIL import Image

from photospotter.core.exceptions import ValidationError
from photospotter.services.image_normalizer import ImageNormalizer
from tests.mocks import create_image_bytes, create_noise_image_bytes


def open_image(data: bytes) -> Image.Image:
    return Image.open(io.BytesIO(data))


def encode_jpeg(data: bytes, quality: int) -> bytes:
    buffer = io.BytesIO()
    open_image(data).convert("RGB").save(buffer, "JPEG", quality=quality)
    return buffer.getvalue()


class TestImageNormalizer:
    """Tests for ImageNormalizer.normalize_sync / normalize"""

    def test_downscales_preserving_aspect_ratio(self):
        normalizer = ImageNormalizer(max_dimension=1024)

        result = open_image(normalizer.normalize_sync(create_image_bytes(4000, 3000)))

        assert result.format == "JPEG"
        assert result.size == (1024, 768)

    def test_never_enlarges(self):
        normalizer = ImageNormalizer(max_dimension=1024)

        result = open_image(normalizer.normalize_sync(create_image_bytes(320, 240)))

        assert result.size == (320, 240)

    def test_converts_to_rgb(self):
        normalizer = ImageNormalizer()

        result = open_image(normalizer.normalize_sync(create_image_bytes(100, 100, format="PNG", mode="RGBA")))

        assert result.mode == "RGB"

    def test_applies_exif_orientation(self):
        image = Image.new("RGB", (200, 100), (10, 20, 30))
        exif = image.getexif()
        exif[0x0112] = 6  # rotate 90 CW on display
        buffer = io.BytesIO()
        image.save(buffer, "JPEG", exif=exif)

        result = open_image(ImageNormalizer().normalize_sync(buffer.getvalue()))

        assert result.size == (100, 200)

    def test_empty_bytes_rejected(self):
        with pytest.raises(ValidationError, match="empty"):
            ImageNormalizer().normalize_sync(b"")

    def test_invalid_bytes_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            ImageNormalizer().normalize_sync(b"definitely not an image")

        assert exc_info.value.message == "Invalid image data"

    def test_steps_quality_down_until_it_fits(self):
        source = create_noise_image_bytes()
        target = encode_jpeg(source, 70)
        normalizer = ImageNormalizer(quality=90, max_bytes=len(target))

        assert normalizer.normalize_sync(source) == target

    def test_too_large_at_minimum_quality(self):
        normalizer = ImageNormalizer(quality=90, max_bytes=1000)

        with pytest.raises(ValidationError, match="too large"):
            normalizer.normalize_sync(create_noise_image_bytes())

    @pytest.mark.asyncio
    async def test_async_normalize(self):
        result = await ImageNormalizer(max_dimension=64).normalize(create_image_bytes(640, 480))

        assert open_image(result).size == (64, 48)
