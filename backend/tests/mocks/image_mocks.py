"""Image byte factories for normalizer and upload tests"""
import io
import random

from PIL import Image


def create_image_bytes(
    width: int = 640,
    height: int = 480,
    color: tuple = (180, 120, 90),
    format: str = "JPEG",
    mode: str = "RGB",
) -> bytes:
    """Encode a solid-color image of the given size."""
    fill = color if mode == "RGB" else color + (255,)
    image = Image.new(mode, (width, height), fill)
    buffer = io.BytesIO()
    image.save(buffer, format)
    return buffer.getvalue()


def create_noise_image_bytes(width: int = 512, height: int = 512, seed: int = 7) -> bytes:
    """Encode a random-noise PNG. Noise compresses poorly, so JPEG size tracks quality."""
    rng = random.Random(seed)
    image = Image.frombytes("RGB", (width, height), rng.randbytes(width * height * 3))
    buffer = io.BytesIO()
    image.save(buffer, "PNG")
    return buffer.getvalue()
