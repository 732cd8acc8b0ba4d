"""Image decoding and re-encoding for the disk tier."""

from __future__ import annotations

import io

from PIL import Image

from imgcache.errors.exceptions import DecodeError

DEFAULT_JPEG_QUALITY = 80
_JPEG_MODES = {"RGB", "L", "CMYK"}


def decode_image(data: bytes) -> Image.Image:
    """Decode raw bytes into a fully loaded PIL image.

    Raises DecodeError if the bytes are empty or not a readable image.
    """
    if not data:
        raise DecodeError("Empty image payload")
    try:
        img = Image.open(io.BytesIO(data))
        # Force pixel decode now; Image.open is lazy and truncated data
        # would otherwise only fail on first use.
        img.load()
    except (OSError, ValueError, SyntaxError, EOFError, Image.DecompressionBombError) as e:
        raise DecodeError(f"Cannot decode image ({len(data)} bytes): {e}", original=e) from e
    return img


def encode_jpeg(img: Image.Image, quality: int = DEFAULT_JPEG_QUALITY) -> bytes:
    """Re-encode an image as JPEG bytes at a fixed quality."""
    if img.mode not in _JPEG_MODES:
        img = img.convert("RGB")
    buf = io.BytesIO()
    try:
        img.save(buf, format="JPEG", quality=quality)
    except (OSError, ValueError) as e:
        raise DecodeError(f"Cannot encode image as JPEG: {e}", original=e) from e
    return buf.getvalue()


def placeholder_image(
    width: int = 10,
    height: int = 10,
    color: tuple[int, int, int] = (128, 128, 128),
) -> Image.Image:
    """Solid-color RGB image, used as a stand-in where no real image exists."""
    return Image.new("RGB", (width, height), color)
