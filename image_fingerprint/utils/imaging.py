"""
Image source and sink: decode compressed bytes, encode buffers as JPEG.
"""

from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import BinaryIO

from PIL import Image, UnidentifiedImageError

from image_fingerprint.errors import DecodeError, EncodeError
from image_fingerprint.models.buffers import PixelBuffer


def _decode(data: bytes, expected_format: str | None = None) -> Image.Image:
    try:
        with Image.open(BytesIO(data)) as image:
            image.load()
            fmt = image.format
            decoded = image.copy()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as exc:
        label = expected_format or "image"
        raise DecodeError(f"Failed to load data as {label}: {exc}") from exc
    if expected_format is not None and fmt != expected_format:
        decoded.close()
        raise DecodeError(f"Failed to load data as {expected_format}: found {fmt}")
    return decoded


def decode_jpeg(data: bytes) -> Image.Image:
    return _decode(data, "JPEG")


def decode_png(data: bytes) -> Image.Image:
    return _decode(data, "PNG")


def decode_image(data: bytes) -> Image.Image:
    """Decode any format Pillow understands."""
    return _decode(data)


def read_image(source: str | Path | BinaryIO) -> Image.Image:
    """Read a file path or binary stream and decode it."""
    if isinstance(source, (str, Path)):
        data = Path(source).read_bytes()
    else:
        data = source.read()
    return decode_image(data)


def encode_jpeg(image: PixelBuffer | Image.Image, quality: int = 95) -> bytes:
    """Encode a buffer or Pillow image as JPEG bytes."""
    if isinstance(image, PixelBuffer):
        image = image.to_image()
    if image.mode not in {"L", "RGB", "CMYK"}:
        image = image.convert("RGB")
    buffer = BytesIO()
    try:
        image.save(buffer, format="JPEG", quality=quality)
    except (OSError, ValueError) as exc:
        raise EncodeError(f"Cannot encode {image.mode} image as JPEG: {exc}") from exc
    return buffer.getvalue()


def write_jpeg(image: PixelBuffer | Image.Image, stream: BinaryIO) -> None:
    stream.write(encode_jpeg(image))


def save_jpeg(image: PixelBuffer | Image.Image, path: Path) -> None:
    """Write ``image`` to ``path`` as JPEG. Nothing is written if encoding fails."""
    data = encode_jpeg(image)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
