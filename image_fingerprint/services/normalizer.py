"""
Grayscale normalization: render any decoded image into a device-gray canvas
of the same size.
"""

from __future__ import annotations

import logging

from PIL import Image

from image_fingerprint.errors import (
    CANVAS_CREATION_FAILED,
    READBACK_FAILED,
    BufferSizeMismatch,
    CanvasError,
    ConversionError,
)
from image_fingerprint.models.buffers import GRAY, GrayscaleBuffer, PixelBuffer
from image_fingerprint.services.canvas import PillowBackend, Rect

LOGGER = logging.getLogger(__name__)


def as_pixel_buffer(image: PixelBuffer | Image.Image) -> PixelBuffer:
    """Accept either a PixelBuffer or a decoded Pillow image."""
    if isinstance(image, PixelBuffer):
        return image
    if isinstance(image, Image.Image):
        return PixelBuffer.from_image(image)
    raise TypeError(f"Expected PixelBuffer or PIL image, got {type(image).__name__}")


def to_grayscale(image: PixelBuffer | Image.Image, backend: PillowBackend | None = None) -> GrayscaleBuffer:
    """Convert ``image`` to one 8-bit gray component without changing its size."""
    source = as_pixel_buffer(image)
    backend = backend or PillowBackend()
    try:
        canvas = backend.create_canvas(source.width, source.height, 8, 1, GRAY)
    except CanvasError as exc:
        raise ConversionError(
            f"Cannot create {source.width}x{source.height} gray canvas: {exc}",
            reason=CANVAS_CREATION_FAILED,
        ) from exc

    with canvas:
        canvas.draw_scaled(source, Rect(0, 0, source.width, source.height))
        try:
            data = canvas.read_buffer()
        except CanvasError as exc:
            raise ConversionError(f"Cannot read gray canvas: {exc}", reason=READBACK_FAILED) from exc

    expected = source.width * source.height
    if len(data) != expected:
        raise BufferSizeMismatch(expected, len(data), context="grayscale conversion")
    LOGGER.debug(
        "Converted %dx%d %s image (%d components) to gray",
        source.width,
        source.height,
        source.color_space,
        source.components_per_pixel,
    )
    return GrayscaleBuffer(width=source.width, height=source.height, data=data)
