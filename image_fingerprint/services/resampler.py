"""
Resampling of grayscale buffers to an exact target size.
"""

from __future__ import annotations

import logging

from PIL import Image

from image_fingerprint.errors import (
    CANVAS_CREATION_FAILED,
    READBACK_FAILED,
    BufferSizeMismatch,
    CanvasError,
    ResizeError,
    UnsupportedColorModel,
)
from image_fingerprint.models.buffers import GrayscaleBuffer, PixelBuffer
from image_fingerprint.services.canvas import PillowBackend, Rect
from image_fingerprint.services.normalizer import as_pixel_buffer

LOGGER = logging.getLogger(__name__)


def resize(
    image: PixelBuffer | Image.Image,
    target_width: int,
    target_height: int,
    backend: PillowBackend | None = None,
) -> GrayscaleBuffer:
    """
    Render a single-component image into a ``target_width`` x ``target_height`` canvas.

    Multi-component images raise UnsupportedColorModel; they are never blended down.
    The result always holds exactly ``target_width * target_height`` bytes, anything
    else raises BufferSizeMismatch.
    """
    source = as_pixel_buffer(image)
    if source.components_per_pixel != 1:
        raise UnsupportedColorModel(source.components_per_pixel)

    backend = backend or PillowBackend()
    try:
        canvas = backend.create_canvas(
            target_width,
            target_height,
            8,
            1,
            source.color_space,
            bytes_per_row=target_width,
        )
    except CanvasError as exc:
        raise ResizeError(
            f"Cannot create {target_width}x{target_height} canvas: {exc}",
            reason=CANVAS_CREATION_FAILED,
        ) from exc

    with canvas:
        canvas.draw_scaled(source, Rect(0, 0, target_width, target_height))
        try:
            data = canvas.read_buffer()
        except CanvasError as exc:
            raise ResizeError(f"Cannot read resized canvas: {exc}", reason=READBACK_FAILED) from exc

    # Backends may pad rows; a padded buffer would shift every hash bit.
    expected = target_width * target_height
    if len(data) != expected:
        raise BufferSizeMismatch(expected, len(data), context=f"resize to {target_width}x{target_height}")
    LOGGER.debug(
        "Resized %dx%d -> %dx%d", source.width, source.height, target_width, target_height
    )
    return GrayscaleBuffer(width=target_width, height=target_height, data=data)
