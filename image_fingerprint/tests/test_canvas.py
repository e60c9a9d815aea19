from __future__ import annotations

import pytest
from PIL import Image

from image_fingerprint.errors import CanvasError
from image_fingerprint.models.buffers import GRAY, RGB, GrayscaleBuffer, PixelBuffer
from image_fingerprint.services.canvas import PillowBackend, Rect, resolve_resample_filter


def test_unknown_filter_is_rejected() -> None:
    with pytest.raises(ValueError):
        PillowBackend(resample_filter="sinc")
    assert resolve_resample_filter("LANCZOS") == Image.Resampling.LANCZOS


@pytest.mark.parametrize(
    "kwargs",
    [
        {"width": 0, "height": 4},
        {"width": 4, "height": 4, "bits_per_component": 16},
        {"width": 4, "height": 4, "components_per_pixel": 2},
        {"width": 4, "height": 4, "bytes_per_row": 8},
    ],
)
def test_create_canvas_rejects_unsupported_layouts(kwargs) -> None:
    params = {"bits_per_component": 8, "components_per_pixel": 1, "color_space": GRAY, **kwargs}
    with pytest.raises(CanvasError):
        PillowBackend().create_canvas(**params)


def test_canvas_starts_black_and_reads_exact_bytes() -> None:
    with PillowBackend().create_canvas(5, 3, 8, 1, GRAY, bytes_per_row=5) as canvas:
        assert canvas.read_buffer() == bytes(15)
        buffer = canvas.to_image()
    assert buffer.size == (5, 3)
    assert buffer.components_per_pixel == 1


def test_draw_scaled_fills_target_rect() -> None:
    source = GrayscaleBuffer(width=1, height=1, data=b"\xc8")
    with PillowBackend().create_canvas(4, 2, 8, 1, GRAY) as canvas:
        canvas.draw_scaled(source, Rect(2, 0, 2, 2))
        data = canvas.read_buffer()
    assert data == bytes([0, 0, 200, 200, 0, 0, 200, 200])


def test_draw_scaled_converts_color_to_gray() -> None:
    white = PixelBuffer(width=2, height=2, data=bytes([255] * 12), components_per_pixel=3, color_space=RGB)
    with PillowBackend().create_canvas(2, 2, 8, 1, GRAY) as canvas:
        canvas.draw_scaled(white, Rect(0, 0, 2, 2))
        assert canvas.read_buffer() == bytes([255] * 4)


def test_draw_scaled_composites_alpha_over_black() -> None:
    transparent = PixelBuffer.from_image(Image.new("RGBA", (2, 2), (255, 255, 255, 0)))
    opaque = PixelBuffer.from_image(Image.new("RGBA", (2, 2), (255, 255, 255, 255)))
    backend = PillowBackend()
    with backend.create_canvas(2, 2, 8, 1, GRAY) as canvas:
        canvas.draw_scaled(transparent, Rect(0, 0, 2, 2))
        assert canvas.read_buffer() == bytes(4)
    with backend.create_canvas(2, 2, 8, 1, GRAY) as canvas:
        canvas.draw_scaled(opaque, Rect(0, 0, 2, 2))
        assert canvas.read_buffer() == bytes([255] * 4)


def test_released_canvas_cannot_be_used() -> None:
    canvas = PillowBackend().create_canvas(2, 2, 8, 1, GRAY)
    with canvas:
        pass
    assert canvas.released
    with pytest.raises(CanvasError):
        canvas.read_buffer()
    with pytest.raises(CanvasError):
        canvas.draw_scaled(GrayscaleBuffer(width=1, height=1, data=b"\x00"), Rect(0, 0, 1, 1))
