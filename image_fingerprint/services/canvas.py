"""
Rendering backend used for color conversion and resampling.

A canvas is a fixed-size drawable surface. Callers create one per operation,
draw a source buffer into it, read the backing bytes once, and release it.
PillowBackend implements the capability on top of Pillow; the resampling
filter it applies is part of a fingerprint's identity, so it is explicit and
configurable.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from PIL import Image

from image_fingerprint.errors import CanvasError
from image_fingerprint.models.buffers import GRAY, RGB, PixelBuffer

LOGGER = logging.getLogger(__name__)

DEFAULT_FILTER = "box"

RESAMPLE_FILTERS: dict[str, Image.Resampling] = {
    "nearest": Image.Resampling.NEAREST,
    "box": Image.Resampling.BOX,
    "bilinear": Image.Resampling.BILINEAR,
    "hamming": Image.Resampling.HAMMING,
    "bicubic": Image.Resampling.BICUBIC,
    "lanczos": Image.Resampling.LANCZOS,
}

# (color_space, components_per_pixel) -> Pillow surface mode
_SURFACE_MODES = {
    (GRAY, 1): "L",
    (RGB, 3): "RGB",
    (RGB, 4): "RGBA",
}


def resolve_resample_filter(name: str) -> Image.Resampling:
    try:
        return RESAMPLE_FILTERS[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown resample filter {name!r}; expected one of {', '.join(RESAMPLE_FILTERS)}"
        ) from None


@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    width: int
    height: int

    @property
    def box(self) -> tuple[int, int, int, int]:
        return self.x, self.y, self.x + self.width, self.y + self.height


class Canvas:
    """Pillow surface with a fixed layout. Use as a context manager."""

    def __init__(
        self,
        surface: Image.Image,
        bits_per_component: int,
        components_per_pixel: int,
        color_space: str,
        resample: Image.Resampling,
    ) -> None:
        self._surface: Image.Image | None = surface
        self.bits_per_component = bits_per_component
        self.components_per_pixel = components_per_pixel
        self.color_space = color_space
        self.resample = resample

    @property
    def width(self) -> int:
        return self._require_surface().width

    @property
    def height(self) -> int:
        return self._require_surface().height

    @property
    def released(self) -> bool:
        return self._surface is None

    def draw_scaled(self, image: PixelBuffer, target_rect: Rect) -> None:
        """Render ``image`` into ``target_rect``, converting to the canvas color space."""
        surface = self._require_surface()
        if target_rect.width < 1 or target_rect.height < 1:
            raise CanvasError(f"Empty target rect {target_rect}")
        target_size = (target_rect.width, target_rect.height)
        with image.drawable_image() as source:
            if image.has_alpha:
                # Composite over what is already on the canvas (initially black).
                layer = source.convert("RGBA")
                if layer.size != target_size:
                    layer = layer.resize(target_size, self.resample)
                backdrop = surface.crop(target_rect.box).convert("RGBA")
                rendered = Image.alpha_composite(backdrop, layer).convert(surface.mode)
            else:
                rendered = source if source.mode == surface.mode else source.convert(surface.mode)
                if rendered.size != target_size:
                    rendered = rendered.resize(target_size, self.resample)
            surface.paste(rendered, (target_rect.x, target_rect.y))

    def read_buffer(self) -> bytes:
        surface = self._require_surface()
        try:
            return surface.tobytes()
        except (OSError, ValueError) as exc:
            raise CanvasError(f"Failed to read canvas buffer: {exc}") from exc

    def to_image(self) -> PixelBuffer:
        return PixelBuffer.from_image(self._require_surface())

    def release(self) -> None:
        if self._surface is not None:
            self._surface.close()
            self._surface = None

    def __enter__(self) -> "Canvas":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    def _require_surface(self) -> Image.Image:
        if self._surface is None:
            raise CanvasError("Canvas already released")
        return self._surface


class PillowBackend:
    """Creates Pillow-backed canvases that resample with a fixed filter."""

    canvas_class: type[Canvas] = Canvas

    def __init__(self, resample_filter: str = DEFAULT_FILTER) -> None:
        self.filter_name = resample_filter.lower()
        self.resample = resolve_resample_filter(resample_filter)

    def create_canvas(
        self,
        width: int,
        height: int,
        bits_per_component: int,
        components_per_pixel: int,
        color_space: str,
        bytes_per_row: int | None = None,
    ) -> Canvas:
        if width < 1 or height < 1:
            raise CanvasError(f"Invalid canvas size {width}x{height}")
        if bits_per_component != 8:
            raise CanvasError(f"Unsupported canvas depth: {bits_per_component} bits per component")
        mode = _SURFACE_MODES.get((color_space, components_per_pixel))
        if mode is None:
            raise CanvasError(
                f"Unsupported canvas layout: {components_per_pixel} components in {color_space}"
            )
        if bytes_per_row is not None and bytes_per_row != width * components_per_pixel:
            raise CanvasError(f"Unsupported row stride {bytes_per_row} for width {width}")
        try:
            surface = Image.new(mode, (width, height), 0)
        except (MemoryError, ValueError) as exc:
            raise CanvasError(f"Failed to allocate {width}x{height} canvas: {exc}") from exc
        LOGGER.debug("Created %s canvas %dx%d (filter=%s)", mode, width, height, self.filter_name)
        return self.canvas_class(surface, bits_per_component, components_per_pixel, color_space, self.resample)
