"""
Pixel buffer value types shared by every pipeline stage.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from PIL import Image

GRAY = "gray"
RGB = "rgb"
CMYK = "cmyk"

# A fingerprint is a plain unsigned 64-bit integer.
Fingerprint = int

# Pillow mode -> (color_space, components_per_pixel, bits_per_component, has_alpha)
_MODE_LAYOUTS: dict[str, tuple[str, int, int, bool]] = {
    "L": (GRAY, 1, 8, False),
    "LA": (GRAY, 2, 8, True),
    "I;16": (GRAY, 1, 16, False),
    "RGB": (RGB, 3, 8, False),
    "RGBA": (RGB, 4, 8, True),
    "CMYK": (CMYK, 4, 8, False),
}
_LAYOUT_MODES = {layout: mode for mode, layout in _MODE_LAYOUTS.items()}


@dataclass(frozen=True)
class PixelBuffer:
    """Contiguous pixel bytes plus the layout needed to interpret them."""

    width: int
    height: int
    data: bytes
    components_per_pixel: int = 1
    bits_per_component: int = 8
    color_space: str = GRAY
    has_alpha: bool = False

    def __post_init__(self) -> None:
        if self.width < 1 or self.height < 1:
            raise ValueError(f"Invalid dimensions {self.width}x{self.height}")
        if not 1 <= self.components_per_pixel <= 4:
            raise ValueError(f"Unsupported component count {self.components_per_pixel}")
        if self.bits_per_component not in (8, 16):
            raise ValueError(f"Unsupported component depth {self.bits_per_component}")
        expected = self.width * self.height * self.components_per_pixel * self.bits_per_component // 8
        if len(self.data) != expected:
            raise ValueError(f"Buffer holds {len(self.data)} bytes, layout requires {expected}")

    @property
    def byte_length(self) -> int:
        return len(self.data)

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    @property
    def mode(self) -> str:
        """Pillow mode matching this layout."""
        key = (self.color_space, self.components_per_pixel, self.bits_per_component, self.has_alpha)
        try:
            return _LAYOUT_MODES[key]
        except KeyError:
            raise ValueError(f"No image mode for layout {key}") from None

    @classmethod
    def from_image(cls, image: Image.Image) -> "PixelBuffer":
        """
        Wrap a decoded Pillow image.

        Palette, bilevel and float images are expanded to 8-bit layouts; 32-bit and
        big-endian 16-bit gray become little-endian 16-bit samples.
        """
        if image.mode == "I" or (image.mode.startswith("I;16") and image.mode != "I;16"):
            return cls._from_wide_gray(image)
        if image.mode not in _MODE_LAYOUTS:
            image = _expand_mode(image)
        color_space, components, bits, has_alpha = _MODE_LAYOUTS[image.mode]
        return cls(
            width=image.width,
            height=image.height,
            data=image.tobytes(),
            components_per_pixel=components,
            bits_per_component=bits,
            color_space=color_space,
            has_alpha=has_alpha,
        )

    def to_image(self) -> Image.Image:
        """Build a new Pillow image over a copy of the bytes."""
        return Image.frombytes(self.mode, self.size, self.data)

    def drawable_image(self) -> Image.Image:
        """
        Read-only 8-bit-per-component view for drawing.

        8-bit layouts share the buffer bytes. 16-bit gray keeps the high byte of
        each sample, mapping 0..65535 onto 0..255.
        """
        if self.bits_per_component == 16:
            samples = np.frombuffer(self.data, dtype="<u2").reshape(self.height, self.width)
            return Image.fromarray((samples >> 8).astype(np.uint8))
        return Image.frombuffer(self.mode, self.size, self.data, "raw", self.mode, 0, 1)

    @classmethod
    def _from_wide_gray(cls, image: Image.Image) -> "PixelBuffer":
        """Store 32-bit and non-native 16-bit gray as little-endian 16-bit samples."""
        samples = np.clip(np.asarray(image, dtype=np.int64), 0, 0xFFFF).astype("<u2")
        return cls(
            width=image.width,
            height=image.height,
            data=samples.tobytes(),
            bits_per_component=16,
        )


@dataclass(frozen=True)
class GrayscaleBuffer(PixelBuffer):
    """Single-channel, 8 bits per sample, one byte per pixel."""

    def __post_init__(self) -> None:
        if (self.components_per_pixel, self.bits_per_component) != (1, 8) or self.color_space != GRAY:
            raise ValueError("GrayscaleBuffer requires one 8-bit gray component")
        super().__post_init__()

    def sample(self, row: int, col: int) -> int:
        if not (0 <= row < self.height and 0 <= col < self.width):
            raise IndexError(f"Sample ({row}, {col}) outside {self.width}x{self.height}")
        return self.data[row * self.width + col]


def _expand_mode(image: Image.Image) -> Image.Image:
    if image.mode == "P":
        return image.convert("RGBA" if "transparency" in image.info else "RGB")
    if image.mode == "PA":
        return image.convert("RGBA")
    if image.mode == "F":
        # float samples are in 8-bit units
        samples = np.clip(np.rint(np.asarray(image)), 0, 255).astype(np.uint8)
        return Image.fromarray(samples)
    if image.mode == "1":
        return image.convert("L")
    if "A" in image.getbands():
        return image.convert("RGBA")
    return image.convert("RGB")
