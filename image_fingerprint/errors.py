"""
Error types raised by the fingerprint pipeline.

Recoverable failures derive from FingerprintError. BufferSizeMismatch is an
integrity violation and derives from BaseException so that generic
``except Exception`` handlers never turn it into a usable result.
"""

from __future__ import annotations

CANVAS_CREATION_FAILED = "canvas_creation_failed"
READBACK_FAILED = "readback_failed"
UNSUPPORTED_COLOR_MODEL = "unsupported_color_model"


class FingerprintError(Exception):
    """Base class for recoverable pipeline errors."""


class DecodeError(FingerprintError):
    """Compressed image data could not be decoded."""


class EncodeError(FingerprintError):
    """An image could not be encoded."""


class CanvasError(FingerprintError):
    """Raised by a rendering backend when a canvas operation fails."""


class ConversionError(FingerprintError):
    """Grayscale normalization failed."""

    def __init__(self, message: str, reason: str) -> None:
        super().__init__(message)
        self.reason = reason


class ResizeError(FingerprintError):
    """Resampling failed."""

    def __init__(self, message: str, reason: str) -> None:
        super().__init__(message)
        self.reason = reason


class UnsupportedColorModel(ResizeError):
    """Resize was asked to handle an image with more than one component."""

    def __init__(self, components: int) -> None:
        super().__init__(
            f"Only single-component images can be resized, got {components} components",
            reason=UNSUPPORTED_COLOR_MODEL,
        )
        self.components = components


class BufferSizeMismatch(BaseException):
    """A buffer does not hold exactly the number of samples that was requested."""

    def __init__(self, expected: int, actual: int, context: str = "") -> None:
        where = f" ({context})" if context else ""
        super().__init__(f"Expected {expected} samples, got {actual}{where}")
        self.expected = expected
        self.actual = actual
        self.context = context
