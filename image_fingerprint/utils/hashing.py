"""
Bit extraction for average and difference hashes.

Both functions read a fixed-size grayscale thumbnail and return a 64-bit
integer. Bit ``i`` is numbered in row-major order from the top-left sample.
"""

from __future__ import annotations

import numpy as np

from image_fingerprint.errors import BufferSizeMismatch
from image_fingerprint.models.buffers import Fingerprint, GrayscaleBuffer

AHASH_SIZE = (8, 8)
DHASH_SIZE = (9, 8)


def _samples(buffer: GrayscaleBuffer, size: tuple[int, int], algorithm: str) -> np.ndarray:
    width, height = size
    expected = width * height
    if (buffer.width, buffer.height) != size or len(buffer.data) != expected:
        raise BufferSizeMismatch(
            expected,
            len(buffer.data),
            context=f"{algorithm} needs {width}x{height}, got {buffer.width}x{buffer.height}",
        )
    return np.frombuffer(buffer.data, dtype=np.uint8).reshape(height, width)


def _pack_bits(bits: np.ndarray) -> Fingerprint:
    value = 0
    for idx in np.flatnonzero(bits.ravel()):
        value |= 1 << int(idx)
    return value


def ahash_bits(buffer: GrayscaleBuffer) -> Fingerprint:
    """Set bit i when sample i is strictly brighter than the mean of all 64 samples."""
    samples = _samples(buffer, AHASH_SIZE, "ahash").astype(np.float64)
    mean = samples.sum() / samples.size
    return _pack_bits(samples > mean)


def dhash_bits(buffer: GrayscaleBuffer) -> Fingerprint:
    """Set bit r*8+c when sample (r, c) is strictly brighter than its right neighbour."""
    grid = _samples(buffer, DHASH_SIZE, "dhash")
    return _pack_bits(grid[:, :-1] > grid[:, 1:])


def format_fingerprint(value: Fingerprint) -> str:
    """Render a fingerprint as 16 lowercase hex digits."""
    if not 0 <= value < 1 << 64:
        raise ValueError(f"Fingerprint out of 64-bit range: {value}")
    return f"{value:016x}"
