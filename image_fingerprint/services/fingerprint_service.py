"""
Pipeline orchestration: grayscale normalization, resize, bit extraction.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable

from PIL import Image

from image_fingerprint.models.buffers import Fingerprint, GrayscaleBuffer, PixelBuffer
from image_fingerprint.services.canvas import PillowBackend
from image_fingerprint.services.normalizer import to_grayscale
from image_fingerprint.services.resampler import resize
from image_fingerprint.utils.hashing import AHASH_SIZE, DHASH_SIZE, ahash_bits, dhash_bits
from image_fingerprint.utils.imaging import read_image

LOGGER = logging.getLogger(__name__)

AHASH = "ahash"
DHASH = "dhash"

# algorithm -> (thumbnail size, bit extractor)
ALGORITHMS: dict[str, tuple[tuple[int, int], Callable[[GrayscaleBuffer], Fingerprint]]] = {
    AHASH: (AHASH_SIZE, ahash_bits),
    DHASH: (DHASH_SIZE, dhash_bits),
}


@dataclass(frozen=True)
class FingerprintSet:
    """Fingerprints of one image plus the thumbnails they were computed from."""

    ahash: Fingerprint | None = None
    dhash: Fingerprint | None = None
    thumbnails: dict[str, GrayscaleBuffer] = field(default_factory=dict)


def average_hash(image: PixelBuffer | Image.Image, backend: PillowBackend | None = None) -> Fingerprint:
    gray = to_grayscale(image, backend=backend)
    return ahash_bits(resize(gray, *AHASH_SIZE, backend=backend))


def difference_hash(image: PixelBuffer | Image.Image, backend: PillowBackend | None = None) -> Fingerprint:
    gray = to_grayscale(image, backend=backend)
    return dhash_bits(resize(gray, *DHASH_SIZE, backend=backend))


def validate_algorithms(algorithms: Iterable[str]) -> tuple[str, ...]:
    selected = tuple(dict.fromkeys(algorithms))
    unknown = [name for name in selected if name not in ALGORITHMS]
    if unknown or not selected:
        raise ValueError(f"Unknown or empty algorithm selection: {unknown or selected}")
    return selected


def fingerprint_image(
    image: PixelBuffer | Image.Image,
    algorithms: Iterable[str] = (AHASH, DHASH),
    backend: PillowBackend | None = None,
) -> FingerprintSet:
    """Normalize once, then resize and extract once per requested algorithm."""
    selected = validate_algorithms(algorithms)
    backend = backend or PillowBackend()
    gray = to_grayscale(image, backend=backend)
    values: dict[str, Fingerprint] = {}
    thumbnails: dict[str, GrayscaleBuffer] = {}
    for name in selected:
        size, extract = ALGORITHMS[name]
        thumbnail = resize(gray, *size, backend=backend)
        thumbnails[name] = thumbnail
        values[name] = extract(thumbnail)
    return FingerprintSet(ahash=values.get(AHASH), dhash=values.get(DHASH), thumbnails=thumbnails)


def fingerprint_file(
    path: Path,
    algorithms: Iterable[str] = (AHASH, DHASH),
    backend: PillowBackend | None = None,
) -> FingerprintSet:
    with read_image(path) as image:
        result = fingerprint_image(image, algorithms=algorithms, backend=backend)
    LOGGER.debug("Fingerprinted %s", path)
    return result
