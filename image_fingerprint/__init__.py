"""
Perceptual fingerprints (average hash, difference hash) for raster images.
"""

from image_fingerprint.errors import (
    BufferSizeMismatch,
    CanvasError,
    ConversionError,
    DecodeError,
    EncodeError,
    FingerprintError,
    ResizeError,
    UnsupportedColorModel,
)
from image_fingerprint.models.buffers import Fingerprint, GrayscaleBuffer, PixelBuffer
from image_fingerprint.services.canvas import PillowBackend
from image_fingerprint.services.fingerprint_service import (
    FingerprintSet,
    average_hash,
    difference_hash,
    fingerprint_file,
    fingerprint_image,
)
from image_fingerprint.services.normalizer import to_grayscale
from image_fingerprint.services.resampler import resize
from image_fingerprint.utils.hashing import ahash_bits, dhash_bits, format_fingerprint
from image_fingerprint.utils.imaging import (
    decode_image,
    decode_jpeg,
    decode_png,
    encode_jpeg,
    read_image,
    save_jpeg,
    write_jpeg,
)

__version__ = "0.1.0"

__all__ = [
    "BufferSizeMismatch",
    "CanvasError",
    "ConversionError",
    "DecodeError",
    "EncodeError",
    "Fingerprint",
    "FingerprintError",
    "FingerprintSet",
    "GrayscaleBuffer",
    "PillowBackend",
    "PixelBuffer",
    "ResizeError",
    "UnsupportedColorModel",
    "ahash_bits",
    "average_hash",
    "decode_image",
    "decode_jpeg",
    "decode_png",
    "dhash_bits",
    "difference_hash",
    "encode_jpeg",
    "fingerprint_file",
    "fingerprint_image",
    "format_fingerprint",
    "read_image",
    "resize",
    "save_jpeg",
    "to_grayscale",
    "write_jpeg",
]
