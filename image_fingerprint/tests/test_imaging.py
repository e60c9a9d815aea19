from __future__ import annotations

from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image

from image_fingerprint.errors import DecodeError
from image_fingerprint.models.buffers import GrayscaleBuffer
from image_fingerprint.utils.imaging import (
    decode_image,
    decode_jpeg,
    decode_png,
    encode_jpeg,
    read_image,
    save_jpeg,
    write_jpeg,
)


def _make_image_bytes(size: tuple[int, int], fmt: str, mode: str = "RGB") -> bytes:
    image = Image.new(mode, size, color="red" if mode == "RGB" else 128)
    buffer = BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


def test_decode_jpeg_and_png() -> None:
    jpeg = decode_jpeg(_make_image_bytes((10, 20), "JPEG"))
    png = decode_png(_make_image_bytes((7, 3), "PNG", mode="L"))

    assert jpeg.size == (10, 20)
    assert jpeg.mode == "RGB"
    assert png.size == (7, 3)
    assert png.getpixel((0, 0)) == 128


def test_decoders_require_their_format() -> None:
    with pytest.raises(DecodeError):
        decode_jpeg(_make_image_bytes((4, 4), "PNG"))
    with pytest.raises(DecodeError):
        decode_png(_make_image_bytes((4, 4), "JPEG"))


def test_decode_rejects_garbage() -> None:
    with pytest.raises(DecodeError):
        decode_image(b"definitely not an image")
    with pytest.raises(DecodeError):
        decode_jpeg(_make_image_bytes((32, 32), "JPEG")[:40])


def test_read_image_accepts_paths_and_streams(tmp_path: Path) -> None:
    path = tmp_path / "pic.bmp"
    path.write_bytes(_make_image_bytes((5, 6), "BMP"))

    assert read_image(path).size == (5, 6)
    assert read_image(str(path)).size == (5, 6)
    with path.open("rb") as fh:
        assert read_image(fh).size == (5, 6)


def test_read_image_propagates_missing_files(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        read_image(tmp_path / "missing.png")


def test_encode_jpeg_of_grayscale_buffer() -> None:
    thumbnail = GrayscaleBuffer(width=8, height=8, data=bytes([200] * 64))

    with Image.open(BytesIO(encode_jpeg(thumbnail))) as decoded:
        assert decoded.format == "JPEG"
        assert decoded.mode == "L"
        assert decoded.size == (8, 8)


def test_encode_jpeg_flattens_alpha() -> None:
    encoded = encode_jpeg(Image.new("RGBA", (4, 4), (0, 255, 0, 128)))
    assert decode_jpeg(encoded).mode == "RGB"


def test_write_and_save_jpeg(tmp_path: Path) -> None:
    image = Image.new("RGB", (12, 12), "blue")
    stream = BytesIO()
    write_jpeg(image, stream)
    target = tmp_path / "nested" / "out.jpg"
    save_jpeg(image, target)

    assert stream.getvalue()[:2] == b"\xff\xd8"
    assert target.read_bytes()[:2] == b"\xff\xd8"


def test_decode_reports_oversized_images(monkeypatch: pytest.MonkeyPatch) -> None:
    data = _make_image_bytes((200, 200), "PNG")
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)

    with pytest.raises(DecodeError, match="Failed to load data as image"):
        decode_image(data)
