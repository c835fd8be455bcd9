from io import BytesIO

import numpy as np
import pytest
from PIL import Image as PILImage, features

from transparentizer.errors import DecodeError, FileSystemError, UnsupportedFormatError
from transparentizer.models.image import Image
from transparentizer.models.image_format import ImageFormat
from transparentizer.repositories.image_repository import ImageRepository
from conftest import solid, RED, WHITE


def pil_bytes(pixels, pil_format, **params):
    buffer = BytesIO()
    PILImage.fromarray(pixels).save(buffer, format=pil_format, **params)
    return buffer.getvalue()


@pytest.fixture
def repo():
    return ImageRepository(jpeg_quality=95)


@pytest.mark.parametrize("fmt", [ImageFormat.PNG, ImageFormat.BMP, ImageFormat.TIFF, ImageFormat.GIF])
def test_lossless_formats_decode_to_rgb(repo, fmt):
    pixels = solid(4, 3, RED)

    img = repo.decode(pil_bytes(pixels, fmt.pil_format), fmt)

    assert img.pixels.shape == (3, 4, 3)
    assert img.pixels.dtype == np.uint8
    assert np.array_equal(img.pixels, pixels)


def test_jpeg_decodes_with_same_dimensions(repo):
    img = repo.decode(pil_bytes(solid(8, 6, WHITE), "JPEG"), ImageFormat.JPEG)
    assert img.pixels.shape == (6, 8, 3)


@pytest.mark.skipif(not features.check("webp"), reason="Pillow built without WEBP")
def test_webp_decodes(repo):
    img = repo.decode(pil_bytes(solid(5, 5, RED), "WEBP", lossless=True), ImageFormat.WEBP)
    assert img.pixels.shape[:2] == (5, 5)


def test_alpha_band_is_kept(repo):
    pixels = solid(2, 2, (*RED, 255))
    pixels[0, 0, 3] = 0

    img = repo.decode(pil_bytes(pixels, "PNG"), ImageFormat.PNG)

    assert img.has_alpha
    assert img.pixels[0, 0, 3] == 0


def test_palette_transparency_becomes_alpha(repo):
    pal = PILImage.new("P", (2, 1))
    pal.putpalette([255, 0, 0, 0, 255, 0] + [0] * 762)
    pal.putpixel((1, 0), 1)
    buffer = BytesIO()
    pal.save(buffer, format="GIF", transparency=1, optimize=False)

    img = repo.decode(buffer.getvalue(), ImageFormat.GIF)

    assert img.has_alpha
    assert img.pixels[0, 1, 3] == 0
    assert img.pixels[0, 0, 3] == 255


def test_codec_mismatch_is_a_decode_error(repo):
    with pytest.raises(DecodeError):
        repo.decode(pil_bytes(solid(2, 2, RED), "PNG"), ImageFormat.JPEG)


def test_garbage_is_a_decode_error(repo):
    with pytest.raises(DecodeError):
        repo.decode(b"definitely not an image", ImageFormat.PNG)


def test_unsupported_tag_cannot_decode_or_encode(repo):
    with pytest.raises(UnsupportedFormatError):
        repo.decode(pil_bytes(solid(2, 2, RED), "PNG"), ImageFormat.UNSUPPORTED)
    with pytest.raises(UnsupportedFormatError):
        repo.encode(Image(pixels=solid(2, 2, RED)), ImageFormat.UNSUPPORTED)


def test_decode_any_detects_the_codec(repo):
    img = repo.decode_any(pil_bytes(solid(3, 3, WHITE), "BMP"))
    assert np.array_equal(img.pixels, solid(3, 3, WHITE))


def test_jpeg_encode_drops_alpha(repo):
    data = repo.encode(Image(pixels=solid(4, 4, (*WHITE, 0))), ImageFormat.JPEG)
    with PILImage.open(BytesIO(data)) as decoded:
        assert decoded.format == "JPEG"
        assert decoded.mode == "RGB"


def test_load_reads_file(repo, write_image):
    path = write_image("red.png", solid(3, 2, RED))

    img = repo.load(path, ImageFormat.PNG)

    assert img.path == path
    assert img.pixels.shape == (2, 3, 3)


def test_load_missing_file_is_a_filesystem_error(repo, tmp_path):
    with pytest.raises(FileSystemError):
        repo.load(tmp_path / "missing.png", ImageFormat.PNG)


def test_load_unsupported_fails_before_reading(repo, tmp_path):
    # the file does not exist, so any read attempt would surface as FileSystemError
    with pytest.raises(UnsupportedFormatError):
        repo.load(tmp_path / "missing.xyz", ImageFormat.UNSUPPORTED)


def test_load_corrupt_file_names_the_file(repo, tmp_path):
    path = tmp_path / "broken.png"
    path.write_bytes(b"\x89PNG\r\n\x1a\n broken")

    with pytest.raises(DecodeError, match="broken.png"):
        repo.load(path, ImageFormat.PNG)


def test_save_replaces_existing_file(repo, tmp_path):
    path = tmp_path / "out__red.png"
    path.write_bytes(b"stale content " * 10_000)

    repo.save(Image(pixels=solid(2, 2, (*RED, 0))), path)

    with PILImage.open(path) as written:
        assert written.format == "PNG"
        assert written.size == (2, 2)
        assert written.getpixel((0, 0)) == (255, 0, 0, 0)
    assert path.stat().st_size < 10_000


def test_save_into_missing_directory_is_a_filesystem_error(repo, tmp_path):
    with pytest.raises(FileSystemError):
        repo.save(Image(pixels=solid(1, 1, RED)), tmp_path / "nope" / "out.png")


def test_sixteen_bit_gray_keeps_high_byte(repo):
    wide = np.full((2, 3), 5000, dtype=np.uint16)
    wide[1, 2] = 60000

    img = repo.decode(pil_bytes(wide, "PNG"), ImageFormat.PNG)

    assert img.pixels.shape == (2, 3, 3)
    assert img.pixels[0, 0].tolist() == [19, 19, 19]
    assert img.pixels[1, 2].tolist() == [234, 234, 234]


def test_png_tag_accepts_any_recognised_codec(repo):
    img = repo.decode(pil_bytes(solid(5, 4, WHITE), "JPEG"), ImageFormat.PNG)
    assert img.pixels.shape == (4, 5, 3)


def test_oversized_image_is_a_decode_error(repo, monkeypatch):
    monkeypatch.setattr(PILImage, "MAX_IMAGE_PIXELS", 1000)

    with pytest.raises(DecodeError):
        repo.decode(pil_bytes(solid(100, 100, RED), "PNG"), ImageFormat.PNG)


def test_explicit_zero_jpeg_quality_is_kept(monkeypatch):
    monkeypatch.setenv("JPEG_QUALITY", "90")
    assert ImageRepository(jpeg_quality=0).jpeg_quality == 0
    assert ImageRepository().jpeg_quality == 90
