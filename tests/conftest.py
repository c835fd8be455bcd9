import numpy as np
import pytest
from PIL import Image as PILImage

from transparentizer.models.image import Image
from transparentizer.repositories.image_repository import ImageRepository
from transparentizer.services.image_service import ImageService

RED = (255, 0, 0)
GREEN = (0, 255, 0)
WHITE = (255, 255, 255)


def solid(width, height, color):
    """(H, W, len(color)) uint8 array filled with *color*."""
    return np.tile(np.array(color, dtype=np.uint8), (height, width, 1))


@pytest.fixture
def image_service():
    return ImageService(ImageRepository(jpeg_quality=95))


@pytest.fixture
def two_by_two():
    """Red background with a single green pixel at (1, 1)."""
    pixels = solid(2, 2, RED)
    pixels[1, 1] = GREEN
    return Image(pixels=pixels)


@pytest.fixture
def write_image(tmp_path):
    """Save an array to tmp_path with Pillow; the extension picks the codec."""
    def _write(name, pixels):
        path = tmp_path / name
        PILImage.fromarray(pixels).save(path)
        return path
    return _write
