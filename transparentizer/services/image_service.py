from pathlib import Path
from typing import Union

from ..models.image import Image
from ..models.image_format import ImageFormat
from ..repositories.image_repository import ImageRepository


class ImageService:
    """I/O helpers.  No transparency logic, no base64."""
    def __init__(self, image_repository: ImageRepository = None):
        self.image_repository = image_repository or ImageRepository()

    @staticmethod
    def resolve_format(path: Union[str, Path]) -> ImageFormat:
        """Format tag from the file extension, e.g. ``red.JPG`` -> JPEG."""
        return ImageFormat.from_path(path)

    def load(self, path: Union[str, Path], fmt: ImageFormat = None) -> Image:
        """Load a single image from disk into an Image object."""
        if fmt is None:
            fmt = self.resolve_format(path)
        return self.image_repository.load(path, fmt)

    def decode(self, data: bytes, fmt: ImageFormat) -> Image:
        return self.image_repository.decode(data, fmt)

    def decode_any(self, data: bytes) -> Image:
        return self.image_repository.decode_any(data)

    def encode(self, image: Image, fmt: ImageFormat) -> bytes:
        return self.image_repository.encode(image, fmt)

    def save(self, image: Image, path: Union[str, Path]) -> Path:
        """
        Business-level method to save the image as PNG, overwriting *path*.
        """
        return self.image_repository.save(image, path)

    def get_image_dimensions(self, img: Image):
        return self.image_repository.retrieve_image_dimensions(img)
