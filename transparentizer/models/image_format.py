from __future__ import annotations
from enum import Enum
from pathlib import Path
from typing import Union


class ImageFormat(Enum):
    """
    Closed set of formats the codec layer knows about.

    The value is the MIME subtype used in data URIs (``data:image/<value>``).
    Adding a format means adding a member here and a row in each table below.
    """
    JPEG = "jpeg"
    PNG = "png"
    BMP = "bmp"
    TIFF = "tiff"
    GIF = "gif"
    WEBP = "webp"
    UNSUPPORTED = "unsupported"

    @property
    def pil_format(self) -> str | None:
        return _PIL_FORMATS.get(self)

    @property
    def mime_prefix(self) -> str:
        return f"data:image/{self.value}"

    @classmethod
    def from_extension(cls, ext: str) -> ImageFormat:
        """Map ``"JPG"``, ``".png"`` ... to a member; anything unknown is UNSUPPORTED."""
        return _EXTENSIONS.get(ext.lstrip(".").lower(), cls.UNSUPPORTED)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> ImageFormat:
        return cls.from_extension(Path(path).suffix)


_EXTENSIONS = {
    "jpg": ImageFormat.JPEG,
    "jpeg": ImageFormat.JPEG,
    "png": ImageFormat.PNG,
    "bmp": ImageFormat.BMP,
    "tiff": ImageFormat.TIFF,
    "gif": ImageFormat.GIF,
    "webp": ImageFormat.WEBP,
}

# Pillow plugin names
_PIL_FORMATS = {
    ImageFormat.JPEG: "JPEG",
    ImageFormat.PNG: "PNG",
    ImageFormat.BMP: "BMP",
    ImageFormat.TIFF: "TIFF",
    ImageFormat.GIF: "GIF",
    ImageFormat.WEBP: "WEBP",
}
