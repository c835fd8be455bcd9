from pathlib import Path
from typing import Union
from io import BytesIO
import os
import logging

import numpy as np
from PIL import Image as PILImage, UnidentifiedImageError
from dotenv import load_dotenv

from ..errors import DecodeError, EncodeError, FileSystemError, UnsupportedFormatError
from ..models.image import Image
from ..models.image_format import ImageFormat

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

# Everything Pillow may raise for a corrupt, mismatched or oversized stream
_CODEC_ERRORS = (
    UnidentifiedImageError, OSError, ValueError, SyntaxError, EOFError,
    PILImage.DecompressionBombError,
)

# 16/32-bit integer grayscale, reduced to 8 bits by keeping the high byte
_WIDE_GRAY_MODES = ("I", "I;16", "I;16L", "I;16B", "I;16N")


class ImageRepository:
    """
    Handles codec dispatch and file I/O for Image entities.
    The only module that talks to Pillow.
    """
    def __init__(self, jpeg_quality: int = None):
        if jpeg_quality is None:
            jpeg_quality = int(os.getenv("JPEG_QUALITY", "75"))
        self.jpeg_quality = jpeg_quality

    @staticmethod
    def _from_pil(pil_img: PILImage.Image, path: Path | None = None) -> Image:
        """
        Normalise any Pillow mode to RGB, or RGBA when the source carries alpha
        (an alpha band or a palette transparency entry).
        """
        if pil_img.mode in _WIDE_GRAY_MODES:
            return ImageRepository._from_wide_gray(pil_img, path)
        if "A" in pil_img.getbands() or "transparency" in pil_img.info:
            pil_img = pil_img.convert("RGBA")
        elif pil_img.mode != "RGB":
            pil_img = pil_img.convert("RGB")
        return Image(pixels=np.array(pil_img, dtype=np.uint8), path=path)

    @staticmethod
    def _from_wide_gray(pil_img: PILImage.Image, path: Path | None = None) -> Image:
        wide = np.asarray(pil_img, dtype=np.int64)
        gray = (np.clip(wide, 0, 0xFFFF) >> 8).astype(np.uint8)
        pixels = np.repeat(gray[..., None], 3, axis=-1)

        key = pil_img.info.get("transparency")
        if isinstance(key, int):
            alpha = np.where(wide == key, 0, 255).astype(np.uint8)
            pixels = np.concatenate([pixels, alpha[..., None]], axis=-1)
        return Image(pixels=pixels, path=path)

    @staticmethod
    def _to_pil(image: Image) -> PILImage.Image:
        pixels = image.pixels
        if not pixels.flags['C_CONTIGUOUS']:
            pixels = np.ascontiguousarray(pixels)
        return PILImage.fromarray(pixels)

    def decode(self, data: bytes, fmt: ImageFormat, path: Path | None = None) -> Image:
        """
        Decode *data* with the single codec named by *fmt*. PNG is the
        exception: it accepts anything a registered codec recognises.

        Raises:
            UnsupportedFormatError: fmt is UNSUPPORTED.
            DecodeError: the codec rejected the bytes.
        """
        if fmt.pil_format is None:
            raise UnsupportedFormatError(f"error when decoding image: unsupported type '{fmt.value}'")
        formats = None if fmt is ImageFormat.PNG else [fmt.pil_format]
        return self._decode(data, formats, fmt.value, path)

    def decode_any(self, data: bytes, path: Path | None = None) -> Image:
        """Decode with whatever registered codec recognises the bytes."""
        return self._decode(data, None, ImageFormat.UNSUPPORTED.value, path)

    def _decode(self, data: bytes, formats, label: str, path: Path | None = None) -> Image:
        try:
            with PILImage.open(BytesIO(data), formats=formats) as pil_img:
                pil_img.load()
                return self._from_pil(pil_img, path)
        except _CODEC_ERRORS as err:
            raise DecodeError(f"error when decoding image data of type '{label}': {err}") from err

    def encode(self, image: Image, fmt: ImageFormat) -> bytes:
        """
        Serialise *image* with the codec named by *fmt*.

        Raises:
            UnsupportedFormatError: fmt is UNSUPPORTED.
            EncodeError: the codec failed.
        """
        if fmt.pil_format is None:
            raise UnsupportedFormatError(f"error when encoding image: unsupported type '{fmt.value}'")

        pil_img = self._to_pil(image)
        params = {}
        if fmt is ImageFormat.JPEG:
            # JPEG has no alpha band
            pil_img = pil_img.convert("RGB")
            params["quality"] = self.jpeg_quality

        buffer = BytesIO()
        try:
            pil_img.save(buffer, format=fmt.pil_format, **params)
        except (OSError, ValueError, KeyError) as err:
            raise EncodeError(f"error when encoding image as '{fmt.value}': {err}") from err
        return buffer.getvalue()

    def load(self, path: Union[str, Path], fmt: ImageFormat) -> Image:
        path = Path(path)
        # Reject before touching the file
        if fmt is ImageFormat.UNSUPPORTED:
            raise UnsupportedFormatError(f"error when loading image '{path}': unsupported type '{fmt.value}'")

        try:
            data = path.read_bytes()
        except OSError as err:
            raise FileSystemError(f"error when opening file '{path}': {err}") from err

        try:
            return self.decode(data, fmt, path)
        except DecodeError as err:
            raise DecodeError(f"error when decoding image from file '{path}': {err}") from err

    def save(self, image: Image, path: Union[str, Path]) -> Path:
        """
        Write *image* as PNG, replacing any existing file at *path*
        (delete then create, not an atomic rename).
        """
        path = Path(path)
        data = self.encode(image, ImageFormat.PNG)
        try:
            if path.exists():
                logger.debug(f"Removing existing file: {path}")
                path.unlink()
            with open(path, "xb") as fh:
                fh.write(data)
        except OSError as err:
            raise FileSystemError(f"error creating file '{path}': {err}") from err
        return path

    @staticmethod
    def retrieve_image_dimensions(img: Image):
        return img.pixels.shape[:2]
