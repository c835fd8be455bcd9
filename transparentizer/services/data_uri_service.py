import base64
import binascii
import logging

from ..errors import Base64DecodeError, UnsupportedEncodeFormatError
from ..models.image import Image
from ..models.image_format import ImageFormat
from .image_service import ImageService

logger = logging.getLogger(__name__)

BASE64_MARKER = "base64,"

# Formats that can be written as a data URI. WEBP decodes but is not encoded
# on this path.
ENCODABLE_FORMATS = (
    ImageFormat.JPEG,
    ImageFormat.PNG,
    ImageFormat.BMP,
    ImageFormat.TIFF,
    ImageFormat.GIF,
)

# Prefixes recognised when reading a data URI, checked in order at position 0
DECODABLE_FORMATS = ENCODABLE_FORMATS + (ImageFormat.WEBP,)


class DataUriService:
    """
    Serialises images to ``data:image/<fmt>;base64,<payload>`` and back.
    """

    def __init__(self, image_service: ImageService = None):
        self.image_service = image_service or ImageService()

    def encode_to_data_uri(self, img: Image, fmt: ImageFormat) -> str:
        if fmt not in ENCODABLE_FORMATS:
            raise UnsupportedEncodeFormatError(
                f"error when encoding image to base64: image type {fmt.value} is not supported"
            )
        payload = base64.b64encode(self.image_service.encode(img, fmt)).decode("ascii")
        return f"{fmt.mime_prefix};{BASE64_MARKER}{payload}"

    @staticmethod
    def detect_format(text: str) -> ImageFormat:
        for fmt in DECODABLE_FORMATS:
            if text.startswith(fmt.mime_prefix):
                return fmt
        return ImageFormat.UNSUPPORTED

    @staticmethod
    def extract_payload(text: str) -> bytes:
        """
        Base64-decode everything after the first marker. Without a marker the
        text itself is returned as raw bytes.
        """
        idx = text.find(BASE64_MARKER)
        if idx == -1:
            return text.encode("utf-8")
        try:
            # line breaks are skipped, anything else outside the alphabet is an error
            payload = text[idx + len(BASE64_MARKER):].replace("\r", "").replace("\n", "")
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as err:
            raise Base64DecodeError(f"error when decoding image from base64: {err}") from err

    def decode_from_data_uri(self, text: str) -> Image:
        """
        Parse a data URI back into an Image.

        An unrecognised ``data:image/...`` prefix is not an error: the payload
        is handed to the auto-detecting decoder instead.
        """
        fmt = self.detect_format(text)
        data = self.extract_payload(text)
        if fmt is ImageFormat.UNSUPPORTED:
            logger.info("Unrecognised data URI prefix, attempting auto-detect decode")
            return self.image_service.decode_any(data)
        return self.image_service.decode(data, fmt)

    def round_trip(self, img: Image, fmt: ImageFormat) -> Image:
        """Encode *img* as a data URI and decode it straight back."""
        text = self.encode_to_data_uri(img, fmt)
        logger.debug(f"Data URI length: {len(text)}")
        decoded = self.decode_from_data_uri(text)
        decoded.path = img.path
        return decoded
