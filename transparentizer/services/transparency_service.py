from typing import Optional, Tuple
import logging
import numpy as np

from ..models.image import Image
from ..models.tolerance import TolerancePolicy, DEFAULT_TOLERANCE
from .color_service import match_mask

logger = logging.getLogger(__name__)

ALPHA_OPAQUE = 255
ALPHA_CLEAR = 0


class TransparencyService:
    """
    Clears the background of an opaque image.

    • Background colour is whatever sits at pixel (0, 0).
    • Every pixel matching it (see color_service) gets alpha 0; RGB is left alone.
    • Returns a **new** Image, the input is never modified.
    """

    def __init__(self, policy: TolerancePolicy = DEFAULT_TOLERANCE):
        self.policy = policy

    @staticmethod
    def to_rgba(img: Image) -> Image:
        """Copy of *img* as 8-bit straight-alpha RGBA."""
        pixels = img.pixels
        if pixels.shape[2] == 4:
            rgba = pixels.astype(np.uint8, copy=True)
        else:
            h, w = pixels.shape[:2]
            alpha = np.full((h, w, 1), ALPHA_OPAQUE, dtype=np.uint8)
            rgba = np.concatenate([pixels[..., :3].astype(np.uint8), alpha], axis=-1)
        return Image(pixels=rgba, path=img.path)

    @staticmethod
    def is_opaque(img: Image) -> bool:
        if not img.has_alpha:
            return True
        return bool((img.pixels[..., 3] == ALPHA_OPAQUE).all())

    def make_transparent(self, img: Image) -> Tuple[bool, Optional[Image]]:
        """
        Returns:
            (True, new_image) when the background was processed (even if no
            pixel matched), (False, None) when *img* already has non-opaque
            pixels and nothing was done.
        """
        rgba = self.to_rgba(img)
        if not self.is_opaque(rgba):
            logger.debug("Image already has non-opaque pixels, skipping")
            return False, None

        background = rgba.pixels[0, 0, :3]
        mask = match_mask(rgba.pixels, background, self.policy)
        rgba.pixels[mask, 3] = ALPHA_CLEAR

        logger.debug(
            f"Background {tuple(int(c) for c in background)}: cleared "
            f"{int(mask.sum())}/{mask.size} pixels"
        )
        return True, rgba
