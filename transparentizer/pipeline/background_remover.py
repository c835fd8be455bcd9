# pipeline/background_remover.py
from pathlib import Path
from typing import Union
import os
import logging

from dotenv import load_dotenv

from ..errors import AlreadyTransparentError
from ..services.data_uri_service import DataUriService
from ..services.image_service import ImageService
from ..services.transparency_service import TransparencyService

# ------------------------------------------------------------------
# env-vars
load_dotenv()
OUTPUT_PREFIX = os.getenv("OUTPUT_PREFIX", "out__")
OUTPUT_EXT    = ".png"

logger = logging.getLogger(__name__)


def output_path_for(path: Union[str, Path], output_dir: Union[str, Path] = None) -> Path:
    """``photos/red.jpg`` -> ``<output_dir or cwd>/out__red.png``"""
    output_dir = Path(output_dir) if output_dir is not None else Path.cwd()
    return output_dir / f"{OUTPUT_PREFIX}{Path(path).stem}{OUTPUT_EXT}"


# ------------------------------------------------------------------
def remove_background(
    path: Union[str, Path],
    *,
    round_trip: bool                           = False,
    output_dir: Union[str, Path]               = None,
    image_service: ImageService                = None,
    transparency_service: TransparencyService  = None,
    data_uri_service: DataUriService           = None,
) -> Path:
    """
    For the image at *path*:
        • resolve the format from the extension (unsupported fails before any read)
        • decode it
        • optionally push it through a base64 data URI and back
        • clear the background
        • write ``out__<stem>.png``, replacing any existing file
    Returns the path written.
    """
    image_service = image_service or ImageService()
    transparency_service = transparency_service or TransparencyService()
    data_uri_service = data_uri_service or DataUriService(image_service)

    # 1. format + decode
    fmt = image_service.resolve_format(path)
    img = image_service.load(path, fmt)
    h, w = image_service.get_image_dimensions(img)
    logger.info(f"Loaded {path} ({fmt.value}, {w}x{h})")

    # 2. optional base64 round-trip
    if round_trip:
        img = data_uri_service.round_trip(img, fmt)
        logger.info(f"Round-tripped {path} through a {fmt.value} data URI")

    # 3. transparency
    applied, result = transparency_service.make_transparent(img)
    if not applied:
        raise AlreadyTransparentError("image not converted - it was probably already transparent")

    # 4. save
    out_path = image_service.save(result, output_path_for(path, output_dir))
    logger.info(f"Saved {out_path}")
    return out_path
