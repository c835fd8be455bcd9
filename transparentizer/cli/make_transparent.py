import os
import sys
import logging
import argparse
from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from ..errors import TransparentizerError
from ..pipeline.background_remover import remove_background

logger = logging.getLogger(__name__)

_TRUE = {"1", "t", "true"}
_FALSE = {"0", "f", "false"}


def parse_bool(value: str) -> bool:
    lowered = value.lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise argparse.ArgumentTypeError(f"second argument has to be true or false - got {value}")


def log_level(name: str) -> int:
    """Numeric level for *name*; unknown names fall back to INFO."""
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="make-transparent",
        description="Make the uniform background of an image transparent and save it as out__<name>.png.",
    )
    parser.add_argument("file", help="Image file path - e.g. red-jpg.jpg")
    parser.add_argument(
        "round_trip",
        nargs="?",
        type=parse_bool,
        default=False,
        help="Pipe the image through a base64 data URI before processing (true/false, default false).",
    )
    return parser


def main(argv=None) -> int:
    # --- Centralized Logging Configuration ---
    logging.basicConfig(
        level=log_level(os.getenv("LOG_LEVEL", "INFO")),
        format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
        datefmt='%H:%M:%S'
    )

    args = build_parser().parse_args(argv)

    try:
        out_path = remove_background(args.file, round_trip=args.round_trip)
    except TransparentizerError as err:
        logger.error(f"{type(err).__name__}: {err}")
        return 1

    logger.info(f"Background removed: {args.file} -> {out_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
