from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional, Sequence

from pydantic import ValidationError

from .errors import Csv2JsonError, InvalidArgumentsError
from .models import ConversionConfig
from .pipeline import convert_file
from .rules import DEFAULT_SEPARATOR, INPUT_EXTENSION, SEPARATORS

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="csv2json",
        description="Convert a comma or semicolon separated file into a JSON array of objects",
    )
    parser.add_argument("filepath", nargs="?", help="Input .csv file")
    parser.add_argument(
        "--separator",
        default=DEFAULT_SEPARATOR,
        help=f"Column separator: {' or '.join(SEPARATORS)} (default: {DEFAULT_SEPARATOR})",
    )
    parser.add_argument("--pretty", action="store_true", help="Generate pretty JSON")
    parser.add_argument("--quiet", "-q", action="store_true", help="Only log warnings and errors")
    return parser


def check_if_valid_file(filename) -> bool:
    path = Path(filename)

    if not path.exists():
        raise InvalidArgumentsError(f"File {filename} does not exist")

    if path.suffix != INPUT_EXTENSION:
        raise InvalidArgumentsError(f"File {filename} is not CSV")

    return True


def get_file_data(argv: Optional[Sequence[str]] = None) -> ConversionConfig:
    return config_from_args(build_parser().parse_args(argv))


def config_from_args(args: argparse.Namespace) -> ConversionConfig:
    if not args.filepath:
        raise InvalidArgumentsError("A filepath argument is required")

    check_if_valid_file(args.filepath)

    try:
        return ConversionConfig(
            input_path=Path(args.filepath),
            separator=args.separator,
            pretty=args.pretty,
        )
    except ValidationError as e:
        raise InvalidArgumentsError("Only comma or semicolon separators are allowed") from e


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = config_from_args(args)
        convert_file(config)
    except Csv2JsonError as e:
        logger.error(str(e))
        return 1

    return 0
