"""Command-line interface for the Base64 Image Indexer.

WHY: Users need a one-line way to turn a folder of images into a JSON
index from the terminal or a build script.

HOW: argparse collects the glob, output directory, transformer name, name
pattern and flags, then calls pipeline.run(). Indexer errors are printed
to stderr and mapped to a non-zero exit status.

RULES:
- --transformer choices come from TRANSFORMER_NAMES
- Status messages go to stderr; the output path is printed to stdout
- Exit 0 on success, 1 on any IndexerError
- --silent suppresses progress messages, not errors
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from base64_indexer.config import (
    DEFAULT_GLOB,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_TRANSFORMER,
)
from base64_indexer.errors import IndexerError
from base64_indexer.pipeline import run
from base64_indexer.transformers import TRANSFORMER_NAMES


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    RULES:
    - Optional: --glob, --output, --transformer, --name-pattern
    - Flags: --silent, --no-optimize, --verbose
    """
    parser = argparse.ArgumentParser(
        prog="base64_indexer",
        description="Convert images matched by a glob pattern into a JSON "
                    "file of base64 data URIs.",
    )

    parser.add_argument(
        "--glob",
        default=DEFAULT_GLOB,
        help="Pattern for matching input files; {a,b} alternatives allowed "
             "(default: %(default)s).",
    )

    parser.add_argument(
        "--output",
        default=DEFAULT_OUTPUT_DIR,
        help="Directory the JSON file is written to (default: %(default)s).",
    )

    parser.add_argument(
        "--transformer",
        default=DEFAULT_TRANSFORMER,
        choices=sorted(TRANSFORMER_NAMES),
        help="Output shape (default: %(default)s).",
    )

    parser.add_argument(
        "--name-pattern",
        default=None,
        help="Regular expression whose capture groups form each entry's name, "
             "e.g. '(.*?)\\.[^.]+' to drop the extension.",
    )

    parser.add_argument(
        "--silent",
        action="store_true",
        help="Suppress progress messages.",
    )

    parser.add_argument(
        "--no-optimize",
        dest="optimize",
        action="store_false",
        help="Encode files as-is, without lossless JPEG recompression.",
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing

    Returns:
        Process exit status.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        path = run(
            glob=args.glob,
            output=args.output,
            output_transformer=args.transformer,
            name_transformer=args.name_pattern,
            silent=args.silent,
            optimize=args.optimize,
        )
    except IndexerError as e:
        print("Error: {}".format(e), file=sys.stderr)
        return 1

    print(path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
