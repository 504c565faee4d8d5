"""Command-line entry point: chunk a Go module into a JSON file."""

import argparse
import logging
import sys
from typing import Optional

from .chunker import extract_chunks, load_project
from .diagnostics import Diagnostics
from .errors import ChunkerError
from .storage import DEFAULT_OUTPUT_FILE, write_chunks_json
from .tools.chunk_project import validate_project_path

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="go-chunk",
        description="Extract functions, methods, types and values of a Go module as JSON chunks.",
    )
    parser.add_argument(
        "--path",
        required=True,
        help="Path to the Go module's root directory (must contain go.mod)",
    )
    parser.add_argument(
        "--output",
        default=DEFAULT_OUTPUT_FILE,
        help=f"Output JSON file (default: {DEFAULT_OUTPUT_FILE})",
    )
    parser.add_argument("--verbose", action="store_true", help="Log every loaded package and skipped item")
    return parser


def main(argv: Optional[list] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    project_path, error = validate_project_path(args.path)
    if error:
        print(f"Error: {error}", file=sys.stderr)
        return 1

    print(f"Processing Go project at: {project_path}")
    diagnostics = Diagnostics(logger)
    try:
        units = load_project(str(project_path), diagnostics)
        chunks = extract_chunks(units, str(project_path), diagnostics)
        count = write_chunks_json(chunks, args.output)
    except ChunkerError as e:
        logger.error(str(e))
        return 1

    print(f"Successfully extracted {count} code chunks to {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
