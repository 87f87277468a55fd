"""Entry point: python -m protodjango --proto schema.proto [--out DIR]

Parses the schema and writes a Django REST Framework app into DIR.
"""

from __future__ import annotations

import argparse
from typing import Sequence

from rich.console import Console
from rich.markup import escape

from .errors import GeneratorError
from .logging_config import get_logger, setup_logging
from .pipeline import DEFAULT_OUTPUT_DIR, generate_app

logger = get_logger(__name__)

console = Console()
err_console = Console(stderr=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="protodjango",
        description="Generate a Django REST Framework app from a .proto file.",
    )
    parser.add_argument("--proto", metavar="FILE", help="Path to the .proto file")
    parser.add_argument(
        "--out",
        metavar="DIR",
        default=DEFAULT_OUTPUT_DIR,
        help=f"Output directory for the Django app (default: {DEFAULT_OUTPUT_DIR})",
    )
    parser.add_argument(
        "--strict-references",
        action="store_true",
        help="Fail when a field references a message that is not defined",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.proto:
        parser.error("please provide a .proto file with --proto")

    setup_logging(args.verbose)

    try:
        result = generate_app(
            args.proto,
            args.out,
            strict_references=args.strict_references,
        )
    except GeneratorError as exc:
        logger.debug("Generation failed: %s", exc)
        err_console.print(f"❌ [red]Error:[/red] {escape(str(exc))}", soft_wrap=True)
        return 1

    console.print(
        f"✅ [green]Django app generated at[/green] {escape(str(result.output_dir))}",
        soft_wrap=True,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
