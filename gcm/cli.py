#!/usr/bin/env python3
"""
gcm CLI Interface

Command-line entry point: parses the arguments, configures logging and hands
a :class:`gcm.config.Config` to :func:`gcm.main.run`.

Usage:
    gcm [options]

Options:
    --only-message        Output only the final commit message without UI
    --verbose             Print detailed steps including chunks and diffs
    -h, --help            Display this help message
    --update              Update the Ollama models before running
    --engine ENGINE       Generation backend: ollama (default) or g4f
    --chunk-model MODEL   Ollama model used for each chunk
    --merge-model MODEL   Ollama model used to merge the micro messages
    --g4f-model MODEL     Model used with the g4f engine
    -a, --attempts N      Attempts for the final message (1-10, default 10)
    --version             Show version information
"""

import argparse
import logging
import sys
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler

from gcm import __version__
from gcm.config import (
    DEFAULT_CHUNK_MODEL,
    DEFAULT_G4F_MODEL,
    DEFAULT_MERGE_MODEL,
    ENGINES,
    MAX_ATTEMPTS,
    Config,
)
from gcm.main import EXIT_FAILURE, run
from gcm.utils import console

DESCRIPTION = "This tool generates intelligent git commit messages based on staged changes."

EPILOG = """\
Description:
  - Analyzes staged git changes (git diff --staged)
  - Splits changes into chunks for better analysis
  - Generates micro commit messages for each chunk
  - Combines them into a final cohesive commit message
  - Allows review and editing before committing
"""


def attempts_type(value: str) -> int:
    """Argparse type accepting an attempt count between 1 and MAX_ATTEMPTS."""
    try:
        attempts = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}")
    if not 1 <= attempts <= MAX_ATTEMPTS:
        raise argparse.ArgumentTypeError(f"must be between 1 and {MAX_ATTEMPTS}")
    return attempts


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the bare argument parser; arguments are added by the add_* helpers."""
    return argparse.ArgumentParser(
        prog="gcm",
        description=DESCRIPTION,
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )


def add_version_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
        help="Show version information",
    )


def add_mode_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--only-message",
        action="store_true",
        help="Output only the final commit message without UI",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Print detailed steps including chunks and diffs",
    )
    parser.add_argument(
        "--update",
        action="store_true",
        help="Update the Ollama models before running",
    )


def add_engine_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--engine",
        choices=ENGINES,
        default="ollama",
        help="Generation backend (default: ollama)",
    )
    parser.add_argument(
        "--chunk-model",
        default=DEFAULT_CHUNK_MODEL,
        metavar="MODEL",
        help=f"Ollama model used for each chunk (default: {DEFAULT_CHUNK_MODEL})",
    )
    parser.add_argument(
        "--merge-model",
        default=DEFAULT_MERGE_MODEL,
        metavar="MODEL",
        help=f"Ollama model used to merge micro messages (default: {DEFAULT_MERGE_MODEL})",
    )
    parser.add_argument(
        "--g4f-model",
        default=DEFAULT_G4F_MODEL,
        metavar="MODEL",
        help=f"Model used with the g4f engine (default: {DEFAULT_G4F_MODEL})",
    )


def add_generation_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-a", "--attempts",
        type=attempts_type,
        default=MAX_ATTEMPTS,
        help=f"Attempts to generate the final message (1-{MAX_ATTEMPTS}, default: {MAX_ATTEMPTS})",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = create_argument_parser()
    add_version_argument(parser)
    add_mode_arguments(parser)
    add_engine_arguments(parser)
    add_generation_arguments(parser)
    return parser


def create_config_from_args(args: argparse.Namespace) -> Config:
    """Create a Config object from parsed command-line arguments."""
    return Config(
        only_message=args.only_message,
        verbose=args.verbose,
        update=args.update,
        engine=args.engine,
        chunk_model=args.chunk_model,
        merge_model=args.merge_model,
        g4f_model=args.g4f_model,
        attempts=args.attempts,
    )


def configure_logging(verbose: bool) -> None:
    """Send log records through rich, at DEBUG level when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)

    try:
        config = create_config_from_args(args)
    except ValueError as e:
        parser.error(str(e))

    try:
        return run(config)
    except KeyboardInterrupt:
        console.print("\nOperation cancelled by user")
        return 130
    except Exception as e:
        if args.verbose:
            raise
        console.print(f"Error: {e!s}", style="red", markup=False)
        return EXIT_FAILURE


def main_cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    main_cli()
