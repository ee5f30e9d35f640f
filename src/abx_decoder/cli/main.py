"""Main CLI entry point for the abx2xml command-line tool.

Converts one Android binary XML file to textual XML:

    abx2xml [-mr] [-i] input [output]

Exit status is 0 on success and 1 on any failure, with the reason printed to
standard error.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from abx_decoder import __version__
from abx_decoder.api import convert_file, resolve_output_path
from abx_decoder.shared.config import ConfigError, ConverterConfig, GlobalConfig
from abx_decoder.shared.errors import AbxDecodeError
from abx_decoder.shared.logging import configure_logging, get_logger

EXIT_SUCCESS = 0
EXIT_FAILURE = 1

_DESCRIPTION = "Converts Android Binary XML to human-readable XML."
_EPILOG = (
    "When invoked with the '-i' argument, the output of a successful conversion "
    "will overwrite the original input file. output can be '-' to use stdout."
)


class _ArgumentParser(argparse.ArgumentParser):
    """Argument parser that reports usage errors with exit status 1."""

    def error(self, message: str) -> None:  # type: ignore[override]
        self.print_usage(sys.stderr)
        self.exit(EXIT_FAILURE, f"Error: {message}\n")


def load_config(config_path: Optional[Path]) -> ConverterConfig:
    """Load a JSON configuration file, or the defaults when none is given.

    Raises:
        ConfigError: If the file content is not a valid configuration
        OSError: If the file cannot be read
    """
    if config_path is None:
        return ConverterConfig()
    try:
        return ConverterConfig.from_json(config_path.read_text(encoding="utf-8"))
    except (ValueError, ConfigError) as e:
        raise ConfigError(f"Invalid configuration file {config_path}: {e}") from e


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = _ArgumentParser(
        prog="abx2xml",
        description=_DESCRIPTION,
        epilog=_EPILOG,
    )
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "-mr", "--multi-root",
        action="store_true",
        help="Enable multi-root processing"
    )
    parser.add_argument(
        "-i", "--in-place",
        action="store_true",
        help="Overwrite the input file when no output is given"
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        help="JSON configuration file"
    )

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    verbosity.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only log errors"
    )

    parser.add_argument("input", type=Path, help="Binary XML input file")
    parser.add_argument(
        "output",
        nargs="?",
        help="Output file, '-' for stdout (default: input with a .xml extension)"
    )
    return parser


def run(args: argparse.Namespace) -> int:
    """Perform the conversion described by parsed arguments."""
    logger = get_logger(__name__, None, "cli")
    try:
        config = load_config(args.config)
        # Without -v/-q or a non-default level from a config file, logging stays
        # unconfigured and only warnings reach stderr
        if args.verbose:
            configure_logging("DEBUG")
        elif args.quiet:
            configure_logging("ERROR")
        elif config.global_.logging_level != GlobalConfig().logging_level:
            configure_logging(config.global_.logging_level)

        target = resolve_output_path(args.input, args.output, args.in_place)
        written = convert_file(
            args.input,
            target,
            multi_root=args.multi_root,
            config=config,
        )
    except AbxDecodeError as e:
        print(f"Error: {e.kind}: {e}", file=sys.stderr)
        return EXIT_FAILURE
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE
    except OSError as e:
        logger.error("I/O failure", extra={"input": str(args.input)}, exc_info=False)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE

    destination = "stdout" if written == "-" else written
    mode = " (multi-root mode)" if args.multi_root or config.decoder.multi_root else ""
    print(f"Successfully converted {args.input} to {destination}{mode}", file=sys.stderr)
    return EXIT_SUCCESS


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        return EXIT_SUCCESS if not e.code else EXIT_FAILURE

    try:
        return run(args)
    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT


if __name__ == "__main__":
    sys.exit(main())
