"""
ssri CLI

Command-line interface for generating and checking integrity strings.
"""

import argparse
import asyncio
import json
import logging
import sys
from contextlib import contextmanager
from typing import BinaryIO, Iterator, List, Optional

import yaml

from . import __version__
from .core.config import Config
from .core.exceptions import IntegrityError, SRIError
from .digest import from_hex
from .integrity import parse, stringify
from .observability import setup_logging
from .stream import check_stream, from_stream

logger = logging.getLogger(__name__)


def load_config(config_path: Optional[str]) -> Config:
    """Load configuration from file or use defaults."""
    if config_path:
        return Config.from_file(config_path)
    return Config()


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog="ssri",
        description="Generate, normalize and verify Subresource Integrity strings",
    )

    parser.add_argument(
        "-c", "--config",
        help="Path to configuration file",
        default=None,
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (overrides config)",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit structured JSON logs",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Hash command
    hash_parser = subparsers.add_parser("hash", help="Compute integrity for a file")
    hash_parser.add_argument(
        "file",
        help="File to hash, or - for stdin",
    )
    hash_parser.add_argument(
        "-a", "--algorithm",
        dest="algorithms",
        action="append",
        help="Algorithm to compute (repeatable)",
    )
    hash_parser.add_argument(
        "-o", "--option",
        dest="options",
        action="append",
        help="Option appended to every entry (repeatable)",
    )
    hash_parser.add_argument(
        "--strict",
        action="store_true",
        help="Only emit W3C-conformant entries",
    )

    # Check command
    check_parser = subparsers.add_parser("check", help="Verify a file against integrity")
    check_parser.add_argument(
        "file",
        help="File to verify, or - for stdin",
    )
    check_parser.add_argument(
        "-i", "--integrity",
        required=True,
        help="Expected integrity string",
    )
    check_parser.add_argument(
        "--size",
        type=int,
        default=None,
        help="Expected size in bytes",
    )
    check_parser.add_argument(
        "--strict",
        action="store_true",
        help="Parse the expected integrity strictly",
    )

    # Normalize command
    normalize_parser = subparsers.add_parser("normalize", help="Clean up an integrity string")
    normalize_parser.add_argument(
        "integrity",
        help="Integrity string",
    )
    normalize_parser.add_argument(
        "--strict",
        action="store_true",
        help="Drop entries outside the W3C grammar",
    )
    normalize_parser.add_argument(
        "--sep",
        default=None,
        help="Entry separator",
    )

    # Hex command
    hex_parser = subparsers.add_parser("hex", help="Show the hex digest of the strongest entry")
    hex_parser.add_argument(
        "integrity",
        help="Integrity string",
    )

    # From-hex command
    from_hex_parser = subparsers.add_parser("from-hex", help="Build an entry from a hex digest")
    from_hex_parser.add_argument(
        "hex_digest",
        help="Hex-encoded digest",
    )
    from_hex_parser.add_argument(
        "-a", "--algorithm",
        required=True,
        help="Algorithm that produced the digest",
    )
    from_hex_parser.add_argument(
        "-o", "--option",
        dest="options",
        action="append",
        help="Option appended to the entry (repeatable)",
    )

    # Pick command
    pick_parser = subparsers.add_parser("pick", help="Show the algorithm that would be trusted")
    pick_parser.add_argument(
        "integrity",
        help="Integrity string",
    )

    # Version command
    subparsers.add_parser("version", help="Show version")

    return parser


@contextmanager
def open_source(path: str) -> Iterator[BinaryIO]:
    """Open a file for binary reading, - meaning stdin."""
    if path == "-":
        yield sys.stdin.buffer
        return
    with open(path, "rb") as f:
        yield f


def report_error(error: SRIError) -> int:
    print(json.dumps(error.to_dict(), indent=2, default=str), file=sys.stderr)
    return 1


async def cmd_hash(args: argparse.Namespace, config: Config) -> int:
    """Compute integrity for a file."""
    algorithms: List[str] = args.algorithms or config.hashing.default_algorithms
    with open_source(args.file) as source:
        integrity = await from_stream(
            source,
            algorithms=algorithms,
            options=args.options,
            strict=args.strict or config.parsing.strict,
            backend=config.hashing.backend,
            chunk_size=config.hashing.chunk_size,
        )
    print(integrity.to_string(sep=config.parsing.separator))
    return 0


async def cmd_check(args: argparse.Namespace, config: Config) -> int:
    """Verify a file against integrity."""
    try:
        with open_source(args.file) as source:
            match = await check_stream(
                source,
                args.integrity,
                size=args.size,
                strict=args.strict or config.parsing.strict,
                backend=config.hashing.backend,
                chunk_size=config.hashing.chunk_size,
            )
    except IntegrityError as e:
        logger.error(f"Verification failed: {e.message}")
        return report_error(e)

    print(match)
    return 0


def cmd_normalize(args: argparse.Namespace, config: Config) -> int:
    """Clean up an integrity string."""
    print(stringify(
        args.integrity,
        strict=args.strict or config.parsing.strict,
        sep=args.sep if args.sep is not None else config.parsing.separator,
    ))
    return 0


def cmd_hex(args: argparse.Namespace, config: Config) -> int:
    """Show the hex digest of the strongest entry."""
    print(parse(args.integrity, strict=config.parsing.strict).hex_digest())
    return 0


def cmd_from_hex(args: argparse.Namespace, config: Config) -> int:
    """Build an entry from a hex digest."""
    try:
        integrity = from_hex(args.hex_digest, args.algorithm, options=args.options)
    except ValueError as e:
        print(f"Invalid hex digest: {e}", file=sys.stderr)
        return 1
    print(integrity)
    return 0


def cmd_pick(args: argparse.Namespace, config: Config) -> int:
    """Show the algorithm that would be trusted."""
    print(parse(args.integrity, strict=config.parsing.strict).pick_algorithm())
    return 0


def cmd_version(args: argparse.Namespace, config: Config) -> int:
    """Show version."""
    print(f"ssri {__version__}")
    return 0


async def async_main(args: argparse.Namespace, config: Config) -> int:
    """Async main entry point."""
    try:
        if args.command == "hash":
            return await cmd_hash(args, config)

        elif args.command == "check":
            return await cmd_check(args, config)

        elif args.command == "normalize":
            return cmd_normalize(args, config)

        elif args.command == "hex":
            return cmd_hex(args, config)

        elif args.command == "from-hex":
            return cmd_from_hex(args, config)

        elif args.command == "pick":
            return cmd_pick(args, config)

        elif args.command == "version":
            return cmd_version(args, config)

        else:
            print("No command specified. Use --help for usage.")
            return 1

    except SRIError as e:
        logger.error(f"{args.command} failed: {e.message}")
        return report_error(e)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    # Load config
    try:
        config = load_config(args.config)
    except (OSError, ValueError, TypeError, yaml.YAMLError, SRIError) as e:
        print(f"Failed to load config: {e}", file=sys.stderr)
        return 1

    # Setup logging
    log_level = "DEBUG" if args.verbose else (args.log_level or config.log_level)
    setup_logging(log_level, json_format=args.json_logs or config.json_logs)

    # Run async main
    return asyncio.run(async_main(args, config))


if __name__ == "__main__":
    sys.exit(main())
