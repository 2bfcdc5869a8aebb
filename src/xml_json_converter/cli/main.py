"""Main CLI entry point for the xml-json command-line tool."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from xml_json_converter import __version__
from xml_json_converter.api import XmlJsonConverter
from xml_json_converter.shared import (
    ConfigError,
    ConverterConfig,
    ParseError,
    SerializationError,
    TextMode,
    get_logger,
)

STDIN_PATH = "-"

logger = get_logger(__name__, None, "cli")


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="xml-json",
        description="Convert XML documents to JSON"
    )

    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Quiet output"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    convert_parser = subparsers.add_parser("convert", help="Convert XML files to JSON")
    convert_parser.add_argument(
        "paths",
        nargs="+",
        help="XML files to convert ('-' reads standard input)"
    )
    destination = convert_parser.add_mutually_exclusive_group()
    destination.add_argument(
        "--output", "-o",
        type=Path,
        help="Output file for a single input (default: stdout)"
    )
    destination.add_argument(
        "--output-dir", "-d",
        type=Path,
        help="Directory for <name>.json outputs (default: next to each input)"
    )
    convert_parser.add_argument(
        "--indent",
        type=int,
        help="Indent output by this many spaces"
    )
    convert_parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail on malformed XML instead of converting the readable part"
    )
    convert_parser.add_argument(
        "--text-runs",
        choices=["last", "concat"],
        help="Keep the last text run of an element or join all of them"
    )
    convert_parser.add_argument(
        "--object-name",
        action="store_true",
        help="Add the legacy _objectName key to objects with children"
    )
    convert_parser.add_argument(
        "--no-sort-keys",
        action="store_true",
        help="Keep keys in projection order instead of sorting them"
    )
    convert_parser.add_argument(
        "--config", "-c",
        type=Path,
        help="JSON configuration file; command-line flags take precedence"
    )

    return parser


def build_config(args: argparse.Namespace) -> ConverterConfig:
    """Create the converter configuration from a config file and CLI flags."""
    config = ConverterConfig.from_file(args.config) if args.config else ConverterConfig()

    overrides = {}
    if args.strict:
        overrides["tree__strict"] = True
    if args.text_runs:
        overrides["tree__text_mode"] = TextMode[args.text_runs.upper()]
    if args.object_name:
        overrides["projection__include_object_name"] = True
    if args.indent is not None:
        overrides["output__indent"] = args.indent
    if args.no_sort_keys:
        overrides["output__sort_keys"] = False

    return config.override(**overrides) if overrides else config


def _output_path(path: str, output_dir: Optional[Path]) -> Path:
    source = Path(path)
    return (output_dir or source.parent) / f"{source.stem}.json"


def _convert_one(converter: XmlJsonConverter, path: str) -> bytes:
    if path == STDIN_PATH:
        return converter.convert(sys.stdin.buffer.read())
    return converter.convert_file(path)


def cmd_convert(args: argparse.Namespace) -> int:
    """Handle convert command."""
    try:
        config = build_config(args)
    except (ConfigError, OSError) as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return 1

    single_output = len(args.paths) == 1 and args.output_dir is None
    if not single_output and args.output:
        print("--output accepts a single input; use --output-dir", file=sys.stderr)
        return 1
    if not single_output and STDIN_PATH in args.paths:
        print("Standard input can only be converted on its own", file=sys.stderr)
        return 1

    converter = XmlJsonConverter(config)
    failures = 0

    for path in args.paths:
        partial_before = converter.statistics["partial_conversions"]
        try:
            output = _convert_one(converter, path)
        except OSError as e:
            print(f"Error reading {path}: {e}", file=sys.stderr)
            failures += 1
            continue
        except ParseError as e:
            print(f"Malformed XML in {path}: {e}", file=sys.stderr)
            failures += 1
            continue
        except SerializationError as e:
            print(f"Could not serialize {path}: {e}", file=sys.stderr)
            failures += 1
            continue

        if converter.statistics["partial_conversions"] > partial_before:
            print(
                f"Warning: {path} is malformed; output covers the part read before the error",
                file=sys.stderr
            )

        if single_output and args.output is None:
            print(output.decode("utf-8"))
            continue

        target = args.output if single_output else _output_path(path, args.output_dir)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(output)
        except OSError as e:
            print(f"Error writing {target}: {e}", file=sys.stderr)
            failures += 1
            continue

        logger.info("Wrote output", extra={"input_path": path, "output_path": str(target)})
        if not args.quiet:
            print(f"Converted: {path} -> {target}", file=sys.stderr)

    return 0 if failures == 0 else 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    elif args.quiet:
        logging.basicConfig(level=logging.ERROR)

    try:
        if args.command == "convert":
            return cmd_convert(args)
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT


if __name__ == "__main__":
    sys.exit(main())
