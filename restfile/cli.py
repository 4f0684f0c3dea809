"""Command-line interface definition.

Builds the argparse parser for the ``restfile`` command and validates the
parsed arguments before any parsing work starts.
"""

import argparse
import os
import sys

from restfile import __version__


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser for the restfile CLI."""
    parser = argparse.ArgumentParser(
        prog="restfile",
        description=(
            "restfile v{ver} — Parse .http / .rest request files.\n\n"
            "Reads a file of '###'-separated request blocks, reports blocks "
            "that could not be parsed, and prints the requests it found."
        ).format(ver=__version__),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  restfile requests.http\n"
            "  restfile requests.http --name login --json\n"
            "  restfile requests.http --index 2 --header 'User-Agent: me'\n"
        ),
    )

    parser.add_argument(
        "request_file",
        help="Path to a .http or .rest file.",
    )

    selection = parser.add_mutually_exclusive_group()
    selection.add_argument(
        "--index",
        type=int,
        default=None,
        help="Show only the request at this 1-based position.",
    )
    selection.add_argument(
        "--name",
        default=None,
        help="Show only the first request with this @name.",
    )

    parser.add_argument(
        "--header",
        action="append",
        default=None,
        dest="headers",
        metavar="'NAME: VALUE'",
        help=(
            "Default header applied to every request (repeatable). "
            "Replaces the built-in User-Agent default."
        ),
    )
    parser.add_argument(
        "--json",
        action="store_true",
        dest="emit_json",
        help="Print requests as JSON.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Show warnings for blocks that were skipped.",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 1 when any warning is reported.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return parser


def parse_header_args(values: list[str] | None) -> dict[str, str] | None:
    """Turn ``--header 'Name: value'`` arguments into a header dict.

    Returns:
        None when no ``--header`` was given, so the built-in defaults apply.

    Raises:
        ValueError: If a value has no colon or an empty name.
    """
    if values is None:
        return None
    headers: dict[str, str] = {}
    for raw in values:
        name, colon, value = raw.partition(":")
        if not colon or not name.strip():
            raise ValueError(f"Invalid header {raw!r}, expected 'Name: value'")
        headers[name.strip()] = value.strip()
    return headers


def validate_args(args: argparse.Namespace) -> None:
    """Validate parsed CLI arguments.

    Raises:
        SystemExit: If the request file is missing or unreadable, the index
            is not positive, or a header is malformed.
    """
    if not os.path.isfile(args.request_file):
        print(
            f"Error: Request file not found: '{args.request_file}'",
            file=sys.stderr,
        )
        sys.exit(2)

    if not os.access(args.request_file, os.R_OK):
        print(
            f"Error: Request file is not readable: '{args.request_file}'",
            file=sys.stderr,
        )
        sys.exit(2)

    if args.index is not None and args.index < 1:
        print("Error: --index must be 1 or greater.", file=sys.stderr)
        sys.exit(2)

    if args.name is not None and not args.name.strip():
        print("Error: --name cannot be empty.", file=sys.stderr)
        sys.exit(2)

    try:
        args.default_headers = parse_header_args(args.headers)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)


def parse_cli(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse and validate command-line arguments.

    Args:
        argv: Optional list of arguments (defaults to sys.argv).

    Returns:
        Parsed and validated argument namespace.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    validate_args(args)
    return args
