"""restfile — Main entry point.

Ties together the CLI, parser and report modules to parse a request file
and print what it contains.
"""

import logging
import sys

from restfile.cli import parse_cli
from restfile.errors import ParseError, ValidationError
from restfile.parser import find_duplicate_names, find_request_by_name, parse_file_with_warnings
from restfile.report import (
    print_duplicate_names,
    print_json,
    print_parse_warnings,
    print_request,
    print_request_list,
    print_request_warnings,
)


def select_request(requests, index: int | None, name: str | None):
    """Pick the request chosen by ``--index`` (1-based) or ``--name``.

    Raises:
        ValidationError: If the selection does not match a request.
    """
    if name is not None:
        request = find_request_by_name(requests, name)
        if request is None:
            raise ValidationError("request name", "request not found", name)
        return request
    if not 1 <= index <= len(requests):
        raise ValidationError(
            "request index", f"out of range (1-{len(requests)})", str(index)
        )
    return requests[index - 1]


def main(argv: list[str] | None = None) -> int:
    """Run the restfile tool.

    Args:
        argv: Optional argument list (defaults to sys.argv).

    Returns:
        Exit code (0 = ok, 1 = warnings under --strict, 2 = error).
    """
    args = parse_cli(argv)

    if args.debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
        )

    try:
        result = parse_file_with_warnings(args.request_file, args.default_headers)
    except ParseError as exc:
        print(f"Error parsing request file: {exc}", file=sys.stderr)
        return 2

    requests = result.requests
    if args.verbose:
        print_parse_warnings(result.warnings)
    else:
        print_duplicate_names(find_duplicate_names(requests))

    if not requests:
        print("Error: no requests found in file", file=sys.stderr)
        return 2

    if args.strict and result.warnings:
        print(
            f"Error: {len(result.warnings)} warning(s) reported "
            "(run without --strict to continue)",
            file=sys.stderr,
        )
        return 1

    if args.index is None and args.name is None:
        if args.emit_json:
            print_json(requests)
        else:
            print(f"[*] {len(requests)} request(s) in {args.request_file}")
            print_request_list(requests)
        return 0

    try:
        request = select_request(requests, args.index, args.name)
    except ValidationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    print_request_warnings(request)
    if args.emit_json:
        print_json(request)
    else:
        print_request(request)
    return 0


if __name__ == "__main__":
    sys.exit(main())
