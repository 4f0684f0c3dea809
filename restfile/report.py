"""Human-readable and JSON output for parsed requests."""

from __future__ import annotations

import json
import sys

from restfile.models import Request
from restfile.parser import DuplicateName, ParseWarning

BANNER = "=" * 60


def print_parse_warnings(warnings: list[ParseWarning]) -> None:
    """Print block-level warnings to stderr (block numbers are 1-based)."""
    for warning in warnings:
        print(
            f"Warning: block {warning.block_index + 1}: {warning.message}",
            file=sys.stderr,
        )


def print_duplicate_names(duplicates: dict[str, list[DuplicateName]]) -> None:
    for name, dupes in duplicates.items():
        print(
            f"Warning: duplicate @name '{name}' found in {len(dupes)} requests:",
            file=sys.stderr,
        )
        for dupe in dupes:
            print(
                f"  - request {dupe.index + 1}: {dupe.method} {dupe.url}",
                file=sys.stderr,
            )
        print("First match will be used when selecting by name.", file=sys.stderr)


def print_request_warnings(request: Request) -> None:
    for warning in request.warnings:
        print(f"Warning: {warning}", file=sys.stderr)


def print_request_list(requests: list[Request]) -> None:
    """Print one line per request: position, method, URL and name."""
    for position, request in enumerate(requests, start=1):
        line = f"  [{position}] {request.method} {request.url}"
        if request.display_name:
            line += f"  ({request.display_name})"
        print(line)


def print_request(request: Request) -> None:
    """Print a formatted view of a single request to stdout."""
    print(f"\n{BANNER}")
    print(f"  {request.method} {request.url}")
    print(BANNER)

    meta = request.metadata
    if request.display_name:
        print(f"\n  Name        : {request.display_name}")
    if meta.note:
        print(f"  Note        : {meta.note}")
    if meta.no_redirect:
        print("  No redirect : YES")
    if meta.no_cookie_jar:
        print("  No cookies  : YES")
    for prompt in meta.prompts:
        secret = " (secret)" if prompt.is_password else ""
        print(f"  Prompt      : {prompt.name}{secret} {prompt.description}".rstrip())

    print("\n  Headers:")
    for key, value in request.headers.items():
        print(f"    {key}: {value}")

    if request.multipart_parts:
        print("\n  Multipart parts:")
        for part in request.multipart_parts:
            if part.file_path:
                print(f"    {part.name}: < {part.file_path}")
            elif part.file_name:
                print(f"    {part.name}: <file {part.file_name}>")
            else:
                print(f"    {part.name}: {part.value}")
    elif request.raw_body:
        print(f"\n  Body:\n    {request.raw_body}")

    if meta.pre_script:
        print(f"\n  Pre-request script:\n    {meta.pre_script}")
    if meta.post_script:
        print(f"\n  Post-response script:\n    {meta.post_script}")

    print(f"\n{BANNER}\n")


def print_json(requests: list[Request] | Request) -> None:
    if isinstance(requests, Request):
        payload = requests.to_dict()
    else:
        payload = [request.to_dict() for request in requests]
    print(json.dumps(payload, indent=2))
