"""Content-type aware normalization of request bodies."""

from __future__ import annotations

import re

from restfile.constants import MIME_FORM_URLENCODED
from restfile.files import FileResolver
from restfile.graphql import build_graphql_body
from restfile.multipart import is_multipart_form_data

# "< path", "<@ path" or "<@encoding path"
FILE_REFERENCE_RE = re.compile(r"^<(?:@(\w[\w-]*)?)?[ \t]+(.+?)\s*$")


class BodyResult:
    """Normalized body text plus the warnings raised while building it."""

    __slots__ = ("raw_body", "warnings")

    def __init__(self, raw_body: str = "", warnings: list[str] | None = None) -> None:
        self.raw_body = raw_body
        self.warnings = warnings if warnings is not None else []


def is_form_urlencoded(content_type: str) -> bool:
    return MIME_FORM_URLENCODED in content_type.lower()


def compact_form(body: str) -> str:
    """Join form fields written one per line into a single ``a=1&b=2`` string."""
    fields = []
    for fragment in body.split("\n"):
        fragment = fragment.strip()
        if fragment:
            fields.append(fragment.removeprefix("&"))
    return "&".join(fields)


def inline_file_references(
    lines: list[str], resolver: FileResolver, warnings: list[str]
) -> list[str]:
    """Replace ``< path`` lines with the referenced file's text.

    A reference that cannot be read is kept literally and reported in
    ``warnings``.
    """
    parts = []
    for line in lines:
        match = FILE_REFERENCE_RE.match(line)
        if match is None:
            parts.append(line)
            continue
        encoding, path = match.group(1), match.group(2).strip()
        try:
            parts.append(resolver.resolve(path, encoding))
        except (OSError, LookupError, UnicodeDecodeError) as exc:
            warnings.append(
                f"file reference '{path}' could not be read: {exc}. "
                "Using literal content instead"
            )
            parts.append(line)
    return parts


def normalize_body(
    lines: list[str],
    content_type: str,
    resolver: FileResolver,
    is_graphql: bool = False,
) -> BodyResult:
    """Build the request body from the block's body lines.

    Args:
        lines: Body lines exactly as written in the block.
        content_type: The request's Content-Type header value (may be empty).
        resolver: Resolver used for ``< path`` file references.
        is_graphql: Whether to wrap the body in a GraphQL JSON envelope.

    Returns:
        A :class:`BodyResult`; the body is empty when only blank lines remain.
    """
    result = BodyResult()

    start = 0
    while start < len(lines) and not lines[start].strip():
        start += 1
    lines = lines[start:]
    if not lines:
        return result

    parts = inline_file_references(lines, resolver, result.warnings)

    line_ending = "\r\n" if is_multipart_form_data(content_type) else "\n"
    result.raw_body = line_ending.join(parts)

    if is_form_urlencoded(content_type):
        result.raw_body = compact_form(result.raw_body)

    if is_graphql:
        result.raw_body = build_graphql_body(result.raw_body)

    return result
