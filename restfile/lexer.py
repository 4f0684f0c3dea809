"""Line classification for request blocks.

Each line of a block falls into exactly one :class:`LineKind`. Script
openers are only recognized on the side of the request line they belong to:
``<`` lines before it, ``>`` lines after it.
"""

from __future__ import annotations

import re
from enum import Enum, auto

METADATA_RE = re.compile(r"^\s*(?:#|//)\s*@([\w-]+)(?:\s+(.*?))?\s*$")

PRE_SCRIPT_MARKER = "<"
POST_SCRIPT_MARKER = ">"
INLINE_SCRIPT_OPEN = "{%"
INLINE_SCRIPT_CLOSE = "%}"
SCRIPT_FILE_SUFFIX = ".js"


class LineKind(Enum):
    BLANK = auto()
    COMMENT = auto()
    FILE_VARIABLE = auto()
    METADATA = auto()
    QUERY_CONTINUATION = auto()
    PRE_SCRIPT_FILE = auto()
    PRE_SCRIPT_INLINE = auto()
    POST_SCRIPT_FILE = auto()
    POST_SCRIPT_INLINE = auto()
    PLAIN = auto()


class Line:
    """A classified line.

    ``argument`` carries the kind-specific payload: the script path for file
    references, the text after ``{%`` for inline openers, and the
    ``(key, value)`` pair for metadata directives.
    """

    __slots__ = ("kind", "text", "argument")

    def __init__(self, kind: LineKind, text: str, argument=None) -> None:
        self.kind = kind
        self.text = text
        self.argument = argument

    def __repr__(self) -> str:
        return f"Line(kind={self.kind.name}, text={self.text!r})"


def is_comment(line: str) -> bool:
    trimmed = line.strip()
    return trimmed.startswith("#") or trimmed.startswith("//")


def is_file_variable(line: str) -> bool:
    """True for ``@name = value`` declarations."""
    trimmed = line.strip()
    return trimmed.startswith("@") and "=" in trimmed


def is_query_continuation(line: str) -> bool:
    trimmed = line.strip()
    return trimmed.startswith("?") or trimmed.startswith("&")


def parse_metadata_directive(line: str) -> tuple[str, str] | None:
    """Parse a ``# @key value`` / ``// @key value`` directive.

    Returns:
        ``(lowercased key, trimmed value)`` or None if the line is not a
        directive. The value is ``""`` for flag directives.
    """
    match = METADATA_RE.match(line)
    if match is None:
        return None
    return match.group(1).lower(), (match.group(2) or "").strip()


def _inline_opener(trimmed: str, marker: str) -> str | None:
    prefix = f"{marker} {INLINE_SCRIPT_OPEN}"
    if trimmed.startswith(prefix):
        return trimmed[len(prefix):]
    return None


def _script_file(trimmed: str, marker: str) -> str | None:
    if not trimmed.startswith(marker):
        return None
    if trimmed.startswith(f"{marker} {INLINE_SCRIPT_OPEN}"):
        return None
    path = trimmed[len(marker):].strip()
    if path.endswith(SCRIPT_FILE_SUFFIX):
        return path
    return None


def classify_line(line: str, request_line_found: bool) -> Line:
    """Classify one raw line of a request block.

    Args:
        line: The line exactly as it appears in the block.
        request_line_found: Whether the block's request line has been seen.

    Returns:
        The classified :class:`Line`.
    """
    trimmed = line.strip()

    if not request_line_found:
        path = _script_file(trimmed, PRE_SCRIPT_MARKER)
        if path is not None:
            return Line(LineKind.PRE_SCRIPT_FILE, line, path)
        rest = _inline_opener(trimmed, PRE_SCRIPT_MARKER)
        if rest is not None:
            return Line(LineKind.PRE_SCRIPT_INLINE, line, rest)
    else:
        path = _script_file(trimmed, POST_SCRIPT_MARKER)
        if path is not None:
            return Line(LineKind.POST_SCRIPT_FILE, line, path)
        rest = _inline_opener(trimmed, POST_SCRIPT_MARKER)
        if rest is not None:
            return Line(LineKind.POST_SCRIPT_INLINE, line, rest)

    if not trimmed:
        return Line(LineKind.BLANK, line)

    directive = parse_metadata_directive(trimmed)
    if directive is not None:
        return Line(LineKind.METADATA, line, directive)
    if is_comment(trimmed):
        return Line(LineKind.COMMENT, line)
    if is_file_variable(trimmed):
        return Line(LineKind.FILE_VARIABLE, line)
    if is_query_continuation(trimmed):
        return Line(LineKind.QUERY_CONTINUATION, line)
    return Line(LineKind.PLAIN, line)
