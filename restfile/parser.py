"""Request file parsing engine.

Converts the text of a ``.http`` / ``.rest`` file into structured
:class:`~restfile.models.Request` objects. A file is a sequence of blocks
separated by lines of three or more ``#``; each block is run through a small
line-driven state machine:

  URL -> HEADER -> BODY -> (post-response script)

with an optional pre-request script before the request line. Problems in one
block never stop the others from being parsed: they become
:class:`ParseWarning` entries in the :class:`ParseResult`.
"""

from __future__ import annotations

import logging
import os
import re
from enum import Enum, auto

from restfile.body import normalize_body
from restfile.constants import (
    DEFAULT_METHOD,
    DEFAULT_USER_AGENT,
    HEADER_CONTENT_TYPE,
    HEADER_HOST,
    HEADER_USER_AGENT,
    VALID_HTTP_METHODS,
)
from restfile.errors import ParseError, ValidationError
from restfile.files import FileResolver
from restfile.graphql import detect_graphql
from restfile.headers import Headers
from restfile.lexer import LineKind, classify_line, is_comment, is_query_continuation
from restfile.metadata import apply_metadata
from restfile.models import Request, RequestMetadata
from restfile.multipart import is_multipart_form_data, parse_multipart
from restfile.scripts import ScriptBuffer

logger = logging.getLogger(__name__)

BLOCK_DELIMITER_RE = re.compile(r"^#{3,}.*$", re.MULTILINE)
METHOD_RE = re.compile(
    r"^(" + "|".join(VALID_HTTP_METHODS) + r")\s+", re.IGNORECASE
)
WORD_RE = re.compile(r"^([A-Za-z]+)\s+")
HTTP_VERSION_RE = re.compile(r"\s+HTTP/[\d.]+\s*$")

NO_REQUEST_LINE = "no request line found"


class ParseState(Enum):
    URL = auto()
    HEADER = auto()
    BODY = auto()
    PRE_SCRIPT = auto()  # inside an inline pre-request script, resumes URL
    POST_SCRIPT = auto()  # inside an inline post-response script
    SCRIPT_TAIL = auto()  # after a post-response script; only scripts are read


class ParseWarning:
    """A non-fatal problem found while parsing one block."""

    __slots__ = ("block_index", "line", "message")

    def __init__(self, block_index: int, message: str, line: int = 0) -> None:
        self.block_index = block_index
        self.line = line
        self.message = message

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParseWarning):
            return NotImplemented
        return (self.block_index, self.line, self.message) == (
            other.block_index,
            other.line,
            other.message,
        )

    def __repr__(self) -> str:
        return (
            f"ParseWarning(block_index={self.block_index!r}, "
            f"line={self.line!r}, message={self.message!r})"
        )


class ParseResult:
    """Requests parsed from a file, in source order, plus block warnings."""

    __slots__ = ("requests", "warnings")

    def __init__(
        self,
        requests: list[Request] | None = None,
        warnings: list[ParseWarning] | None = None,
    ) -> None:
        self.requests = requests if requests is not None else []
        self.warnings = warnings if warnings is not None else []

    def __repr__(self) -> str:
        return (
            f"ParseResult(requests=<{len(self.requests)} requests>, "
            f"warnings=<{len(self.warnings)} warnings>)"
        )


class DuplicateName:
    """One request sharing its name with at least one other request."""

    __slots__ = ("name", "method", "url", "index")

    def __init__(self, name: str, method: str, url: str, index: int) -> None:
        self.name = name
        self.method = method
        self.url = url
        self.index = index

    def __repr__(self) -> str:
        return (
            f"DuplicateName(name={self.name!r}, method={self.method!r}, "
            f"url={self.url!r}, index={self.index!r})"
        )


class RequestLine:
    """Method and URL parsed from a block's request line."""

    __slots__ = ("method", "url", "warnings")

    def __init__(self, method: str, url: str, warnings: list[str]) -> None:
        self.method = method
        self.url = url
        self.warnings = warnings


def parse_request_line(line: str) -> RequestLine:
    """Parse ``[METHOD] URL [HTTP/x.y]``.

    A missing method defaults to GET. If the line starts with a word that is
    not a known method, GET is still used but a warning is returned.
    """
    line = line.strip()
    warnings: list[str] = []

    match = METHOD_RE.match(line)
    if match:
        method = match.group(1).upper()
        line = line[match.end():]
    else:
        word = WORD_RE.match(line)
        if word and word.group(1).upper() not in VALID_HTTP_METHODS:
            warnings.append(
                f"unknown HTTP method '{word.group(1)}', defaulting to GET. "
                "Valid methods: GET, POST, PUT, DELETE, PATCH, HEAD, OPTIONS"
            )
        method = DEFAULT_METHOD

    url = HTTP_VERSION_RE.sub("", line).strip()
    return RequestLine(method, url, warnings)


def parse_headers(
    lines: list[str], default_headers: dict[str, str] | None, url: str
) -> tuple[Headers, list[str]]:
    """Build the header mapping for a request.

    Default headers are laid down first (a default ``Host`` only for relative
    URLs). A header written in the block replaces a default of the same name;
    repeating it in the block combines the values.

    Returns:
        The headers and any malformed-header warnings.
    """
    if default_headers is None:
        default_headers = {HEADER_USER_AGENT: DEFAULT_USER_AGENT}

    headers = Headers()
    warnings: list[str] = []
    for name, value in default_headers.items():
        if name.lower() == HEADER_HOST.lower() and not url.startswith("/"):
            continue
        headers[name] = value

    seen: set[str] = set()
    for line in lines:
        name, colon, value = line.partition(":")
        name, value = name.strip(), value.strip()
        if not colon and name:
            warnings.append(
                f"malformed header '{name}': missing colon separator. "
                "Expected format: 'Header-Name: value'"
            )

        if name.lower() in seen:
            headers.add(name, value)
        else:
            seen.add(name.lower())
            headers[name] = value

    return headers, warnings


def resolve_relative_url(url: str, headers: Headers) -> str:
    """Prefix a ``/path`` URL with the scheme and Host header, if present."""
    host = headers.get(HEADER_HOST)
    if host is None or not url.startswith("/"):
        return url
    scheme = "https" if ":443" in host or ":8443" in host else "http"
    return f"{scheme}://{host}{url}"


class BlockParser:
    """State machine that turns the lines of one block into a request.

    One instance parses one block; nothing is shared between blocks.
    """

    def __init__(
        self,
        text: str,
        default_headers: dict[str, str] | None,
        resolver: FileResolver,
    ) -> None:
        self.text = text
        self.default_headers = default_headers
        self.resolver = resolver

        self.state = ParseState.URL
        self.found_request_line = False
        self.request_parts: list[str] = []
        self.header_lines: list[str] = []
        self.body_lines: list[str] = []
        self.pre_script = ScriptBuffer("pre-request")
        self.post_script = ScriptBuffer("post-response")
        self.metadata = RequestMetadata()

    def parse(self) -> Request:
        """Run the state machine over the block.

        Raises:
            ParseError: If the block has no request line.
        """
        lines = self.text.split("\n")
        index = 0
        while index < len(lines):
            self.consume(lines[index])
            index += 1

            if self.state is ParseState.URL and self.found_request_line:
                next_line = lines[index] if index < len(lines) else ""
                if is_query_continuation(next_line):
                    continue
                if not next_line.strip():
                    index += 1
                    self.state = ParseState.BODY
                elif not is_comment(next_line):
                    self.state = ParseState.HEADER

        if not self.found_request_line:
            raise ParseError(NO_REQUEST_LINE)
        return self.build()

    def consume(self, line: str) -> None:
        """Feed a single line to the state machine."""
        if self.state is ParseState.PRE_SCRIPT:
            if self.pre_script.feed(line):
                self.state = ParseState.URL
            return
        if self.state is ParseState.POST_SCRIPT:
            if self.post_script.feed(line):
                self.state = ParseState.SCRIPT_TAIL
            return

        item = classify_line(line, self.found_request_line)
        kind = item.kind

        if kind is LineKind.PRE_SCRIPT_FILE:
            self.pre_script.add_file(item.argument, self.resolver)
            return
        if kind is LineKind.PRE_SCRIPT_INLINE:
            if not self.pre_script.open_inline(item.argument):
                self.state = ParseState.PRE_SCRIPT
            return
        if kind is LineKind.POST_SCRIPT_FILE:
            self.post_script.add_file(item.argument, self.resolver)
            self.state = ParseState.SCRIPT_TAIL
            return
        if kind is LineKind.POST_SCRIPT_INLINE:
            if self.post_script.open_inline(item.argument):
                self.state = ParseState.SCRIPT_TAIL
            else:
                self.state = ParseState.POST_SCRIPT
            return

        if self.state is ParseState.SCRIPT_TAIL:
            return
        if kind is LineKind.METADATA:
            apply_metadata(self.metadata, *item.argument)
            return

        if self.state is ParseState.URL:
            if not self.found_request_line:
                if kind in (LineKind.BLANK, LineKind.COMMENT, LineKind.FILE_VARIABLE):
                    return
                self.request_parts.append(line.strip())
                self.found_request_line = True
            elif kind is LineKind.QUERY_CONTINUATION:
                self.request_parts.append(line.strip())
        elif self.state is ParseState.HEADER:
            if kind is LineKind.BLANK:
                self.state = ParseState.BODY
            elif kind is not LineKind.COMMENT:
                self.header_lines.append(line.strip())
        elif self.state is ParseState.BODY:
            self.body_lines.append(line)

    def build(self) -> Request:
        """Assemble the request from the collected lines."""
        self.metadata.pre_script = self.pre_script.text()
        self.metadata.post_script = self.post_script.text()

        request_line = parse_request_line("".join(self.request_parts))
        warnings = list(request_line.warnings)

        headers, header_warnings = parse_headers(
            self.header_lines, self.default_headers, request_line.url
        )
        warnings.extend(header_warnings)

        is_graphql = detect_graphql(headers, request_line.url)
        content_type = headers.get(HEADER_CONTENT_TYPE, "")
        body = normalize_body(self.body_lines, content_type, self.resolver, is_graphql)
        warnings.extend(body.warnings)

        request = Request(
            method=request_line.method,
            url=resolve_relative_url(request_line.url, headers),
            headers=headers,
            raw_body=body.raw_body,
            name=self.metadata.name,
            metadata=self.metadata,
        )
        request.warnings = warnings

        if is_multipart_form_data(content_type):
            request.multipart_parts = parse_multipart(body.raw_body, content_type)

        return request


def split_blocks(content: str) -> list[str]:
    """Split file content on ``###`` delimiter lines.

    ``n`` delimiter lines always give ``n + 1`` blocks, some possibly empty.
    """
    return BLOCK_DELIMITER_RE.split(content)


def _resolver_for(base_dir: str, resolver: FileResolver | None) -> FileResolver:
    return resolver if resolver is not None else FileResolver(base_dir)


def parse_request(
    text: str,
    default_headers: dict[str, str] | None = None,
    base_dir: str = "",
    resolver: FileResolver | None = None,
) -> Request:
    """Parse a single request block.

    Args:
        text: The block text.
        default_headers: Headers applied before the block's own headers;
            None means ``{"User-Agent": "restfile-cli"}``.
        base_dir: Directory used to resolve relative file references.
        resolver: Optional resolver; overrides ``base_dir`` when given.

    Returns:
        The parsed :class:`Request`.

    Raises:
        ParseError: If the block has no request line.
    """
    return BlockParser(text, default_headers, _resolver_for(base_dir, resolver)).parse()


def find_duplicate_names(requests: list[Request]) -> dict[str, list[DuplicateName]]:
    """Group requests that share a name.

    Requests are named by their ``@name`` directive, falling back to the
    legacy name; unnamed requests are ignored.

    Returns:
        Only the names used more than once, in order of first occurrence.
        ``index`` is the 0-based position in ``requests``.
    """
    groups: dict[str, list[DuplicateName]] = {}
    for index, request in enumerate(requests):
        name = request.display_name
        if name:
            groups.setdefault(name, []).append(
                DuplicateName(name, request.method, request.url, index)
            )
    return {name: dupes for name, dupes in groups.items() if len(dupes) > 1}


def format_duplicate_warning(name: str, dupes: list[DuplicateName]) -> str:
    details = "; ".join(
        f"request {d.index + 1}: {d.method} {d.url}" for d in dupes
    )
    return (
        f"duplicate @name '{name}' found in {len(dupes)} requests ({details}). "
        "First match will be used when selecting by name"
    )


def parse(
    content: str,
    default_headers: dict[str, str] | None = None,
    base_dir: str = "",
    resolver: FileResolver | None = None,
) -> ParseResult:
    """Parse every block of a request file.

    Blocks without a request line are skipped with a warning, and a warning
    is added for every ``@name`` used by more than one request. Blank blocks
    are skipped silently.

    Args:
        content: The whole file text.
        default_headers: See :func:`parse_request`.
        base_dir: Directory used to resolve relative file references.
        resolver: Optional resolver; overrides ``base_dir`` when given.

    Returns:
        A :class:`ParseResult`.
    """
    resolver = _resolver_for(base_dir, resolver)
    result = ParseResult()
    block_indexes: list[int] = []

    for block_index, block in enumerate(split_blocks(content)):
        if not block.strip():
            continue
        try:
            request = BlockParser(block, default_headers, resolver).parse()
        except ParseError as exc:
            logger.debug("Skipping block %d: %s", block_index, exc)
            result.warnings.append(
                ParseWarning(block_index, f"skipped invalid request block: {exc}")
            )
            continue
        result.requests.append(request)
        block_indexes.append(block_index)

    for name, dupes in find_duplicate_names(result.requests).items():
        result.warnings.append(
            ParseWarning(
                block_indexes[dupes[0].index], format_duplicate_warning(name, dupes)
            )
        )

    return result


def parse_all(
    content: str,
    default_headers: dict[str, str] | None = None,
    base_dir: str = "",
    resolver: FileResolver | None = None,
) -> list[Request]:
    """Parse every block, discarding warnings."""
    return parse(content, default_headers, base_dir, resolver).requests


def load_request_file(filepath: str) -> str:
    """Read and return the contents of a request file.

    Raises:
        ParseError: If the file cannot be read.
    """
    try:
        with open(filepath, "r", encoding="utf-8") as fh:
            return fh.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise ParseError(f"failed to read file: {exc}", path=filepath) from exc


def parse_file_with_warnings(
    filepath: str,
    default_headers: dict[str, str] | None = None,
    resolver: FileResolver | None = None,
) -> ParseResult:
    """Parse a request file, resolving file references next to it."""
    content = load_request_file(filepath)
    return parse(content, default_headers, os.path.dirname(filepath), resolver)


def parse_file(
    filepath: str,
    default_headers: dict[str, str] | None = None,
    resolver: FileResolver | None = None,
) -> list[Request]:
    return parse_file_with_warnings(filepath, default_headers, resolver).requests


def parse_file_at(
    filepath: str,
    index: int,
    default_headers: dict[str, str] | None = None,
    resolver: FileResolver | None = None,
) -> Request:
    """Return the request at 0-based ``index`` in a file.

    Raises:
        ValidationError: If ``index`` is out of range.
    """
    requests = parse_file(filepath, default_headers, resolver)
    if index < 0 or index >= len(requests):
        raise ValidationError(
            "request index", f"out of range (0-{len(requests) - 1})", str(index)
        )
    return requests[index]


def find_request_by_name(requests: list[Request], name: str) -> Request | None:
    """Return the first request whose ``@name`` or legacy name is ``name``."""
    for request in requests:
        if request.name == name or request.metadata.name == name:
            return request
    return None


def parse_file_by_name(
    filepath: str,
    name: str,
    default_headers: dict[str, str] | None = None,
    resolver: FileResolver | None = None,
) -> Request:
    """Return the first request named ``name`` in a file.

    Raises:
        ValidationError: If no request has that name.
    """
    request = find_request_by_name(parse_file(filepath, default_headers, resolver), name)
    if request is None:
        raise ValidationError("request name", "not found", name)
    return request
