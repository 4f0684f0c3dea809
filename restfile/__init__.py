"""restfile — parser for .http / .rest request files.

Turns a plain-text file of ``###``-separated request blocks into structured
:class:`~restfile.models.Request` objects for downstream tooling.
"""

__version__ = "1.0.0"

from restfile.models import MultipartPart, PromptVariable, Request, RequestMetadata
from restfile.parser import (
    DuplicateName,
    ParseResult,
    ParseWarning,
    find_duplicate_names,
    parse,
    parse_all,
    parse_file,
    parse_file_at,
    parse_file_by_name,
    parse_file_with_warnings,
    parse_request,
    split_blocks,
)

__all__ = [
    "DuplicateName",
    "MultipartPart",
    "ParseResult",
    "ParseWarning",
    "PromptVariable",
    "Request",
    "RequestMetadata",
    "find_duplicate_names",
    "parse",
    "parse_all",
    "parse_file",
    "parse_file_at",
    "parse_file_by_name",
    "parse_file_with_warnings",
    "parse_request",
    "split_blocks",
]
