"""GraphQL request detection and JSON envelope construction."""

from __future__ import annotations

import re

from restfile.constants import (
    HEADER_CONTENT_TYPE,
    HEADER_REQUEST_TYPE,
    MIME_APPLICATION_JSON,
)
from restfile.headers import Headers

OPERATION_RE = re.compile(r"^\s*(?:query|mutation|subscription)\s+(\w+)")

# Order matters: backslashes first so later escapes are not doubled
_ESCAPES = (
    ("\\", "\\\\"),
    ('"', '\\"'),
    ("\n", "\\n"),
    ("\r", "\\r"),
    ("\t", "\\t"),
)


def detect_graphql(headers: Headers, url: str) -> bool:
    """Decide whether a request body is a GraphQL document.

    An explicit ``X-Request-Type: GraphQL`` header wins and is removed from
    ``headers``. Otherwise a ``/graphql`` URL with no Content-Type, or a JSON
    one, is treated as GraphQL.
    """
    if headers.pop_matching(HEADER_REQUEST_TYPE, "GraphQL"):
        return True
    if url.endswith("/graphql") or "/graphql?" in url:
        content_type = headers.get(HEADER_CONTENT_TYPE, "")
        return not content_type or MIME_APPLICATION_JSON in content_type
    return False


def escape_query(query: str) -> str:
    for raw, escaped in _ESCAPES:
        query = query.replace(raw, escaped)
    return query


def extract_operation_name(query: str) -> str:
    match = OPERATION_RE.match(query)
    return match.group(1) if match else ""


def build_graphql_body(body: str) -> str:
    """Wrap a GraphQL document in its JSON request envelope.

    The document is split on the first blank line into the query and an
    optional variables object. Keys are always emitted in the order
    ``query``, ``operationName`` (only when the operation is named),
    ``variables``.

    Args:
        body: The raw body text.

    Returns:
        The JSON envelope as a string.
    """
    query, separator, variables = body.partition("\n\n")
    if not separator or not variables.strip():
        variables = "{}"
    else:
        variables = variables.strip()

    operation_name = extract_operation_name(query)

    envelope = f'{{"query":"{escape_query(query)}"'
    if operation_name:
        envelope += f',"operationName":"{operation_name}"'
    envelope += f',"variables":{variables}}}'
    return envelope
