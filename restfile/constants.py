"""Shared constants: header names, MIME types and request-line vocabulary."""

# Header names (canonical form)
HEADER_CONTENT_TYPE = "Content-Type"
HEADER_COOKIE = "Cookie"
HEADER_HOST = "Host"
HEADER_USER_AGENT = "User-Agent"
HEADER_REQUEST_TYPE = "X-Request-Type"

# MIME types
MIME_APPLICATION_JSON = "application/json"
MIME_FORM_URLENCODED = "application/x-www-form-urlencoded"
MIME_MULTIPART_FORM_DATA = "multipart/form-data"

DEFAULT_USER_AGENT = "restfile-cli"
DEFAULT_METHOD = "GET"

VALID_HTTP_METHODS = (
    "GET",
    "POST",
    "PUT",
    "DELETE",
    "PATCH",
    "HEAD",
    "OPTIONS",
    "CONNECT",
    "TRACE",
    "LOCK",
    "UNLOCK",
    "PROPFIND",
    "PROPPATCH",
    "COPY",
    "MOVE",
    "MKCOL",
    "MKCALENDAR",
    "ACL",
    "SEARCH",
)

# Prompt variable names treated as secrets
PASSWORD_PROMPT_NAMES = frozenset({"password", "passwd", "pass"})
