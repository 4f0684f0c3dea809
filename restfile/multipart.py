"""Splitting of multipart/form-data bodies into named parts."""

from __future__ import annotations

import re

from restfile.constants import MIME_MULTIPART_FORM_DATA
from restfile.models import MultipartPart

DISPOSITION_RE = re.compile(r"Content-Disposition:\s*form-data;\s*(.+)", re.IGNORECASE)
NAME_RE = re.compile(r'\bname="([^"]+)"')
FILENAME_RE = re.compile(r'filename="([^"]+)"')
CONTENT_TYPE_RE = re.compile(r"Content-Type:\s*(.+)", re.IGNORECASE)

FILE_REFERENCE_PREFIX = "< "


def is_multipart_form_data(content_type: str) -> bool:
    return MIME_MULTIPART_FORM_DATA in content_type.lower()


def extract_boundary(content_type: str) -> str:
    """Return the ``boundary=`` parameter of a Content-Type, or ``""``.

    The parameter name matches case-insensitively; the value keeps its case
    and loses surrounding double quotes.
    """
    for param in content_type.split(";"):
        param = param.strip()
        if param.lower().startswith("boundary="):
            return param[len("boundary="):].strip('"')
    return ""


def parse_section(section: str) -> MultipartPart:
    """Parse one boundary-delimited section into a part.

    The section's headers and value are separated by the first blank line.
    A ``< path`` value is left as-is here; see :func:`parse_multipart`.
    """
    part = MultipartPart()

    head, separator, value = section.partition("\r\n\r\n")
    if not separator:
        head, separator, value = section.partition("\n\n")
    if separator:
        part.value = value.strip()

    disposition = DISPOSITION_RE.search(head)
    if disposition:
        params = disposition.group(1)
        name = NAME_RE.search(params)
        if name:
            part.name = name.group(1)
        filename = FILENAME_RE.search(params)
        if filename:
            part.file_name = filename.group(1)
            part.is_file = True

    content_type = CONTENT_TYPE_RE.search(head)
    if content_type:
        part.content_type = content_type.group(1).strip()

    return part


def parse_multipart(body: str, content_type: str) -> list[MultipartPart]:
    """Split a multipart body into its named parts.

    Args:
        body: The normalized request body (lines joined with ``\\r\\n``).
        content_type: The request's Content-Type header value.

    Returns:
        Parts in body order. Sections without a ``name`` are dropped, and a
        value of ``< path`` turns the part into a file upload of ``path``.
    """
    boundary = extract_boundary(content_type)
    if not boundary:
        return []

    parts: list[MultipartPart] = []
    for section in body.split(f"--{boundary}"):
        section = section.strip()
        if not section or section == "--":
            continue
        section = section.removesuffix("--").strip()
        if not section:
            continue

        part = parse_section(section)
        if not part.name:
            continue
        value = part.value.strip()
        if value.startswith(FILE_REFERENCE_PREFIX):
            part.file_path = value[len(FILE_REFERENCE_PREFIX):].strip()
            part.is_file = True
            part.value = ""
        parts.append(part)

    return parts
