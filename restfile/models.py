"""Request data model produced by the parser.

Downstream tools (exporters, executors, the CLI) depend only on the classes
defined here and on :class:`restfile.parser.ParseResult`.
"""

from __future__ import annotations

import io
from typing import Any

import requests

from restfile.constants import HEADER_CONTENT_TYPE
from restfile.headers import Headers


class PromptVariable:
    """A variable whose value is asked from the user at send time."""

    __slots__ = ("name", "description", "is_password")

    def __init__(
        self, name: str, description: str = "", is_password: bool = False
    ) -> None:
        self.name = name
        self.description = description
        self.is_password = is_password

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PromptVariable):
            return NotImplemented
        return (self.name, self.description, self.is_password) == (
            other.name,
            other.description,
            other.is_password,
        )

    def __repr__(self) -> str:
        return (
            f"PromptVariable(name={self.name!r}, "
            f"description={self.description!r}, "
            f"is_password={self.is_password!r})"
        )


class RequestMetadata:
    """Request-level settings collected from ``# @key value`` directives."""

    __slots__ = (
        "name",
        "note",
        "no_redirect",
        "no_cookie_jar",
        "pre_script",
        "post_script",
        "prompts",
    )

    def __init__(self) -> None:
        self.name = ""
        self.note = ""
        self.no_redirect = False
        self.no_cookie_jar = False
        self.pre_script = ""
        self.post_script = ""
        self.prompts: list[PromptVariable] = []

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RequestMetadata):
            return NotImplemented
        return all(
            getattr(self, slot) == getattr(other, slot) for slot in self.__slots__
        )

    def __repr__(self) -> str:
        return (
            f"RequestMetadata(name={self.name!r}, "
            f"no_redirect={self.no_redirect!r}, "
            f"no_cookie_jar={self.no_cookie_jar!r}, "
            f"prompts=<{len(self.prompts)} prompts>)"
        )


class MultipartPart:
    """One named part of a multipart/form-data body."""

    __slots__ = ("name", "value", "file_name", "file_path", "content_type", "is_file")

    def __init__(
        self,
        name: str = "",
        value: str = "",
        file_name: str = "",
        file_path: str = "",
        content_type: str = "",
        is_file: bool = False,
    ) -> None:
        self.name = name
        self.value = value
        self.file_name = file_name
        self.file_path = file_path
        self.content_type = content_type
        self.is_file = is_file

    def to_dict(self) -> dict[str, Any]:
        return {slot: getattr(self, slot) for slot in self.__slots__}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MultipartPart):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return (
            f"MultipartPart(name={self.name!r}, "
            f"is_file={self.is_file!r}, "
            f"value={'<present>' if self.value else '<none>'})"
        )


class Request:
    """A single parsed request block."""

    __slots__ = (
        "method",
        "url",
        "headers",
        "raw_body",
        "name",
        "metadata",
        "multipart_parts",
        "warnings",
    )

    def __init__(
        self,
        method: str,
        url: str,
        headers: Headers | None = None,
        raw_body: str = "",
        name: str = "",
        metadata: RequestMetadata | None = None,
    ) -> None:
        self.method = method.upper()
        self.url = url
        self.headers = headers if headers is not None else Headers()
        self.raw_body = raw_body
        self.name = name
        self.metadata = metadata if metadata is not None else RequestMetadata()
        self.multipart_parts: list[MultipartPart] = []
        self.warnings: list[str] = []

    @property
    def body(self) -> io.BytesIO:
        """A fresh byte stream over the raw body."""
        return io.BytesIO(self.raw_body.encode("utf-8"))

    @property
    def content_type(self) -> str:
        return self.headers.get(HEADER_CONTENT_TYPE, "")

    @property
    def display_name(self) -> str:
        """The ``@name`` directive value, falling back to the legacy name."""
        return self.metadata.name or self.name

    def to_requests(self) -> requests.Request:
        """Build an unsent :class:`requests.Request` for an execution engine."""
        return requests.Request(
            method=self.method,
            url=self.url,
            headers=dict(self.headers.items()),
            data=self.raw_body.encode("utf-8") if self.raw_body else None,
        )

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable view of the request."""
        meta = self.metadata
        return {
            "name": self.display_name,
            "method": self.method,
            "url": self.url,
            "headers": dict(self.headers.items()),
            "body": self.raw_body,
            "metadata": {
                "note": meta.note,
                "no_redirect": meta.no_redirect,
                "no_cookie_jar": meta.no_cookie_jar,
                "pre_script": meta.pre_script,
                "post_script": meta.post_script,
                "prompts": [
                    {
                        "name": p.name,
                        "description": p.description,
                        "is_password": p.is_password,
                    }
                    for p in meta.prompts
                ],
            },
            "multipart_parts": [part.to_dict() for part in self.multipart_parts],
            "warnings": list(self.warnings),
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Request):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return (
            f"Request(method={self.method!r}, url={self.url!r}, "
            f"headers=<{len(self.headers)} headers>, "
            f"body={'<present>' if self.raw_body else '<none>'})"
        )
