"""Exception types raised by restfile.

Both concrete errors subclass :class:`ValueError` so callers that only care
about "bad input" can keep catching the builtin.
"""

from __future__ import annotations


class RestfileError(Exception):
    """Base class for all restfile errors."""


class ParseError(RestfileError, ValueError):
    """Raised when request text or a request file cannot be parsed."""

    def __init__(self, message: str, path: str = "", line: int = 0) -> None:
        self.message = message
        self.path = path
        self.line = line
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.path and self.line > 0:
            return f"{self.path}:{self.line}: {self.message}"
        if self.path:
            return f"{self.path}: {self.message}"
        return self.message


class ValidationError(RestfileError, ValueError):
    """Raised when a caller asks for something the parsed file cannot satisfy."""

    def __init__(self, field: str, message: str, value: str = "") -> None:
        self.field = field
        self.value = value
        self.message = message
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.value:
            return f"invalid {self.field} {self.value!r}: {self.message}"
        return f"invalid {self.field}: {self.message}"
