"""Capture of pre-request and post-response scripts.

Scripts are written inline between ``{%`` and ``%}`` or referenced as an
external ``.js`` file. An external file that cannot be read is skipped
without a warning; it is only logged.
"""

from __future__ import annotations

import logging

from restfile.files import FileResolver
from restfile.lexer import INLINE_SCRIPT_CLOSE

logger = logging.getLogger(__name__)


class ScriptBuffer:
    """Accumulates the text of one kind of script for a request."""

    __slots__ = ("kind", "lines")

    def __init__(self, kind: str) -> None:
        self.kind = kind
        self.lines: list[str] = []

    def add_file(self, path: str, resolver: FileResolver) -> None:
        """Append the contents of an external script file, if readable."""
        try:
            self.lines.append(resolver.resolve(path))
        except (OSError, ValueError) as exc:
            logger.debug("Skipping unreadable %s script file %r: %s", self.kind, path, exc)

    def open_inline(self, rest: str) -> bool:
        """Start an inline script from the text following ``{%``.

        Returns:
            True if the script also closes on the same line.
        """
        if INLINE_SCRIPT_CLOSE in rest:
            self.lines.append(rest.split(INLINE_SCRIPT_CLOSE, 1)[0].strip())
            return True
        if rest.strip():
            self.lines.append(rest.strip())
        return False

    def feed(self, line: str) -> bool:
        """Consume one line of an open inline script.

        Lines are kept verbatim until one contains ``%}``; text before the
        marker on that closing line is kept if it is not blank.

        Returns:
            True if this line closed the script.
        """
        trimmed = line.strip()
        if INLINE_SCRIPT_CLOSE not in trimmed:
            self.lines.append(line)
            return False
        before = trimmed.split(INLINE_SCRIPT_CLOSE, 1)[0]
        if before.strip():
            self.lines.append(before)
        return True

    def text(self) -> str:
        return "\n".join(self.lines)
