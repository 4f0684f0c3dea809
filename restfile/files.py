"""File access used by script and body file references.

The parser never opens files itself; it asks a :class:`FileResolver`, which
tries a path as absolute, then relative to the request file's directory, then
relative to the current working directory. The underlying reader is
swappable so tests can run against :class:`MemoryFileReader`.
"""

from __future__ import annotations

import os

DEFAULT_ENCODING = "utf-8"


def join_lines(text: str) -> str:
    """Normalize file text the way a line scanner would see it.

    Lines are split on ``\\n``, a trailing ``\\r`` is dropped from each line,
    and a final newline does not produce an empty trailing line.
    """
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return "\n".join(line[:-1] if line.endswith("\r") else line for line in lines)


class LocalFileReader:
    """Reads files from the local filesystem."""

    def read_text(self, path: str, encoding: str | None = None) -> str:
        with open(path, "r", encoding=encoding or DEFAULT_ENCODING, newline="") as fh:
            return join_lines(fh.read())

    def getcwd(self) -> str:
        return os.getcwd()


class MemoryFileReader:
    """In-memory stand-in for :class:`LocalFileReader`.

    Paths are normalized with :func:`os.path.normpath` so ``/a/./b.js`` and
    ``/a/b.js`` name the same entry.
    """

    def __init__(self, files: dict[str, str] | None = None, cwd: str = "/") -> None:
        self.files: dict[str, str] = {}
        self.cwd = cwd
        self.reads: list[str] = []
        for path, content in (files or {}).items():
            self.add(path, content)

    def add(self, path: str, content: str) -> None:
        self.files[os.path.normpath(path)] = content

    def read_text(self, path: str, encoding: str | None = None) -> str:
        key = os.path.normpath(path)
        self.reads.append(key)
        if key not in self.files:
            raise FileNotFoundError(f"No such file: {path!r}")
        return join_lines(self.files[key])

    def getcwd(self) -> str:
        return self.cwd


class FileResolver:
    """Resolves file references through absolute, base-dir and cwd lookups."""

    def __init__(self, base_dir: str = "", reader=None) -> None:
        self.base_dir = base_dir
        self.reader = reader if reader is not None else LocalFileReader()

    def resolve(self, path: str, encoding: str | None = None) -> str:
        """Return the text of the file at ``path``.

        Args:
            path: Absolute or relative file path as written in the request file.
            encoding: Optional text encoding (defaults to UTF-8).

        Returns:
            The file contents with lines joined by ``\\n``.

        Raises:
            OSError: If the file cannot be found or read.
            LookupError: If ``encoding`` is not a known codec.
            UnicodeDecodeError: If the file does not decode with ``encoding``.
        """
        if os.path.isabs(path):
            return self.reader.read_text(path, encoding)

        if self.base_dir:
            try:
                return self.reader.read_text(
                    os.path.join(self.base_dir, path), encoding
                )
            except OSError:
                pass

        return self.reader.read_text(
            os.path.join(self.reader.getcwd(), path), encoding
        )
