"""Tests for file resolution."""

import os

import pytest

from restfile.files import FileResolver, LocalFileReader, MemoryFileReader, join_lines


class TestJoinLines:
    """Tests for line normalization of file contents."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("", ""),
            ("a", "a"),
            ("a\n", "a"),
            ("a\n\n", "a\n"),
            ("a\r\nb\r\n", "a\nb"),
            ("a\rb", "a\rb"),
        ],
    )
    def test_join_lines(self, text, expected):
        assert join_lines(text) == expected


class TestFileResolver:
    """Tests for the absolute / base-dir / cwd lookup order."""

    def test_absolute_path(self):
        reader = MemoryFileReader({"/abs/script.js": "abs"}, cwd="/cwd")
        resolver = FileResolver("/base", reader)
        assert resolver.resolve("/abs/script.js") == "abs"
        assert reader.reads == ["/abs/script.js"]

    def test_absolute_path_does_not_fall_back(self):
        reader = MemoryFileReader({"/cwd/abs/script.js": "cwd"}, cwd="/cwd")
        with pytest.raises(FileNotFoundError):
            FileResolver("/base", reader).resolve("/abs/script.js")

    def test_base_dir_wins_over_cwd(self):
        reader = MemoryFileReader(
            {"/base/data.json": "base", "/cwd/data.json": "cwd"}, cwd="/cwd"
        )
        assert FileResolver("/base", reader).resolve("./data.json") == "base"

    def test_falls_back_to_cwd(self):
        reader = MemoryFileReader({"/cwd/data.json": "cwd"}, cwd="/cwd")
        resolver = FileResolver("/base", reader)
        assert resolver.resolve("data.json") == "cwd"
        assert reader.reads == ["/base/data.json", "/cwd/data.json"]

    def test_no_base_dir_uses_cwd(self):
        reader = MemoryFileReader({"/cwd/data.json": "cwd"}, cwd="/cwd")
        resolver = FileResolver("", reader)
        assert resolver.resolve("data.json") == "cwd"
        assert reader.reads == ["/cwd/data.json"]

    def test_missing_everywhere(self):
        resolver = FileResolver("/base", MemoryFileReader(cwd="/cwd"))
        with pytest.raises(OSError):
            resolver.resolve("missing.json")


class TestLocalFileReader:
    """Tests for reading from disk."""

    def test_reads_relative_to_base_dir(self, tmp_path):
        (tmp_path / "body.txt").write_bytes(b"line one\r\nline two\r\n")
        resolver = FileResolver(str(tmp_path))
        assert resolver.resolve("body.txt") == "line one\nline two"

    def test_honours_encoding(self, tmp_path):
        path = tmp_path / "latin.txt"
        path.write_bytes("café".encode("latin-1"))
        assert LocalFileReader().read_text(str(path), "latin-1") == "café"

    def test_unknown_encoding(self, tmp_path):
        path = tmp_path / "x.txt"
        path.write_text("x")
        with pytest.raises(LookupError):
            LocalFileReader().read_text(str(path), "no-such-codec")

    def test_getcwd(self):
        assert LocalFileReader().getcwd() == os.getcwd()
