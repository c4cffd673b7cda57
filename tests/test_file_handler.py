"""Tests for file_handler module: encoding-aware reads and atomic writes."""

from unittest.mock import patch

import pytest

from kit_updater.file_handler import (
    read_file_with_encoding,
    read_text_if_exists,
    write_text_atomic,
)

# =============================================================================
# read_file_with_encoding
# =============================================================================


class TestReadFileWithEncoding:
    def test_utf8(self, tmp_path):
        f = tmp_path / "c.yaml"
        f.write_text("name: café\n", encoding="utf-8")
        content, encoding = read_file_with_encoding(f)
        assert content == "name: café\n"
        assert encoding.replace("_", "-").lower() in ("utf-8", "utf8")

    def test_ascii_reported_as_utf8(self, tmp_path):
        f = tmp_path / "c.yaml"
        f.write_bytes(b"a: 1\n")
        assert read_file_with_encoding(f) == ("a: 1\n", "utf-8")

    def test_empty_file(self, tmp_path):
        f = tmp_path / "empty.yaml"
        f.write_bytes(b"")
        assert read_file_with_encoding(f) == ("", "utf-8")


class TestReadTextIfExists:
    def test_missing_returns_none(self, tmp_path):
        assert read_text_if_exists(tmp_path / "nope.yaml") is None

    def test_directory_returns_none(self, tmp_path):
        assert read_text_if_exists(tmp_path) is None

    def test_existing(self, tmp_path):
        f = tmp_path / "c.yaml"
        f.write_text("a: 1\n")
        assert read_text_if_exists(f)[0] == "a: 1\n"


# =============================================================================
# write_text_atomic
# =============================================================================


class TestWriteTextAtomic:
    def test_writes_and_returns_byte_count(self, tmp_path):
        f = tmp_path / "out.yaml"
        assert write_text_atomic(f, "café") == 5
        assert f.read_text(encoding="utf-8") == "café"

    def test_creates_parent_dirs(self, tmp_path):
        f = tmp_path / "a" / "b" / "out.yaml"
        write_text_atomic(f, "x")
        assert f.read_text() == "x"

    def test_overwrites_existing(self, tmp_path):
        f = tmp_path / "out.yaml"
        f.write_text("old")
        write_text_atomic(f, "new")
        assert f.read_text() == "new"

    def test_custom_encoding(self, tmp_path):
        f = tmp_path / "out.yaml"
        write_text_atomic(f, "café", encoding="latin-1")
        assert f.read_bytes() == b"caf\xe9"

    def test_failure_leaves_no_temp_file(self, tmp_path):
        f = tmp_path / "out.yaml"
        f.write_text("original")

        with patch("kit_updater.file_handler.os.replace", side_effect=OSError("boom")):
            with pytest.raises(OSError, match="boom"):
                write_text_atomic(f, "new")

        assert f.read_text() == "original"
        assert [p.name for p in tmp_path.iterdir()] == ["out.yaml"]
