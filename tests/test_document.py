"""
Tests for innotool.script.document module.

Tests the line document including:
- Reading with mixed line endings and BOM
- CRLF serialization
- Index lookups and mutation
"""

from __future__ import annotations

from pathlib import Path

import pytest

from innotool.script.document import ScriptDocument

pytestmark = pytest.mark.unit


class TestReadWrite:
    """Tests for loading and saving scripts."""

    def test_from_text_mixed_line_endings(self):
        """Test CRLF, LF and CR all split lines."""
        doc = ScriptDocument.from_text("a\r\nb\nc\rd")

        assert doc.lines == ["a", "b", "c", "d"]

    def test_trailing_newline_does_not_add_line(self):
        """Test a single trailing line break is not an extra line."""
        doc = ScriptDocument.from_text("a\r\nb\r\n")

        assert doc.lines == ["a", "b"]

    def test_empty_text(self):
        """Test empty text gives an empty document."""
        assert len(ScriptDocument.from_text("")) == 0

    def test_to_text_uses_crlf(self):
        """Test serialization joins with CRLF and adds no trailing break."""
        doc = ScriptDocument(["[Setup]", "AppName=X"])

        assert doc.to_text() == "[Setup]\r\nAppName=X"

    def test_load_strips_bom(self, tmp_test_dir: Path):
        """Test a UTF-8 BOM is not part of the first line."""
        path = tmp_test_dir / "bom.iss"
        path.write_bytes(b"\xef\xbb\xbf[Setup]\nAppName=X\n")

        doc = ScriptDocument.load(path)

        assert doc[0] == "[Setup]"

    def test_bom_kept_on_save(self, tmp_test_dir: Path):
        """Test a script read with a BOM is written back with one."""
        path = tmp_test_dir / "bom.iss"
        path.write_bytes(b"\xef\xbb\xbf[Setup]\r\nAppName=X")

        ScriptDocument.load(path).save(path)

        assert path.read_bytes() == b"\xef\xbb\xbf[Setup]\r\nAppName=X"

    def test_load_ansi_script(self, tmp_test_dir: Path):
        """Test a Windows-1252 script is read and saved in that encoding."""
        path = tmp_test_dir / "ansi.iss"
        path.write_bytes(b"[Setup]\r\nAppPublisher=Soci\xe9t\xe9\r\n[Files]\r\n")

        doc = ScriptDocument.load(path)
        doc.append("; note")
        doc.save(path)

        assert doc.encoding == "cp1252"
        assert doc[1] == "AppPublisher=Société"
        assert path.read_bytes() == (
            b"[Setup]\r\nAppPublisher=Soci\xe9t\xe9\r\n[Files]\r\n; note"
        )

    def test_save_writes_crlf(self, tmp_test_dir: Path):
        """Test save converts LF input to CRLF output."""
        path = tmp_test_dir / "out.iss"
        ScriptDocument.from_text("a\nb").save(path)

        assert path.read_bytes() == b"a\r\nb"

    def test_load_save_preserves_content(self, sample_script: Path):
        """Test loading and saving an unchanged CRLF script is byte-identical."""
        original = sample_script.read_bytes()

        ScriptDocument.load(sample_script).save(sample_script)

        assert sample_script.read_bytes() == original


class TestLookup:
    """Tests for index_of and contains."""

    def test_index_of_from_start(self):
        """Test the search begins at start."""
        doc = ScriptDocument(["x", "y", "x"])

        assert doc.index_of(lambda line: line == "x") == 0
        assert doc.index_of(lambda line: line == "x", 1) == 2

    def test_index_of_not_found(self):
        """Test None when no line matches."""
        doc = ScriptDocument(["x"])

        assert doc.index_of(lambda line: line == "z") is None
        assert not doc.contains(lambda line: line == "z")

    def test_lines_is_a_snapshot(self):
        """Test mutating the snapshot leaves the document alone."""
        doc = ScriptDocument(["a"])
        snapshot = doc.lines
        snapshot.append("b")

        assert len(doc) == 1


class TestMutation:
    """Tests for insert, remove and friends."""

    def test_insert_before_index(self):
        """Test insert places the line before index."""
        doc = ScriptDocument(["a", "c"])
        doc.insert(1, "b")

        assert doc.lines == ["a", "b", "c"]

    def test_insert_at_length_appends(self):
        """Test inserting at len(doc) appends."""
        doc = ScriptDocument(["a"])
        doc.insert(1, "b")

        assert doc.lines == ["a", "b"]

    def test_insert_out_of_range_raises(self):
        """Test insert past the end raises IndexError."""
        doc = ScriptDocument(["a"])

        with pytest.raises(IndexError):
            doc.insert(5, "b")

    def test_insert_many(self):
        """Test several lines inserted in order."""
        doc = ScriptDocument(["a", "d"])
        doc.insert_many(1, ["b", "c"])

        assert doc.lines == ["a", "b", "c", "d"]

    def test_remove_range_inclusive(self):
        """Test remove_range removes both ends."""
        doc = ScriptDocument(["a", "b", "c", "d"])
        doc.remove_range(1, 2)

        assert doc.lines == ["a", "d"]

    def test_remove_range_empty_when_end_before_start(self):
        """Test an inverted range removes nothing."""
        doc = ScriptDocument(["a", "b"])
        doc.remove_range(1, 0)

        assert doc.lines == ["a", "b"]

    def test_remove_where(self):
        """Test predicate-based removal."""
        doc = ScriptDocument(["keep", "drop", "keep"])
        doc.remove_where(lambda line: line == "drop")

        assert doc.lines == ["keep", "keep"]

    def test_set_and_remove(self):
        """Test replacing and deleting single lines."""
        doc = ScriptDocument(["a", "b"])
        doc.set(0, "z")
        doc.remove(1)

        assert doc.lines == ["z"]
