"""Tests for snapshot loading: encodings, newline detection and hashes."""
import codecs
import hashlib
import os
from pathlib import Path

import pytest

from safepatch.errors import FileAccessError, UnsupportedEncodingError
from safepatch.snapshot import UTF16_LE, hashes_equal, load_snapshot, sha256_hex, snapshot_from_bytes


def write_bytes(tmp_path: Path, name: str, data: bytes) -> Path:
    path = tmp_path / name
    path.write_bytes(data)
    return path


# ---------------------------------------------------------------------------
# Newline detection
# ---------------------------------------------------------------------------
class TestNewlineDetection:
    @pytest.mark.parametrize(
        "data,newline,name",
        [
            (b"a\r\nb\r\n", "\r\n", "CRLF"),
            (b"a\nb\n", "\n", "LF"),
            (b"a\rb\r", "\r", "CR"),
        ],
    )
    def test_detects_style(self, tmp_path: Path, data: bytes, newline: str, name: str) -> None:
        snap = load_snapshot(write_bytes(tmp_path, "f.txt", data))
        assert snap.newline == newline
        assert snap.newline_name == name
        assert snap.lf_text == "a\nb\n"

    def test_crlf_wins_over_lf(self, tmp_path: Path) -> None:
        snap = load_snapshot(write_bytes(tmp_path, "f.txt", b"a\nb\r\nc"))
        assert snap.newline == "\r\n"

    def test_no_newline_uses_platform_default(self, tmp_path: Path) -> None:
        snap = load_snapshot(write_bytes(tmp_path, "f.txt", b"single line"))
        assert snap.newline == os.linesep
        assert snap.line_count == 1


# ---------------------------------------------------------------------------
# Text and hashes
# ---------------------------------------------------------------------------
class TestSnapshotContent:
    def test_text_keeps_original_newlines(self, tmp_path: Path) -> None:
        snap = load_snapshot(write_bytes(tmp_path, "f.txt", b"x\r\ny"))
        assert snap.text == "x\r\ny"
        assert snap.lines == ["x", "y"]

    def test_bom_is_stripped_from_text(self, tmp_path: Path) -> None:
        data = codecs.BOM_UTF16_LE + "abc\n".encode("utf-16-le")
        snap = load_snapshot(write_bytes(tmp_path, "f.txt", data))
        assert snap.encoding == UTF16_LE
        assert snap.has_bom is True
        assert snap.text == "abc\n"

    def test_strict_hash_is_uppercase_sha256_of_bytes(self, tmp_path: Path) -> None:
        data = b"hello\n"
        snap = load_snapshot(write_bytes(tmp_path, "f.txt", data))
        assert snap.hash_strict == hashlib.sha256(data).hexdigest().upper()
        assert len(snap.hash_strict) == 64

    def test_normalized_hash_ignores_whitespace_and_newlines(self) -> None:
        a = snapshot_from_bytes("a.txt", b"foo  bar\t\nbaz\n")
        b = snapshot_from_bytes("b.txt", b"foo bar\r\nbaz\r\n")
        assert a.hash_strict != b.hash_strict
        assert a.hash_normalized == b.hash_normalized

    def test_normalized_hash_sees_content_changes(self) -> None:
        a = snapshot_from_bytes("a.txt", b"foo bar\n")
        b = snapshot_from_bytes("b.txt", b"foo baz\n")
        assert a.hash_normalized != b.hash_normalized

    def test_matches_hash_is_case_insensitive(self) -> None:
        snap = snapshot_from_bytes("a.txt", b"x  y\r\n")
        assert snap.hash_strict != snap.hash_normalized
        assert snap.matches_hash(snap.hash_strict.lower()) == (True, False)
        assert snap.matches_hash(snap.hash_normalized.lower()) == (False, True)
        assert snap.matches_hash("0" * 64) == (False, False)

    def test_hashes_equal_ignores_case_and_padding(self) -> None:
        digest = sha256_hex(b"abc")
        assert hashes_equal(f"  {digest.lower()}\n", digest)
        assert not hashes_equal(digest[:-1], digest)

    def test_metadata(self) -> None:
        snap = snapshot_from_bytes("a.txt", codecs.BOM_UTF8 + b"x\r\n")
        meta = snap.to_metadata()
        assert meta["encoding"] == "utf-8"
        assert meta["has_bom"] is True
        assert meta["newline"] == "CRLF"
        assert meta["hash_strict"] == snap.hash_strict


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------
class TestLoadErrors:
    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileAccessError) as exc_info:
            load_snapshot(tmp_path / "nope.txt")
        assert exc_info.value.kind == "io_error"
        assert exc_info.value.path == str(tmp_path / "nope.txt")

    def test_directory_is_not_readable(self, tmp_path: Path) -> None:
        with pytest.raises(FileAccessError):
            load_snapshot(tmp_path)

    def test_bad_payload_after_utf8_bom(self, tmp_path: Path) -> None:
        path = write_bytes(tmp_path, "f.txt", codecs.BOM_UTF8 + b"ok \xff\xff")
        with pytest.raises(UnsupportedEncodingError) as exc_info:
            load_snapshot(path)
        assert exc_info.value.kind == "unsupported_encoding"

    def test_truncated_utf16_payload(self, tmp_path: Path) -> None:
        path = write_bytes(tmp_path, "f.txt", codecs.BOM_UTF16_LE + b"a")
        with pytest.raises(UnsupportedEncodingError):
            load_snapshot(path)
