"""Tests for encoding and BOM detection.

Tests cover:
- BOM precedence (UTF-8, UTF-16LE, UTF-16BE)
- Strict UTF-8 without BOM
- Windows-1252 fallback, including the bytes cp1252 leaves undefined
"""
import codecs

import pytest

from safepatch.snapshot import UTF8, UTF8_SIG, UTF16_BE, UTF16_LE, WINDOWS_1252, detect_encoding


# ---------------------------------------------------------------------------
# Tests for BOM detection
# ---------------------------------------------------------------------------
class TestBomDetection:
    def test_utf8_bom(self) -> None:
        data = codecs.BOM_UTF8 + "héllo".encode("utf-8")
        encoding, has_bom = detect_encoding(data)
        assert encoding == UTF8_SIG
        assert has_bom is True
        assert encoding.decode(data, has_bom) == "héllo"

    def test_utf16le_bom(self) -> None:
        data = codecs.BOM_UTF16_LE + "hi".encode("utf-16-le")
        encoding, has_bom = detect_encoding(data)
        assert encoding == UTF16_LE
        assert has_bom is True
        assert encoding.decode(data, has_bom) == "hi"

    def test_utf16be_bom(self) -> None:
        data = codecs.BOM_UTF16_BE + "hi".encode("utf-16-be")
        encoding, has_bom = detect_encoding(data)
        assert encoding == UTF16_BE
        assert encoding.decode(data, has_bom) == "hi"

    def test_utf8_bom_wins_over_utf16_check(self) -> None:
        encoding, _ = detect_encoding(codecs.BOM_UTF8 + b"\xff\xfe")
        assert encoding == UTF8_SIG


# ---------------------------------------------------------------------------
# Tests for BOM-less input
# ---------------------------------------------------------------------------
class TestWithoutBom:
    def test_plain_ascii_is_utf8(self) -> None:
        encoding, has_bom = detect_encoding(b"plain text\n")
        assert encoding == UTF8
        assert has_bom is False

    def test_empty_input_is_utf8(self) -> None:
        assert detect_encoding(b"") == (UTF8, False)

    def test_invalid_utf8_falls_back_to_windows_1252(self) -> None:
        data = "café €".encode("cp1252")
        encoding, has_bom = detect_encoding(data)
        assert encoding == WINDOWS_1252
        assert has_bom is False
        assert encoding.decode(data) == "café €"

    @pytest.mark.parametrize("byte", [b"\x81", b"\x8d", b"\x8f", b"\x90", b"\x9d"])
    def test_undefined_cp1252_bytes_roundtrip(self, byte: bytes) -> None:
        data = b"a" + byte + b"\xe9"
        encoding, _ = detect_encoding(data)
        assert encoding == WINDOWS_1252

        text = encoding.decode(data)
        assert text == "a" + chr(byte[0]) + "é"
        assert encoding.encode(text) == data

    def test_windows_1252_cannot_encode_cjk(self) -> None:
        with pytest.raises(UnicodeEncodeError):
            WINDOWS_1252.encode("日本")
