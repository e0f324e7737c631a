"""Character encoding and byte-order-marker detection."""
from __future__ import annotations

import codecs
from dataclasses import dataclass
from typing import Tuple

# Bytes with no mapping in Windows-1252. They pass through as the C1 control
# code point of the same value so the fallback decodes (and re-encodes) any input.
_CP1252_UNDEFINED: frozenset[int] = frozenset(b"\x81\x8d\x8f\x90\x9d")
CP1252_PASSTHROUGH: str = "safepatch-cp1252-passthrough"


def _cp1252_passthrough(exc: UnicodeError):
    if isinstance(exc, UnicodeDecodeError):
        bad = exc.object[exc.start:exc.end]
        if all(b in _CP1252_UNDEFINED for b in bad):
            return "".join(chr(b) for b in bad), exc.end
    elif isinstance(exc, UnicodeEncodeError):
        bad = exc.object[exc.start:exc.end]
        if all(ord(c) in _CP1252_UNDEFINED for c in bad):
            return bytes(ord(c) for c in bad), exc.end
    raise exc


codecs.register_error(CP1252_PASSTHROUGH, _cp1252_passthrough)


@dataclass(frozen=True)
class TextEncoding:
    """A character encoding together with its byte-order-marker preamble.

    Attributes:
        name: Public name reported to callers (``utf-8``, ``utf-16le``, ...).
        codec: Python codec used for encoding and decoding.
        bom: Marker bytes written before the payload when the file had one.
        errors: Codec error handler.
    """

    name: str
    codec: str
    bom: bytes = b""
    errors: str = "strict"

    def encode(self, text: str) -> bytes:
        """Encode ``text`` without the preamble.

        Raises:
            UnicodeEncodeError: If the encoding cannot represent ``text``.
        """
        return text.encode(self.codec, self.errors)

    def decode(self, data: bytes, has_bom: bool = False) -> str:
        """Decode ``data``, skipping the preamble when ``has_bom`` is set.

        Raises:
            UnicodeDecodeError: If ``data`` is not valid in this encoding.
        """
        offset = 0
        if has_bom and self.bom and data.startswith(self.bom):
            offset = len(self.bom)
        return data[offset:].decode(self.codec, self.errors)


UTF8_SIG = TextEncoding("utf-8", "utf-8", codecs.BOM_UTF8)
UTF8 = TextEncoding("utf-8", "utf-8")
UTF16_LE = TextEncoding("utf-16le", "utf-16-le", codecs.BOM_UTF16_LE)
UTF16_BE = TextEncoding("utf-16be", "utf-16-be", codecs.BOM_UTF16_BE)
WINDOWS_1252 = TextEncoding("windows-1252", "cp1252", errors=CP1252_PASSTHROUGH)


def _is_valid_utf8(data: bytes) -> bool:
    try:
        data.decode("utf-8")
    except UnicodeDecodeError:
        return False
    return True


def detect_encoding(data: bytes) -> Tuple[TextEncoding, bool]:
    """Determine the encoding of ``data`` and whether it starts with a BOM.

    Checked in order: UTF-8 BOM, UTF-16LE BOM, UTF-16BE BOM, strict UTF-8,
    then Windows-1252 as a best-effort fallback that never fails.
    """
    if data.startswith(codecs.BOM_UTF8):
        return UTF8_SIG, True
    if data.startswith(codecs.BOM_UTF16_LE):
        return UTF16_LE, True
    if data.startswith(codecs.BOM_UTF16_BE):
        return UTF16_BE, True
    if _is_valid_utf8(data):
        return UTF8, False
    return WINDOWS_1252, False
