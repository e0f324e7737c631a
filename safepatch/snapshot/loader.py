"""Read a file into an immutable :class:`FileSnapshot`."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..errors import FileAccessError, UnsupportedEncodingError
from ..logging import get_logger
from ..text import describe_newline, detect_newline, normalize_newlines
from .encoding import TextEncoding, detect_encoding
from .hashing import hashes_equal, normalized_text_hash, sha256_hex

logger = get_logger(__name__)


@dataclass(frozen=True)
class FileSnapshot:
    """File state captured at read time. Never mutated.

    Attributes:
        path: Absolute path the bytes were read from.
        original_bytes: Raw bytes as found on disk.
        encoding: Detected encoding (with its BOM preamble).
        has_bom: Whether ``original_bytes`` began with the encoding's marker.
        newline: Dominant line terminator of ``text``.
        text: Decoded text without the marker character.
        hash_strict: SHA-256 over ``original_bytes``.
        hash_normalized: SHA-256 over the whitespace-normalized ``text``.
    """

    path: Path
    original_bytes: bytes = field(repr=False)
    encoding: TextEncoding
    has_bom: bool
    newline: str
    text: str = field(repr=False)
    hash_strict: str
    hash_normalized: str

    @property
    def lf_text(self) -> str:
        """``text`` with every newline sequence converted to ``\\n``."""
        return normalize_newlines(self.text)

    @property
    def lines(self) -> list[str]:
        return self.lf_text.split("\n")

    @property
    def line_count(self) -> int:
        return len(self.lines)

    @property
    def newline_name(self) -> str:
        return describe_newline(self.newline)

    def matches_hash(self, expected: str) -> tuple[bool, bool]:
        """Return ``(strict_ok, normalized_ok)`` for a caller supplied hash."""
        return hashes_equal(expected, self.hash_strict), hashes_equal(expected, self.hash_normalized)

    def to_metadata(self) -> dict[str, Any]:
        return {
            "hash_strict": self.hash_strict,
            "hash_normalized": self.hash_normalized,
            "encoding": self.encoding.name,
            "has_bom": self.has_bom,
            "newline": self.newline_name,
        }


def snapshot_from_bytes(path: str | Path, data: bytes) -> FileSnapshot:
    """Build a snapshot from bytes already read from ``path``.

    Raises:
        UnsupportedEncodingError: If a BOM-marked payload does not decode.
    """
    encoding, has_bom = detect_encoding(data)
    try:
        text = encoding.decode(data, has_bom)
    except UnicodeDecodeError as exc:
        raise UnsupportedEncodingError(
            f"Could not decode the file as {encoding.name}: {exc.reason} at byte {exc.start}",
            path=str(path),
        ) from exc

    return FileSnapshot(
        path=Path(path),
        original_bytes=data,
        encoding=encoding,
        has_bom=has_bom,
        newline=detect_newline(text),
        text=text,
        hash_strict=sha256_hex(data),
        hash_normalized=normalized_text_hash(text),
    )


def load_snapshot(path: str | Path) -> FileSnapshot:
    """Read ``path`` and capture its encoding, newline style and hashes.

    Raises:
        FileAccessError: If the file cannot be read.
        UnsupportedEncodingError: If a BOM-marked payload does not decode.
    """
    p = Path(path)
    try:
        data = p.read_bytes()
    except OSError as exc:
        raise FileAccessError(f"Cannot read file: {exc.strerror or exc}", path=str(p)) from exc

    snapshot = snapshot_from_bytes(p, data)
    logger.debug(
        "snapshot_loaded",
        path=str(p),
        size=len(data),
        encoding=snapshot.encoding.name,
        has_bom=snapshot.has_bom,
        newline=snapshot.newline_name,
    )
    return snapshot
