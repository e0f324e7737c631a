"""File snapshots: encoding detection, loading, hashing and writing back."""
from .encoding import (
    UTF8,
    UTF8_SIG,
    UTF16_BE,
    UTF16_LE,
    WINDOWS_1252,
    TextEncoding,
    detect_encoding,
)
from .hashing import hashes_equal, normalized_text_hash, sha256_hex
from .loader import FileSnapshot, load_snapshot, snapshot_from_bytes
from .writer import encode_like_snapshot, write_bytes_atomic, write_patched

__all__ = [
    "TextEncoding",
    "UTF8",
    "UTF8_SIG",
    "UTF16_LE",
    "UTF16_BE",
    "WINDOWS_1252",
    "detect_encoding",
    "sha256_hex",
    "normalized_text_hash",
    "hashes_equal",
    "FileSnapshot",
    "load_snapshot",
    "snapshot_from_bytes",
    "encode_like_snapshot",
    "write_bytes_atomic",
    "write_patched",
]
