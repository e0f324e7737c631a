"""SHA-256 helpers for the strict and whitespace-normalized file hashes."""
from __future__ import annotations

import hashlib

from ..text import normalize_for_loose_hash


def sha256_hex(data: bytes) -> str:
    """Uppercase hex SHA-256 digest (64 characters)."""
    return hashlib.sha256(data).hexdigest().upper()


def normalized_text_hash(text: str) -> str:
    """Hash of ``text`` with newlines unified and whitespace runs collapsed."""
    return sha256_hex(normalize_for_loose_hash(text).encode("utf-8"))


def hashes_equal(a: str, b: str) -> bool:
    """Case-insensitive comparison of two hex digests."""
    return a.strip().upper() == b.strip().upper()
