"""Detection and reporting of characters that signal upstream encoding damage."""
from __future__ import annotations

from typing import Iterator, Optional

REPLACEMENT_CHAR = "\ufffd"
BOM_CHAR = "\ufeff"

_CHAR_NAMES: dict[str, str] = {
    REPLACEMENT_CHAR: "U+FFFD (REPLACEMENT CHARACTER)",
    BOM_CHAR: "U+FEFF (BOM / ZERO WIDTH NO-BREAK SPACE)",
}


def contains_invalid_unicode(text: str) -> bool:
    return REPLACEMENT_CHAR in text or BOM_CHAR in text


def iter_invalid_unicode(text: str) -> Iterator[tuple[str, int, int]]:
    """Yield ``(char, line, column)`` for each offending character, 1-based.

    CR, LF and CRLF each count as a single line break.
    """
    line = 1
    col = 1
    i = 0
    length = len(text)
    while i < length:
        c = text[i]
        if c == "\n" or c == "\r":
            line += 1
            col = 1
            if c == "\r" and i + 1 < length and text[i + 1] == "\n":
                i += 1
            i += 1
            continue
        if c in _CHAR_NAMES:
            yield c, line, col
        col += 1
        i += 1


def build_invalid_unicode_report(
    text: str,
    headline: Optional[str] = None,
    max_occurrences: int = 5,
) -> str:
    """Describe where U+FFFD/U+FEFF occur, listing at most ``max_occurrences``."""
    if headline is None:
        headline = "Invalid Unicode character detected (U+FFFD or U+FEFF)."

    parts = [
        headline,
        "",
        "Retrying the same patch will not help: it fails for as long as the file contains these characters.",
        "",
    ]
    found = 0
    for char, line, col in iter_invalid_unicode(text):
        found += 1
        if found <= max_occurrences:
            parts.append(f" - {_CHAR_NAMES[char]} at line {line}, column {col}")

    if found > max_occurrences:
        parts.append(f" - ... and {found - max_occurrences} more occurrences.")

    return "\n".join(parts).rstrip()


def make_visible(s: str) -> str:
    """Render tabs and carriage returns so they show up in error messages."""
    return s.replace("\t", "\\t").replace("\r", "\\r")


def truncate(s: str, max_len: int) -> str:
    if max_len <= 0:
        return ""
    if len(s) <= max_len:
        return s
    return s[:max_len] + "\u2026"
