"""Pure text helpers: newline handling, whitespace-tolerant comparison and
invalid-Unicode reporting."""
from .normalize import (
    convert_newlines,
    describe_newline,
    detect_newline,
    normalize_for_loose_hash,
    normalize_line_loose,
    normalize_newlines,
    same_line,
)
from .unicode_issues import (
    BOM_CHAR,
    REPLACEMENT_CHAR,
    build_invalid_unicode_report,
    contains_invalid_unicode,
    iter_invalid_unicode,
    make_visible,
    truncate,
)

__all__ = [
    "convert_newlines",
    "describe_newline",
    "detect_newline",
    "normalize_for_loose_hash",
    "normalize_line_loose",
    "normalize_newlines",
    "same_line",
    "BOM_CHAR",
    "REPLACEMENT_CHAR",
    "build_invalid_unicode_report",
    "contains_invalid_unicode",
    "iter_invalid_unicode",
    "make_visible",
    "truncate",
]
