"""Apply an aligned diff to the original text."""
from __future__ import annotations

from typing import List

from ..errors import UnsafeOutputError
from ..text import build_invalid_unicode_report, contains_invalid_unicode, normalize_newlines
from .model import AlignedDiff, LineKind


def apply_diff(original_text: str, aligned: AlignedDiff) -> str:
    """Return the patched text, joined with ``\\n``.

    The output is assembled into a fresh line list; ``original_text`` and
    ``aligned`` are not modified. CONTEXT lines copy the file's own line
    (not the diff's, which may differ in whitespace), REMOVE lines skip it,
    ADD lines emit their payload.

    Raises:
        UnsafeOutputError: If the result contains U+FFFD or U+FEFF.
    """
    file_lines = normalize_newlines(original_text).split("\n")
    out: List[str] = []
    cursor = 0

    for hunk in aligned.hunks:
        out.extend(file_lines[cursor:hunk.start_index])
        cursor = hunk.start_index

        for line in hunk.lines:
            if line.kind is LineKind.CONTEXT:
                out.append(file_lines[cursor])
                cursor += 1
            elif line.kind is LineKind.REMOVE:
                cursor += 1
            else:
                out.append(line.text)

    out.extend(file_lines[cursor:])
    result = "\n".join(out)

    if contains_invalid_unicode(result):
        raise UnsafeOutputError(
            build_invalid_unicode_report(
                result,
                headline="Refusing to write: the patched text would contain invalid Unicode. "
                "This error is not retriable.",
            )
        )
    return result
