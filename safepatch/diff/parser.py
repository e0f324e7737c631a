"""Unified diff parsing.

Accepted input is a single-file unified diff:

- optional preamble (``diff --git``, ``index ...``) which is ignored,
- ``---`` / ``+++`` file headers (informational only),
- one or more hunks opened by ``@@ -S,L +S,L @@``; counts may be omitted
  (``@@ -3 +3 @@``) and default to 1, text after the closing ``@@`` is ignored,
- hunk body lines starting with ``' '``, ``'+'`` or ``'-'``; an empty body line
  is an empty context line.

A line indented before its ``+``/``-`` marker is rejected rather than read as
context, since that almost always means the whole diff was indented by the
caller.
"""
from __future__ import annotations

import re
from typing import List, Optional

from ..errors import DiffFormatError
from ..text import BOM_CHAR, normalize_newlines, truncate
from .model import Hunk, HunkLine, LineKind, UnifiedDiff

RE_HUNK_HEADER = re.compile(
    r"^@@ -(?P<old_start>\d+)(?:,(?P<old_count>\d+))? "
    r"\+(?P<new_start>\d+)(?:,(?P<new_count>\d+))? @@"
)

_PREFIXES = {kind.value: kind for kind in LineKind}


def _count(value: Optional[str]) -> int:
    return int(value) if value is not None else 1


def _parse_body_line(raw: str, line_no: int) -> HunkLine:
    if raw == "":
        return HunkLine(LineKind.CONTEXT, "")

    if len(raw) >= 2 and raw[0] == " " and raw[1] in "+-":
        raise DiffFormatError(
            f"Invalid diff line {line_no}: whitespace before the '{raw[1]}' prefix "
            f"({truncate(raw, 60)!r})."
        )

    kind = _PREFIXES.get(raw[0])
    if kind is None:
        raise DiffFormatError(f"Invalid diff line {line_no}: unknown prefix {raw[0]!r}.")
    return HunkLine(kind, raw[1:])


def parse_unified_diff(diff_text: str) -> UnifiedDiff:
    """Parse ``diff_text`` into a :class:`UnifiedDiff`.

    Raises:
        DiffFormatError: On a leading BOM, a malformed hunk header, an invalid
            line prefix, a diff without hunks, or a hunk without changes.
    """
    if diff_text.startswith(BOM_CHAR):
        raise DiffFormatError("Invalid diff: it starts with a BOM. Send the diff as UTF-8 without BOM.")

    lines = normalize_newlines(diff_text).split("\n")
    if lines and lines[-1] == "":
        lines.pop()

    original_file: Optional[str] = None
    new_file: Optional[str] = None
    hunks: List[Hunk] = []
    current: Optional[dict] = None

    def finalize() -> None:
        if current is not None:
            hunks.append(
                Hunk(
                    start_original=current["old_start"],
                    length_original=current["old_count"],
                    start_new=current["new_start"],
                    length_new=current["new_count"],
                    lines=tuple(current["lines"]),
                    header=current["header"],
                )
            )

    for line_no, raw in enumerate(lines, start=1):
        if raw.startswith("---"):
            original_file = raw
        elif raw.startswith("+++"):
            new_file = raw
        elif raw.startswith("@@"):
            match = RE_HUNK_HEADER.match(raw)
            if not match:
                raise DiffFormatError(f"Invalid hunk header at line {line_no}: {truncate(raw, 80)!r}.")
            finalize()
            current = {
                "old_start": int(match.group("old_start")),
                "old_count": _count(match.group("old_count")),
                "new_start": int(match.group("new_start")),
                "new_count": _count(match.group("new_count")),
                "header": raw,
                "lines": [],
            }
        elif current is not None:
            current["lines"].append(_parse_body_line(raw, line_no))

    finalize()

    if not hunks:
        raise DiffFormatError("Invalid diff: no hunks found.")

    for index, hunk in enumerate(hunks, start=1):
        if not hunk.has_changes:
            raise DiffFormatError(f"Invalid diff: hunk {index} has no actual changes.")

    return UnifiedDiff(hunks=tuple(hunks), original_file=original_file, new_file=new_file)
