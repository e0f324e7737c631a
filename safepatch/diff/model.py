"""Data structures for parsed and aligned unified diffs."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class LineKind(str, Enum):
    CONTEXT = " "
    ADD = "+"
    REMOVE = "-"


@dataclass(frozen=True)
class HunkLine:
    """One tagged line of a hunk body, prefix stripped."""

    kind: LineKind
    text: str

    @property
    def consumes_original(self) -> bool:
        """Context and remove lines each match one line of the original file."""
        return self.kind is not LineKind.ADD

    @property
    def produces_new(self) -> bool:
        return self.kind is not LineKind.REMOVE

    @property
    def is_change(self) -> bool:
        return self.kind is not LineKind.CONTEXT

    def render(self) -> str:
        return f"{self.kind.value}{self.text}"


def count_original(lines: Tuple[HunkLine, ...]) -> int:
    return sum(1 for line in lines if line.consumes_original)


def count_new(lines: Tuple[HunkLine, ...]) -> int:
    return sum(1 for line in lines if line.produces_new)


@dataclass(frozen=True)
class Hunk:
    """A hunk as declared by its ``@@ -S,L +S,L @@`` header.

    Positions are 1-based and only trusted after the aligner confirms them.
    """

    start_original: int
    length_original: int
    start_new: int
    length_new: int
    lines: Tuple[HunkLine, ...] = ()
    header: str = ""

    @property
    def added(self) -> int:
        return sum(1 for line in self.lines if line.kind is LineKind.ADD)

    @property
    def removed(self) -> int:
        return sum(1 for line in self.lines if line.kind is LineKind.REMOVE)

    @property
    def has_changes(self) -> bool:
        return any(line.is_change for line in self.lines)


@dataclass(frozen=True)
class UnifiedDiff:
    """An ordered sequence of hunks against a single file."""

    hunks: Tuple[Hunk, ...]
    original_file: Optional[str] = None
    new_file: Optional[str] = None

    @property
    def touched_lines(self) -> int:
        """Number of added plus removed lines across all hunks."""
        return sum(h.added + h.removed for h in self.hunks)


@dataclass(frozen=True)
class ResolvedHunk:
    """Where a hunk actually applies, as established by the aligner.

    Attributes:
        start_original: 1-based first original line the hunk covers.
        length_original: Original lines consumed (context + remove).
        length_new: Lines produced (context + add).
        lines: Effective lines, possibly trimmed of leading/trailing context.
        declared_start: ``start_original`` from the diff header.
        fuzz: Context lines trimmed as ``(leading, trailing)``.
        relocated: True when the hunk was found away from its declared start.
    """

    start_original: int
    length_original: int
    length_new: int
    lines: Tuple[HunkLine, ...]
    declared_start: int
    fuzz: Tuple[int, int] = (0, 0)
    relocated: bool = False

    @property
    def start_index(self) -> int:
        return self.start_original - 1

    @property
    def end_index(self) -> int:
        """0-based exclusive end of the original range."""
        return self.start_index + self.length_original

    @property
    def added(self) -> int:
        return sum(1 for line in self.lines if line.kind is LineKind.ADD)

    @property
    def removed(self) -> int:
        return sum(1 for line in self.lines if line.kind is LineKind.REMOVE)

    def to_dict(self) -> dict:
        return {
            "declared_start": self.declared_start,
            "start": self.start_original,
            "length_original": self.length_original,
            "length_new": self.length_new,
            "relocated": self.relocated,
            "fuzz": list(self.fuzz),
        }


@dataclass(frozen=True)
class AlignedDiff:
    """A diff whose hunks are placed, ordered and non-overlapping."""

    source: UnifiedDiff
    hunks: Tuple[ResolvedHunk, ...] = field(default_factory=tuple)

    @property
    def lines_added(self) -> int:
        return sum(h.added for h in self.hunks)

    @property
    def lines_removed(self) -> int:
        return sum(h.removed for h in self.hunks)

    @property
    def relocated(self) -> bool:
        return any(h.relocated for h in self.hunks)
