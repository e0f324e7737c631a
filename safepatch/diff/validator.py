"""Structural checks on a parsed diff before it is matched against the file."""
from __future__ import annotations

from typing import Optional

from ..config import DEFAULT_CONFIG, EngineConfig
from ..errors import PatchEmptyError, PatchTooInvasiveError, PatchTooLargeError
from .model import UnifiedDiff


def validate_structure(
    diff: UnifiedDiff,
    original_line_count: int,
    max_touched_lines: Optional[int] = None,
    *,
    config: EngineConfig = DEFAULT_CONFIG,
) -> int:
    """Reject diffs that are empty, too large, or rewrite too much of the file.

    The touched/original ratio is only checked for files of at least
    ``config.invasive_min_lines`` lines; on tiny or freshly created files it
    rejects perfectly reasonable edits.

    Returns:
        The number of touched (added + removed) lines.
    """
    if max_touched_lines is None:
        max_touched_lines = config.max_touched_lines

    touched = diff.touched_lines

    if touched == 0:
        raise PatchEmptyError("Patch is empty: it adds and removes nothing.")

    if touched > max_touched_lines:
        raise PatchTooLargeError(
            f"Patch too large: touches {touched} lines (limit {max_touched_lines})."
        )

    if original_line_count >= config.invasive_min_lines:
        ratio = touched / original_line_count
        if ratio > config.invasive_max_ratio:
            raise PatchTooInvasiveError(
                f"Patch too invasive: touches {touched} of {original_line_count} lines "
                f"({ratio:.0%}, limit {config.invasive_max_ratio:.0%})."
            )

    return touched
