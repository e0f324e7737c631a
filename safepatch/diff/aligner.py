"""Semantic alignment of hunks against the live file text.

Each hunk is first checked exactly where its header says it applies. When
that fails the hunk is relocated by searching for its context (and removed
lines), first in a window around the declared position and then across the
rest of the file, optionally trimming up to ``max_fuzz`` context lines from
either end. A relocation is only accepted when it is unique; several
candidate positions are an error, never a guess.

Hunks are placed in order: a hunk can never start before the end of the
previous one.
"""
from __future__ import annotations

from typing import Iterator, List, Optional, Sequence, Tuple

from ..config import DEFAULT_CONFIG, EngineConfig
from ..errors import (
    AmbiguousPatchLocationError,
    ContextMismatchError,
    LineMismatchError,
    PatchLocationNotFoundError,
    RemoveMismatchError,
)
from ..logging import get_logger
from ..text import make_visible, normalize_newlines, same_line, truncate
from .model import AlignedDiff, HunkLine, LineKind, ResolvedHunk, UnifiedDiff, count_new, count_original

logger = get_logger(__name__)

MAX_CANDIDATES_SHOWN: int = 6
_PREVIEW_CHARS: int = 240

Variant = Tuple[Tuple[HunkLine, ...], int, int]


def _validate_at(
    file_lines: Sequence[str],
    start_idx: int,
    lines: Sequence[HunkLine],
    *,
    hunk_no: int,
) -> Tuple[int, int]:
    """Check ``lines`` against the file starting at ``start_idx``.

    Returns:
        ``(original_consumed, new_produced)``.

    Raises:
        ContextMismatchError / RemoveMismatchError: On the first line that
            does not match, or when the file ends too early.
    """
    if start_idx > len(file_lines):
        raise ContextMismatchError(
            f"Hunk {hunk_no}: declared start line {start_idx + 1} is past the end of the file "
            f"({len(file_lines)} lines).",
            line_number=start_idx + 1,
        )

    idx = start_idx
    consumed = 0
    produced = 0

    for line in lines:
        if line.kind is LineKind.ADD:
            produced += 1
            continue

        if line.kind is LineKind.CONTEXT:
            error_cls: type[LineMismatchError] = ContextMismatchError
            what = "Patch context does not match"
        else:
            error_cls = RemoveMismatchError
            what = "Line to remove does not match"

        if idx >= len(file_lines):
            raise error_cls(
                f"Hunk {hunk_no}: {what} (unexpected end of file at line {idx + 1}).",
                line_number=idx + 1,
                diff_line=line.text,
            )

        file_line = file_lines[idx]
        if not same_line(file_line, line.text):
            file_vis = truncate(make_visible(file_line), _PREVIEW_CHARS)
            diff_vis = truncate(make_visible(line.text), _PREVIEW_CHARS)
            raise error_cls(
                f"Hunk {hunk_no}: {what} at line {idx + 1}.\n"
                f'File: "{file_vis}"\n'
                f'Diff: "{diff_vis}"',
                line_number=idx + 1,
                file_line=file_line,
                diff_line=line.text,
            )

        idx += 1
        consumed += 1
        if line.kind is LineKind.CONTEXT:
            produced += 1

    return consumed, produced


def _matches_at(file_lines: Sequence[str], start_idx: int, lines: Sequence[HunkLine]) -> bool:
    idx = start_idx
    for line in lines:
        if not line.consumes_original:
            continue
        if idx >= len(file_lines) or not same_line(file_lines[idx], line.text):
            return False
        idx += 1
    return True


def iter_fuzz_variants(lines: Tuple[HunkLine, ...], max_fuzz: int) -> Iterator[Variant]:
    """Yield ``(lines, leading_trim, trailing_trim)``, least trimming first.

    The untrimmed hunk always comes first. Only context lines outside the
    first/last change may be trimmed, at most ``max_fuzz`` from each end.
    """
    yield lines, 0, 0

    change_positions = [i for i, line in enumerate(lines) if line.is_change]
    if not change_positions:
        return
    first_change, last_change = change_positions[0], change_positions[-1]

    leading = 0
    for line in lines[:first_change]:
        if line.kind is not LineKind.CONTEXT:
            break
        leading += 1

    trailing = 0
    for line in reversed(lines[last_change + 1:]):
        if line.kind is not LineKind.CONTEXT:
            break
        trailing += 1

    max_lead = min(max_fuzz, leading)
    max_trail = min(max_fuzz, trailing)

    for total in range(1, max_lead + max_trail + 1):
        for lead in range(0, max_lead + 1):
            trail = total - lead
            if trail < 0 or trail > max_trail:
                continue
            count = len(lines) - lead - trail
            if count <= 0:
                continue
            yield lines[lead:lead + count], lead, trail


def find_matches(
    file_lines: Sequence[str],
    lines: Sequence[HunkLine],
    expected_idx: int,
    min_idx: int,
    window: Optional[int],
    *,
    hit_limit: int,
) -> List[int]:
    """Return 0-based start indices where ``lines`` match the file.

    With a ``window`` only starts within ``expected_idx ± window`` are tried.
    Without one the whole file from ``min_idx`` is scanned, stopping once
    more than ``hit_limit`` matches were found.
    """
    if window is None:
        start = min_idx
        end = len(file_lines) - 1
    else:
        start = max(min_idx, expected_idx - window)
        end = min(len(file_lines) - 1, expected_idx + window)

    hits: List[int] = []
    for i in range(start, end + 1):
        if _matches_at(file_lines, i, lines):
            hits.append(i)
            if window is None and len(hits) > hit_limit:
                break
    return hits


def _relocate(
    file_lines: Sequence[str],
    lines: Tuple[HunkLine, ...],
    expected_idx: int,
    min_idx: int,
    *,
    hunk_no: int,
    config: EngineConfig,
    strict_error: LineMismatchError,
) -> Tuple[int, Variant]:
    """Search for a unique position of ``lines``; raise chained to ``strict_error`` otherwise."""
    window = config.window_for(count_original(lines))
    preface = (
        f"{strict_error.error}\n\n"
        "Tried to relocate the hunk by its context (search + limited fuzz) "
        "without finding a unique match.\n"
    )

    for variant in iter_fuzz_variants(lines, config.max_fuzz):
        variant_lines = variant[0]
        hits = find_matches(
            file_lines, variant_lines, expected_idx, min_idx, window,
            hit_limit=config.full_scan_hit_limit,
        )
        if not hits:
            hits = find_matches(
                file_lines, variant_lines, expected_idx, min_idx, None,
                hit_limit=config.full_scan_hit_limit,
            )

        if len(hits) == 1:
            return hits[0], variant

        if len(hits) > 1:
            shown = ", ".join(str(h + 1) for h in hits[:MAX_CANDIDATES_SHOWN])
            more = f" (+{len(hits) - MAX_CANDIDATES_SHOWN} more)" if len(hits) > MAX_CANDIDATES_SHOWN else ""
            raise AmbiguousPatchLocationError(
                f"{preface}Hunk {hunk_no} matches multiple locations in the file "
                f"(lines {shown}{more}). Refusing to pick one.",
                candidates=tuple(h + 1 for h in hits),
            ) from strict_error

    raise PatchLocationNotFoundError(
        f"{preface}Hunk {hunk_no}: no location matches the hunk context, even with fuzz. "
        "Typical causes: wrapped lines in the diff, invented or inexact context, "
        "or a diff generated against a different version of the file."
    ) from strict_error


def align_diff(
    diff: UnifiedDiff,
    original_text: str,
    *,
    config: EngineConfig = DEFAULT_CONFIG,
    relocate: bool = True,
) -> AlignedDiff:
    """Establish where every hunk of ``diff`` applies in ``original_text``.

    The parsed diff is left untouched; the result carries one
    :class:`ResolvedHunk` per hunk with corrected geometry and, when a fuzz
    variant matched, the trimmed line list.

    Args:
        diff: Parsed diff.
        original_text: Current file text (any newline style).
        config: Search window and fuzz limits.
        relocate: When False, a hunk that does not match at its declared
            position raises the mismatch instead of being searched for.

    Raises:
        ContextMismatchError / RemoveMismatchError: Only with ``relocate=False``.
        AmbiguousPatchLocationError: Relocation found several positions.
        PatchLocationNotFoundError: Relocation found none.
    """
    file_lines = normalize_newlines(original_text).split("\n")
    last_end = 0
    resolved: List[ResolvedHunk] = []

    for hunk_no, hunk in enumerate(diff.hunks, start=1):
        declared_idx = max(hunk.start_original - 1, last_end)

        try:
            consumed, produced = _validate_at(file_lines, declared_idx, hunk.lines, hunk_no=hunk_no)
        except LineMismatchError as strict_error:
            if not relocate:
                raise

            found_idx, (variant_lines, lead, trail) = _relocate(
                file_lines, hunk.lines, declared_idx, last_end,
                hunk_no=hunk_no, config=config, strict_error=strict_error,
            )

            placed = ResolvedHunk(
                start_original=found_idx + 1,
                length_original=count_original(variant_lines),
                length_new=count_new(variant_lines),
                lines=variant_lines,
                declared_start=hunk.start_original,
                fuzz=(lead, trail),
                relocated=True,
            )
            logger.info(
                "hunk_relocated",
                hunk=hunk_no,
                declared_start=hunk.start_original,
                start=placed.start_original,
                fuzz_leading=lead,
                fuzz_trailing=trail,
            )
        else:
            placed = ResolvedHunk(
                start_original=declared_idx + 1,
                length_original=consumed,
                length_new=produced,
                lines=hunk.lines,
                declared_start=hunk.start_original,
            )

        resolved.append(placed)
        last_end = placed.end_index

    return AlignedDiff(source=diff, hunks=tuple(resolved))
