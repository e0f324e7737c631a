"""Unified diff parsing, validation, alignment and application."""
from .aligner import align_diff, find_matches, iter_fuzz_variants
from .applier import apply_diff
from .model import AlignedDiff, Hunk, HunkLine, LineKind, ResolvedHunk, UnifiedDiff
from .parser import RE_HUNK_HEADER, parse_unified_diff
from .validator import validate_structure

__all__ = [
    "AlignedDiff",
    "Hunk",
    "HunkLine",
    "LineKind",
    "ResolvedHunk",
    "UnifiedDiff",
    "RE_HUNK_HEADER",
    "parse_unified_diff",
    "validate_structure",
    "align_diff",
    "find_matches",
    "iter_fuzz_variants",
    "apply_diff",
]
