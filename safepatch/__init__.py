"""
safepatch

Safe, encoding-preserving application of unified diffs submitted by
automated agents.

A patch is accepted only if the caller's hash still matches the file, the
diff is well formed and reasonably sized, and every hunk can be placed
unambiguously. The file is then rewritten with its original encoding, BOM
and newline style, after verifying the new bytes decode back to the exact
patched text.

Main exports:
    - FileGateway: read / read_range / apply_patch / try_apply_patch
    - FileSnapshot: immutable view of a file as read
    - EngineConfig: every tunable limit
    - SafePatchError and subclasses: one per failing step

Example:
    >>> from safepatch import FileGateway
    >>> gateway = FileGateway()
    >>> snap = gateway.read("/repo/app.py")
    >>> report = gateway.apply_patch(snap, diff_text, snap.hash_strict)
    >>> report.hash_strict  # hash to use for the next patch
"""

from .config import DEFAULT_CONFIG, EngineConfig
from .diff import (
    AlignedDiff,
    Hunk,
    HunkLine,
    LineKind,
    ResolvedHunk,
    UnifiedDiff,
    align_diff,
    apply_diff,
    parse_unified_diff,
    validate_structure,
)
from .errors import (
    AlignmentError,
    AmbiguousPatchLocationError,
    ConcurrencyConflictError,
    ContextMismatchError,
    DiffFormatError,
    FileAccessError,
    LineMismatchError,
    PatchEmptyError,
    PatchLocationNotFoundError,
    PatchTooInvasiveError,
    PatchTooLargeError,
    RemoveMismatchError,
    RoundtripError,
    SafePatchError,
    StructuralValidationError,
    UnsafeOutputError,
    UnsupportedEncodingError,
)
from .gateway import FileGateway, PatchOutcome, PatchReport, RangeRead
from .snapshot import FileSnapshot, TextEncoding, detect_encoding, load_snapshot, write_patched

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "DEFAULT_CONFIG",
    "EngineConfig",
    "FileGateway",
    "PatchOutcome",
    "PatchReport",
    "RangeRead",
    "FileSnapshot",
    "TextEncoding",
    "detect_encoding",
    "load_snapshot",
    "write_patched",
    "AlignedDiff",
    "Hunk",
    "HunkLine",
    "LineKind",
    "ResolvedHunk",
    "UnifiedDiff",
    "align_diff",
    "apply_diff",
    "parse_unified_diff",
    "validate_structure",
    "SafePatchError",
    "FileAccessError",
    "UnsupportedEncodingError",
    "DiffFormatError",
    "StructuralValidationError",
    "PatchEmptyError",
    "PatchTooLargeError",
    "PatchTooInvasiveError",
    "LineMismatchError",
    "ContextMismatchError",
    "RemoveMismatchError",
    "AlignmentError",
    "AmbiguousPatchLocationError",
    "PatchLocationNotFoundError",
    "ConcurrencyConflictError",
    "UnsafeOutputError",
    "RoundtripError",
]
