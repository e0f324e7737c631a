"""Error types raised by the patch engine.

Every failure is surfaced to the caller with one descriptive message plus a
remediation hint. Nothing is retried internally. Each class carries a stable
``kind`` string that the gateway and tool layer use as the error tag.
"""
from __future__ import annotations

from typing import Optional

NEWLINE_NOTE = (
    "Line endings are normalized internally and the file is rewritten with its "
    "original newline style; do not convert the diff with unix2dos/sed/printf."
)

REGENERATE_DIFF_HINT = (
    "Regenerate the diff as a git-style unified diff and make sure every hunk "
    "line starts with ' ', '+' or '-'."
)

REREAD_BLOCK_HINT = (
    "Re-read the exact block and regenerate the diff preserving tabs and "
    "without wrapping long lines."
)


class SafePatchError(Exception):
    """Base class for every engine failure.

    Attributes:
        error: Human readable description of what went wrong.
        path: File the failure relates to, when known.
        hint: What the caller should do before retrying.
    """

    kind: str = "error"
    retriable: bool = True
    default_hint: Optional[str] = None

    def __init__(self, error: str, path: Optional[str] = None, hint: Optional[str] = None):
        super().__init__(error)
        self.error = error
        self.path = path
        self.hint = hint if hint is not None else self.default_hint

    def to_dict(self) -> dict:
        result: dict = {"status": "error", "error_kind": self.kind, "error": self.error}
        if self.path is not None:
            result["path"] = self.path
        if self.hint is not None:
            result["hint"] = self.hint
        if not self.retriable:
            result["retriable"] = False
        return result


class FileAccessError(SafePatchError):
    """File unreadable or unwritable, or its directory is missing."""

    kind = "io_error"


class UnsupportedEncodingError(SafePatchError):
    """The bytes cannot be decoded with the detected encoding."""

    kind = "unsupported_encoding"
    default_hint = "Convert the file to UTF-8 (with or without BOM) or UTF-16 with BOM."


class DiffFormatError(SafePatchError):
    """The diff text is not a well-formed unified diff."""

    kind = "diff_format"
    default_hint = f"{NEWLINE_NOTE}\n{REGENERATE_DIFF_HINT}"


class StructuralValidationError(SafePatchError):
    """The diff is well formed but its size or shape is rejected."""

    default_hint = (
        "Make the diff smaller and more focused, or ask for confirmation to "
        "use allow_large if the change really needs it."
    )


class PatchEmptyError(StructuralValidationError):
    kind = "patch_empty"


class PatchTooLargeError(StructuralValidationError):
    kind = "patch_too_large"


class PatchTooInvasiveError(StructuralValidationError):
    kind = "patch_too_invasive"


class LineMismatchError(SafePatchError):
    """A hunk line does not match the file at its declared position."""

    default_hint = (
        f"{NEWLINE_NOTE}\nTypical causes: tabs vs spaces, wrapped lines in the "
        f"diff, or the file changed. {REREAD_BLOCK_HINT}"
    )

    def __init__(
        self,
        error: str,
        *,
        line_number: int,
        file_line: Optional[str] = None,
        diff_line: Optional[str] = None,
        path: Optional[str] = None,
        hint: Optional[str] = None,
    ):
        super().__init__(error, path=path, hint=hint)
        self.line_number = line_number
        self.file_line = file_line
        self.diff_line = diff_line


class ContextMismatchError(LineMismatchError):
    kind = "context_mismatch"


class RemoveMismatchError(LineMismatchError):
    kind = "remove_mismatch"


class AlignmentError(SafePatchError):
    """Relocating a hunk by its context did not yield a single position."""

    default_hint = REREAD_BLOCK_HINT


class AmbiguousPatchLocationError(AlignmentError):
    kind = "ambiguous_location"
    default_hint = (
        "Add 3-6 lines of real context around the change and regenerate the "
        "diff without wrapping lines."
    )

    def __init__(self, error: str, *, candidates: tuple[int, ...] = (), path: Optional[str] = None,
                 hint: Optional[str] = None):
        super().__init__(error, path=path, hint=hint)
        self.candidates = candidates


class PatchLocationNotFoundError(AlignmentError):
    kind = "location_not_found"


class ConcurrencyConflictError(SafePatchError):
    """The caller's expected hash matches neither live hash of the file."""

    kind = "concurrency_conflict"
    default_hint = "The file changed since it was read. Read it again to get a fresh hash."


class UnsafeOutputError(SafePatchError):
    """Input or output text contains U+FFFD or U+FEFF.

    Retrying the same patch fails identically; the characters have to be
    removed by someone first.
    """

    kind = "unsafe_output"
    retriable = False
    default_hint = (
        "Do not retry the same patch. Ask the user to remove those characters "
        "manually, or show the exact block to edit so it can be applied by hand."
    )


class RoundtripError(SafePatchError):
    """The original encoding cannot represent the patched text losslessly."""

    kind = "roundtrip"
    default_hint = (
        "The patched text contains characters the file's encoding cannot store. "
        "Use only characters representable in that encoding."
    )


__all__ = [
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
