"""File gateway: the read and patch flows that tool handlers call into.

Patch flow::

    snapshot -> hash gate -> unicode check -> parse -> validate -> align -> apply -> write

Every step raises a :class:`~safepatch.errors.SafePatchError` subclass on
failure. :meth:`FileGateway.try_apply_patch` turns those into a tagged
:class:`PatchOutcome` for callers that prefer values over exceptions.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Tuple

from .config import DEFAULT_CONFIG, EngineConfig
from .diff import ResolvedHunk, align_diff, apply_diff, parse_unified_diff, validate_structure
from .errors import ConcurrencyConflictError, SafePatchError, UnsafeOutputError
from .logging import get_logger, request_context
from .snapshot import FileSnapshot, load_snapshot, write_patched
from .text import build_invalid_unicode_report, contains_invalid_unicode

logger = get_logger(__name__)


@dataclass(frozen=True)
class RangeRead:
    """A 1-based inclusive slice of a file's lines."""

    snapshot: FileSnapshot
    start_line: int
    end_line: int
    lines: Tuple[str, ...]

    @property
    def total_lines(self) -> int:
        return self.snapshot.line_count

    def render(self) -> str:
        """Lines prefixed with their right-aligned line number."""
        return "\n".join(
            f"{number:6} | {line}"
            for number, line in enumerate(self.lines, start=self.start_line)
        )


@dataclass(frozen=True)
class PatchReport:
    """What a successful patch did.

    Attributes:
        path: File that was rewritten.
        hash_strict: SHA-256 of the bytes now on disk; use it for the next patch.
        hunks: Placement of every hunk as applied.
        normalized_hash_match: The caller's hash matched only the normalized
            hash, so concurrent whitespace-only edits cannot be ruled out.
    """

    path: Path
    hash_strict: str
    hunks: Tuple[ResolvedHunk, ...] = ()
    normalized_hash_match: bool = False

    @property
    def hunk_count(self) -> int:
        return len(self.hunks)

    @property
    def lines_added(self) -> int:
        return sum(h.added for h in self.hunks)

    @property
    def lines_removed(self) -> int:
        return sum(h.removed for h in self.hunks)

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": str(self.path),
            "hash_strict": self.hash_strict,
            "hunks": self.hunk_count,
            "lines_added": self.lines_added,
            "lines_removed": self.lines_removed,
            "normalized_hash_match": self.normalized_hash_match,
            "placements": [h.to_dict() for h in self.hunks],
        }


@dataclass(frozen=True)
class PatchOutcome:
    """Either a :class:`PatchReport` or a tagged error, never both."""

    ok: bool
    report: Optional[PatchReport] = None
    error_kind: Optional[str] = None
    message: Optional[str] = None
    hint: Optional[str] = None
    retriable: bool = True
    error: Optional[SafePatchError] = field(default=None, repr=False, compare=False)

    @classmethod
    def success(cls, report: PatchReport) -> "PatchOutcome":
        return cls(ok=True, report=report)

    @classmethod
    def failure(cls, error: SafePatchError) -> "PatchOutcome":
        return cls(
            ok=False,
            error_kind=error.kind,
            message=error.error,
            hint=error.hint,
            retriable=error.retriable,
            error=error,
        )

    def to_dict(self) -> dict[str, Any]:
        if self.ok and self.report is not None:
            return {"status": "ok", **self.report.to_dict()}
        assert self.error is not None
        return self.error.to_dict()


class FileGateway:
    """Reads snapshots and applies unified diffs to files on disk.

    Paths are taken as given; resolving and sandboxing them is the caller's
    job (see :mod:`safepatch.tools.paths`).
    """

    def __init__(self, config: EngineConfig = DEFAULT_CONFIG):
        self.config = config

    # ------------------------------------------------------------------
    # Read flow
    # ------------------------------------------------------------------

    def read(self, path: str | Path) -> FileSnapshot:
        snapshot = load_snapshot(path)
        if contains_invalid_unicode(snapshot.text):
            logger.warning(
                "invalid_unicode_in_file",
                path=str(snapshot.path),
                report=build_invalid_unicode_report(snapshot.text),
            )
        return snapshot

    def read_range(self, path: str | Path, start_line: int, end_line: int) -> RangeRead:
        """Return lines ``start_line..end_line`` (1-based, inclusive).

        Reversed bounds are swapped and both are clamped to the file length.

        Raises:
            ValueError: If either bound is below 1.
        """
        if start_line < 1 or end_line < 1:
            raise ValueError("start_line and end_line must be >= 1")
        if end_line < start_line:
            start_line, end_line = end_line, start_line

        snapshot = self.read(path)
        lines = snapshot.lines
        total = len(lines)
        start_line = min(start_line, total)
        end_line = min(end_line, total)

        return RangeRead(
            snapshot=snapshot,
            start_line=start_line,
            end_line=end_line,
            lines=tuple(lines[start_line - 1:end_line]),
        )

    # ------------------------------------------------------------------
    # Patch flow
    # ------------------------------------------------------------------

    def check_hash(self, snapshot: FileSnapshot, expected_hash: str) -> bool:
        """Optimistic concurrency gate.

        Returns:
            True when only the normalized hash matched.

        Raises:
            ConcurrencyConflictError: If ``expected_hash`` matches neither hash.
        """
        strict_ok, normalized_ok = snapshot.matches_hash(expected_hash or "")
        if strict_ok:
            return False
        if normalized_ok:
            logger.warning("hash_gate_normalized_match", path=str(snapshot.path))
            return True
        raise ConcurrencyConflictError(
            "Concurrency conflict: expected hash does not match the current file.\n"
            f"Current hash_strict: {snapshot.hash_strict}\n"
            f"Current hash_normalized: {snapshot.hash_normalized}",
            path=str(snapshot.path),
        )

    def apply_patch(
        self,
        snapshot: FileSnapshot,
        diff_text: str,
        expected_hash: str,
        allow_large: bool = False,
    ) -> PatchReport:
        """Apply ``diff_text`` to the file ``snapshot`` was read from.

        Raises:
            SafePatchError: The subclass identifies the failing step.
        """
        with request_context(operation="apply_patch", path=str(snapshot.path)):
            try:
                return self._apply(snapshot, diff_text, expected_hash, allow_large)
            except SafePatchError as exc:
                if exc.path is None:
                    exc.path = str(snapshot.path)
                logger.info("patch_rejected", error_kind=exc.kind)
                raise

    def _apply(
        self,
        snapshot: FileSnapshot,
        diff_text: str,
        expected_hash: str,
        allow_large: bool,
    ) -> PatchReport:
        normalized_only = self.check_hash(snapshot, expected_hash)

        original_text = snapshot.lf_text
        if contains_invalid_unicode(original_text):
            raise UnsafeOutputError(
                build_invalid_unicode_report(
                    original_text,
                    headline="Refusing to patch: the file already contains invalid Unicode.",
                )
            )

        diff = parse_unified_diff(diff_text)
        validate_structure(
            diff,
            snapshot.line_count,
            self.config.touched_limit(allow_large),
            config=self.config,
        )
        aligned = align_diff(diff, original_text, config=self.config)
        patched = apply_diff(original_text, aligned)
        new_hash = write_patched(snapshot, patched)

        report = PatchReport(
            path=snapshot.path,
            hash_strict=new_hash,
            hunks=aligned.hunks,
            normalized_hash_match=normalized_only,
        )
        logger.info(
            "patch_applied",
            hunks=report.hunk_count,
            lines_added=report.lines_added,
            lines_removed=report.lines_removed,
            relocated=aligned.relocated,
        )
        return report

    def try_apply_patch(
        self,
        snapshot: FileSnapshot,
        diff_text: str,
        expected_hash: str,
        allow_large: bool = False,
    ) -> PatchOutcome:
        try:
            report = self.apply_patch(snapshot, diff_text, expected_hash, allow_large)
        except SafePatchError as exc:
            return PatchOutcome.failure(exc)
        return PatchOutcome.success(report)
