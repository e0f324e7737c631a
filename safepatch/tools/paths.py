"""Path resolution for tool handlers.

The engine itself only ever sees absolute paths. Turning a caller supplied
path into one, and deciding whether it may be touched at all, is delegated
to a :class:`PathResolver`.
"""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, Protocol

from ..errors import FileAccessError


class PathResolver(Protocol):
    """Maps a raw, caller supplied path to an absolute path it may use."""

    def resolve(self, raw: str) -> Path:
        """Return the absolute path for ``raw``.

        Raises:
            FileAccessError: If the path is not allowed.
        """
        ...


def _is_within(child: Path, parent: Path) -> bool:
    """Check if a child path is within a parent directory."""
    try:
        child.relative_to(parent)
        return True
    except ValueError:
        return False


class SandboxPathResolver:
    """Keep every path inside ``base_path``.

    Relative paths are joined to the base; absolute ones are accepted only
    when they already point inside it. Paths under any of ``denied_dirs``
    (relative to the base, first component) are refused.
    """

    def __init__(self, base_path: str | Path, denied_dirs: Iterable[str] = (".git",)):
        self.base_path = Path(base_path).resolve()
        self.denied_dirs = tuple(denied_dirs)

    def resolve(self, raw: str) -> Path:
        cleaned = (raw or "").strip()
        if not cleaned:
            raise FileAccessError("Path is required", hint="Pass a path relative to the workspace root")

        candidate = Path(cleaned)
        if not candidate.is_absolute():
            candidate = self.base_path / candidate
        full = candidate.resolve()

        if not _is_within(full, self.base_path):
            raise FileAccessError(
                "Access denied: path is outside the workspace root.",
                path=str(full),
                hint=f"Use paths inside {self.base_path}",
            )

        relative = full.relative_to(self.base_path)
        if relative.parts and relative.parts[0] in self.denied_dirs:
            raise FileAccessError(
                f"Access denied: path is in a restricted directory ({relative.parts[0]}).",
                path=str(full),
            )
        return full
