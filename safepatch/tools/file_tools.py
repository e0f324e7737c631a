"""
File tools exposed to agents: ``file.read``, ``file.read_range`` and
``file.apply_patch_only``.

- Every handler returns a JSON string.
  - Success: ``{"status": "ok", ...}``
  - Error:   ``{"status": "error", "error_kind": "...", "error": "...", "hint": "..."}``
- Paths go through a :class:`~safepatch.tools.paths.PathResolver` first.
- ``file.read`` refuses files whose text exceeds ``max_read_chars`` and points
  to ``file.read_range`` instead.
- ``file.apply_patch_only`` re-reads the file, so the hash passed in is always
  checked against what is on disk right now.

Error recovery guidance for agents:
  - ``concurrency_conflict`` -> read the file again and use the fresh hash
  - ``context_mismatch`` / ``location_not_found`` -> re-read the block, keep tabs, do not wrap lines
  - ``ambiguous_location`` -> add more real context lines around the change
  - ``unsafe_output`` -> do not retry; the characters must be removed by hand
"""
from __future__ import annotations

import json
from typing import Any, Callable, List, Optional

from ..config import DEFAULT_CONFIG, EngineConfig
from ..errors import SafePatchError
from ..gateway import FileGateway
from ..logging import request_context
from .base import ToolRegistry
from .paths import PathResolver

_PATH_PROPERTY = {"type": "string", "description": "Absolute or workspace-relative path to the file."}

READ_SCHEMA: dict = {
    "name": "file.read",
    "description": (
        "Read the full content of a file. Returns the text, a strict SHA-256 hash (over the "
        "original bytes) and a whitespace-normalized hash. Always pass one of these hashes "
        "to file.apply_patch_only."
    ),
    "input_schema": {
        "type": "object",
        "properties": {"path": _PATH_PROPERTY},
        "required": ["path"],
    },
}

READ_RANGE_SCHEMA: dict = {
    "name": "file.read_range",
    "description": (
        "Read a line range from a file (1-based, inclusive). Returns the lines prefixed with "
        "their numbers, plus the full-file hashes."
    ),
    "input_schema": {
        "type": "object",
        "properties": {
            "path": _PATH_PROPERTY,
            "start_line": {"type": "integer", "description": "First line to read (1-based)."},
            "end_line": {"type": "integer", "description": "Last line to read (1-based, inclusive)."},
        },
        "required": ["path", "start_line", "end_line"],
    },
}

APPLY_PATCH_SCHEMA: dict = {
    "name": "file.apply_patch_only",
    "description": (
        "Apply a unified diff to a file. Requires the hash from the last file.read or "
        "file.read_range so stale content is never edited. Lines in the diff must start with "
        "' ' (context), '+' (add) or '-' (remove)."
    ),
    "input_schema": {
        "type": "object",
        "properties": {
            "path": _PATH_PROPERTY,
            "expected_hash": {
                "type": "string",
                "description": "SHA-256 (64 hex chars) from the last read: strict or normalized.",
            },
            "diff": {
                "type": "string",
                "description": "Unified diff text (not a file path) with @@ hunk headers and context lines.",
            },
            "allow_large": {
                "type": "boolean",
                "description": "Allow patches touching more than 200 lines (up to 1000). Default: false.",
            },
        },
        "required": ["path", "expected_hash", "diff"],
    },
}


def _make_error_response(error: str, path: Optional[str] = None, hint: Optional[str] = None) -> str:
    result: dict[str, Any] = {"status": "error", "error": error}
    if path is not None:
        result["path"] = path
    if hint is not None:
        result["hint"] = hint
    return json.dumps(result)


def _make_success_response(**fields: Any) -> str:
    return json.dumps({"status": "ok", **fields})


class FileToolHandlers:
    """Configurable file tools bound to one gateway and one path resolver."""

    def __init__(
        self,
        resolver: PathResolver,
        gateway: Optional[FileGateway] = None,
        config: Optional[EngineConfig] = None,
    ):
        self.config = config or (gateway.config if gateway is not None else DEFAULT_CONFIG)
        self.gateway = gateway or FileGateway(self.config)
        self.resolver = resolver

    def read(self, path: str) -> str:
        try:
            resolved = self.resolver.resolve(path)
            with request_context(operation="file.read", path=str(resolved)):
                snapshot = self.gateway.read(resolved)
        except SafePatchError as e:
            return json.dumps(e.to_dict())

        if len(snapshot.text) > self.config.max_read_chars:
            return _make_error_response(
                f"File too large for file.read ({len(snapshot.text)} chars, max {self.config.max_read_chars}).",
                path=str(resolved),
                hint="Use file.read_range to read specific sections.",
            )

        return _make_success_response(text=snapshot.text, **snapshot.to_metadata())

    def read_range(self, path: str, start_line: int, end_line: int) -> str:
        try:
            resolved = self.resolver.resolve(path)
            with request_context(operation="file.read_range", path=str(resolved)):
                chunk = self.gateway.read_range(resolved, int(start_line), int(end_line))
        except SafePatchError as e:
            return json.dumps(e.to_dict())
        except ValueError as e:
            return _make_error_response(str(e), path=path, hint="Line numbers are 1-based.")

        content = f"-----RANGE {chunk.start_line}-{chunk.end_line} (1-based)-----\n{chunk.render()}"
        return _make_success_response(
            text=content,
            total_lines=chunk.total_lines,
            range_start=chunk.start_line,
            range_end=chunk.end_line,
            **chunk.snapshot.to_metadata(),
        )

    def apply_patch_only(self, path: str, expected_hash: str, diff: str, allow_large: bool = False) -> str:
        if not (expected_hash or "").strip():
            return _make_error_response(
                "Missing required argument: expected_hash",
                path=path,
                hint="Read the file first and pass its hash_strict or hash_normalized.",
            )
        if not (diff or "").strip():
            return _make_error_response("Missing required argument: diff", path=path)

        try:
            resolved = self.resolver.resolve(path)
            snapshot = self.gateway.read(resolved)
        except SafePatchError as e:
            return json.dumps(e.to_dict())

        outcome = self.gateway.try_apply_patch(snapshot, diff, expected_hash, bool(allow_large))
        return json.dumps(outcome.to_dict())

    def get_tools(self) -> List[Callable[..., str]]:
        """Return the three handlers, each carrying its ``__tool_schema__``."""
        tools: List[Callable[..., str]] = []
        for func, schema in (
            (self.read, READ_SCHEMA),
            (self.read_range, READ_RANGE_SCHEMA),
            (self.apply_patch_only, APPLY_PATCH_SCHEMA),
        ):
            def handler(*args: Any, _func: Callable[..., str] = func, **kwargs: Any) -> str:
                return _func(*args, **kwargs)

            handler.__name__ = func.__name__
            handler.__doc__ = schema["description"]
            handler.__tool_schema__ = schema  # type: ignore[attr-defined]
            tools.append(handler)
        return tools

    def build_registry(self, registry: Optional[ToolRegistry] = None) -> ToolRegistry:
        registry = registry or ToolRegistry()
        registry.register_tools(self.get_tools())
        return registry
