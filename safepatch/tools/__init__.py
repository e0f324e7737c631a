"""Agent-facing file tools and the registry they are exposed through."""
from .base import ToolExecutor, ToolRegistry
from .file_tools import APPLY_PATCH_SCHEMA, READ_RANGE_SCHEMA, READ_SCHEMA, FileToolHandlers
from .paths import PathResolver, SandboxPathResolver

__all__ = [
    "ToolExecutor",
    "ToolRegistry",
    "FileToolHandlers",
    "READ_SCHEMA",
    "READ_RANGE_SCHEMA",
    "APPLY_PATCH_SCHEMA",
    "PathResolver",
    "SandboxPathResolver",
]
