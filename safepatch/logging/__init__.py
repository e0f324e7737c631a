"""Structured logging for safepatch.

All engine components log through structlog bound loggers bridged onto the
stdlib ``safepatch`` logger tree. Only that tree gets a handler, so embedding
applications keep their own root logging untouched.

Quick Start:
    >>> from safepatch.logging import configure_logging, LogConfig, LogLevel
    >>> configure_logging(LogConfig(level=LogLevel.DEBUG))

Request tracing:
    >>> from safepatch.logging import request_context
    >>> with request_context(request_id="req-123"):
    ...     ...  # every event inside carries request_id
"""
import structlog

from .config import (
    DEFAULT_MODULE_LEVELS,
    LogConfig,
    LogFormat,
    LogLevel,
    configure_logging,
    ensure_configured,
    is_configured,
)
from .context import (
    bind_context,
    clear_context,
    get_context,
    request_context,
    unbind_context,
)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Logging is configured with defaults on first use if the host application
    has not configured it.

    Args:
        name: Logger name, typically ``__name__`` of the calling module.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("snapshot_loaded", encoding="utf-8", line_count=42)
    """
    ensure_configured()
    return structlog.get_logger(name)


__all__ = [
    "DEFAULT_MODULE_LEVELS",
    "LogConfig",
    "LogFormat",
    "LogLevel",
    "configure_logging",
    "ensure_configured",
    "is_configured",
    "get_logger",
    "bind_context",
    "unbind_context",
    "clear_context",
    "get_context",
    "request_context",
]
