"""Request-scoped logging context.

Each read or patch request binds the file it works on (and any caller
supplied correlation id) so every event emitted by the loader, aligner and
writer can be traced back to the request that produced it.
"""
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterator

_log_context: ContextVar[dict[str, Any]] = ContextVar("safepatch_log_context", default={})


def bind_context(**kwargs: Any) -> None:
    """Bind key-value pairs to the current logging context.

    Example:
        >>> bind_context(request_id="req-123", path="/repo/app.py")
    """
    current = _log_context.get().copy()
    current.update(kwargs)
    _log_context.set(current)


def unbind_context(*keys: str) -> None:
    """Remove specific keys from the current logging context."""
    current = _log_context.get().copy()
    for key in keys:
        current.pop(key, None)
    _log_context.set(current)


def clear_context() -> None:
    """Clear all bound context values."""
    _log_context.set({})


def get_context() -> dict[str, Any]:
    """Return a copy of the current logging context."""
    return _log_context.get().copy()


@contextmanager
def request_context(**kwargs: Any) -> Iterator[dict[str, Any]]:
    """Bind values for the duration of one request and restore afterwards.

    Example:
        >>> with request_context(operation="apply_patch", path="/repo/a.txt"):
        ...     gateway.apply_patch(...)
    """
    token = _log_context.set({**_log_context.get(), **kwargs})
    try:
        yield get_context()
    finally:
        _log_context.reset(token)
