"""Custom structlog processors for safepatch.

Processors transform log event dictionaries as they pass through the
logging pipeline.
"""
from typing import Any, Callable

from .context import get_context

# Diff bodies and file text can be arbitrarily large; events only ever need a prefix.
DEFAULT_MAX_VALUE_CHARS: int = 300


def inject_context(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Inject values bound via bind_context() or request_context().

    Explicit event values win over bound context values.
    """
    context = get_context()
    for key, value in context.items():
        if key not in event_dict:
            event_dict[key] = value
    return event_dict


def add_logger_name(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Add the name of the logger that produced the event as ``logger``."""
    record = event_dict.get("_record")
    if record is not None:
        event_dict["logger"] = record.name
    elif hasattr(logger, "name"):
        event_dict["logger"] = logger.name
    return event_dict


def make_value_truncator(max_chars: int = DEFAULT_MAX_VALUE_CHARS) -> Callable[..., dict[str, Any]]:
    """Build a processor that shortens string values longer than ``max_chars``.

    The event message itself is left alone.
    """

    def truncate_long_values(
        logger: Any,
        method_name: str,
        event_dict: dict[str, Any],
    ) -> dict[str, Any]:
        for key, value in list(event_dict.items()):
            if key == "event" or not isinstance(value, str):
                continue
            if len(value) > max_chars:
                event_dict[key] = f"{value[:max_chars]}... ({len(value)} chars)"
        return event_dict

    return truncate_long_values
