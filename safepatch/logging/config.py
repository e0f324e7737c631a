"""Logging setup for the patch engine.

Only the ``safepatch`` logger tree is configured; the host application's root
logger and handlers are left alone. Output goes to a single stream, stderr by
default, because stdout carries tool responses when the engine runs over stdio.

Environment overrides (a ``.env`` file is honoured via python-dotenv):
    SAFEPATCH_LOG_LEVEL            DEBUG | INFO | WARNING | ERROR | CRITICAL
    SAFEPATCH_LOG_FORMAT           plain | json
    SAFEPATCH_LOG_MAX_VALUE_CHARS  longest string field kept in an event
"""
import logging
import os
import sys
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Mapping, Optional, TextIO

import structlog
from dotenv import load_dotenv

from .processors import DEFAULT_MAX_VALUE_CHARS, add_logger_name, inject_context, make_value_truncator

ROOT_LOGGER_NAME = "safepatch"
ENV_PREFIX = "SAFEPATCH_LOG_"


class LogLevel(str, Enum):
    """Log level enumeration."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    def to_int(self) -> int:
        """Convert to logging module integer level."""
        return getattr(logging, self.value)


class LogFormat(str, Enum):
    """Output format for logs."""
    PLAIN = "plain"  # Human-readable for development
    JSON = "json"    # Structured for log shipping


# Patch outcomes and hunk relocations are the events hosts care about; the
# snapshot loader and writer only speak up on warnings.
DEFAULT_MODULE_LEVELS: dict[str, LogLevel] = {
    "safepatch.gateway": LogLevel.INFO,
    "safepatch.diff.aligner": LogLevel.INFO,
}


@dataclass
class LogConfig:
    """How engine events are filtered and rendered.

    Attributes:
        level: Level of the ``safepatch`` logger; applies to every module
            without an override.
        format: Output format (PLAIN for console, JSON for machines).
        stream: Where all output goes. stdout is rejected.
        max_value_chars: String fields (diff bodies, file text) longer than
            this are cut in events.
        module_levels: Per-module overrides merged over DEFAULT_MODULE_LEVELS,
            e.g. ``{"safepatch.snapshot.writer": LogLevel.DEBUG}``.
    """
    level: LogLevel = LogLevel.WARNING
    format: LogFormat = LogFormat.PLAIN
    stream: TextIO = field(default_factory=lambda: sys.stderr)
    max_value_chars: int = DEFAULT_MAX_VALUE_CHARS
    module_levels: dict[str, LogLevel] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.stream is sys.stdout or self.stream is sys.__stdout__:
            raise ValueError("stdout is reserved for tool responses; log to stderr or a file stream")
        if self.max_value_chars < 1:
            raise ValueError(f"max_value_chars must be positive (got {self.max_value_chars})")

    def effective_module_levels(self) -> dict[str, LogLevel]:
        levels = dict(DEFAULT_MODULE_LEVELS)
        levels.update(self.module_levels)
        return levels

    @classmethod
    def from_env(
        cls,
        env: Optional[Mapping[str, str]] = None,
        *,
        dotenv_path: str | Path | None = None,
    ) -> "LogConfig":
        """Build a config from ``SAFEPATCH_LOG_*`` variables.

        Raises:
            ValueError: If a variable holds an unknown level or format, or a
                non-numeric length.
        """
        if env is None:
            load_dotenv(dotenv_path=dotenv_path)
            env = os.environ

        overrides: dict = {}
        level = env.get(f"{ENV_PREFIX}LEVEL", "").strip()
        if level:
            overrides["level"] = LogLevel(level.upper())
        fmt = env.get(f"{ENV_PREFIX}FORMAT", "").strip()
        if fmt:
            overrides["format"] = LogFormat(fmt.lower())
        max_chars = env.get(f"{ENV_PREFIX}MAX_VALUE_CHARS", "").strip()
        if max_chars:
            try:
                overrides["max_value_chars"] = int(max_chars)
            except ValueError:
                raise ValueError(f"{ENV_PREFIX}MAX_VALUE_CHARS({max_chars!r}) is not a valid int.") from None
        return cls(**overrides)


_configured: bool = False
_handler: Optional[logging.Handler] = None
_levelled_modules: set[str] = set()


def _get_processors(config: LogConfig) -> list:
    return [
        structlog.contextvars.merge_contextvars,
        inject_context,
        add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        make_value_truncator(config.max_value_chars),
    ]


def _get_renderer(config: LogConfig):
    if config.format == LogFormat.JSON:
        return structlog.processors.JSONRenderer()
    isatty = getattr(config.stream, "isatty", None)
    return structlog.dev.ConsoleRenderer(
        colors=bool(isatty and isatty()),
        exception_formatter=structlog.dev.plain_traceback,
    )


def _setup_engine_logger(config: LogConfig, formatter: logging.Formatter) -> None:
    """Attach one stream handler to the ``safepatch`` logger, replacing any earlier one."""
    global _handler

    engine_logger = logging.getLogger(ROOT_LOGGER_NAME)
    if _handler is not None:
        engine_logger.removeHandler(_handler)

    _handler = logging.StreamHandler(config.stream)
    _handler.setFormatter(formatter)
    engine_logger.addHandler(_handler)
    engine_logger.setLevel(config.level.to_int())
    engine_logger.propagate = False

    for name in _levelled_modules:
        logging.getLogger(name).setLevel(logging.NOTSET)
    _levelled_modules.clear()
    for name, level in config.effective_module_levels().items():
        logging.getLogger(name).setLevel(level.to_int())
        _levelled_modules.add(name)


def configure_logging(config: Optional[LogConfig] = None) -> None:
    """Configure structlog and the ``safepatch`` stdlib logger tree.

    Calling it again replaces the previous handler and module levels.

    Example:
        >>> from safepatch.logging import configure_logging, LogConfig, LogFormat
        >>> configure_logging(LogConfig(format=LogFormat.JSON))
    """
    global _configured

    if config is None:
        config = LogConfig()

    processors = _get_processors(config)

    structlog.configure(
        processors=processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _get_renderer(config),
        ],
    )
    _setup_engine_logger(config, formatter)

    _configured = True


def is_configured() -> bool:
    """Check if logging has been configured."""
    return _configured


def ensure_configured() -> None:
    """Configure logging from the environment if nobody has done so yet."""
    if not _configured:
        configure_logging(LogConfig.from_env())
