"""Engine configuration.

All limits the patch engine enforces live in :class:`EngineConfig`. Defaults
match the behaviour agents are told about in the tool descriptions; hosts can
override them in code or through ``SAFEPATCH_*`` environment variables (a
``.env`` file is honoured via python-dotenv).
"""
from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
MAX_TOUCHED_LINES: int = 200
MAX_TOUCHED_LINES_LARGE: int = 1000
INVASIVE_MIN_LINES: int = 150
INVASIVE_MAX_RATIO: float = 0.3
SEARCH_WINDOW: int = 300
SEARCH_WINDOW_FACTOR: int = 20
MAX_SEARCH_WINDOW: int = 2000
MAX_FUZZ: int = 2
FULL_SCAN_HIT_LIMIT: int = 10
MAX_READ_CHARS: int = 500_000

ENV_PREFIX: str = "SAFEPATCH_"


@dataclass(frozen=True)
class EngineConfig:
    """Tunable limits for validation, alignment and reads.

    Attributes:
        max_touched_lines: Add+remove lines allowed per patch by default.
        max_touched_lines_large: Ceiling when the caller passes allow_large.
        invasive_min_lines: Files with fewer lines skip the invasiveness ratio.
        invasive_max_ratio: Max touched/original line ratio for larger files.
        search_window: Minimum relocation window (lines each side).
        search_window_factor: Window grows to consumed_lines * factor.
        max_search_window: Upper bound for the relocation window.
        max_fuzz: Context lines that may be trimmed from each end of a hunk.
        full_scan_hit_limit: A file-wide scan stops after this many extra hits.
        max_read_chars: Largest text ``file.read`` returns in one piece.
    """

    max_touched_lines: int = MAX_TOUCHED_LINES
    max_touched_lines_large: int = MAX_TOUCHED_LINES_LARGE
    invasive_min_lines: int = INVASIVE_MIN_LINES
    invasive_max_ratio: float = INVASIVE_MAX_RATIO
    search_window: int = SEARCH_WINDOW
    search_window_factor: int = SEARCH_WINDOW_FACTOR
    max_search_window: int = MAX_SEARCH_WINDOW
    max_fuzz: int = MAX_FUZZ
    full_scan_hit_limit: int = FULL_SCAN_HIT_LIMIT
    max_read_chars: int = MAX_READ_CHARS

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if value < 0:
                raise ValueError(f"{f.name} cannot be negative (got {value})")
        if self.max_touched_lines_large < self.max_touched_lines:
            raise ValueError("max_touched_lines_large must be >= max_touched_lines")

    def touched_limit(self, allow_large: bool) -> int:
        return self.max_touched_lines_large if allow_large else self.max_touched_lines

    def window_for(self, consumed_lines: int) -> int:
        """Relocation window for a hunk consuming ``consumed_lines`` file lines."""
        return min(self.max_search_window, max(self.search_window, consumed_lines * self.search_window_factor))

    @classmethod
    def from_env(
        cls,
        env: Optional[Mapping[str, str]] = None,
        *,
        dotenv_path: str | Path | None = None,
    ) -> "EngineConfig":
        """Build a config from ``SAFEPATCH_<FIELD>`` variables.

        When ``env`` is None the process environment is used, after loading
        ``dotenv_path`` (or a ``.env`` found from the working directory).

        Raises:
            ValueError: If a variable does not parse as the field's type.
        """
        if env is None:
            load_dotenv(dotenv_path=dotenv_path)
            env = os.environ

        overrides: dict = {}
        for f in fields(cls):
            raw = env.get(f"{ENV_PREFIX}{f.name.upper()}")
            if raw is None or not raw.strip():
                continue
            caster = float if f.type in (float, "float") else int
            try:
                overrides[f.name] = caster(raw.strip())
            except ValueError:
                raise ValueError(f"{ENV_PREFIX}{f.name.upper()}({raw!r}) is not a valid {caster.__name__}.") from None
        return cls(**overrides)


DEFAULT_CONFIG = EngineConfig()
