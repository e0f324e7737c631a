"""Tests for the size and invasiveness checks."""
import pytest

from safepatch.config import EngineConfig
from safepatch.diff import Hunk, HunkLine, LineKind, UnifiedDiff, validate_structure
from safepatch.errors import PatchEmptyError, PatchTooInvasiveError, PatchTooLargeError


def make_diff(removed: int, added: int = 0, context: int = 0) -> UnifiedDiff:
    lines = (
        [HunkLine(LineKind.CONTEXT, f"c{i}") for i in range(context)]
        + [HunkLine(LineKind.REMOVE, f"r{i}") for i in range(removed)]
        + [HunkLine(LineKind.ADD, f"a{i}") for i in range(added)]
    )
    hunk = Hunk(1, context + removed, 1, context + added, lines=tuple(lines))
    return UnifiedDiff(hunks=(hunk,))


class TestTouchedLimits:
    def test_returns_touched_count(self) -> None:
        assert validate_structure(make_diff(3, 2), 1000) == 5

    def test_empty_patch(self) -> None:
        with pytest.raises(PatchEmptyError):
            validate_structure(make_diff(0, context=3), 100)

    def test_default_limit(self) -> None:
        assert validate_structure(make_diff(100, 100), 10_000) == 200
        with pytest.raises(PatchTooLargeError, match="touches 201 lines"):
            validate_structure(make_diff(101, 100), 10_000)

    def test_explicit_large_limit(self) -> None:
        assert validate_structure(make_diff(250, 250), 10_000, 1000) == 500

    def test_config_limit(self) -> None:
        config = EngineConfig(max_touched_lines=5)
        with pytest.raises(PatchTooLargeError):
            validate_structure(make_diff(6), 10_000, config=config)


class TestInvasiveness:
    def test_ratio_above_limit_on_200_line_file(self) -> None:
        with pytest.raises(PatchTooInvasiveError) as exc_info:
            validate_structure(make_diff(31, 30), 200)
        assert exc_info.value.kind == "patch_too_invasive"

    def test_ratio_at_limit_on_200_line_file(self) -> None:
        assert validate_structure(make_diff(30, 30), 200) == 60

    def test_small_file_skips_ratio(self) -> None:
        assert validate_structure(make_diff(5, 5), 10) == 10

    def test_just_below_min_lines_skips_ratio(self) -> None:
        assert validate_structure(make_diff(50, 50), 149) == 100

    def test_at_min_lines_checks_ratio(self) -> None:
        with pytest.raises(PatchTooInvasiveError):
            validate_structure(make_diff(50, 50), 150)
