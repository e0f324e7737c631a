"""Tests for the logging context helpers, processors and engine log config."""
import io
import json
import logging
import sys
from pathlib import Path

import pytest
import structlog

from safepatch.logging import (
    DEFAULT_MODULE_LEVELS,
    LogConfig,
    LogFormat,
    LogLevel,
    bind_context,
    clear_context,
    configure_logging,
    get_context,
    is_configured,
    request_context,
    unbind_context,
)
from safepatch.logging.processors import DEFAULT_MAX_VALUE_CHARS, inject_context, make_value_truncator


@pytest.fixture(autouse=True)
def clean_context():
    clear_context()
    yield
    clear_context()


@pytest.fixture
def restore_logging():
    yield
    configure_logging(LogConfig(stream=sys.__stderr__))


class TestContext:
    def test_bind_and_unbind(self) -> None:
        bind_context(request_id="r1", path="/a")
        assert get_context() == {"request_id": "r1", "path": "/a"}

        unbind_context("path")
        assert get_context() == {"request_id": "r1"}

    def test_request_context_restores(self) -> None:
        bind_context(request_id="outer")
        with request_context(operation="apply_patch", path="/a") as ctx:
            assert ctx["operation"] == "apply_patch"
            assert get_context()["request_id"] == "outer"
        assert get_context() == {"request_id": "outer"}

    def test_request_context_restores_on_error(self) -> None:
        with pytest.raises(RuntimeError):
            with request_context(path="/a"):
                raise RuntimeError("boom")
        assert get_context() == {}


class TestProcessors:
    def test_inject_context_does_not_override(self) -> None:
        bind_context(path="/bound", request_id="r1")
        event = inject_context(None, "info", {"event": "x", "path": "/explicit"})
        assert event["path"] == "/explicit"
        assert event["request_id"] == "r1"

    def test_truncate_long_values(self) -> None:
        long_value = "d" * (DEFAULT_MAX_VALUE_CHARS + 50)
        event = make_value_truncator()(None, "info", {"event": long_value, "diff": long_value, "n": 3})
        assert event["event"] == long_value
        assert event["diff"].startswith("d" * DEFAULT_MAX_VALUE_CHARS)
        assert event["diff"].endswith(f"({len(long_value)} chars)")
        assert event["n"] == 3

    def test_custom_truncation_limit(self) -> None:
        event = make_value_truncator(5)(None, "info", {"event": "e", "text": "abcdefgh", "short": "abc"})
        assert event["text"] == "abcde... (8 chars)"
        assert event["short"] == "abc"


class TestLogConfig:
    def test_defaults(self) -> None:
        config = LogConfig()
        assert config.level == LogLevel.WARNING
        assert config.stream is sys.stderr
        assert config.max_value_chars == DEFAULT_MAX_VALUE_CHARS
        assert config.effective_module_levels() == DEFAULT_MODULE_LEVELS

    def test_module_levels_merge_over_defaults(self) -> None:
        config = LogConfig(module_levels={"safepatch.diff.aligner": LogLevel.DEBUG})
        levels = config.effective_module_levels()
        assert levels["safepatch.diff.aligner"] == LogLevel.DEBUG
        assert levels["safepatch.gateway"] == LogLevel.INFO

    def test_stdout_rejected(self) -> None:
        with pytest.raises(ValueError, match="stdout"):
            LogConfig(stream=sys.stdout)

    def test_non_positive_truncation_rejected(self) -> None:
        with pytest.raises(ValueError, match="max_value_chars"):
            LogConfig(max_value_chars=0)

    def test_from_env(self) -> None:
        config = LogConfig.from_env(
            {"SAFEPATCH_LOG_LEVEL": "debug", "SAFEPATCH_LOG_FORMAT": "JSON", "SAFEPATCH_LOG_MAX_VALUE_CHARS": "40"}
        )
        assert config.level == LogLevel.DEBUG
        assert config.format == LogFormat.JSON
        assert config.max_value_chars == 40

    def test_from_env_blank_values_ignored(self) -> None:
        config = LogConfig.from_env({"SAFEPATCH_LOG_LEVEL": " ", "SAFEPATCH_LOG_FORMAT": ""})
        assert config.level == LogLevel.WARNING
        assert config.format == LogFormat.PLAIN

    def test_from_env_invalid(self) -> None:
        with pytest.raises(ValueError):
            LogConfig.from_env({"SAFEPATCH_LOG_LEVEL": "LOUD"})
        with pytest.raises(ValueError, match="SAFEPATCH_LOG_MAX_VALUE_CHARS"):
            LogConfig.from_env({"SAFEPATCH_LOG_MAX_VALUE_CHARS": "many"})

    def test_from_dotenv_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("SAFEPATCH_LOG_LEVEL=ERROR\n")
        monkeypatch.setattr("os.environ", {})

        assert LogConfig.from_env(dotenv_path=env_file).level == LogLevel.ERROR


class TestConfigure:
    def test_engine_tree_levels(self, restore_logging) -> None:
        configure_logging(LogConfig(level=LogLevel.ERROR, module_levels={"safepatch.snapshot.writer": LogLevel.DEBUG}))

        assert is_configured()
        assert logging.getLogger("safepatch").level == logging.ERROR
        assert logging.getLogger("safepatch.gateway").level == logging.INFO
        assert logging.getLogger("safepatch.snapshot.writer").level == logging.DEBUG

    def test_reconfigure_resets_module_overrides(self, restore_logging) -> None:
        configure_logging(LogConfig(module_levels={"safepatch.snapshot.writer": LogLevel.DEBUG}))
        configure_logging(LogConfig())

        assert logging.getLogger("safepatch.snapshot.writer").level == logging.NOTSET

    def test_root_logger_untouched(self, restore_logging) -> None:
        root = logging.getLogger()
        handlers_before = list(root.handlers)
        level_before = root.level

        configure_logging(LogConfig(level=LogLevel.DEBUG))

        assert root.handlers == handlers_before
        assert root.level == level_before
        assert logging.getLogger("safepatch").propagate is False
        assert len(logging.getLogger("safepatch").handlers) == 1

    def test_json_events_written_to_stream(self, restore_logging) -> None:
        stream = io.StringIO()
        configure_logging(LogConfig(format=LogFormat.JSON, stream=stream, max_value_chars=10))

        with request_context(path="/a.txt"):
            structlog.get_logger("safepatch.gateway").info("patch_applied", diff="x" * 50)

        event = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert event["event"] == "patch_applied"
        assert event["path"] == "/a.txt"
        assert event["logger"] == "safepatch.gateway"
        assert event["diff"] == "xxxxxxxxxx... (50 chars)"

    def test_below_module_level_dropped(self, restore_logging) -> None:
        stream = io.StringIO()
        configure_logging(LogConfig(format=LogFormat.JSON, stream=stream))

        structlog.get_logger("safepatch.snapshot.writer").info("patched_file_written")

        assert stream.getvalue() == ""
