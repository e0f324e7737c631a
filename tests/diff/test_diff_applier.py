"""Tests for applying aligned hunks to text."""
import pytest

from safepatch.diff import align_diff, apply_diff, parse_unified_diff
from safepatch.errors import UnsafeOutputError


def patch(text: str, diff_text: str) -> str:
    return apply_diff(text, align_diff(parse_unified_diff(diff_text), text))


class TestApplyDiff:
    def test_replace_line(self) -> None:
        assert patch("a\nb\nc\n", "@@ -2 +2 @@\n-b\n+B\n") == "a\nB\nc\n"

    def test_insert_and_delete(self) -> None:
        result = patch("a\nb\nc\nd", "@@ -1,4 +1,4 @@\n a\n+a2\n b\n-c\n d\n")
        assert result == "a\na2\nb\nd"

    def test_multiple_hunks(self) -> None:
        text = "\n".join(f"l{i}" for i in range(1, 11))
        result = patch(
            text,
            "@@ -2,2 +2,2 @@\n l2\n-l3\n+L3\n"
            "@@ -8,2 +8,3 @@\n l8\n+new\n l9\n",
        )
        assert result.split("\n") == ["l1", "l2", "L3", "l4", "l5", "l6", "l7", "l8", "new", "l9", "l10"]

    def test_context_keeps_file_whitespace(self) -> None:
        result = patch("\tfoo\nbar", "@@ -1,2 +1,2 @@\n     foo\n-bar\n+baz\n")
        assert result == "\tfoo\nbaz"

    def test_input_is_not_modified(self) -> None:
        text = "a\nb\n"
        diff = parse_unified_diff("@@ -1 +1 @@\n-a\n+A\n")
        aligned = align_diff(diff, text)
        apply_diff(text, aligned)
        assert text == "a\nb\n"
        assert [line.text for line in aligned.hunks[0].lines] == ["a", "A"]

    def test_crlf_input_joined_with_lf(self) -> None:
        assert patch("a\r\nb\r\n", "@@ -1 +1 @@\n-a\n+A\n") == "A\nb\n"

    def test_append_to_empty_file(self) -> None:
        assert patch("", "@@ -0,0 +1,2 @@\n+one\n+two\n") == "one\ntwo\n"


class TestUnsafeOutput:
    @pytest.mark.parametrize("char", ["\ufffd", "\ufeff"])
    def test_added_invalid_unicode_rejected(self, char: str) -> None:
        with pytest.raises(UnsafeOutputError) as exc_info:
            patch("a\nb\n", f"@@ -2 +2 @@\n-b\n+x{char}\n")

        err = exc_info.value
        assert err.kind == "unsafe_output"
        assert err.retriable is False
        assert "line 2, column 2" in err.error
        assert "not retriable" in err.error

    def test_report_caps_occurrences(self) -> None:
        added = "".join(f"+{i}\ufffd\n" for i in range(7))
        with pytest.raises(UnsafeOutputError) as exc_info:
            patch("a\n", f"@@ -1 +1,7 @@\n-a\n{added}")
        assert "and 2 more occurrences" in exc_info.value.error
