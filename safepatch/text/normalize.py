"""Newline and whitespace normalization shared by the loader, aligner and writer."""
from __future__ import annotations

import os
import re

_WS_RUN = re.compile(r"[\t ]+")

NEWLINE_NAMES: dict[str, str] = {"\r\n": "CRLF", "\n": "LF", "\r": "CR"}


def normalize_newlines(text: str) -> str:
    """Convert CRLF and lone CR sequences to LF."""
    return text.replace("\r\n", "\n").replace("\r", "\n")


def convert_newlines(lf_text: str, newline: str) -> str:
    """Turn LF-only text into text using ``newline`` (platform default if empty)."""
    if not newline:
        newline = os.linesep
    if newline == "\n":
        return lf_text
    return lf_text.replace("\n", newline)


def detect_newline(text: str) -> str:
    """Return the line terminator used by ``text``.

    ``\\r\\n`` is checked before ``\\n`` and ``\\r`` so CRLF files are never
    reported as CR. Text without any terminator gets ``os.linesep``.
    """
    if "\r\n" in text:
        return "\r\n"
    if "\n" in text:
        return "\n"
    if "\r" in text:
        return "\r"
    return os.linesep


def describe_newline(newline: str) -> str:
    return NEWLINE_NAMES.get(newline, repr(newline))


def normalize_line_loose(line: str) -> str:
    """Collapse every run of spaces/tabs to one space and drop trailing whitespace."""
    return _WS_RUN.sub(" ", line).rstrip(" ")


def normalize_for_loose_hash(text: str) -> str:
    """Text form hashed for the whitespace-tolerant concurrency check."""
    return "\n".join(normalize_line_loose(line) for line in normalize_newlines(text).split("\n"))


def same_line(file_line: str, diff_line: str) -> bool:
    """Line equality used when matching hunks against a file.

    Trailing spaces/tabs never matter. If the lines still differ they are
    compared again with whitespace runs collapsed, which absorbs tab vs space
    indentation without hiding content changes.
    """
    a = file_line.rstrip(" \t")
    b = diff_line.rstrip(" \t")
    if a == b:
        return True
    return normalize_line_loose(a) == normalize_line_loose(b)
