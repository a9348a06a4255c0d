"""Escaping and line folding primitives for iCalendar text content."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, List

__all__ = [
    "CRLF",
    "MAX_LINE_OCTETS",
    "escape_text",
    "fold_line",
    "format_utc",
    "octet_length",
    "unescape_text",
    "unfold_lines",
]

CRLF = "\r\n"
MAX_LINE_OCTETS = 75

_UNESCAPES = {"\\": "\\", "n": "\n", "N": "\n", ",": ",", ";": ";"}


def escape_text(value: str) -> str:
    """Escape raw user text for use as an iCalendar TEXT value.

    Backslashes are escaped first so the sequences introduced by the later
    replacements are never escaped twice.
    """

    if not value:
        return ""
    normalized = value.replace("\r\n", "\n").replace("\r", "\n")
    return (
        normalized.replace("\\", "\\\\")
        .replace("\n", "\\n")
        .replace(",", "\\,")
        .replace(";", "\\;")
    )


def unescape_text(value: str) -> str:
    """Reverse :func:`escape_text`."""

    chars: List[str] = []
    index = 0
    while index < len(value):
        char = value[index]
        if char == "\\" and index + 1 < len(value):
            following = value[index + 1]
            chars.append(_UNESCAPES.get(following, following))
            index += 2
            continue
        chars.append(char)
        index += 1
    return "".join(chars)


def octet_length(value: str) -> int:
    return len(value.encode("utf-8"))


def fold_line(line: str, limit: int = MAX_LINE_OCTETS) -> List[str]:
    """Fold a logical content line into physical lines of at most ``limit`` octets.

    Continuation lines start with a single space which counts toward the
    limit. Splits only happen between characters and never between a
    backslash and the character it escapes.
    """

    if octet_length(line) <= limit:
        return [line]

    physical: List[str] = []
    current: List[str] = []
    used = 0
    for token in _tokens(line):
        size = octet_length(token)
        if used + size > limit and current:
            physical.append("".join(current))
            current = [" "]
            used = 1
        current.append(token)
        used += size
    if current:
        physical.append("".join(current))
    return physical


def unfold_lines(lines: Iterable[str]) -> str:
    """Join physical lines produced by :func:`fold_line` back into one line."""

    parts: List[str] = []
    for position, line in enumerate(lines):
        if position and line.startswith(" "):
            line = line[1:]
        parts.append(line)
    return "".join(parts)


def format_utc(value: datetime) -> str:
    """Render an instant as ``YYYYMMDDTHHMMSSZ``; naive values are taken as UTC."""

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def _tokens(line: str) -> Iterable[str]:
    index = 0
    length = len(line)
    while index < length:
        if line[index] == "\\" and index + 1 < length:
            yield line[index : index + 2]
            index += 2
        else:
            yield line[index]
            index += 1
