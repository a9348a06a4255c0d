from datetime import datetime, timedelta, timezone

import pytest

from calshare.feed.text import (
    MAX_LINE_OCTETS,
    escape_text,
    fold_line,
    format_utc,
    octet_length,
    unescape_text,
    unfold_lines,
)


def test_escape_special_characters():
    assert (
        escape_text("Meeting; with, special\\characters")
        == "Meeting\\; with\\, special\\\\characters"
    )


def test_escape_newline_becomes_backslash_n():
    assert escape_text("line one\nline two") == "line one\\nline two"


def test_escape_carriage_returns_are_treated_as_newlines():
    assert escape_text("a\r\nb\rc") == "a\\nb\\nc"


def test_escape_empty_string():
    assert escape_text("") == ""


def test_escape_does_not_double_escape():
    # A literal backslash followed by "n" is user text, not an escape sequence.
    assert escape_text("C:\\new") == "C:\\\\new"


def test_escape_keeps_unicode():
    assert escape_text("Café ☕ 🎉 東京") == "Café ☕ 🎉 東京"


@pytest.mark.parametrize(
    "raw",
    [
        "plain",
        "semi;colon, comma",
        "back\\slash\\",
        "multi\nline\n\ntext",
        "\\n is not a newline",
        "mixed \\;,\n end",
    ],
)
def test_unescape_reverses_escape(raw):
    assert unescape_text(escape_text(raw)) == raw


def test_short_line_is_not_folded():
    line = "SUMMARY:Team sync"
    assert fold_line(line) == [line]


def test_line_of_exactly_75_octets_is_not_folded():
    line = "SUMMARY:" + "a" * (MAX_LINE_OCTETS - len("SUMMARY:"))
    assert octet_length(line) == 75
    assert fold_line(line) == [line]


def test_line_of_76_octets_is_folded_once():
    line = "SUMMARY:" + "a" * 68
    folded = fold_line(line)
    assert folded == [line[:75], " " + line[75:]]


def test_folded_lines_respect_limit_and_reassemble():
    line = "DESCRIPTION:" + "x" * 400
    folded = fold_line(line)
    assert len(folded) > 1
    assert not folded[0].startswith(" ")
    for physical in folded:
        assert octet_length(physical) <= MAX_LINE_OCTETS
    for continuation in folded[1:]:
        assert continuation.startswith(" ")
        assert not continuation.startswith("  ")
    assert unfold_lines(folded) == line


def test_folding_never_splits_multibyte_characters():
    line = "SUMMARY:" + "é" * 40 + "😀" * 20 + "東" * 30
    folded = fold_line(line)
    for physical in folded:
        encoded = physical.encode("utf-8")
        assert len(encoded) <= MAX_LINE_OCTETS
        assert encoded.decode("utf-8") == physical
    assert unfold_lines(folded) == line


def test_folding_keeps_escape_pairs_together():
    line = "SUMMARY:" + "a" * 66 + "\\,rest"
    folded = fold_line(line)
    assert folded[0] == "SUMMARY:" + "a" * 66
    assert folded[1].startswith(" \\,")
    assert unfold_lines(folded) == line


def test_unfold_strips_only_one_leading_space():
    assert unfold_lines(["SUMMARY:a", "  b"]) == "SUMMARY:a b"


def test_format_utc_for_aware_and_naive_values():
    aware = datetime(2025, 3, 1, 10, 30, tzinfo=timezone(timedelta(hours=2)))
    naive = datetime(2025, 3, 1, 8, 30)
    assert format_utc(aware) == "20250301T083000Z"
    assert format_utc(naive) == "20250301T083000Z"
