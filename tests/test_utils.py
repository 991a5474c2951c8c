"""Tests for paper.utils -- terminal text utilities."""

from __future__ import annotations

from paper.utils import (
    extract_ansi_code,
    is_cjk,
    iter_ansi_segments,
    split_at_columns,
    strip_ansi,
    take_columns,
    visible_width,
)


# ---------------------------------------------------------------------------
# visible_width
# ---------------------------------------------------------------------------


class TestVisibleWidth:
    """Measure the visible terminal width of text."""

    def test_plain_ascii(self) -> None:
        assert visible_width("hello") == 5

    def test_empty_string(self) -> None:
        assert visible_width("") == 0

    def test_ansi_codes_do_not_count(self) -> None:
        assert visible_width("\x1b[1mhi\x1b[0m") == 2

    def test_truecolor_codes_do_not_count(self) -> None:
        assert visible_width("\x1b[38;2;10;20;30;48;2;1;2;3m▀\x1b[0m") == 1

    def test_wide_cjk_characters_count_as_two(self) -> None:
        assert visible_width("世") == 2

    def test_mixed_ascii_and_wide(self) -> None:
        assert visible_width("A世B") == 4

    def test_fullwidth_punctuation(self) -> None:
        # U+3002 IDEOGRAPHIC FULL STOP
        assert visible_width("。") == 2

    def test_combining_mark_adds_nothing(self) -> None:
        assert visible_width("e\u0301") == 1

    def test_osc8_hyperlink_does_not_count(self) -> None:
        text = "\x1b]8;;https://example.com\x07link\x1b]8;;\x07"
        assert visible_width(text) == 4

    def test_idempotent_under_styling(self) -> None:
        text = "日本語 text"
        assert visible_width(f"\x1b[31m{text}\x1b[0m") == visible_width(text)


# ---------------------------------------------------------------------------
# CJK classification
# ---------------------------------------------------------------------------


class TestIsCjk:
    def test_ideograph(self) -> None:
        assert is_cjk("漢")

    def test_kana(self) -> None:
        assert is_cjk("か")
        assert is_cjk("カ")

    def test_hangul(self) -> None:
        assert is_cjk("한")

    def test_latin(self) -> None:
        assert not is_cjk("a")
        assert not is_cjk("é")


# ---------------------------------------------------------------------------
# ANSI walking
# ---------------------------------------------------------------------------


class TestStripAnsi:
    def test_removes_sgr(self) -> None:
        assert strip_ansi("\x1b[1;31mred\x1b[0m") == "red"

    def test_leaves_plain_text(self) -> None:
        assert strip_ansi("plain") == "plain"


class TestExtractAnsiCode:
    def test_csi(self) -> None:
        assert extract_ansi_code("\x1b[31mx", 0) == ("\x1b[31m", 5)

    def test_not_an_escape(self) -> None:
        assert extract_ansi_code("abc", 0) is None

    def test_unterminated(self) -> None:
        assert extract_ansi_code("\x1b[31", 0) is None


class TestIterAnsiSegments:
    def test_splits_text_and_escapes(self) -> None:
        segments = list(iter_ansi_segments("a\x1b[1mb\x1b[0mc"))
        assert segments == [
            ("a", False),
            ("\x1b[1m", True),
            ("b", False),
            ("\x1b[0m", True),
            ("c", False),
        ]

    def test_plain_text_is_one_segment(self) -> None:
        assert list(iter_ansi_segments("hello")) == [("hello", False)]

    def test_empty(self) -> None:
        assert list(iter_ansi_segments("")) == []


# ---------------------------------------------------------------------------
# Column cutting
# ---------------------------------------------------------------------------


class TestSplitAtColumns:
    def test_exact_split(self) -> None:
        assert split_at_columns("abcdef", 4) == ("abcd", "ef")

    def test_shorter_than_limit(self) -> None:
        assert split_at_columns("abc", 10) == ("abc", "")

    def test_wide_character_not_cut(self) -> None:
        # Two wide characters; only one fits in three columns.
        assert split_at_columns("日本", 3) == ("日", "本")

    def test_always_makes_progress(self) -> None:
        head, rest = split_at_columns("日本", 1)
        assert head == "日"
        assert rest == "本"


class TestTakeColumns:
    def test_prefix(self) -> None:
        assert take_columns("abcdef", 3) == "abc"

    def test_zero(self) -> None:
        assert take_columns("abc", 0) == ""

    def test_wide_character_that_does_not_fit(self) -> None:
        assert take_columns("日", 1) == ""
