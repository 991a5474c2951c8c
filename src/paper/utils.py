"""Terminal text utilities: ANSI handling and width measurement.

Provides functions for measuring the visible terminal width of styled text,
classifying CJK code points, walking ANSI escape sequences, and cutting text
at a column boundary.
"""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterator

import grapheme
import wcwidth as _wcwidth

# ---------------------------------------------------------------------------
# Regex patterns for ANSI / OSC / APC sequences
# ---------------------------------------------------------------------------

_STRIP_RE = re.compile(
    r"\x1b\[[0-9;]*[mGKHJA-D]"             # CSI
    r"|\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)"  # OSC
    r"|\x1b_[^\x07\x1b]*(?:\x07|\x1b\\)"   # APC
)

RESET = "\x1b[0m"

# ---------------------------------------------------------------------------
# CJK classification
# ---------------------------------------------------------------------------

_CJK_RANGES: tuple[tuple[int, int], ...] = (
    (0x1100, 0x11FF),    # Hangul Jamo
    (0x2E80, 0x2EFF),    # CJK Radicals Supplement
    (0x2F00, 0x2FDF),    # Kangxi Radicals
    (0x2FF0, 0x2FFF),    # Ideographic Description Characters
    (0x3000, 0x303F),    # CJK Symbols and Punctuation
    (0x3040, 0x309F),    # Hiragana
    (0x30A0, 0x30FF),    # Katakana
    (0x3100, 0x312F),    # Bopomofo
    (0x3130, 0x318F),    # Hangul Compatibility Jamo
    (0x3190, 0x319F),    # Kanbun
    (0x31A0, 0x31BF),    # Bopomofo Extended
    (0x31C0, 0x31EF),    # CJK Strokes
    (0x31F0, 0x31FF),    # Katakana Phonetic Extensions
    (0x3200, 0x32FF),    # Enclosed CJK Letters and Months
    (0x3300, 0x33FF),    # CJK Compatibility
    (0x3400, 0x4DBF),    # CJK Unified Ideographs Extension A
    (0x4E00, 0x9FFF),    # CJK Unified Ideographs
    (0xA960, 0xA97F),    # Hangul Jamo Extended-A
    (0xAC00, 0xD7AF),    # Hangul Syllables
    (0xD7B0, 0xD7FF),    # Hangul Jamo Extended-B
    (0xF900, 0xFAFF),    # CJK Compatibility Ideographs
    (0xFE30, 0xFE4F),    # CJK Compatibility Forms
    (0xFF00, 0xFFEF),    # Halfwidth and Fullwidth Forms
    (0x20000, 0x2FA1F),  # Extensions B-F, Compatibility Supplement
    (0x30000, 0x323AF),  # Extensions G-H
)


def is_cjk(char: str) -> bool:
    """Return ``True`` if the single character *char* is a CJK code point."""
    cp = ord(char)
    if cp < 0x1100:
        return False
    for low, high in _CJK_RANGES:
        if cp < low:
            return False
        if cp <= high:
            return True
    return False


# ---------------------------------------------------------------------------
# Width cache (capped at 512 entries)
# ---------------------------------------------------------------------------

_width_cache: dict[str, int] = {}
_WIDTH_CACHE_MAX = 512


def _cache_width(key: str, value: int) -> int:
    if len(_width_cache) >= _WIDTH_CACHE_MAX:
        _width_cache.clear()
    _width_cache[key] = value
    return value


# ---------------------------------------------------------------------------
# Grapheme width
# ---------------------------------------------------------------------------


def _codepoint_width(ch: str) -> int:
    cp = ord(ch)
    # Control characters
    if cp < 0x20 or (0x7F <= cp <= 0x9F):
        return 0
    if is_cjk(ch) and unicodedata.east_asian_width(ch) == "A":
        return 2
    return max(_wcwidth.wcwidth(ch), 0)


def grapheme_width(g: str) -> int:
    """Return the terminal display width of a single grapheme cluster.

    Rules:
    1. Zero-width characters (control, combining marks, format) -> 0
    2. Emoji sequences (VS16, ZWJ, skin tones, flags) -> 2
    3. Ambiguous-width code points inside the CJK blocks -> 2
    4. Otherwise delegate to wcwidth for the first code point.
    """
    if not g:
        return 0

    if len(g) == 1:
        return _codepoint_width(g)

    for ch in g:
        cp = ord(ch)
        if cp == 0xFE0F:  # VS16
            return 2
        if cp == 0x200D:  # ZWJ
            return 2
        if 0x1F3FB <= cp <= 0x1F3FF:  # Skin tone modifiers
            return 2
        if 0x1F1E6 <= cp <= 0x1F1FF:  # Regional indicators
            return 2

    first = g[0]
    if ord(first) >= 0x1F000:
        return 2

    cat = unicodedata.category(first)
    if cat.startswith("M") or cat == "Cf":
        return 0

    return _codepoint_width(first)


# ---------------------------------------------------------------------------
# visible_width
# ---------------------------------------------------------------------------


def strip_ansi(text: str) -> str:
    """Remove every ANSI escape sequence from *text*."""
    return _STRIP_RE.sub("", text)


def visible_width(text: str) -> int:
    """Calculate the visible terminal width of *text*.

    * Strips ANSI escape sequences.
    * Counts wide (CJK) code points as two columns.
    * Uses a fast ASCII path when possible.
    * Caches results for non-ASCII strings.
    """
    if not text:
        return 0

    stripped = _STRIP_RE.sub("", text)
    if not stripped:
        return 0

    if stripped.isascii() and stripped.isprintable():
        return len(stripped)

    cached = _width_cache.get(stripped)
    if cached is not None:
        return cached

    total = 0
    for g in grapheme.graphemes(stripped):
        total += grapheme_width(g)

    return _cache_width(stripped, total)


# ---------------------------------------------------------------------------
# ANSI sequence walking
# ---------------------------------------------------------------------------


def extract_ansi_code(text: str, pos: int) -> tuple[str, int] | None:
    """Extract an ANSI escape sequence starting at *pos* in *text*.

    Returns ``(code, length)`` where *code* is the full escape sequence string
    and *length* is the number of characters consumed, or ``None`` if there is
    no escape sequence at *pos*.
    """
    if pos >= len(text) or text[pos] != "\x1b":
        return None

    if pos + 1 >= len(text):
        return None

    next_ch = text[pos + 1]

    # CSI: ESC[ <params> <final>
    if next_ch == "[":
        i = pos + 2
        while i < len(text):
            ch = text[i]
            if ch.isdigit() or ch == ";":
                i += 1
                continue
            if "@" <= ch <= "~":
                code = text[pos : i + 1]
                return (code, len(code))
            break
        return None

    # OSC / APC: ESC] or ESC_ ... (BEL | ESC\)
    if next_ch in "]_":
        i = pos + 2
        while i < len(text):
            ch = text[i]
            if ch == "\x07":
                code = text[pos : i + 1]
                return (code, len(code))
            if ch == "\x1b" and i + 1 < len(text) and text[i + 1] == "\\":
                code = text[pos : i + 2]
                return (code, len(code))
            i += 1
        return None

    return None


def iter_ansi_segments(text: str) -> Iterator[tuple[str, bool]]:
    """Split *text* into ``(segment, is_escape)`` pieces, in order.

    Runs of visible text are yielded whole; each escape sequence is yielded
    on its own.
    """
    start = 0
    i = 0
    while i < len(text):
        extracted = extract_ansi_code(text, i)
        if extracted is None:
            i += 1
            continue
        if i > start:
            yield (text[start:i], False)
        code, length = extracted
        yield (code, True)
        i += length
        start = i
    if start < len(text):
        yield (text[start:], False)


# ---------------------------------------------------------------------------
# Column cutting
# ---------------------------------------------------------------------------


def split_at_columns(text: str, max_cols: int) -> tuple[str, str]:
    """Split unstyled *text* into a head fitting *max_cols* columns and the rest.

    The cut falls on a grapheme boundary. The head always holds at least one
    grapheme so that repeated splitting makes progress even when a single
    wide character is wider than *max_cols*.
    """
    cols = 0
    taken = 0
    for g in grapheme.graphemes(text):
        w = grapheme_width(g)
        if taken and cols + w > max_cols:
            break
        cols += w
        taken += len(g)
        if cols >= max_cols:
            break
    return text[:taken], text[taken:]


def take_columns(text: str, max_cols: int) -> str:
    """Return the prefix of unstyled *text* that fits within *max_cols* columns."""
    if max_cols <= 0:
        return ""
    head, _rest = split_at_columns(text, max_cols)
    if visible_width(head) > max_cols:
        return ""
    return head
