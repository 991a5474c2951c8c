"""Word segmentation for wrapping.

:class:`Words` splits a line of text into atomic tokens that can be packed onto
terminal lines. Tokens break on whitespace and after hyphens, and between
characters of East Asian scripts where the line-breaking rules allow it.
Concatenating the tokens gives back the source text.
"""

from __future__ import annotations

from dataclasses import dataclass

from paper.utils import is_cjk


# ---------------------------------------------------------------------------
# Line-breaking rules
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LineBreakRules:
    """Characters that may not start or end a line around a CJK break.

    The built-in tables follow the common Japanese and Chinese prohibition
    rules and are known to be incomplete; pass a custom instance to
    :class:`Words` to change them.
    """

    no_start: frozenset[str]
    no_end: frozenset[str]

    def can_break(self, before: str, after: str) -> bool:
        """Return ``True`` if a line may end after *before* and start with *after*."""
        if not (is_cjk(before) or is_cjk(after)):
            return False
        return before not in self.no_end and after not in self.no_start


_NO_START = (
    # closing brackets and quotes
    ")]}〕〉》」』】〙〗〟’”｠»）］｝｣"
    # small kana, prolonged sound mark, iteration marks
    "ヽヾーァィゥェォッャュョヮヵヶぁぃぅぇぉっゃゅょゎゕゖㇰㇱㇲㇳㇴㇵㇶㇷㇸㇹㇺㇻㇼㇽㇾㇿ々〻"
    # hyphens and dashes
    "‐゠–〜～"
    # delimiters and mid-sentence punctuation
    "?!‼⁇⁈⁉・、:;,。.？！：；，．､｡"
    # units
    "%％‰℃°"
)

_NO_END = (
    # opening brackets and quotes
    "([{〔〈《「『【〘〖〝‘“｟«（［｛｢"
    # currency prefixes
    "$＄¥￥£￡#＃"
)

DEFAULT_RULES = LineBreakRules(
    no_start=frozenset(_NO_START),
    no_end=frozenset(_NO_END),
)


# ---------------------------------------------------------------------------
# Words
# ---------------------------------------------------------------------------


class Words:
    """One-shot iterator over the wrap tokens of *source*.

    Each token is an optional whitespace gap followed by a word. In the
    default mode a non-empty gap is reduced to a single space; with
    ``preserve_whitespace=True`` the gap is kept verbatim so that indentation
    and runs of spaces survive. Trailing whitespace comes out as a token of
    its own.

    :meth:`undo` steps back over the most recent token, giving consumers one
    token of lookahead.
    """

    def __init__(
        self,
        source: str,
        *,
        preserve_whitespace: bool = False,
        rules: LineBreakRules = DEFAULT_RULES,
    ) -> None:
        self._source = source
        self._preserve_whitespace = preserve_whitespace
        self._rules = rules
        self._position = 0
        self._previous: int | None = None

    @classmethod
    def preserving_whitespace(cls, source: str) -> Words:
        return cls(source, preserve_whitespace=True)

    def __iter__(self) -> Words:
        return self

    def __next__(self) -> str:
        source = self._source
        end = len(source)
        start = self._position
        if start >= end:
            raise StopIteration
        self._previous = start

        word_start = start
        while word_start < end and source[word_start].isspace():
            word_start += 1
        gap = source[start:word_start]
        if gap and not self._preserve_whitespace:
            gap = " "

        if word_start == end:
            self._position = end
            return gap

        i = word_start
        while i < end:
            ch = source[i]
            if ch == "-":
                i += 1
                break
            if ch.isspace():
                break
            if i > word_start and self._rules.can_break(source[i - 1], ch):
                break
            i += 1

        self._position = i
        return gap + source[word_start:i]

    def undo(self) -> None:
        """Rewind to the position before the most recent token.

        Only one step is remembered; a second call without an intervening
        :func:`next` does nothing.
        """
        if self._previous is not None:
            self._position = self._previous
            self._previous = None
