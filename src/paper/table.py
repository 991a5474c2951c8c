"""Table layout: column width allocation and a box-drawn grid."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from enum import Enum

from paper.stylesheet import Style
from paper.utils import strip_ansi, visible_width
from paper.words import Words

TOO_LARGE = "[Table too large to fit]"


class Alignment(Enum):
    NONE = "none"
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


# ---------------------------------------------------------------------------
# Measuring
# ---------------------------------------------------------------------------


def _longest_word(cell: str) -> int:
    return max((visible_width(word.strip()) for word in Words(cell)), default=0)


def _longest_line(cell: str) -> int:
    return max((visible_width(line) for line in cell.splitlines()), default=0)


def _column_maxima(
    titles: Sequence[str],
    rows: Sequence[Sequence[str]],
    num_cols: int,
    measure: Callable[[str], int],
) -> list[int]:
    maxima = [0] * num_cols
    for row in (titles, *rows):
        for i, cell in enumerate(row):
            maxima[i] = max(maxima[i], measure(cell))
    return maxima


# ---------------------------------------------------------------------------
# Cell wrapping
# ---------------------------------------------------------------------------


def wrap_cell(text: str, width: int) -> list[str]:
    """Greedily pack the words of *text* into lines of at most *width* columns."""
    lines: list[str] = []
    for source_line in text.splitlines() or [""]:
        words = Words(source_line)
        line = ""
        for word in words:
            if not word.strip():
                continue
            if not line:
                line = word.strip()
                continue
            if visible_width(line) + visible_width(word) > width:
                words.undo()
                lines.append(line)
                line = ""
                continue
            line += word
        lines.append(line.rstrip())
    return lines


def _align(text: str, width: int, alignment: Alignment) -> str:
    missing = max(0, width - visible_width(text))
    if alignment is Alignment.RIGHT:
        return " " * missing + text
    if alignment is Alignment.CENTER:
        left = missing // 2
        return " " * left + text + " " * (missing - left)
    return text + " " * missing


# ---------------------------------------------------------------------------
# Table
# ---------------------------------------------------------------------------


class Table:
    """A header row and body rows laid out within *width* columns.

    Cells are plain text; any styling is removed before layout.
    """

    def __init__(self, titles: Sequence[str], rows: Sequence[Sequence[str]], width: int) -> None:
        self.titles = [strip_ansi(title) for title in titles]
        self.rows = [[strip_ansi(cell) for cell in row] for row in rows]
        self.width = width

    @property
    def num_cols(self) -> int:
        return max([len(self.titles), *(len(row) for row in self.rows)])

    def column_widths(self) -> list[int] | None:
        """Allocate a width to every column, or ``None`` if the table cannot fit.

        A column never gets less than its longest word. When the content does
        not fit as is, the usable width is shared out in proportion to each
        column's longest line.
        """
        num_cols = self.num_cols
        if num_cols == 0:
            return []

        longest_words = _column_maxima(self.titles, self.rows, num_cols, _longest_word)
        longest_lines = _column_maxima(self.titles, self.rows, num_cols, _longest_line)

        total = sum(longest_lines)
        usable = max(0, self.width - (4 + 3 * (num_cols - 1)))
        if total <= usable:
            widths = longest_lines
        else:
            widths = [
                max(floor, int(usable * size / total))
                for floor, size in zip(longest_words, longest_lines)
            ]
        if sum(widths) > usable:
            return None
        return widths

    def render(
        self,
        style: Style,
        alignments: Sequence[Alignment] = (),
        border_style: Style | None = None,
    ) -> list[str]:
        """Render the table as a list of lines, each exactly as wide as the grid."""
        widths = self.column_widths()
        if widths is None:
            return [style.paint(TOO_LARGE)]
        if not widths:
            return []

        border_style = border_style or style
        aligns = list(alignments) + [Alignment.NONE] * (len(widths) - len(alignments))

        def rule(left: str, fill: str, joint: str, right: str) -> str:
            return border_style.paint(left + joint.join(fill * (w + 2) for w in widths) + right)

        lines = [rule("┌", "─", "┬", "┐")]
        if self.titles:
            lines.extend(self._render_row(self.titles, widths, aligns, style, border_style))
            lines.append(rule("╞", "═", "╪", "╡"))
        for i, row in enumerate(self.rows):
            if i > 0:
                lines.append(rule("├", "─", "┼", "┤"))
            lines.extend(self._render_row(row, widths, aligns, style, border_style))
        lines.append(rule("└", "─", "┴", "┘"))
        return lines

    @staticmethod
    def _render_row(
        row: Sequence[str],
        widths: list[int],
        aligns: list[Alignment],
        style: Style,
        border_style: Style,
    ) -> list[str]:
        cells = [
            wrap_cell(row[i] if i < len(row) else "", width)
            for i, width in enumerate(widths)
        ]
        height = max(len(cell) for cell in cells)
        bar = border_style.paint("│")

        lines: list[str] = []
        for line_no in range(height):
            parts = [
                style.paint(
                    " " + _align(cell[line_no] if line_no < len(cell) else "", width, align) + " "
                )
                for cell, width, align in zip(cells, widths, aligns)
            ]
            lines.append(bar + bar.join(parts) + bar)
        return lines
