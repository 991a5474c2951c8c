"""Composing whole documents onto a page.

A page is the text area framed by margins, with a one column shadow down its
right edge and along its bottom::

    <blank line>
    <v_margin blank lines>                    + shadow
    <margin><text area><margin>               + shadow
    <v_margin blank lines>                    + shadow
     <shadow row, offset by one column>
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import TextIO

from paper.config import Options, PageLayout
from paper.highlight import Highlighter
from paper.parser import parse
from paper.printer import Printer
from paper.stylesheet import Stylesheet
from paper.utils import split_at_columns, strip_ansi, visible_width
from paper.words import Words

logger = logging.getLogger(__name__)


def normalize(source: str, tab_length: int) -> str:
    """Strip escape sequences, expand tabs to tab stops, and end every line with a newline."""
    lines: list[str] = []
    for line in source.splitlines():
        line = strip_ansi(line)
        if "\t" in line and tab_length > 0:
            column = 0
            expanded = ""
            for ch in line:
                if ch == "\t":
                    missing = tab_length - column % tab_length
                    expanded += " " * missing
                    column += missing
                else:
                    expanded += ch
                    column += visible_width(ch)
            line = expanded
        lines.append(line + "\n")
    return "".join(lines)


# ---------------------------------------------------------------------------
# Frame
# ---------------------------------------------------------------------------


class _Frame:
    """The margins and shadow drawn around every document."""

    def __init__(self, layout: PageLayout, stylesheet: Stylesheet, out: TextIO) -> None:
        self.layout = layout
        self.out = out
        self.paper_style = stylesheet.style("paper")
        self.shadow_style = stylesheet.style("shadow")
        self.margin = self.paper_style.paint(" " * layout.h_margin)
        self.shadow = self.shadow_style.paint(" ")
        self._blank_line = self.paper_style.paint(" " * layout.width)

    def top(self) -> None:
        self.out.write(f"{self.layout.centering}{self._blank_line}\n")
        for _ in range(self.layout.v_margin):
            self.out.write(f"{self.layout.centering}{self._blank_line}{self.shadow}\n")

    def bottom(self) -> None:
        for _ in range(self.layout.v_margin):
            self.out.write(f"{self.layout.centering}{self._blank_line}{self.shadow}\n")
        self.out.write(f"{self.layout.centering} {self.shadow_style.paint(' ' * self.layout.width)}\n")

    def line(self, text: str) -> None:
        padding = " " * max(0, self.layout.available_width - visible_width(text))
        self.out.write(
            f"{self.layout.centering}{self.margin}{self.paper_style.paint(text)}"
            f"{self.paper_style.paint(padding)}{self.margin}{self.shadow}\n"
        )


# ---------------------------------------------------------------------------
# Renderers
# ---------------------------------------------------------------------------


def make_highlighter(options: Options) -> Highlighter | None:
    if not options.syncat:
        return None
    return Highlighter(options.highlighter)


def render_markdown(
    source: str,
    layout: PageLayout,
    stylesheet: Stylesheet,
    options: Options,
    out: TextIO,
    *,
    highlighter: Highlighter | None = None,
) -> None:
    frame = _Frame(layout, stylesheet, out)
    frame.top()
    printer = Printer(
        layout.centering,
        frame.margin,
        layout.available_width,
        stylesheet,
        options,
        out=out,
        highlighter=highlighter,
    )
    for event in parse(source):
        printer.handle(event)
    frame.bottom()


def render_plain(source: str, layout: PageLayout, stylesheet: Stylesheet, out: TextIO) -> None:
    """Wrap *source* as plain text, keeping each line's indentation on its continuation lines."""
    frame = _Frame(layout, stylesheet, out)
    available = layout.available_width
    frame.top()

    for source_line in source.splitlines():
        buffer = ""
        indent: str | None = None
        wrapped = False
        for word in Words.preserving_whitespace(source_line):
            if buffer and visible_width(buffer) + visible_width(word) > available:
                frame.line(buffer)
                buffer = ""
                wrapped = True
            if buffer:
                buffer += word
                continue

            if indent is None:
                indent = word[: len(word) - len(word.lstrip())]
            buffer = indent + word.strip()
            if visible_width(buffer) > available:
                while buffer:
                    head, buffer = split_at_columns(buffer, max(1, available))
                    frame.line(head)
                wrapped = True
        if buffer or not wrapped:
            frame.line(buffer)

    frame.bottom()


def dump_events(source: str, out: TextIO) -> None:
    """Write the parsed events of *source*, one per line."""
    for event in parse(source):
        out.write(f"{event!r}\n")


def render(
    source: str,
    layout: PageLayout,
    stylesheet: Stylesheet,
    options: Options,
    out: TextIO,
) -> None:
    """Render one document in the mode *options* selects."""
    source = normalize(source, options.tab_length)
    if options.plain:
        render_plain(source, layout, stylesheet, out)
    elif options.dev:
        dump_events(source, out)
    else:
        render_markdown(
            source, layout, stylesheet, options, out, highlighter=make_highlighter(options)
        )


def render_files(
    paths: Iterable[Path],
    layout: PageLayout,
    stylesheet: Stylesheet,
    options: Options,
    out: TextIO,
) -> int:
    """Render each file in turn. Returns the number of files that could not be read.

    A file that cannot be read is reported with a single line in place of its
    page, and the remaining files are still rendered.
    """
    failures = 0
    for path in paths:
        try:
            source = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("Cannot read %s: %s", path, e)
            out.write(f"{e}\n")
            failures += 1
            continue
        render(source, layout, stylesheet, options, out)
    return failures
