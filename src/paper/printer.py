"""The page printer: turns a stream of markup events into terminal lines.

The :class:`Printer` keeps a stack of :class:`Scope` frames, one per open
construct. Every frame contributes a name to the style path and may draw a
fixed-width prefix and suffix on each line written while it is open. Text is
collected into the current line until the next word would overflow the
content width, at which point the line is written out ("flushed") together
with all the prefixes, padding and suffixes of the open scopes.

Every content line has the shape::

    <centering><margin><prefixes><content><padding><suffixes><margin><shadow>

where prefixes, content, padding and suffixes always add up to the printer's
width.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, TextIO

from paper.config import Options
from paper.errors import HighlightError, ImageError
from paper.events import (
    BlockQuote,
    BlockQuoteKind,
    Code,
    CodeBlock,
    DisplayMath,
    Emphasis,
    End,
    Event,
    FootnoteDefinition,
    FootnoteReference,
    HardBreak,
    Heading,
    Html,
    HtmlBlock,
    Image,
    InlineHtml,
    InlineMath,
    Item,
    Link,
    List,
    MetadataBlock,
    Paragraph,
    Rule,
    SoftBreak,
    Start,
    Strikethrough,
    Strong,
    Table,
    TableCell,
    TableHead,
    TableRow,
    Tag,
    TaskListMarker,
    Text,
)
from paper.highlight import Highlighter
from paper.stylesheet import Style, Stylesheet
from paper.table import Alignment
from paper.table import Table as TableLayout
from paper.terminal_image import load_image, render_image
from paper.utils import RESET, iter_ansi_segments, split_at_columns, take_columns, visible_width
from paper.words import Words

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Scopes
# ---------------------------------------------------------------------------


class ScopeKind(Enum):
    PAPER = "paper"
    INDENT = "indent"
    ITALIC = "italic"
    BOLD = "bold"
    STRIKETHROUGH = "strikethrough"
    LINK = "link"
    CAPTION = "caption"
    FOOTNOTE_DEFINITION = "footnote_definition"
    FOOTNOTE_REFERENCE = "footnote_reference"
    FOOTNOTE_CONTENT = "footnote_content"
    LIST = "list"
    LIST_ITEM = "list_item"
    CODE = "code"
    CODE_BLOCK = "code_block"
    BLOCK_QUOTE = "block_quote"
    TABLE = "table"
    TABLE_HEAD = "table_head"
    TABLE_ROW = "table_row"
    TABLE_CELL = "table_cell"
    HEADING = "heading"


@dataclass
class Scope:
    """One open construct on the printer's stack.

    Only the fields relevant to ``kind`` are meaningful.
    """

    kind: ScopeKind
    index: int | None = None  # list start / item number; None for bullets
    handled: bool = False  # list item: first-line marker already drawn
    url: str = ""
    title: str = ""
    language: str = ""
    quote_kind: BlockQuoteKind | None = None
    alignments: tuple[Alignment, ...] = ()
    level: int = 1


_SCOPE_NAMES = {
    ScopeKind.PAPER: "paper",
    ScopeKind.INDENT: "indent",
    ScopeKind.ITALIC: "emphasis",
    ScopeKind.BOLD: "strong",
    ScopeKind.STRIKETHROUGH: "strikethrough",
    ScopeKind.LINK: "link",
    ScopeKind.CAPTION: "caption",
    ScopeKind.FOOTNOTE_DEFINITION: "footnote-def",
    ScopeKind.FOOTNOTE_REFERENCE: "footnote-ref",
    ScopeKind.FOOTNOTE_CONTENT: "footnote",
    ScopeKind.LIST_ITEM: "li",
    ScopeKind.CODE: "code",
    ScopeKind.CODE_BLOCK: "codeblock",
    ScopeKind.TABLE: "table",
    ScopeKind.TABLE_HEAD: "th",
    ScopeKind.TABLE_ROW: "tr",
    ScopeKind.TABLE_CELL: "td",
}

_QUOTE_BAR = "┃   "
_H2_PREFIX = "├─── "
_H2_SUFFIX = " ───┤"


def scope_name(scope: Scope) -> str:
    """The style path segment for *scope*."""
    if scope.kind is ScopeKind.LIST:
        return "ul" if scope.index is None else "ol"
    if scope.kind is ScopeKind.BLOCK_QUOTE:
        if scope.quote_kind is None:
            return "blockquote"
        return f"{scope.quote_kind.value}-blockquote"
    if scope.kind is ScopeKind.HEADING:
        return f"h{scope.level}"
    return _SCOPE_NAMES[scope.kind]


def _marker_width(item: Scope) -> int:
    if item.index is None:
        return 4
    return max(4, len(f"{item.index}.") + 1)


def scope_prefix_width(scope: Scope) -> int:
    kind = scope.kind
    if kind is ScopeKind.LIST_ITEM:
        return _marker_width(scope)
    if kind in (ScopeKind.INDENT, ScopeKind.FOOTNOTE_CONTENT, ScopeKind.BLOCK_QUOTE):
        return 4
    if kind is ScopeKind.CODE_BLOCK:
        return 2
    if kind is ScopeKind.HEADING:
        return 5 if scope.level == 2 else 4
    return 0


def scope_prefix(scope: Scope) -> str:
    """The text *scope* draws at the start of a line.

    A list item draws its marker on the first line only; calling this marks
    the item as handled.
    """
    kind = scope.kind
    if kind in (ScopeKind.INDENT, ScopeKind.FOOTNOTE_CONTENT):
        return "    "
    if kind is ScopeKind.LIST_ITEM:
        width = _marker_width(scope)
        if scope.handled:
            return " " * width
        scope.handled = True
        if scope.index is None:
            return "•   "
        return f"{scope.index}.".ljust(width)
    if kind is ScopeKind.CODE_BLOCK:
        return "  "
    if kind is ScopeKind.BLOCK_QUOTE:
        return _QUOTE_BAR
    if kind is ScopeKind.HEADING:
        return _H2_PREFIX if scope.level == 2 else "    "
    return ""


def scope_suffix_width(scope: Scope) -> int:
    if scope.kind is ScopeKind.CODE_BLOCK:
        return 2
    if scope.kind is ScopeKind.HEADING:
        return 5 if scope.level == 2 else 4
    return 0


def scope_suffix(scope: Scope) -> str:
    if scope.kind is ScopeKind.CODE_BLOCK:
        return "  "
    if scope.kind is ScopeKind.HEADING:
        return _H2_SUFFIX if scope.level == 2 else "    "
    return ""


# ---------------------------------------------------------------------------
# Callouts
# ---------------------------------------------------------------------------

_CALLOUTS = {
    BlockQuoteKind.NOTE: ("󰋽", "Note"),
    BlockQuoteKind.TIP: ("󰌶", "Tip"),
    BlockQuoteKind.IMPORTANT: ("󱋉", "Important"),
    BlockQuoteKind.WARNING: ("󰀪", "Warning"),
    BlockQuoteKind.CAUTION: ("󰳦", "Caution"),
}


def _wrap_code(code: str, width: int) -> Iterator[str]:
    """Hard-wrap every line of *code* at exactly *width* columns."""
    for line in code.splitlines():
        while visible_width(line) > width:
            head, line = split_at_columns(line, max(1, width))
            yield head
        yield line


# ---------------------------------------------------------------------------
# Printer
# ---------------------------------------------------------------------------


class Printer:
    """Writes one document to *out* as it receives its events.

    *centering* and *margin* are written verbatim on both sides of every
    line; *width* is the width of the text area between the margins.
    Highlighting is enabled by passing a *highlighter*.
    """

    def __init__(
        self,
        centering: str,
        margin: str,
        width: int,
        stylesheet: Stylesheet,
        options: Options,
        *,
        out: TextIO | None = None,
        highlighter: Highlighter | None = None,
        image_loader: Callable[[str], Any] = load_image,
    ) -> None:
        self.centering = centering
        self.margin = margin
        self.width = width
        self.stylesheet = stylesheet
        self.options = options
        self._out = out if out is not None else sys.stdout
        self._highlighter = highlighter
        self._image_loader = image_loader

        self._scopes: list[Scope] = [Scope(ScopeKind.PAPER)]
        self._content = ""
        self._buffer = ""
        self._table_head: list[str] = []
        self._table_rows: list[list[str]] = []
        self._empty_queued = False

    # -- styles and decorations ----------------------------------------------

    def _names(self, extra: Sequence[str] = ()) -> list[str]:
        return [scope_name(scope) for scope in self._scopes] + list(extra)

    def _style(self, extra: Sequence[str] = (), token: str | None = None) -> Style:
        return self.stylesheet.resolve(self._names(extra), token)

    def _paper_style(self) -> Style:
        return self.stylesheet.style("paper")

    def _shadow(self) -> str:
        return self.stylesheet.style("shadow").paint(" ")

    def _prefix(self, extra: Sequence[str] = ()) -> tuple[str, int]:
        names: list[str] = []
        text = ""
        width = 0
        for scope in self._scopes:
            names.append(scope_name(scope))
            prefix = scope_prefix(scope)
            style = self.stylesheet.resolve([*names, *extra], "prefix")
            text += style.paint(prefix)
            width += visible_width(prefix)
        return text, width

    def _suffix(self, extra: Sequence[str] = ()) -> tuple[str, int]:
        names: list[str] = []
        text = ""
        width = 0
        for scope in self._scopes:
            names.append(scope_name(scope))
            suffix = scope_suffix(scope)
            style = self.stylesheet.resolve([*names, *extra], "suffix")
            # Inner scopes sit closer to the content
            text = style.paint(suffix) + text
            width += visible_width(suffix)
        return text, width

    def _prefix_width(self) -> int:
        return sum(scope_prefix_width(scope) for scope in self._scopes)

    def _suffix_width(self) -> int:
        return sum(scope_suffix_width(scope) for scope in self._scopes)

    def _available_width(self) -> int:
        return max(0, self.width - self._prefix_width() - self._suffix_width())

    # -- output -------------------------------------------------------------

    def _write_line(self, prefix: str, body: str, suffix: str) -> None:
        self._out.write(
            f"{self.centering}{self.margin}{prefix}{body}{suffix}{self.margin}{self._shadow()}\n"
        )

    def _empty(self) -> None:
        prefix, prefix_width = self._prefix()
        suffix, suffix_width = self._suffix()
        padding = " " * max(0, self.width - prefix_width - suffix_width)
        self._write_line(prefix, self._paper_style().paint(padding), suffix)
        self._empty_queued = False

    def _queue_empty(self) -> None:
        self._empty_queued = True

    def _print_rule(self) -> None:
        prefix, prefix_width = self._prefix()
        suffix, suffix_width = self._suffix()
        rule = "─" * max(0, self.width - prefix_width - suffix_width)
        self._write_line(prefix, self._style().paint(rule), suffix)

    def _in_table(self) -> bool:
        return any(scope.kind is ScopeKind.TABLE for scope in self._scopes)

    def _has_scope(self, kind: ScopeKind) -> bool:
        return any(scope.kind is kind for scope in self._scopes)

    def _flush(self) -> None:
        """Write out the pending line, if there is one."""
        if self._buffer or self._in_table() or not self._content:
            return
        prefix, prefix_width = self._prefix()
        suffix, suffix_width = self._suffix()
        padding = " " * max(0, self.width - prefix_width - suffix_width - visible_width(self._content))
        self._write_line(prefix, self._content + self._paper_style().paint(padding), suffix)
        self._content = ""

    def _print_table(self) -> None:
        top = self._scopes[-1]
        if top.kind is not ScopeKind.TABLE:
            return
        titles, rows = self._table_head, self._table_rows
        self._table_head, self._table_rows = [], []

        available = self._available_width()
        paper_style = self._paper_style()
        layout = TableLayout(titles, rows, available)
        for line in layout.render(paper_style, top.alignments, border_style=self._style()):
            prefix, _ = self._prefix()
            suffix, _ = self._suffix()
            padding = paper_style.paint(" " * max(0, available - visible_width(line)))
            self._write_line(prefix, line + padding, suffix)

    def _flush_buffer(self) -> None:
        """Write out the collected contents of the code block on top of the stack."""
        top = self._scopes[-1]
        if top.kind is not ScopeKind.CODE_BLOCK:
            return
        lang = top.language
        context = lang if lang and self._highlighter is not None else "txt"
        extra = (context,)
        style = self._style(extra)
        style_prefix = style.prefix()

        prefix, prefix_width = self._prefix(extra)
        suffix, suffix_width = self._suffix(extra)
        available = max(0, self.width - prefix_width - suffix_width)

        code, self._buffer = self._buffer, ""
        lines: list[str] | None = None
        if self._highlighter is not None:
            try:
                lines = self._highlighter.highlight(code, context, available).splitlines()
            except HighlightError as e:
                logger.warning("%s; showing the code block without highlighting", e)
        if lines is None:
            lines = list(_wrap_code(code, available))

        self._write_line(prefix, style.paint(" " * available), suffix)

        for line in lines:
            prefix, _ = self._prefix(extra)
            suffix, _ = self._suffix(extra)
            body = style_prefix
            for segment, is_escape in iter_ansi_segments(line):
                if not is_escape:
                    body += segment
                elif segment == RESET:
                    body += segment + style_prefix
                else:
                    body += style_prefix + segment
            padding = " " * max(0, available - visible_width(line))
            if padding:
                body += style.paint(padding)
            elif style_prefix:
                body += RESET
            self._write_line(prefix, body, suffix)

        prefix, _ = self._prefix(extra)
        suffix, _ = self._suffix(extra)
        tag_style = self._style(extra, "lang-tag")
        tag = take_columns(lang, available)
        padding = " " * max(0, available - visible_width(tag))
        self._write_line(prefix, style.paint(padding) + tag_style.paint(tag), suffix)

    # -- text ---------------------------------------------------------------

    def _target(self) -> str:
        if self._has_scope(ScopeKind.TABLE_HEAD):
            return self._table_head[-1] if self._table_head else ""
        if self._has_scope(ScopeKind.TABLE_ROW):
            row = self._table_rows[-1] if self._table_rows else []
            return row[-1] if row else ""
        return self._content

    def _append(self, text: str) -> None:
        if self._has_scope(ScopeKind.TABLE_HEAD):
            if not self._table_head:
                self._table_head.append("")
            self._table_head[-1] += text
        elif self._has_scope(ScopeKind.TABLE_ROW):
            if not self._table_rows:
                self._table_rows.append([])
            row = self._table_rows[-1]
            if not row:
                row.append("")
            row[-1] += text
        else:
            self._content += text

    def _handle_text(self, text: str) -> None:
        if self._scopes[-1].kind is ScopeKind.CODE_BLOCK:
            self._buffer += text
            return

        style = self._style()
        in_table = self._in_table()
        for word in Words(text):
            if in_table:
                if not self._target():
                    word = word.lstrip()
                self._append(style.paint(word))
                continue

            available = self._available_width()
            if self._content and visible_width(self._content) + visible_width(word) > available:
                self._flush()
            if not self._content:
                word = word.strip()
                if not word:
                    continue

            if visible_width(self._content) + visible_width(word) > available:
                rest = word
                while rest:
                    head, rest = split_at_columns(rest, max(1, available))
                    self._content += style.paint(head)
                    self._flush()
                continue

            self._content += style.paint(word)

    def _handle_inline(self, kind: ScopeKind, text: str) -> None:
        self._push(Scope(kind))
        self._handle_text(text)
        self._pop()

    # -- scope stack --------------------------------------------------------

    def _push(self, scope: Scope) -> None:
        self._scopes.append(scope)

    def _pop(self) -> Scope | None:
        if len(self._scopes) <= 1:
            logger.debug("Ignoring unbalanced end event")
            return None
        return self._scopes.pop()

    # -- events -------------------------------------------------------------

    def handle(self, event: Event) -> None:
        """Process one event, writing any lines it completes."""
        match event:
            case Start(tag=tag):
                if self._empty_queued:
                    self._empty()
                self._start(tag)
            case End(tag=tag):
                self._end(tag)
            case Rule():
                self._flush()
                self._print_rule()
            case Text(text=text):
                self._handle_text(text)
            case Code(text=text) | InlineMath(text=text) | DisplayMath(text=text):
                self._handle_inline(ScopeKind.CODE, text)
            case Html() | InlineHtml():
                pass
            case FootnoteReference(label=label):
                self._handle_inline(ScopeKind.FOOTNOTE_REFERENCE, f"[{label}]")
            case SoftBreak():
                self._handle_text(" ")
            case HardBreak():
                self._flush()
            case TaskListMarker(checked=checked):
                self._handle_text("[✓] " if checked else "[ ] ")
            case _:
                logger.debug("Ignoring unknown event %r", event)

    def _start(self, tag: Tag) -> None:
        match tag:
            case Paragraph():
                self._flush()
            case Heading(level=level):
                self._flush()
                if level == 1:
                    self._print_rule()
                self._push(Scope(ScopeKind.HEADING, level=level))
            case BlockQuote(kind=kind):
                self._flush()
                self._push(Scope(ScopeKind.BLOCK_QUOTE, quote_kind=kind))
                if kind is not None:
                    icon, label = _CALLOUTS[kind]
                    style = self.stylesheet.resolve([f"{kind.value}-blockquote"], "prefix")
                    self._handle_text(f"{style.paint(icon)} {style.paint(label)}")
            case CodeBlock(language=language, fenced=fenced):
                self._flush()
                self._push(Scope(ScopeKind.CODE_BLOCK, language=language if fenced else ""))
            case MetadataBlock():
                self._flush()
                self._push(Scope(ScopeKind.CODE_BLOCK))
            case HtmlBlock():
                pass
            case List(start=start):
                self._flush()
                self._push(Scope(ScopeKind.LIST, index=start))
            case Item():
                self._flush()
                parent = self._scopes[-1]
                index = parent.index if parent.kind is ScopeKind.LIST else None
                self._push(Scope(ScopeKind.LIST_ITEM, index=index))
            case FootnoteDefinition(label=label):
                self._flush()
                self._push(Scope(ScopeKind.FOOTNOTE_DEFINITION))
                self._handle_text(f"{label}:")
                self._pop()
                self._flush()
                self._push(Scope(ScopeKind.FOOTNOTE_CONTENT))
            case Table(alignments=alignments):
                self._table_head, self._table_rows = [], []
                self._push(Scope(ScopeKind.TABLE, alignments=alignments))
            case TableHead():
                self._push(Scope(ScopeKind.TABLE_HEAD))
            case TableRow():
                self._push(Scope(ScopeKind.TABLE_ROW))
                self._table_rows.append([])
            case TableCell():
                self._push(Scope(ScopeKind.TABLE_CELL))
                if self._has_scope(ScopeKind.TABLE_HEAD):
                    self._table_head.append("")
                else:
                    if not self._table_rows:
                        self._table_rows.append([])
                    self._table_rows[-1].append("")
            case Emphasis():
                self._push(Scope(ScopeKind.ITALIC))
            case Strong():
                self._push(Scope(ScopeKind.BOLD))
            case Strikethrough():
                self._push(Scope(ScopeKind.STRIKETHROUGH))
            case Link(url=url, title=title):
                self._push(Scope(ScopeKind.LINK, url=url, title=title))
            case Image():
                self._start_image(tag)

    def _start_image(self, image: Image) -> None:
        self._flush()

        if self.options.no_images:
            self._push(Scope(ScopeKind.INDENT))
            self._handle_text("[Image")
            if image.title:
                self._handle_text(": ")
                self._handle_inline(ScopeKind.CAPTION, image.title)
            if image.url and not self.options.hide_urls:
                self._handle_text(" <")
                self._handle_inline(ScopeKind.LINK, image.url)
                self._handle_text(">")
            self._handle_text("]")
            self._push(Scope(ScopeKind.CAPTION))
            self._flush()
            return

        available = self._available_width()
        try:
            picture = self._image_loader(image.url)
        except ImageError as e:
            self._handle_text("Cannot open image ")
            self._push(Scope(ScopeKind.INDENT))
            self._handle_inline(ScopeKind.LINK, image.url)
            self._handle_text(f": {e}")
            self._push(Scope(ScopeKind.CAPTION))
            self._flush()
            return

        paper_style = self._paper_style()
        for line in render_image(picture, available):
            prefix, _ = self._prefix()
            suffix, _ = self._suffix()
            padding = paper_style.paint(" " * max(0, available - visible_width(line)))
            self._write_line(prefix, line + padding, suffix)

        self._push(Scope(ScopeKind.INDENT))
        self._push(Scope(ScopeKind.CAPTION))
        if image.title:
            self._handle_text(f"{image.title} ")

    def _end(self, tag: Tag) -> None:
        match tag:
            case Paragraph():
                self._flush()
                self._queue_empty()
            case Heading(level=level):
                self._flush()
                self._pop()
                if level == 1:
                    self._print_rule()
                self._queue_empty()
            case List() | BlockQuote() | FootnoteDefinition():
                self._flush()
                self._pop()
                self._queue_empty()
            case Item():
                self._flush()
                self._pop()
                parent = self._scopes[-1]
                if parent.kind is ScopeKind.LIST and parent.index is not None:
                    parent.index += 1
            case Table():
                self._print_table()
                self._pop()
                self._queue_empty()
            case HtmlBlock():
                pass
            case CodeBlock() | MetadataBlock():
                self._flush_buffer()
                self._pop()
                self._queue_empty()
            case Link():
                scope = self._pop()
                if scope is not None:
                    self._annotate_link(scope)
            case Image():
                self._flush()
                self._pop()
                self._pop()
                self._queue_empty()
            case _:
                self._pop()

    def _annotate_link(self, scope: Scope) -> None:
        url = "" if self.options.hide_urls else scope.url
        if scope.title and url:
            self._handle_text(f" <{scope.title}: {url}>")
        elif url:
            self._handle_text(f" <{url}>")
        elif scope.title:
            self._handle_text(f" <{scope.title}>")
