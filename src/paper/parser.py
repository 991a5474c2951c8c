"""Markdown source -> event stream, using ``markdown-it-py``.

markdown-it produces a flat list of block tokens with ``*_open`` / ``*_close``
pairs, and inline content in the ``children`` of ``inline`` tokens. This
module walks that list and re-emits it as :mod:`paper.events`, which is what
the printer consumes.

Differences from the raw token stream:
- Paragraphs hidden by markdown-it (tight lists) produce no events.
- The header row of a table is reported as cells directly inside
  :class:`~paper.events.TableHead`, without a row.
- GitHub alert markers (``> [!NOTE]``) become the block quote's kind.
- Task list checkboxes become :class:`~paper.events.TaskListMarker`.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator

from markdown_it import MarkdownIt
from markdown_it.token import Token
from mdit_py_plugins.dollarmath import dollarmath_plugin
from mdit_py_plugins.footnote import footnote_plugin
from mdit_py_plugins.front_matter import front_matter_plugin
from mdit_py_plugins.tasklists import tasklists_plugin

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
from paper.table import Alignment

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# markdown-it singleton (GFM tables + strikethrough, plus plugins)
# ---------------------------------------------------------------------------

_md_parser = (
    MarkdownIt("gfm-like")
    .use(front_matter_plugin)
    .use(footnote_plugin)
    .use(tasklists_plugin)
    .use(dollarmath_plugin, allow_digits=False)
)

_ALERT_RE = re.compile(r"^\[!(note|tip|important|warning|caution)\]\s*$", re.IGNORECASE)

_ALIGNMENTS = {
    "text-align:left": Alignment.LEFT,
    "text-align:center": Alignment.CENTER,
    "text-align:right": Alignment.RIGHT,
}

_SIMPLE_INLINE_TAGS: dict[str, type[Emphasis] | type[Strong] | type[Strikethrough]] = {
    "em": Emphasis,
    "strong": Strong,
    "s": Strikethrough,
}


def parse(text: str) -> Iterator[Event]:
    """Parse Markdown *text* into a stream of events."""
    tokens = _md_parser.parse(text)
    return _EventBuilder(tokens).events()


# ---------------------------------------------------------------------------
# Token walking
# ---------------------------------------------------------------------------


class _EventBuilder:
    def __init__(self, tokens: list[Token]) -> None:
        self._tokens = tokens
        self._in_head = False

    def events(self) -> Iterator[Event]:
        # One entry per open token; None for containers that produce no events.
        open_tags: list[Tag | None] = []

        for index, tok in enumerate(self._tokens):
            if tok.type == "inline":
                yield from self._inline_events(tok.children or [])
            elif tok.nesting == 1:
                tag = self._open_tag(index)
                open_tags.append(tag)
                if tag is not None:
                    yield Start(tag)
            elif tok.nesting == -1:
                if tok.type == "thead_close":
                    self._in_head = False
                tag = open_tags.pop() if open_tags else None
                if tag is not None:
                    yield End(tag)
            else:
                yield from self._leaf_events(tok)

    # -- block tokens -------------------------------------------------------

    def _open_tag(self, index: int) -> Tag | None:
        tok = self._tokens[index]
        t = tok.type

        if t == "paragraph_open":
            return None if tok.hidden else Paragraph()
        if t == "heading_open":
            return Heading(int(tok.tag[1:]) if tok.tag[1:].isdigit() else 1)
        if t == "blockquote_open":
            return BlockQuote(self._take_alert_kind(index))
        if t == "bullet_list_open":
            return List(None)
        if t == "ordered_list_open":
            start = tok.attrs.get("start", 1)
            try:
                return List(int(start))
            except (TypeError, ValueError):
                return List(1)
        if t == "list_item_open":
            return Item()
        if t == "table_open":
            return Table(self._table_alignments(index))
        if t == "thead_open":
            self._in_head = True
            return TableHead()
        if t == "tr_open":
            return None if self._in_head else TableRow()
        if t in ("th_open", "td_open"):
            return TableCell()
        if t == "footnote_open":
            meta = tok.meta or {}
            label = meta.get("label")
            if label is None:
                label = str(meta.get("id", 0) + 1)
            return FootnoteDefinition(str(label))

        # tbody, footnote_block and anything unknown are transparent
        return None

    def _leaf_events(self, tok: Token) -> Iterator[Event]:
        t = tok.type

        if t in ("fence", "code_block"):
            fenced = t == "fence"
            info = tok.info.strip() if fenced and tok.info else ""
            language = info.split(maxsplit=1)[0] if info else ""
            tag = CodeBlock(language, fenced=fenced)
            yield Start(tag)
            if tok.content:
                yield Text(tok.content)
            yield End(tag)
        elif t == "hr":
            yield Rule()
        elif t == "html_block":
            yield Start(HtmlBlock())
            yield Html(tok.content)
            yield End(HtmlBlock())
        elif t == "front_matter":
            yield Start(MetadataBlock())
            if tok.content:
                yield Text(tok.content if tok.content.endswith("\n") else tok.content + "\n")
            yield End(MetadataBlock())
        elif t in ("math_block", "math_block_label"):
            # Display math is laid out like a paragraph of its own
            yield Start(Paragraph())
            yield DisplayMath(tok.content)
            yield End(Paragraph())
        else:
            logger.debug("Ignoring block token %s", t)

    def _take_alert_kind(self, index: int) -> BlockQuoteKind | None:
        """Detect a ``[!KIND]`` marker opening the quote and remove it."""
        tokens = self._tokens
        if index + 2 >= len(tokens):
            return None
        para, inline = tokens[index + 1], tokens[index + 2]
        if para.type != "paragraph_open" or inline.type != "inline" or not inline.children:
            return None

        children = inline.children
        marker = ""
        consumed = 0
        for child in children:
            if child.type not in ("text", "text_special"):
                break
            marker += child.content
            consumed += 1
        match = _ALERT_RE.match(marker)
        if match is None:
            return None

        if consumed < len(children) and children[consumed].type in ("softbreak", "hardbreak"):
            consumed += 1
        inline.children = children[consumed:]
        if not inline.children:
            para.hidden = True
        return BlockQuoteKind(match.group(1).lower())

    def _table_alignments(self, index: int) -> tuple[Alignment, ...]:
        alignments: list[Alignment] = []
        for tok in self._tokens[index + 1 :]:
            if tok.type in ("thead_close", "table_close"):
                break
            if tok.type == "th_open":
                style = str(tok.attrs.get("style", "")).replace(" ", "")
                alignments.append(_ALIGNMENTS.get(style, Alignment.NONE))
        return tuple(alignments)

    # -- inline tokens ------------------------------------------------------

    def _inline_events(self, children: list[Token]) -> Iterator[Event]:
        links: list[Link] = []
        after_checkbox = False

        for child in children:
            ct = child.type

            if ct in ("text", "text_special"):
                content = child.content.lstrip() if after_checkbox else child.content
                if content:
                    yield Text(content)
                after_checkbox = False
            elif ct == "softbreak":
                yield SoftBreak()
            elif ct == "hardbreak":
                yield HardBreak()
            elif ct.endswith(("_open", "_close")) and ct.rsplit("_", 1)[0] in _SIMPLE_INLINE_TAGS:
                name, _, side = ct.rpartition("_")
                tag = _SIMPLE_INLINE_TAGS[name]()
                yield Start(tag) if side == "open" else End(tag)
            elif ct == "link_open":
                url = str(child.attrs.get("href", ""))
                if child.markup in ("autolink", "linkify"):
                    url = ""
                link = Link(url, str(child.attrs.get("title", "")))
                links.append(link)
                yield Start(link)
            elif ct == "link_close":
                if links:
                    yield End(links.pop())
            elif ct == "code_inline":
                yield Code(child.content)
            elif ct == "image":
                image = Image(str(child.attrs.get("src", "")), str(child.attrs.get("title", "")))
                yield Start(image)
                yield from self._inline_events(child.children or [])
                yield End(image)
            elif ct == "html_inline":
                if 'class="task-list-item-checkbox"' in child.content:
                    yield TaskListMarker('checked="checked"' in child.content)
                    after_checkbox = True
                else:
                    yield InlineHtml(child.content)
            elif ct == "footnote_ref":
                meta = child.meta or {}
                label = meta.get("label")
                if label is None:
                    label = str(meta.get("id", 0) + 1)
                yield FootnoteReference(str(label))
            elif ct == "footnote_anchor":
                continue
            elif ct == "math_inline":
                yield InlineMath(child.content)
            elif ct == "math_inline_double":
                yield DisplayMath(child.content)
            elif child.content:
                yield Text(child.content)
