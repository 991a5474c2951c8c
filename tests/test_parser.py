"""Tests for paper.parser -- Markdown to events."""

from __future__ import annotations

from paper.events import (
    BlockQuote,
    BlockQuoteKind,
    Code,
    CodeBlock,
    DisplayMath,
    Emphasis,
    End,
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
    TaskListMarker,
    Text,
)
from paper.parser import parse
from paper.table import Alignment


def _events(text: str) -> list:
    return list(parse(text))


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------


class TestParagraphsAndHeadings:
    def test_paragraph_with_emphasis(self) -> None:
        assert _events("Hello *world*") == [
            Start(Paragraph()),
            Text("Hello "),
            Start(Emphasis()),
            Text("world"),
            End(Emphasis()),
            End(Paragraph()),
        ]

    def test_strong_and_strikethrough(self) -> None:
        events = _events("**bold** ~~gone~~")
        assert Start(Strong()) in events
        assert Start(Strikethrough()) in events
        assert Text("gone") in events

    def test_heading_level(self) -> None:
        assert _events("## Title") == [
            Start(Heading(2)),
            Text("Title"),
            End(Heading(2)),
        ]

    def test_soft_and_hard_breaks(self) -> None:
        events = _events("one\ntwo  \nthree")
        assert SoftBreak() in events
        assert HardBreak() in events

    def test_rule(self) -> None:
        assert Rule() in _events("a\n\n***\n\nb")


class TestCodeBlocks:
    def test_fenced_with_language(self) -> None:
        assert _events("```python\nprint(1)\n```") == [
            Start(CodeBlock("python")),
            Text("print(1)\n"),
            End(CodeBlock("python")),
        ]

    def test_info_string_extra_words_are_ignored(self) -> None:
        events = _events("```rust ignore\nfn main() {}\n```")
        assert events[0] == Start(CodeBlock("rust"))

    def test_fenced_without_language(self) -> None:
        assert _events("```\nx\n```")[0] == Start(CodeBlock(""))

    def test_indented(self) -> None:
        assert _events("    code\n") == [
            Start(CodeBlock("", fenced=False)),
            Text("code\n"),
            End(CodeBlock("", fenced=False)),
        ]

    def test_front_matter(self) -> None:
        events = _events("---\ntitle: x\n---\n\n# H")
        assert events[:3] == [Start(MetadataBlock()), Text("title: x\n"), End(MetadataBlock())]

    def test_display_math(self) -> None:
        events = _events("$$\nE = mc^2\n$$")
        assert len(events) == 3
        assert events[0] == Start(Paragraph())
        assert isinstance(events[1], DisplayMath)
        assert "E = mc^2" in events[1].text
        assert events[2] == End(Paragraph())

    def test_inline_math(self) -> None:
        assert InlineMath("x^2") in _events("Area is $x^2$ here")

    def test_dollar_amounts_are_not_math(self) -> None:
        events = _events("It costs $5 and $10.")
        assert not any(isinstance(e, InlineMath) for e in events)


class TestHtml:
    def test_html_block(self) -> None:
        events = _events("<div>\nhi\n</div>\n")
        assert events[0] == Start(HtmlBlock())
        assert isinstance(events[1], Html)
        assert events[-1] == End(HtmlBlock())

    def test_inline_html(self) -> None:
        events = _events("a <b>bold</b>")
        assert InlineHtml("<b>") in events
        assert InlineHtml("</b>") in events


# ---------------------------------------------------------------------------
# Lists
# ---------------------------------------------------------------------------


class TestLists:
    def test_ordered_list_with_start(self) -> None:
        assert _events("3. a\n4. b") == [
            Start(List(3)),
            Start(Item()),
            Text("a"),
            End(Item()),
            Start(Item()),
            Text("b"),
            End(Item()),
            End(List(3)),
        ]

    def test_ordered_list_default_start(self) -> None:
        assert _events("1. a")[0] == Start(List(1))

    def test_bullet_list(self) -> None:
        assert _events("- a")[0] == Start(List(None))

    def test_loose_list_keeps_paragraphs(self) -> None:
        events = _events("- a\n\n- b")
        assert Start(Paragraph()) in events

    def test_task_list(self) -> None:
        events = _events("- [x] done\n- [ ] todo")
        assert TaskListMarker(True) in events
        assert TaskListMarker(False) in events
        assert Text("done") in events
        assert Text("todo") in events


# ---------------------------------------------------------------------------
# Block quotes
# ---------------------------------------------------------------------------


class TestBlockQuotes:
    def test_plain_quote(self) -> None:
        events = _events("> quoted")
        assert events[0] == Start(BlockQuote())
        assert events[-1] == End(BlockQuote())

    def test_alert(self) -> None:
        assert _events("> [!NOTE]\n> Be careful") == [
            Start(BlockQuote(BlockQuoteKind.NOTE)),
            Start(Paragraph()),
            Text("Be careful"),
            End(Paragraph()),
            End(BlockQuote(BlockQuoteKind.NOTE)),
        ]

    def test_alert_is_case_insensitive(self) -> None:
        assert _events("> [!warning]\n> Hot")[0] == Start(BlockQuote(BlockQuoteKind.WARNING))

    def test_alert_alone(self) -> None:
        assert _events("> [!TIP]") == [
            Start(BlockQuote(BlockQuoteKind.TIP)),
            End(BlockQuote(BlockQuoteKind.TIP)),
        ]

    def test_unknown_alert_is_text(self) -> None:
        events = _events("> [!OTHER]\n> text")
        assert events[0] == Start(BlockQuote())


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------


class TestTables:
    def test_structure(self) -> None:
        table = Table((Alignment.LEFT, Alignment.RIGHT))
        assert _events("| a | b |\n|:--|--:|\n| 1 | 2 |") == [
            Start(table),
            Start(TableHead()),
            Start(TableCell()),
            Text("a"),
            End(TableCell()),
            Start(TableCell()),
            Text("b"),
            End(TableCell()),
            End(TableHead()),
            Start(TableRow()),
            Start(TableCell()),
            Text("1"),
            End(TableCell()),
            Start(TableCell()),
            Text("2"),
            End(TableCell()),
            End(TableRow()),
            End(table),
        ]

    def test_unaligned_columns(self) -> None:
        events = _events("| a | b |\n|---|:-:|\n| 1 | 2 |")
        assert events[0] == Start(Table((Alignment.NONE, Alignment.CENTER)))


# ---------------------------------------------------------------------------
# Inline
# ---------------------------------------------------------------------------


class TestInline:
    def test_code_span(self) -> None:
        assert Code("x = 1") in _events("Use `x = 1` here")

    def test_link_with_title(self) -> None:
        events = _events('[site](https://example.com "Title")')
        link = Link("https://example.com", "Title")
        assert events[1:4] == [Start(link), Text("site"), End(link)]

    def test_autolink_has_no_separate_url(self) -> None:
        events = _events("<https://example.com>")
        assert Start(Link("")) in events
        assert Text("https://example.com") in events

    def test_image(self) -> None:
        image = Image("pic.png", "Cap")
        assert _events('![alt text](pic.png "Cap")') == [
            Start(Paragraph()),
            Start(image),
            Text("alt text"),
            End(image),
            End(Paragraph()),
        ]

    def test_footnotes(self) -> None:
        events = _events("Text[^1]\n\n[^1]: Note.")
        assert FootnoteReference("1") in events
        start = events.index(Start(FootnoteDefinition("1")))
        assert Text("Note.") in events[start:]
        assert events[-1] == End(FootnoteDefinition("1"))

    def test_named_footnote(self) -> None:
        events = _events("See[^note]\n\n[^note]: Here.")
        assert FootnoteReference("note") in events
        assert Start(FootnoteDefinition("note")) in events
