"""Markup events consumed by the :class:`~paper.printer.Printer`.

A document is a flat stream of events. Block and inline containers are
bracketed by :class:`Start` / :class:`End` pairs carrying the same tag; leaf
content arrives as :class:`Text`, :class:`Code` and friends.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from paper.table import Alignment


class BlockQuoteKind(Enum):
    NOTE = "note"
    TIP = "tip"
    IMPORTANT = "important"
    WARNING = "warning"
    CAUTION = "caution"


# ---------------------------------------------------------------------------
# Tags
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Paragraph:
    pass


@dataclass(frozen=True)
class Heading:
    level: int


@dataclass(frozen=True)
class BlockQuote:
    kind: BlockQuoteKind | None = None


@dataclass(frozen=True)
class CodeBlock:
    language: str = ""
    fenced: bool = True


@dataclass(frozen=True)
class HtmlBlock:
    pass


@dataclass(frozen=True)
class MetadataBlock:
    pass


@dataclass(frozen=True)
class List:
    start: int | None = None  # None for bullet lists


@dataclass(frozen=True)
class Item:
    pass


@dataclass(frozen=True)
class FootnoteDefinition:
    label: str


@dataclass(frozen=True)
class Table:
    alignments: tuple[Alignment, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class TableHead:
    pass


@dataclass(frozen=True)
class TableRow:
    pass


@dataclass(frozen=True)
class TableCell:
    pass


@dataclass(frozen=True)
class Emphasis:
    pass


@dataclass(frozen=True)
class Strong:
    pass


@dataclass(frozen=True)
class Strikethrough:
    pass


@dataclass(frozen=True)
class Link:
    url: str
    title: str = ""


@dataclass(frozen=True)
class Image:
    url: str
    title: str = ""


Tag = Union[
    Paragraph,
    Heading,
    BlockQuote,
    CodeBlock,
    HtmlBlock,
    MetadataBlock,
    List,
    Item,
    FootnoteDefinition,
    Table,
    TableHead,
    TableRow,
    TableCell,
    Emphasis,
    Strong,
    Strikethrough,
    Link,
    Image,
]


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Start:
    tag: Tag


@dataclass(frozen=True)
class End:
    tag: Tag


@dataclass(frozen=True)
class Text:
    text: str


@dataclass(frozen=True)
class Code:
    text: str


@dataclass(frozen=True)
class Html:
    text: str


@dataclass(frozen=True)
class InlineHtml:
    text: str


@dataclass(frozen=True)
class InlineMath:
    text: str


@dataclass(frozen=True)
class DisplayMath:
    text: str


@dataclass(frozen=True)
class FootnoteReference:
    label: str


@dataclass(frozen=True)
class SoftBreak:
    pass


@dataclass(frozen=True)
class HardBreak:
    pass


@dataclass(frozen=True)
class Rule:
    pass


@dataclass(frozen=True)
class TaskListMarker:
    checked: bool


Event = Union[
    Start,
    End,
    Text,
    Code,
    Html,
    InlineHtml,
    InlineMath,
    DisplayMath,
    FootnoteReference,
    SoftBreak,
    HardBreak,
    Rule,
    TaskListMarker,
]
