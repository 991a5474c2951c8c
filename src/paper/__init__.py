"""paper: print Markdown documents on a sheet of paper in the terminal."""

from paper.config import Options, PageLayout, compute_layout
from paper.errors import (
    ConfigError,
    HighlightError,
    ImageError,
    PaperError,
    StylesheetError,
    WidthTooSmallError,
)
from paper.highlight import Highlighter
from paper.page import dump_events, normalize, render, render_files, render_markdown, render_plain
from paper.parser import parse
from paper.printer import Printer, Scope, ScopeKind
from paper.stylesheet import Style, Stylesheet, load_stylesheet
from paper.table import Alignment, Table
from paper.utils import strip_ansi, visible_width
from paper.words import DEFAULT_RULES, LineBreakRules, Words

__version__ = "0.5.0"

__all__ = [
    # Config
    "Options",
    "PageLayout",
    "compute_layout",
    # Errors
    "ConfigError",
    "HighlightError",
    "ImageError",
    "PaperError",
    "StylesheetError",
    "WidthTooSmallError",
    # Highlighting
    "Highlighter",
    # Page
    "dump_events",
    "normalize",
    "render",
    "render_files",
    "render_markdown",
    "render_plain",
    # Parsing
    "parse",
    # Printer
    "Printer",
    "Scope",
    "ScopeKind",
    # Stylesheet
    "Style",
    "Stylesheet",
    "load_stylesheet",
    # Table
    "Alignment",
    "Table",
    # Utilities
    "strip_ansi",
    "visible_width",
    # Words
    "DEFAULT_RULES",
    "LineBreakRules",
    "Words",
]
