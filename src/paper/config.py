"""Render options, page layout and the configuration directory.

The user stylesheet lives at ``~/.paper/paper.json``; set ``PAPER_CONFIG_DIR``
to use another directory.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path

from paper.errors import WidthTooSmallError

CONFIG_DIR_NAME = ".paper"
STYLESHEET_NAME = "paper.json"

# Text narrower than this between the margins is not worth rendering
MIN_CONTENT_WIDTH = 40


@dataclass
class Options:
    """Everything the command line can change about a render."""

    margin: int = 6
    h_margin: int | None = None
    v_margin: int | None = None
    width: int = 92
    plain: bool = False
    tab_length: int = 4
    hide_urls: bool = False
    no_images: bool = False
    left: bool = False
    right: bool = False
    syncat: bool = False
    highlighter: str = "syncat"
    dev: bool = False
    stylesheet: Path | None = None

    @property
    def horizontal_margin(self) -> int:
        return self.margin if self.h_margin is None else self.h_margin

    @property
    def vertical_margin(self) -> int:
        return self.margin if self.v_margin is None else self.v_margin


@dataclass
class PageLayout:
    width: int
    h_margin: int
    v_margin: int
    centering: str

    @property
    def available_width(self) -> int:
        return self.width - 2 * self.h_margin


def compute_layout(options: Options, terminal_width: int) -> PageLayout:
    """Fit the page described by *options* into a terminal *terminal_width* wide.

    One column is kept free on the right for the page shadow. Asking for
    both ``left`` and ``right`` centres the page. Raises
    :class:`WidthTooSmallError` if the remaining width cannot hold both
    margins and :data:`MIN_CONTENT_WIDTH` columns of text.
    """
    width = min(options.width, terminal_width - 1)
    h_margin = options.horizontal_margin
    minimum = 2 * h_margin + MIN_CONTENT_WIDTH
    if width < minimum:
        raise WidthTooSmallError(width, h_margin, minimum)

    if options.left and not options.right:
        centering = ""
    elif options.right and not options.left:
        centering = " " * max(0, terminal_width - width - 1)
    else:
        centering = " " * max(0, (terminal_width - width) // 2)

    return PageLayout(
        width=width,
        h_margin=h_margin,
        v_margin=options.vertical_margin,
        centering=centering,
    )


def terminal_columns(default: int) -> int:
    """Return the width of the terminal on stdout, or *default* if there is none."""
    try:
        return os.get_terminal_size(sys.stdout.fileno()).columns
    except (AttributeError, ValueError, OSError):
        return default


def get_config_dir() -> Path:
    return Path(os.environ.get("PAPER_CONFIG_DIR", Path.home() / CONFIG_DIR_NAME))


def get_stylesheet_path(options: Options) -> Path:
    """The stylesheet named on the command line, else the one in the config directory."""
    if options.stylesheet is not None:
        return options.stylesheet
    return get_config_dir() / STYLESHEET_NAME
