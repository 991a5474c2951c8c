"""Exception hierarchy for paper."""

from __future__ import annotations


class PaperError(Exception):
    """Base class for all errors raised by paper."""


class ConfigError(PaperError):
    """The requested configuration cannot be used."""


class WidthTooSmallError(ConfigError):
    """The page width leaves too little room between the margins."""

    def __init__(self, width: int, h_margin: int, minimum: int) -> None:
        super().__init__(
            f"The width is too short! ({width} columns, need at least {minimum} "
            f"with a horizontal margin of {h_margin})"
        )
        self.width = width
        self.h_margin = h_margin
        self.minimum = minimum


class StylesheetError(PaperError):
    """A stylesheet could not be read or contains an invalid rule."""


class ImageError(PaperError):
    """An image file could not be opened or decoded."""


class HighlightError(PaperError):
    """The external syntax highlighter could not be run."""
