"""Stylesheets: resolving a path of scope names to terminal attributes.

A stylesheet is a JSON object whose keys are selectors and whose values are
style objects::

    {
        "paper": {"foreground": "black", "background": "white"},
        "blockquote::prefix": {"foreground": "bright-black"},
        "li strong": {"foreground": "red"}
    }

A selector is a space separated list of scope names, optionally followed by
``::token``. It matches a path when its last name is the innermost scope and
its other names appear, in order, further out. Styles cascade from the
outermost scope inwards, less specific selectors first, so a ``paper``
background shows through everything drawn on the page.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from paper.errors import StylesheetError
from paper.utils import RESET

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Colours
# ---------------------------------------------------------------------------

_COLOR_NAMES = {
    "black": 0,
    "red": 1,
    "green": 2,
    "yellow": 3,
    "blue": 4,
    "magenta": 5,
    "purple": 5,
    "cyan": 6,
    "white": 7,
}


def parse_color(value: Any, *, background: bool = False) -> str:
    """Convert a colour value into SGR parameters.

    Accepts a colour name (optionally prefixed with ``bright-``), a
    ``#rrggbb`` hex string, or a 0-255 palette index.
    """
    base = 40 if background else 30
    extended = "48" if background else "38"

    if isinstance(value, bool):
        raise StylesheetError(f"Invalid colour: {value!r}")
    if isinstance(value, int):
        if not 0 <= value <= 255:
            raise StylesheetError(f"Palette index out of range: {value}")
        return f"{extended};5;{value}"
    if not isinstance(value, str):
        raise StylesheetError(f"Invalid colour: {value!r}")

    name = value.strip().lower()
    if name.startswith("#") and len(name) == 7:
        try:
            r, g, b = (int(name[i : i + 2], 16) for i in (1, 3, 5))
        except ValueError:
            raise StylesheetError(f"Invalid hex colour: {value!r}") from None
        return f"{extended};2;{r};{g};{b}"
    if name.startswith("bright-") and name[7:] in _COLOR_NAMES:
        return str(base + 60 + _COLOR_NAMES[name[7:]])
    if name in _COLOR_NAMES:
        return str(base + _COLOR_NAMES[name])
    raise StylesheetError(f"Unknown colour: {value!r}")


# ---------------------------------------------------------------------------
# Style
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Style:
    """Concrete terminal attributes. ``None`` means "not set here"."""

    foreground: str | None = None  # SGR parameters, e.g. "31" or "38;2;R;G;B"
    background: str | None = None
    bold: bool | None = None
    dim: bool | None = None
    italic: bool | None = None
    underline: bool | None = None
    strikethrough: bool | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Style:
        if not isinstance(data, Mapping):
            raise StylesheetError(f"Style must be an object, got {data!r}")
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            if key == "foreground":
                kwargs[key] = parse_color(value)
            elif key == "background":
                kwargs[key] = parse_color(value, background=True)
            elif key in ("bold", "dim", "italic", "underline", "strikethrough"):
                if not isinstance(value, bool):
                    raise StylesheetError(f"{key} must be true or false, got {value!r}")
                kwargs[key] = value
            else:
                raise StylesheetError(f"Unknown style property: {key!r}")
        return cls(**kwargs)

    def merged(self, other: Style) -> Style:
        """Return this style with every attribute *other* sets overridden."""
        changes = {
            f.name: getattr(other, f.name)
            for f in fields(other)
            if getattr(other, f.name) is not None
        }
        if not changes:
            return self
        return Style(**{**{f.name: getattr(self, f.name) for f in fields(self)}, **changes})

    @property
    def is_plain(self) -> bool:
        return not self.prefix()

    def prefix(self) -> str:
        """Return the escape sequence that switches this style on."""
        params: list[str] = []
        if self.bold:
            params.append("1")
        if self.dim:
            params.append("2")
        if self.italic:
            params.append("3")
        if self.underline:
            params.append("4")
        if self.strikethrough:
            params.append("9")
        if self.foreground:
            params.append(self.foreground)
        if self.background:
            params.append(self.background)
        if not params:
            return ""
        return f"\x1b[{';'.join(params)}m"

    def paint(self, text: str) -> str:
        """Wrap *text* in this style, resetting afterwards."""
        prefix = self.prefix()
        if not prefix or not text:
            return text
        return f"{prefix}{text}{RESET}"


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class _Rule:
    names: tuple[str, ...]
    token: str | None
    style: Style
    order: int

    def matches(self, path: Sequence[str]) -> bool:
        if not path or self.names[-1] != path[-1]:
            return False
        remaining = iter(path[:-1])
        return all(name in remaining for name in self.names[:-1])


def _parse_selector(selector: str) -> tuple[tuple[str, ...], str | None]:
    scopes, _, token = selector.partition("::")
    names = tuple(scopes.split())
    if not names:
        raise StylesheetError(f"Empty selector: {selector!r}")
    return names, (token.strip() or None)


# ---------------------------------------------------------------------------
# Stylesheet
# ---------------------------------------------------------------------------


class Stylesheet:
    """An ordered set of selector rules."""

    def __init__(self, rules: Mapping[str, Mapping[str, Any]] | None = None) -> None:
        self._rules: list[_Rule] = []
        for order, (selector, style) in enumerate((rules or {}).items()):
            names, token = _parse_selector(selector)
            self._rules.append(_Rule(names, token, Style.from_dict(style), order))
        self._rules.sort(key=lambda rule: (len(rule.names), rule.order))
        self._cache: dict[tuple[tuple[str, ...], str | None], Style] = {}

    @classmethod
    def default(cls) -> Stylesheet:
        return cls(DEFAULT_STYLESHEET)

    @classmethod
    def from_file(cls, path: Path) -> Stylesheet:
        """Load a stylesheet from a JSON file.

        Raises :class:`StylesheetError` if the file cannot be read or parsed.
        """
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise StylesheetError(f"Cannot read stylesheet {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise StylesheetError(f"Invalid JSON in stylesheet {path}: {e}") from e
        if not isinstance(data, dict):
            raise StylesheetError(f"Stylesheet {path} must contain a JSON object")
        return cls(data)

    def resolve(self, path: Sequence[str], token: str | None = None) -> Style:
        """Return the style for the innermost scope of *path*.

        Unmatched paths resolve to an empty :class:`Style`.
        """
        key = (tuple(path), token)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        style = Style()
        for depth in range(1, len(path) + 1):
            prefix = path[:depth]
            for rule in self._rules:
                if rule.token is None and rule.matches(prefix):
                    style = style.merged(rule.style)
        if token is not None:
            for rule in self._rules:
                if rule.token == token and rule.matches(path):
                    style = style.merged(rule.style)

        self._cache[key] = style
        return style

    def style(self, name: str) -> Style:
        """Shorthand for resolving a single top-level scope name."""
        return self.resolve((name,))


def load_stylesheet(path: Path | None, *, explicit: bool = False) -> Stylesheet:
    """Load the user stylesheet at *path*, falling back to the built-in one.

    A missing file is ignored unless it was asked for *explicitly*; an
    unreadable or invalid one is reported as a warning.
    """
    if path is None:
        return Stylesheet.default()
    if not path.exists():
        if explicit:
            logger.warning("Stylesheet %s not found; using the default stylesheet", path)
        return Stylesheet.default()
    try:
        stylesheet = Stylesheet.from_file(path)
    except StylesheetError as e:
        logger.warning("%s; using the default stylesheet", e)
        return Stylesheet.default()
    logger.debug("Loaded stylesheet from %s", path)
    return stylesheet


# ---------------------------------------------------------------------------
# Built-in stylesheet
# ---------------------------------------------------------------------------

DEFAULT_STYLESHEET: dict[str, dict[str, Any]] = {
    "paper": {"foreground": "black", "background": "#f5f2e8"},
    "shadow": {"background": "bright-black"},
    "h1": {"bold": True},
    "h2": {"bold": True},
    "h2::prefix": {"foreground": "bright-black", "bold": False},
    "h2::suffix": {"foreground": "bright-black", "bold": False},
    "h3": {"bold": True, "underline": True},
    "h4": {"bold": True},
    "h5": {"italic": True},
    "h6": {"italic": True, "foreground": "bright-black"},
    "emphasis": {"italic": True},
    "strong": {"bold": True},
    "strikethrough": {"strikethrough": True},
    "link": {"foreground": "blue", "underline": True},
    "caption": {"italic": True, "foreground": "bright-black"},
    "code": {"foreground": "red"},
    "codeblock": {"background": "#e6e1d3"},
    "codeblock::lang-tag": {"foreground": "bright-black", "italic": True},
    "li::prefix": {"bold": True},
    "blockquote::prefix": {"foreground": "bright-black"},
    "note-blockquote::prefix": {"foreground": "blue"},
    "tip-blockquote::prefix": {"foreground": "green"},
    "important-blockquote::prefix": {"foreground": "magenta"},
    "warning-blockquote::prefix": {"foreground": "yellow"},
    "caution-blockquote::prefix": {"foreground": "red"},
    "footnote-ref": {"foreground": "blue"},
    "footnote-def": {"bold": True},
    "th": {"bold": True},
}
