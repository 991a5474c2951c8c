"""Tests for paper.config -- options, layout and the config directory."""

from __future__ import annotations

from pathlib import Path

import pytest

from paper.config import (
    STYLESHEET_NAME,
    Options,
    compute_layout,
    get_config_dir,
    get_stylesheet_path,
    terminal_columns,
)
from paper.errors import ConfigError, WidthTooSmallError


class TestOptions:
    def test_defaults(self) -> None:
        options = Options()
        assert options.width == 92
        assert options.horizontal_margin == 6
        assert options.vertical_margin == 6
        assert options.tab_length == 4

    def test_specific_margins_override(self) -> None:
        options = Options(margin=3, h_margin=1)
        assert options.horizontal_margin == 1
        assert options.vertical_margin == 3


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------


class TestComputeLayout:
    def test_centred(self) -> None:
        layout = compute_layout(Options(), 120)
        assert layout.width == 92
        assert layout.centering == " " * 14
        assert layout.available_width == 80

    def test_width_clamped_to_terminal(self) -> None:
        layout = compute_layout(Options(), 80)
        assert layout.width == 79
        assert layout.centering == ""

    def test_left(self) -> None:
        assert compute_layout(Options(left=True), 120).centering == ""

    def test_right_leaves_room_for_shadow(self) -> None:
        layout = compute_layout(Options(right=True), 120)
        assert layout.centering == " " * 27

    def test_left_and_right_centre(self) -> None:
        layout = compute_layout(Options(left=True, right=True), 120)
        assert layout.centering == " " * 14

    def test_minimum_width_accepted(self) -> None:
        layout = compute_layout(Options(width=52), 200)
        assert layout.available_width == 40

    def test_too_narrow(self) -> None:
        with pytest.raises(WidthTooSmallError) as exc_info:
            compute_layout(Options(width=51), 200)
        assert str(exc_info.value).startswith("The width is too short!")
        assert exc_info.value.minimum == 52

    def test_narrow_terminal(self) -> None:
        with pytest.raises(ConfigError):
            compute_layout(Options(), 40)

    def test_vertical_margin(self) -> None:
        assert compute_layout(Options(v_margin=0), 120).v_margin == 0


class TestTerminalColumns:
    def test_falls_back_without_terminal(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def no_terminal(fd: int) -> None:
            raise OSError("not a terminal")

        monkeypatch.setattr("paper.config.os.get_terminal_size", no_terminal)
        assert terminal_columns(93) == 93


# ---------------------------------------------------------------------------
# Config directory
# ---------------------------------------------------------------------------


class TestConfigDir:
    def test_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PAPER_CONFIG_DIR", str(tmp_path))
        assert get_config_dir() == tmp_path

    def test_default_is_in_home(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("PAPER_CONFIG_DIR", raising=False)
        assert get_config_dir() == Path.home() / ".paper"

    def test_stylesheet_in_config_dir(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PAPER_CONFIG_DIR", str(tmp_path))
        assert get_stylesheet_path(Options()) == tmp_path / STYLESHEET_NAME

    def test_explicit_stylesheet(self, tmp_path: Path) -> None:
        path = tmp_path / "mine.json"
        assert get_stylesheet_path(Options(stylesheet=path)) == path
