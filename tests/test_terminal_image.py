"""Tests for paper.terminal_image -- decoding and half-block rendering."""

from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image

from paper.errors import ImageError
from paper.terminal_image import (
    UPPER_HALF_BLOCK,
    ImageDimensions,
    fit_to_width,
    load_image,
    render_image,
    render_pixels,
)
from paper.utils import visible_width


def _solid(size: tuple[int, int], colour: tuple[int, int, int, int]) -> Image.Image:
    return Image.new("RGBA", size, colour)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


class TestLoadImage:
    def test_png(self, tmp_path: Path) -> None:
        path = tmp_path / "pic.png"
        Image.new("RGB", (3, 2), (0, 128, 0)).save(path)
        image = load_image(path)
        assert image.size == (3, 2)
        assert image.mode == "RGBA"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ImageError):
            load_image(tmp_path / "missing.png")

    def test_not_an_image(self, tmp_path: Path) -> None:
        path = tmp_path / "notes.png"
        path.write_text("just text")
        with pytest.raises(ImageError):
            load_image(path)


# ---------------------------------------------------------------------------
# Sizing
# ---------------------------------------------------------------------------


class TestFitToWidth:
    def test_small_image_unchanged(self) -> None:
        assert fit_to_width(ImageDimensions(10, 6), 40) == ImageDimensions(10, 6)

    def test_scaled_down_keeping_ratio(self) -> None:
        assert fit_to_width(ImageDimensions(200, 100), 40) == ImageDimensions(40, 20)

    def test_never_zero(self) -> None:
        assert fit_to_width(ImageDimensions(1000, 1), 10) == ImageDimensions(10, 1)


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


class TestRenderPixels:
    def test_two_pixel_rows_per_line(self) -> None:
        lines = render_pixels(_solid((5, 4), (255, 0, 0, 255)), 5, 4)
        assert len(lines) == 2
        assert all(visible_width(line) == 5 for line in lines)
        assert all(line.count(UPPER_HALF_BLOCK) == 5 for line in lines)

    def test_odd_height_repeats_last_row(self) -> None:
        lines = render_pixels(_solid((2, 3), (0, 0, 255, 255)), 2, 3)
        assert len(lines) == 2
        assert "38;2;0;0;255;48;2;0;0;255m" in lines[1]

    def test_colours(self) -> None:
        line = render_pixels(_solid((1, 2), (10, 20, 30, 255)), 1, 2)[0]
        assert line.startswith("\x1b[38;2;10;20;30;48;2;10;20;30m")
        assert line.endswith("\x1b[0m")

    def test_transparent_is_white(self) -> None:
        line = render_pixels(_solid((1, 2), (0, 0, 0, 0)), 1, 2)[0]
        assert "38;2;255;255;255;48;2;255;255;255m" in line

    def test_empty(self) -> None:
        assert render_pixels(_solid((2, 2), (0, 0, 0, 255)), 0, 2) == []


class TestRenderImage:
    def test_fits_width(self) -> None:
        lines = render_image(_solid((100, 10), (0, 0, 0, 255)), 20)
        assert len(lines) == 1
        assert visible_width(lines[0]) == 20
