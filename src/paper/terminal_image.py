"""Image decoding and half-block pixel art."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from paper.errors import ImageError
from paper.utils import RESET

UPPER_HALF_BLOCK = "▀"


@dataclass
class ImageDimensions:
    width_px: int
    height_px: int


def load_image(path: str | Path) -> Image.Image:
    """Decode the image at *path*.

    Raises :class:`ImageError` carrying the decoder's message if the file
    cannot be opened or is not an image.
    """
    try:
        with Image.open(path) as image:
            image.load()
            return image.convert("RGBA")
    except (OSError, UnidentifiedImageError, ValueError) as e:
        raise ImageError(str(e)) from e


def fit_to_width(dimensions: ImageDimensions, max_width: int) -> ImageDimensions:
    """Scale *dimensions* down to at most *max_width* pixels wide, keeping aspect ratio.

    Images that already fit are returned unchanged.
    """
    width, height = dimensions.width_px, dimensions.height_px
    if width > max_width > 0:
        scale = max_width / width
        width = max(1, int(width * scale))
        height = max(1, int(height * scale))
    return ImageDimensions(width_px=width, height_px=height)


def _rgb(pixel: tuple[int, int, int, int]) -> tuple[int, int, int]:
    r, g, b, a = pixel
    # Transparent pixels are drawn on white
    if a < 128:
        return 255, 255, 255
    return r, g, b


def render_pixels(image: Image.Image, width: int, height: int) -> list[str]:
    """Render *image* resized to *width* x *height* pixels as terminal lines.

    Each cell is an upper half block whose foreground is the top pixel and
    whose background is the bottom pixel, so every line covers two pixel rows
    and is exactly *width* columns wide.
    """
    if width <= 0 or height <= 0:
        return []

    resized = image.convert("RGBA").resize((width, height), Image.Resampling.LANCZOS)
    pixels = resized.load()

    lines: list[str] = []
    for y in range(0, height, 2):
        cells: list[str] = []
        for x in range(width):
            top = _rgb(pixels[x, y])
            bottom = _rgb(pixels[x, y + 1]) if y + 1 < height else top
            cells.append(
                f"\x1b[38;2;{top[0]};{top[1]};{top[2]}"
                f";48;2;{bottom[0]};{bottom[1]};{bottom[2]}m{UPPER_HALF_BLOCK}"
            )
        lines.append("".join(cells) + RESET)
    return lines


def render_image(image: Image.Image, max_width: int) -> list[str]:
    """Render *image* no wider than *max_width* columns."""
    fitted = fit_to_width(ImageDimensions(*image.size), max_width)
    return render_pixels(image, fitted.width_px, fitted.height_px)
