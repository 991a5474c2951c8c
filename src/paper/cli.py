"""CLI entry point for paper. Uses Click for argument parsing."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from click.shell_completion import get_completion_class

from paper.config import Options, compute_layout, get_stylesheet_path, terminal_columns
from paper.errors import WidthTooSmallError
from paper.page import render, render_files
from paper.stylesheet import load_stylesheet

logger = logging.getLogger(__name__)

_SHELLS = ["bash", "zsh", "fish"]


def _print_completions(ctx: click.Context, _param: click.Parameter, shell: str | None) -> None:
    if shell is None or ctx.resilient_parsing:
        return
    completion_class = get_completion_class(shell)
    if completion_class is None:
        raise click.BadParameter(f"Unsupported shell: {shell}")
    completion = completion_class(main, {}, "paper", "_PAPER_COMPLETE")
    click.echo(completion.source())
    ctx.exit(0)


@click.command()
@click.argument("files", nargs=-1, type=click.Path(path_type=Path))
@click.option("-m", "--margin", default=6, show_default=True, type=click.IntRange(min=0),
              help="Horizontal and vertical margin")
@click.option("--h-margin", default=None, type=click.IntRange(min=0),
              help="Horizontal margin (overrides --margin)")
@click.option("--v-margin", default=None, type=click.IntRange(min=0),
              help="Vertical margin (overrides --margin)")
@click.option("-w", "--width", default=92, show_default=True, type=click.IntRange(min=1),
              help="Width of the paper, margins included")
@click.option("-p", "--plain", is_flag=True, help="Render plain text instead of Markdown")
@click.option("-t", "--tab-length", default=4, show_default=True, type=click.IntRange(min=1),
              help="Columns per tab stop")
@click.option("-U", "--hide-urls", is_flag=True, help="Hide link URLs")
@click.option("-I", "--no-images", is_flag=True, help="Do not draw images")
@click.option("-l", "--left", is_flag=True, help="Put the paper on the left edge of the terminal")
@click.option("-r", "--right", is_flag=True, help="Put the paper on the right edge of the terminal")
@click.option("-s", "--syncat", is_flag=True, help="Highlight code blocks with an external highlighter")
@click.option("--highlighter", default="syncat", show_default=True,
              help="Highlighter command used with --syncat")
@click.option("--stylesheet", default=None, type=click.Path(path_type=Path),
              help="Stylesheet to use instead of the one in the config directory")
@click.option("--dev", is_flag=True, help="Print the parsed events instead of the page")
@click.option("--log-level", default="warning", show_default=True,
              type=click.Choice(["debug", "info", "warning", "error"]))
@click.option("--completions", type=click.Choice(_SHELLS), callback=_print_completions,
              expose_value=False, is_eager=True, help="Print a shell completion script and exit")
def main(files, margin, h_margin, v_margin, width, plain, tab_length, hide_urls, no_images,
         left, right, syncat, highlighter, stylesheet, dev, log_level):
    """Print Markdown FILES on a sheet of paper in the terminal.

    Reads standard input when no files are given.
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    options = Options(
        margin=margin,
        h_margin=h_margin,
        v_margin=v_margin,
        width=width,
        plain=plain,
        tab_length=tab_length,
        hide_urls=hide_urls,
        no_images=no_images,
        left=left,
        right=right,
        syncat=syncat,
        highlighter=highlighter,
        dev=dev,
        stylesheet=stylesheet,
    )

    try:
        layout = compute_layout(options, terminal_columns(options.width + 1))
    except WidthTooSmallError as e:
        click.echo(str(e), err=True)
        sys.exit(1)

    sheet = load_stylesheet(get_stylesheet_path(options), explicit=options.stylesheet is not None)
    out = click.get_text_stream("stdout")

    if files:
        render_files(files, layout, sheet, options, out)
    else:
        render(click.get_text_stream("stdin").read(), layout, sheet, options, out)
    out.flush()


if __name__ == "__main__":
    main()
