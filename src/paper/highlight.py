"""Syntax highlighting through an external command.

The command is invoked once per code block as ``<command> -l <language> -w
<width>`` with the code on stdin, and is expected to print the highlighted
code, as ANSI-styled text, on stdout.
"""

from __future__ import annotations

import logging
import shlex
import subprocess

from paper.errors import HighlightError

logger = logging.getLogger(__name__)

DEFAULT_COMMAND = "syncat"


class Highlighter:
    def __init__(self, command: str = DEFAULT_COMMAND) -> None:
        self.command = command

    def argv(self, language: str, width: int) -> list[str]:
        return [*shlex.split(self.command), "-l", language, "-w", str(width)]

    def highlight(self, code: str, language: str, width: int) -> str:
        """Return *code* highlighted as *language*, wrapped to *width* columns.

        Raises :class:`HighlightError` if the command cannot be started or
        exits with a non-zero status.
        """
        argv = self.argv(language, width)
        logger.debug("Running highlighter: %s", shlex.join(argv))
        try:
            proc = subprocess.run(argv, input=code, capture_output=True, text=True)
        except (OSError, ValueError) as e:
            raise HighlightError(f"Cannot run {argv[0]!r}: {e}") from e

        if proc.returncode != 0:
            detail = proc.stderr.strip() or f"exit status {proc.returncode}"
            raise HighlightError(f"{argv[0]!r} failed: {detail}")
        return proc.stdout
