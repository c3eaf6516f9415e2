"""Reading here-documents into temporary files."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Iterable, Iterator, TextIO

from minishell.expansion import expand_variables

DEFAULT_PATH = "/tmp/heredoc_defoult"
PROMPT = "heredoc> "


class HeredocInterrupted(Exception):
    """A here-document ended before its delimiter (status 1) or by Ctrl-C (130)."""

    def __init__(self, status: int) -> None:
        self.status = status
        super().__init__(f"here-document ended with status {status}")


def heredoc_path(tty_name: str | None = None) -> str:
    """Temporary file for the here-document of the terminal ``tty_name``."""
    if not tty_name or "/" not in tty_name:
        return DEFAULT_PATH
    return "/tmp/heredoc" + tty_name.rsplit("/", 1)[1]


def _heredoc_lines(
    delimiter: str,
    lines: Iterable[str],
    source: TextIO | None,
    prompt: TextIO | None,
) -> Iterator[str]:
    source = sys.stdin if source is None else source
    prompt = sys.stdout if prompt is None else prompt
    env_lines = list(lines)
    terminator = delimiter + "\n"
    while True:
        prompt.write(PROMPT)
        prompt.flush()
        try:
            line = source.readline()
        except KeyboardInterrupt:
            prompt.write("\n")
            raise HeredocInterrupted(130) from None
        if not line:
            raise HeredocInterrupted(1)
        if line == terminator:
            return
        yield expand_variables(line, env_lines, 0, False, prompt)


def read_heredoc(
    delimiter: str,
    lines: Iterable[str] = (),
    source: TextIO | None = None,
    prompt: TextIO | None = None,
) -> str:
    """Read lines up to one that is exactly ``delimiter`` and expand them.

    The prompt is written to ``prompt`` before each line. Running out of
    input before the delimiter, or Ctrl-C, raises HeredocInterrupted.
    """
    return "".join(_heredoc_lines(delimiter, lines, source, prompt))


def write_heredoc(
    path: str | os.PathLike[str],
    delimiter: str,
    lines: Iterable[str] = (),
    source: TextIO | None = None,
    prompt: TextIO | None = None,
) -> Path:
    """Read a here-document into a fresh file at ``path`` and return the path.

    Lines are written as they are read, so an interrupted document leaves
    what was read so far.
    """
    target = Path(path)
    target.unlink(missing_ok=True)
    with target.open("w", encoding="utf-8") as handle:
        for piece in _heredoc_lines(delimiter, lines, source, prompt):
            handle.write(piece)
    return target