"""Expansion of ``$NAME``, ``$?`` and ``$0`` in words."""

from __future__ import annotations

import string
import sys
from typing import Iterable, TextIO

_VAR_CHARS = frozenset(string.ascii_letters + string.digits + "_")
_SPACES = frozenset(" \t\n")


def is_var_char(char: str) -> bool:
    """True for an ASCII letter, digit or underscore."""
    return len(char) == 1 and char in _VAR_CHARS


def extract_var_name(text: str, index: int) -> tuple[str, int]:
    """Read a variable name starting at ``index``; return it and the next index."""
    end = index
    while end < len(text) and is_var_char(text[end]):
        end += 1
    return text[index:end], end


def lookup(name: str, lines: Iterable[str]) -> str | None:
    """Value of ``name`` among ``KEY=VALUE`` lines, or None."""
    prefix = name + "="
    for line in lines:
        if line.startswith(prefix):
            return line[len(prefix):]
    return None


def squash_whitespace(text: str) -> str:
    """Drop leading blanks and collapse each run of blanks into one space."""
    pieces: list[str] = []
    in_space = False
    for char in text:
        if char in _SPACES:
            if not in_space and pieces:
                pieces.append(" ")
            in_space = True
        else:
            pieces.append(char)
            in_space = False
    return "".join(pieces)


def expand_variables(
    text: str,
    lines: Iterable[str],
    exit_status: int = 0,
    split: bool = False,
    out: TextIO | None = None,
) -> str:
    """Expand variables in ``text`` using ``KEY=VALUE`` lines.

    ``$?`` gives the exit status, ``$0`` prints the shell name to ``out``
    and expands to nothing, and unknown names expand to nothing. With
    ``split`` the whitespace in values is squashed.
    """
    out = sys.stdout if out is None else out
    lines = list(lines)
    pieces: list[str] = []
    index = 0
    length = len(text)
    while index < length:
        char = text[index]
        if char != "$":
            pieces.append(char)
            index += 1
            continue
        index += 1
        following = text[index] if index < length else ""
        if following == "?":
            pieces.append(str(exit_status))
            index += 1
        elif following == "0":
            out.write("Minishell\n")
            index += 1
        elif is_var_char(following):
            name, index = extract_var_name(text, index)
            value = lookup(name, lines)
            if value is not None:
                pieces.append(squash_whitespace(value) if split else value)
        else:
            pieces.append("$" + following)
            index += 1
    return "".join(pieces)