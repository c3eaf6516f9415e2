"""Turning a tokenized line into a list of commands."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Callable, Iterable

from minishell.environment import Environment
from minishell.heredoc import read_heredoc
from minishell.lexer import ShellSyntaxError, is_special, tokenize

HeredocReader = Callable[[str], str]

_REDIRECTIONS = frozenset({"<", ">", ">>", "<<"})
_FILE_MODE = 0o644


@dataclass
class Command:
    """One simple command of a pipeline with its redirections."""

    args: list[str] = field(default_factory=list)
    infile: str | None = None
    outfile: str | None = None
    append: bool = False
    heredoc: bool = False
    heredoc_input: str | None = None
    pipe_to_next: bool = False


def is_redirection(token: str) -> bool:
    """True for '<', '>', '>>' or '<<'."""
    return token in _REDIRECTIONS


def check_syntax_error(tokens: list[str], quoted: bool = False) -> None:
    """Raise ShellSyntaxError if the tokens cannot form a command line.

    A leading pipe and two pipes in a row are errors. Unless the line held
    quoted text, a redirection with nothing after it, or followed by a
    two-character operator, is an error too.
    """
    if tokens and tokens[0] == "|":
        raise ShellSyntaxError("`|`")
    for position, token in enumerate(tokens):
        following = tokens[position + 1] if position + 1 < len(tokens) else None
        if token == "|" and following == "|":
            raise ShellSyntaxError("`||`")
        if is_redirection(token) and not quoted:
            if following is None or is_special(following[1:2]):
                raise ShellSyntaxError("`newline'")


def _touch(path: str, truncate: bool) -> None:
    flags = os.O_CREAT | os.O_WRONLY | (os.O_TRUNC if truncate else os.O_APPEND)
    try:
        descriptor = os.open(path, flags, _FILE_MODE)
    except OSError:
        return
    os.close(descriptor)


def apply_redirection(command: Command, operator: str, target: str) -> None:
    """Record a redirection on ``command``.

    A replaced output file is still created, and truncated unless it was
    opened for appending and the new redirection appends as well.
    """
    if operator == "<":
        command.infile = target
    elif operator == ">":
        if command.outfile:
            _touch(command.outfile, truncate=True)
        command.outfile = target
        command.append = False
    elif operator == ">>":
        if command.outfile:
            _touch(command.outfile, truncate=not command.append)
        command.outfile = target
        command.append = True
    elif operator == "<<":
        command.heredoc = True
    else:
        raise ValueError(f"not a redirection: {operator!r}")


def parse_tokens(
    tokens: Iterable[str],
    quoted: bool = False,
    heredoc_reader: HeredocReader | None = None,
) -> list[Command]:
    """Group tokens into commands split at pipes.

    Here-documents are read at once with ``heredoc_reader``, which gets the
    delimiter and returns the document's text. When the line held quoted
    text, operators are kept as plain arguments.
    """
    reader = heredoc_reader if heredoc_reader is not None else read_heredoc
    items = list(tokens)
    commands: list[Command] = []
    current: Command | None = None
    stream = iter(items)
    for token in stream:
        if current is None:
            current = Command()
            commands.append(current)
        if quoted:
            current.args.append(token)
        elif token == "|":
            current.pipe_to_next = True
            current = Command()
            commands.append(current)
        elif is_redirection(token):
            target = next(stream, None)
            if target is None:
                raise ShellSyntaxError("`newline'")
            apply_redirection(current, token, target)
            if token == "<<":
                current.heredoc_input = reader(target)
        else:
            current.args.append(token)
    return commands


def parse_input(
    line: str,
    env: Environment,
    exit_status: int = 0,
    heredoc_reader: HeredocReader | None = None,
) -> list[Command]:
    """Tokenize, check and parse one input line.

    Raises ShellSyntaxError for a line that cannot be parsed.
    """
    env_lines = env.lines()
    tokenized = tokenize(line, env_lines, exit_status)
    check_syntax_error(tokenized.tokens, tokenized.quoted)
    if heredoc_reader is None:
        def heredoc_reader(delimiter: str) -> str:
            return read_heredoc(delimiter, env_lines)
    return parse_tokens(tokenized.tokens, tokenized.quoted, heredoc_reader)


def format_commands(commands: Iterable[Command]) -> str:
    """A readable description of each command, for debugging."""
    out: list[str] = []
    for command in commands:
        out.append("----- Command -----\n")
        if command.args:
            out.extend(
                f"  Arg[{position}]: {arg}\n"
                for position, arg in enumerate(command.args)
            )
        else:
            out.append("  No arguments.\n")
        out.append(f"  Infile  : {command.infile or 'NULL'}\n")
        out.append(f"  Outfile : {command.outfile or 'NULL'}\n")
        out.append(f"  Append  : {int(command.append)}\n")
        out.append(f"  Heredoc : {int(command.heredoc)}\n")
        out.append(f"  Pipe to next: {int(command.pipe_to_next)}\n")
    return "".join(out)