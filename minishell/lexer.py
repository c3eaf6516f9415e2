"""Splitting a command line into words and operators."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterable, TextIO

from minishell.expansion import expand_variables

_SPACES = frozenset(" \t\n")
_SPECIALS = frozenset("|<>")
_QUOTES = frozenset("'\"")
_DOUBLE_OPERATORS = (">>", "<<")


class ShellSyntaxError(Exception):
    """A line that the shell cannot parse; the shell's status becomes 2."""

    PREFIX = "bash: syntax error near unexpected token"
    status = 2

    def __init__(self, token: str = "`newline'") -> None:
        self.token = token
        super().__init__(f"{self.PREFIX}: {token}")


class TokenType(enum.Enum):
    PIPE = "|"
    REDIR_IN = "<"
    REDIR_OUT = ">"
    APPEND = ">>"
    HEREDOC = "<<"
    WORD = "word"


@dataclass
class Token:
    type: TokenType
    value: str


@dataclass
class Tokenized:
    """The words and operators of a line, and whether any quote held text."""

    tokens: list[str] = field(default_factory=list)
    quoted: bool = False


def is_space(char: str) -> bool:
    """True for a space, tab or newline."""
    return len(char) == 1 and char in _SPACES


def is_special(char: str) -> bool:
    """True for '|', '<' or '>'."""
    return len(char) == 1 and char in _SPECIALS


def token_type(text: str | None) -> TokenType:
    """The type of a token's text; anything that is not an operator is a word."""
    if text is None:
        return TokenType.WORD
    try:
        operator = TokenType(text)
    except ValueError:
        return TokenType.WORD
    return operator if operator is not TokenType.WORD else TokenType.WORD


def token_length(line: str, index: int) -> int:
    """Length of the operator or plain word that starts at ``index``."""
    if index < len(line) and is_special(line[index]):
        return 2 if line[index:index + 2] in _DOUBLE_OPERATORS else 1
    end = index
    while end < len(line) and not is_space(line[end]) and not is_special(line[end]):
        end += 1
    return end - index


def extract_quoted(text: str, index: int) -> tuple[str, int, bool]:
    """Read the quoted text starting at ``index``.

    Returns the text between the quotes, the index after the closing quote
    and whether the quotes were single. An unclosed quote is a syntax error.
    """
    quote = text[index] if 0 <= index < len(text) else ""
    if quote not in _QUOTES or not quote:
        raise ValueError(f"no quote at position {index}")
    end = text.find(quote, index + 1)
    if end == -1:
        raise ShellSyntaxError()
    return text[index + 1:end], end + 1, quote == "'"


def extract_special(text: str, index: int) -> tuple[str, int]:
    """Read the operator at ``index``; return it and the index after it."""
    for operator in _DOUBLE_OPERATORS:
        if text.startswith(operator, index):
            return operator, index + 2
    return text[index], index + 1


def extract_word(text: str, index: int) -> tuple[str, int]:
    """Read up to the next blank; return the word and the index after it."""
    end = index
    while end < len(text) and not is_space(text[end]):
        end += 1
    return text[index:end], end


def tokenize_input(line: str) -> list[Token]:
    """Split a line into typed tokens without expanding variables."""
    tokens: list[Token] = []
    index = 0
    length = len(line)
    while index < length:
        char = line[index]
        if is_space(char):
            while index < length and is_space(line[index]):
                index += 1
        elif is_special(char):
            operator, index = extract_special(line, index)
            tokens.append(Token(token_type(operator), operator))
        else:
            pieces: list[str] = []
            while index < length and not is_space(line[index]) and not is_special(line[index]):
                if line[index] in _QUOTES:
                    quoted, index, _ = extract_quoted(line, index)
                    pieces.append(quoted)
                else:
                    word, index = extract_word(line, index)
                    pieces.append(word)
            tokens.append(Token(TokenType.WORD, "".join(pieces)))
    return tokens


def tokenize(
    line: str,
    lines: Iterable[str] = (),
    exit_status: int = 0,
    out: TextIO | None = None,
) -> Tokenized:
    """Split a line into words and operators, expanding variables.

    Text in single quotes is kept as it is; double-quoted text is expanded
    as it stands, and unquoted text with its whitespace squashed. Words that
    expand to nothing are dropped.
    """
    env_lines = list(lines)
    result = Tokenized()
    index = 0
    length = len(line)
    while index < length:
        while index < length and is_space(line[index]):
            index += 1
        if index >= length:
            break
        pieces: list[str] = []
        while index < length and not is_space(line[index]) and not is_special(line[index]):
            if line[index] in _QUOTES:
                quoted, index, single = extract_quoted(line, index)
                if quoted:
                    result.quoted = True
                pieces.append(
                    quoted if single
                    else expand_variables(quoted, env_lines, exit_status, False, out)
                )
            else:
                start = index
                while (
                    index < length
                    and not is_space(line[index])
                    and not is_special(line[index])
                    and line[index] not in _QUOTES
                ):
                    index += 1
                pieces.append(
                    expand_variables(line[start:index], env_lines, exit_status, True, out)
                )
        word = "".join(pieces)
        if word:
            result.tokens.append(word)
        if index < length and is_special(line[index]):
            size = token_length(line, index)
            result.tokens.append(line[index:index + size])
            index += size
    return result