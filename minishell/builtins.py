"""The commands the shell runs itself: echo, cd, pwd, env, unset, export, exit."""

from __future__ import annotations

import os
import string
import sys
from typing import Sequence, TextIO

from minishell.environment import Environment

_ATOI_SPACES = frozenset(" \t\v\f\r\n")
_ALPHA = frozenset(string.ascii_letters)
_ALNUM = frozenset(string.ascii_letters + string.digits)
_LLONG_MAX = 2**63 - 1
_LLONG_MIN = -(2**63)
_NO_SUCH_FILE = ": No such file or directory"


class ShellExit(Exception):
    """Raised by ``exit`` to end the shell with ``status``."""

    def __init__(self, status: int) -> None:
        self.status = status
        super().__init__(f"exit {status}")


def _stream(stream: TextIO | None, default: TextIO) -> TextIO:
    return default if stream is None else stream


def atoi(text: str) -> int:
    """Leading blanks, an optional sign and digits, as a 32-bit signed integer.

    Reading stops at the first character that is not a digit.
    """
    index = 0
    while index < len(text) and text[index] in _ATOI_SPACES:
        index += 1
    sign = 1
    if index < len(text) and text[index] in "+-":
        if text[index] == "-":
            sign = -1
        index += 1
    result = 0
    while index < len(text) and text[index] in string.digits:
        result = result * 10 + int(text[index])
        index += 1
    value = (result * sign) & 0xFFFFFFFF
    return value - 2**32 if value >= 2**31 else value


def echo(args: Sequence[str], out: TextIO | None = None) -> int:
    """Print the arguments separated by spaces.

    Leading arguments that begin with ``-n`` suppress the final newline.
    """
    out = _stream(out, sys.stdout)
    words = list(args[1:])
    if not words:
        out.write("\n")
        return 0
    newline = True
    while words and words[0].startswith("-n"):
        words.pop(0)
        newline = False
    out.write(" ".join(words))
    if newline:
        out.write("\n")
    return 0


def cd(env: Environment, args: Sequence[str], err: TextIO | None = None) -> int:
    """Change the working directory and record it in PWD.

    Without an argument HOME is used, and an argument beginning with '-'
    means OLDPWD; both are read from the process environment. PWD is only
    updated when the environment already has a variable starting with it.
    """
    err = _stream(err, sys.stderr)
    if len(args) < 2:
        path = os.environ.get("HOME")
    elif args[1].startswith("-"):
        path = os.environ.get("OLDPWD")
    else:
        path = args[1]
    if path is None or not os.path.exists(path) or path == '"':
        err.write(f"Minishell: cd: {path or ''}{_NO_SUCH_FILE}\n")
        return 1
    try:
        os.chdir(path)
    except OSError:
        pass
    cwd = os.getcwd()
    existing = next((key for key, _ in env if key.startswith("PWD")), None)
    if existing is not None:
        env.set(existing, cwd)
    return 0


def pwd(args: Sequence[str], out: TextIO | None = None, err: TextIO | None = None) -> int:
    """Print the working directory; any argument is an error."""
    out = _stream(out, sys.stdout)
    err = _stream(err, sys.stderr)
    if len(args) > 1:
        err.write("pwd: too many arguments\n")
        return 1
    out.write(os.getcwd() + "\n")
    return 0


def env_builtin(
    env: Environment,
    args: Sequence[str],
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    """Print the environment; it fails without PATH or with an argument."""
    out = _stream(out, sys.stdout)
    err = _stream(err, sys.stderr)
    if env.path() is None:
        err.write(f"minishell: env: {_NO_SUCH_FILE}\n")
        return 1
    if not args:
        return 1
    if len(args) > 1:
        err.write(f"env: {args[1]}{_NO_SUCH_FILE}\n")
        return 1
    out.writelines(line + "\n" for line in env.lines())
    return 0


def unset(env: Environment, args: Sequence[str]) -> int:
    """Remove each named variable, stopping at the first that is not found."""
    for name in args[1:]:
        if not env.unset(name):
            break
    return 0


def is_valid_export_syntax(arg: str | None, err: TextIO | None = None) -> bool:
    """Check that ``arg`` starts with a valid name; complain on ``err`` if not."""
    err = _stream(err, sys.stderr)

    def invalid() -> bool:
        err.write(f"export: {arg or ''}: not a valid identifier\n")
        return False

    if not arg:
        return invalid()
    if arg[0] not in _ALPHA and arg[0] != "_":
        return invalid()
    for index in range(1, len(arg)):
        char = arg[index]
        if char == "=" or arg.startswith("+=", index):
            break
        if char not in _ALNUM and char != "_":
            return invalid()
    return True


def format_export(env: Environment) -> str:
    """The ``declare -x`` listing of all variables, sorted."""
    entries = sorted(
        key if value is None else f'{key}="{value}"' for key, value in env
    )
    return "".join(f"declare -x {entry}\n" for entry in entries)


def export(
    env: Environment,
    args: Sequence[str],
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    """Set or append to variables, or list them all when given no names.

    Only the first argument's name is checked; ``KEY+=VALUE`` appends.
    """
    out = _stream(out, sys.stdout)
    if not args:
        return 0
    if len(args) == 1:
        out.write(format_export(env))
        return 0
    if not is_valid_export_syntax(args[1], err):
        return 1
    for arg in args[1:]:
        plus = arg.find("+")
        equal = arg.find("=")
        if plus != -1 and equal != -1 and plus + 1 == equal:
            env.append_assignment(arg)
        else:
            env.assign(arg)
    return 0


def is_numeric_argument(text: str) -> bool:
    """True when every character is a digit, each possibly preceded by one sign."""
    index = 0
    while index < len(text):
        if text[index] in "+-":
            index += 1
        if index >= len(text) or text[index] not in string.digits:
            return False
        index += 1
    return True


def is_big_number(text: str) -> bool:
    """True when the digits examined overflow a 64-bit integer or are not digits.

    After a leading '+' the digits start at the second character; otherwise
    the first two characters are passed over, a '-' in second place making
    the number negative.
    """
    sign = 1
    if text[:1] == "+":
        start = 1
    else:
        if text[1:2] == "-":
            sign = -1
        start = 2
    result = 0
    for char in text[start:]:
        if char not in string.digits:
            return True
        digit = int(char)
        if sign == 1 and result > (_LLONG_MAX - digit) // 10:
            return True
        if sign == -1 and result > (-(_LLONG_MIN + digit)) // 10:
            return True
        result = result * 10 + digit
    return False


def exit_builtin(
    args: Sequence[str],
    exit_status: int = 0,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    """Leave the shell by raising ShellExit, or return a status when it stays.

    A non-numeric argument gives 255 and too many arguments 1, without
    leaving; a number too large leaves with status 2.
    """
    out = _stream(out, sys.stdout)
    err = _stream(err, sys.stderr)
    if len(args) < 2:
        out.write("exit\n")
        raise ShellExit(exit_status)
    argument = args[1]
    if not is_numeric_argument(argument):
        err.write(f"minishell: exit: {argument}: numeric argument required\n")
        return 255
    if len(args) > 2:
        err.write("exit\nminishell: exit: too many arguments\n")
        return 1
    if is_big_number(argument):
        err.write(f"minishell: exit: numeric argument required: {argument}\n")
        raise ShellExit(2)
    out.write("exit\n")
    raise ShellExit(atoi(argument) & 0xFF)