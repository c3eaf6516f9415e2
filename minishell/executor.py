"""Running parsed commands: builtins in the shell, programs as child processes."""

from __future__ import annotations

import contextlib
import copy
import io
import os
import signal
import subprocess
import sys
import tempfile
import threading
from typing import IO, Any, Iterable, Iterator, TextIO

from minishell import builtins
from minishell.environment import Environment
from minishell.parser import Command

_BUILTINS = frozenset({"pwd", "echo", "exit", "env", "export", "cd", "unset"})
_PARENT_ONLY = frozenset({"cd", "exit", "unset", "export"})
_FILE_MODE = 0o644
_INTERRUPTS = tuple(
    getattr(signal, name) for name in ("SIGINT", "SIGQUIT") if hasattr(signal, name)
)


def is_builtin(name: str) -> bool:
    """True for the commands the shell runs itself."""
    return name in _BUILTINS


def is_parent_only_builtin(name: str) -> bool:
    """True for builtins that must run in the shell itself to have an effect."""
    return name in _PARENT_ONLY


def find_command(name: str, env: Environment) -> str | None:
    """Locate an executable for ``name``.

    Names starting with '/' or '.' are used as they are; other names are
    looked up in each directory of PATH in turn.
    """
    if not name:
        return None
    if name[0] in "/.":
        return name if os.access(name, os.X_OK) else None
    search = env.path()
    if search is None:
        return None
    for directory in filter(None, search.split(":")):
        candidate = f"{directory}/{name}"
        if os.access(candidate, os.X_OK):
            return candidate
    return None


def open_infile(command: Command, err: TextIO | None = None) -> IO[bytes] | None:
    """Open the command's input file for reading, or return None without one.

    A file that cannot be opened is reported on ``err`` and the OSError raised.
    """
    err = sys.stderr if err is None else err
    if not command.infile:
        return None
    try:
        return open(command.infile, "rb")
    except OSError as exc:
        err.write(f"minishell: {command.infile}: {exc.strerror}\n")
        raise


def open_outfile(command: Command, err: TextIO | None = None) -> IO[bytes] | None:
    """Open the command's output file, truncating or appending.

    Returns None without an output file; a failure is reported on ``err``
    and the OSError raised.
    """
    err = sys.stderr if err is None else err
    if not command.outfile:
        return None
    flags = os.O_CREAT | os.O_WRONLY | (os.O_APPEND if command.append else os.O_TRUNC)
    try:
        descriptor = os.open(command.outfile, flags, _FILE_MODE)
    except OSError as exc:
        err.write(f"Error opening output file: {exc.strerror}\n")
        raise
    return os.fdopen(descriptor, "wb")


def run_builtin(
    command: Command,
    env: Environment,
    exit_status: int = 0,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    """Run a builtin and return the shell's new exit status.

    A builtin that succeeds leaves the status as it was, except ``unset``,
    which always sets it to 0. ``exit`` may raise ShellExit.
    """
    if not command.args or not is_builtin(command.args[0]):
        return exit_status
    name = command.args[0]
    args = command.args
    actions = {
        "echo": lambda: builtins.echo(args, out),
        "cd": lambda: builtins.cd(env, args, err),
        "pwd": lambda: builtins.pwd(args, out, err),
        "env": lambda: builtins.env_builtin(env, args, out, err),
        "unset": lambda: builtins.unset(env, args),
        "export": lambda: builtins.export(env, args, out, err),
        "exit": lambda: builtins.exit_builtin(args, exit_status, out, err),
    }
    status = actions[name]()
    if name == "unset":
        return 0
    return status or exit_status


@contextlib.contextmanager
def _ignoring_interrupts() -> Iterator[None]:
    if threading.current_thread() is not threading.main_thread():
        yield
        return
    saved = [(sig, signal.getsignal(sig)) for sig in _INTERRUPTS]
    for sig, _ in saved:
        signal.signal(sig, signal.SIG_IGN)
    try:
        yield
    finally:
        for sig, handler in saved:
            if handler is not None:
                signal.signal(sig, handler)


def _default_signals() -> None:
    for sig in _INTERRUPTS:
        signal.signal(sig, signal.SIG_DFL)


_SPAWN_OPTIONS: dict[str, Any] = (
    {"preexec_fn": _default_signals} if os.name == "posix" else {}
)


def _child_environment(env: Environment) -> dict[str, str]:
    pairs = (line.partition("=") for line in env.lines())
    return {key: value for key, _, value in pairs}


def _close(stream: Any) -> None:
    if hasattr(stream, "close"):
        stream.close()


def _nothing_next(last: bool) -> Any:
    return None if last else subprocess.DEVNULL


def _prepare_empty(command: Command, err: TextIO) -> None:
    with contextlib.suppress(OSError):
        if command.infile:
            _close(open_infile(command, err))
        elif command.outfile:
            _close(open_outfile(command, err))


def _stage_input(
    command: Command, source: Any, stack: contextlib.ExitStack, err: TextIO
) -> Any:
    if command.heredoc and command.heredoc_input is not None:
        handle = stack.enter_context(tempfile.TemporaryFile())
        handle.write(command.heredoc_input.encode())
        handle.seek(0)
        return handle
    if command.infile:
        return stack.enter_context(open_infile(command, err))
    return source


def _stage_output(command: Command, last: bool, stack: contextlib.ExitStack, err: TextIO) -> Any:
    if command.outfile:
        return stack.enter_context(open_outfile(command, err))
    return None if last else subprocess.PIPE


def _run_builtin_stage(
    command: Command,
    env: Environment,
    exit_status: int,
    stdout: Any,
    last: bool,
    err: TextIO,
) -> tuple[int, Any]:
    buffer = io.StringIO()
    if command.args[0] != "exit":
        cwd = os.getcwd()
        try:
            run_builtin(command, copy.deepcopy(env), exit_status, buffer, err)
        finally:
            os.chdir(cwd)
    text = buffer.getvalue()
    if stdout is None:
        sys.stdout.write(text)
        sys.stdout.flush()
        return 0, None
    if stdout is subprocess.PIPE:
        handle = tempfile.TemporaryFile()
        handle.write(text.encode())
        handle.seek(0)
        return 0, handle
    stdout.write(text.encode())
    return 0, _nothing_next(last)


def _run_stage(
    command: Command,
    env: Environment,
    exit_status: int,
    source: Any,
    last: bool,
    err: TextIO,
) -> tuple[int | subprocess.Popen, Any]:
    with contextlib.ExitStack() as stack:
        stack.callback(_close, source)
        if not command.args:
            _prepare_empty(command, err)
            return exit_status, _nothing_next(last)
        try:
            stdin = _stage_input(command, source, stack, err)
            stdout = _stage_output(command, last, stack, err)
        except OSError:
            return 1, _nothing_next(last)
        name = command.args[0]
        if is_builtin(name):
            return _run_builtin_stage(command, env, exit_status, stdout, last, err)
        if not name:
            err.write("minshell: command not found: \n")
            return 127, _nothing_next(last)
        path = find_command(name, env)
        if path is None:
            err.write(f"minishell: command not found: {name}\n")
            return 127, _nothing_next(last)
        try:
            process = subprocess.Popen(
                command.args,
                executable=path,
                stdin=stdin,
                stdout=stdout,
                env=_child_environment(env),
                **_SPAWN_OPTIONS,
            )
        except OSError:
            err.write(f"Minishell: {name}: Is a directory\n")
            return 126, _nothing_next(last)
        following = process.stdout if stdout is subprocess.PIPE else _nothing_next(last)
        return process, following


def execute_pipeline(
    commands: Iterable[Command],
    env: Environment,
    exit_status: int = 0,
    err: TextIO | None = None,
) -> int:
    """Run the commands connected by pipes and return the new exit status.

    Builtins run on a copy of the environment, so they change nothing in
    the shell. The status is that of the last command; a program killed by
    a signal leaves the previous status.
    """
    err = sys.stderr if err is None else err
    stages = list(commands)
    if not stages:
        return exit_status
    sys.stdout.flush()
    processes: list[subprocess.Popen] = []
    final: int | subprocess.Popen = exit_status
    source: Any = None
    with _ignoring_interrupts():
        try:
            for position, command in enumerate(stages):
                last = position == len(stages) - 1
                result, source = _run_stage(command, env, exit_status, source, last, err)
                if isinstance(result, subprocess.Popen):
                    processes.append(result)
                if last:
                    final = result
        finally:
            _close(source)
            for process in processes:
                process.wait()
    if isinstance(final, subprocess.Popen):
        code = final.returncode
        return code if code >= 0 else exit_status
    return final