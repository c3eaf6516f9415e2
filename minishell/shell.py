"""The interactive read-and-run loop."""

from __future__ import annotations

import os
import sys
from typing import Callable, Mapping, Sequence

from minishell.builtins import ShellExit
from minishell.environment import Environment
from minishell.executor import execute_pipeline, is_parent_only_builtin, run_builtin
from minishell.heredoc import HeredocInterrupted
from minishell.lexer import ShellSyntaxError
from minishell.parser import parse_input

PROMPT = "minishell$ "


class Shell:
    """A shell session: its variables and the status of the last command."""

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        source = os.environ if environ is None else environ
        self.env = Environment(f"{key}={value}" for key, value in source.items())
        self.status = 0

    def run_line(self, line: str) -> int:
        """Parse and run one line; return the new exit status.

        ``exit`` raises ShellExit. A line with no words sets the status to 2.
        """
        try:
            commands = parse_input(line, self.env, self.status)
        except ShellSyntaxError as exc:
            sys.stderr.write(f"minishell: {exc}\n")
            self.status = exc.status
            return self.status
        except HeredocInterrupted as exc:
            self.status = exc.status
            return self.status
        if not commands:
            self.status = 2
            return self.status
        first = commands[0]
        if (
            first.args
            and is_parent_only_builtin(first.args[0])
            and not first.pipe_to_next
            and not first.infile
            and not first.outfile
        ):
            self.status = run_builtin(first, self.env, self.status)
        else:
            self.status = execute_pipeline(commands, self.env, self.status)
        return self.status

    def loop(self, read_line: Callable[[str], str]) -> int:
        """Read and run lines until end of input or ``exit``; return the status.

        ``read_line`` is called with the prompt and raises EOFError at the end.
        """
        while True:
            try:
                line = read_line(PROMPT)
            except EOFError:
                sys.stdout.write("exit\n")
                return self.status
            except KeyboardInterrupt:
                sys.stdout.write("\n")
                self.status = 130
                continue
            try:
                self.run_line(line)
            except ShellExit as exc:
                return exc.status


def main(argv: Sequence[str] | None = None) -> int:
    """Run an interactive shell on the terminal; arguments are ignored."""
    try:
        import readline  # noqa: F401  (gives input() line editing and history)
    except ImportError:
        pass
    return Shell().loop(input)


if __name__ == "__main__":
    raise SystemExit(main())