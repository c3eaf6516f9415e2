# minishell

A small interactive command shell. It reads one line at a time, splits it
into words with single and double quotes, expands `$NAME` and `$?`, and runs
the result as a pipeline of builtins and programs found on `PATH`.

## Running

```
minishell
```

The prompt is `minishell$ `. Line editing and history come from Python's
`readline` module where it is available. Command-line arguments are ignored.
End input (Ctrl-D) to leave; the shell prints `exit` and returns the status of
the last command. Ctrl-C at the prompt starts a fresh line and sets the status
to 130.

## What it understands

- Pipes: `ls | wc -l`
- Redirections: `< file`, `> file`, `>> file`. When a command names several
  output files, the earlier ones are still created (and truncated).
- Here-documents: `cat << END` reads lines, with the prompt `heredoc> `, until
  a line holding only `END`. Variables in those lines are expanded (`$?` gives
  0 there). Ending input before the delimiter sets the status to 1, Ctrl-C to
  130.
- Quotes: text in single quotes is kept as it is; text in double quotes has
  variables expanded but keeps its spaces. Outside quotes an expanded value
  has leading whitespace dropped and runs of whitespace squeezed to one space.
- Variables: `$NAME` and `$?` (status of the last command). `$0` prints
  `Minishell` and expands to nothing. Unknown names expand to nothing, and a
  word that expands to nothing is dropped.

Syntax errors (a leading `|`, `| |`, a redirection with no target) are
reported on standard error and set the status to 2, as does an empty line.

## Builtins

| Command  | Effect |
|----------|--------|
| `echo [-n] args...` | print the arguments; leading arguments beginning with `-n` drop the newline |
| `cd [dir]` | change directory; no argument uses `HOME`, an argument beginning with `-` uses `OLDPWD`, both read from the process environment; `PWD` is updated if it exists |
| `pwd` | print the working directory |
| `env` | print the variables; fails when `PATH` is not set |
| `export NAME=value`, `export NAME+=more` | set or extend a variable; with no arguments, list all sorted as `declare -x` |
| `unset NAME...` | remove variables, stopping at the first name not found |
| `exit [n]` | leave the shell with status `n` modulo 256 |

`cd`, `exit`, `unset` and `export` change the shell itself only when they are
the first command of a line with no pipe and no redirection. Anywhere else a
builtin runs on a copy of the variables and changes nothing; `exit` inside a
pipeline does nothing.

## Using it from Python

```python
from minishell.shell import Shell

shell = Shell({"PATH": "/usr/bin:/bin", "HOME": "/tmp"})
shell.run_line("export GREETING=hello")
shell.run_line("echo $GREETING | tr a-z A-Z")
print(shell.status)
```

`Shell.run_line` returns the new status and raises
`minishell.builtins.ShellExit` for `exit`; `Shell.loop` takes a function that
reads a line given the prompt and raises `EOFError` at the end.

The pieces can be used on their own:

- `minishell.lexer.tokenize` splits and expands a line;
  `minishell.lexer.tokenize_input` splits it into typed `Token`s without
  expanding.
- `minishell.parser.parse_input` turns a line into a list of
  `minishell.parser.Command` objects without running anything, and
  `format_commands` describes them.
- `minishell.executor.execute_pipeline` runs a list of commands and returns
  the status; `find_command` searches `PATH`.
- `minishell.environment.Environment` holds the variables in order.
- `minishell.heredoc.read_heredoc` and `write_heredoc` read a here-document
  into a string or a file.

## What it does not do

- No `;`, `&&`, `||`, background jobs, job control, subshells or globbing.
- No backslash escapes.
- It does not run script files; it only reads lines interactively.
- When any quoted text on a line is non-empty, `|`, `<`, `>`, `>>` and `<<`
  on that line are passed as plain arguments rather than acted on.
- A variable exported without a value hides every variable defined after it
  from expansion, from `env` and from the programs the shell starts.
- `unset` and updates by `export` affect the first variable whose name begins
  with the given name.

## Tests

```
pip install -e .[test]
pytest
```