"""Shell environment variables kept in definition order."""

from __future__ import annotations

from dataclasses import dataclass
from itertools import takewhile
from typing import Iterable, Iterator


@dataclass
class _Variable:
    key: str
    value: str | None


def split_assignment(text: str) -> tuple[str, str | None]:
    """Split ``KEY=VALUE`` at the first '='; the value is None without one."""
    key, sep, value = text.partition("=")
    return key, (value if sep else None)


def split_append(text: str) -> tuple[str, str | None]:
    """Split ``KEY+=VALUE`` into the key and the text after ``+=``.

    Without a '+' the whole text is the key and the value is None.
    """
    key, sep, rest = text.partition("+")
    if not sep:
        return text, None
    return key, rest[1:]


def lookup_in_lines(key: str, lines: Iterable[str] | None) -> str | None:
    """Find the value of ``key`` (up to any '=') among ``KEY=VALUE`` lines."""
    if key is None or lines is None:
        return None
    prefix = key.split("=", 1)[0] + "="
    for line in lines:
        if line.startswith(prefix):
            return line[len(prefix):]
    return None


class Environment:
    """Ordered collection of shell variables; a value may be unset (None).

    Updates and removals address the first variable whose name begins
    with the given key, as the shell has always done.
    """

    def __init__(self, entries: Iterable[str] = ()) -> None:
        self._vars = [_Variable(*split_assignment(entry)) for entry in entries]

    def __iter__(self) -> Iterator[tuple[str, str | None]]:
        return ((var.key, var.value) for var in self._vars)

    def __len__(self) -> int:
        return len(self._vars)

    def _find(self, key: str) -> _Variable | None:
        return next((var for var in self._vars if var.key.startswith(key)), None)

    def get(self, key: str) -> str | None:
        """Return the value of the variable named exactly ``key``."""
        return next((var.value for var in self._vars if var.key == key), None)

    def set(self, key: str, value: str | None) -> None:
        """Replace the first matching variable, or add a new one at the end."""
        var = self._find(key)
        if var is None:
            self._vars.append(_Variable(key, value))
        else:
            var.key = key
            var.value = value

    def append(self, key: str, value: str) -> None:
        """Append ``value`` to the first matching variable, if there is one.

        A variable that has no value stays without one.
        """
        var = self._find(key)
        if var is None:
            return
        var.value = None if var.value is None else var.value + value

    def unset(self, key: str) -> bool:
        """Remove the first matching variable; report whether one was removed."""
        var = self._find(key)
        if var is None:
            return False
        self._vars.remove(var)
        return True

    def assign(self, text: str) -> None:
        """Apply a ``KEY=VALUE`` (or bare ``KEY``) assignment."""
        self.set(*split_assignment(text))

    def append_assignment(self, text: str) -> None:
        """Apply a ``KEY+=VALUE`` assignment."""
        key, value = split_append(text)
        if value is None:
            raise ValueError(f"not an append assignment: {text!r}")
        self.append(key, value)

    def lines(self) -> list[str]:
        """``KEY=VALUE`` lines, up to the first variable that has no value."""
        return [
            f"{var.key}={var.value}"
            for var in takewhile(lambda var: var.value is not None, self._vars)
        ]

    def path(self) -> str | None:
        """The value of PATH."""
        return self.get("PATH")