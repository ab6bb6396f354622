"""Text helpers used when rendering help output and shell completions."""

from __future__ import annotations

import os
from typing import Any, Iterable, Sequence, TextIO


def lexicographic_less(i: str, j: str) -> bool:
    """Compare two strings alphabetically, ignoring case first and then honouring it."""
    for ic, jc in zip(i, j):
        li, lj = ic.lower(), jc.lower()
        if li != lj:
            return li < lj
        if ic != jc:
            return ic < jc
    return i < j


def subtract(a: int, b: int) -> int:
    """Return ``a - b``."""
    return a - b


def indent(spaces: int, v: str) -> str:
    """Indent every line of ``v`` by ``spaces`` blanks."""
    pad = " " * spaces
    return pad + v.replace("\n", "\n" + pad)


def nindent(spaces: int, v: str) -> str:
    """Like :func:`indent`, preceded by a newline."""
    return "\n" + indent(spaces, v)


def wrap(input: str, offset: int, wrap_at: int) -> str:
    """Wrap each line of ``input`` at ``wrap_at`` columns, continuing lines at ``offset``."""
    padding = " " * offset
    out: list[str] = []
    for index, line in enumerate(input.split("\n")):
        if not line:
            out.append(line)
            continue
        wrapped = wrap_line(line, offset, wrap_at, padding)
        out.append(wrapped if index == 0 else padding + wrapped)
    return "\n".join(out)


def wrap_line(input: str, offset: int, wrap_at: int, padding: str) -> str:
    """Wrap a single line on word boundaries, prefixing continuation lines with ``padding``."""
    if wrap_at <= offset or len(input) <= wrap_at - offset:
        return input

    line_width = wrap_at - offset
    words = input.split()
    if not words:
        return input

    wrapped = words[0]
    space_left = line_width - len(wrapped)
    for word in words[1:]:
        if len(word) + 1 > space_left:
            wrapped += "\n" + padding + word
            space_left = line_width - len(word)
        else:
            wrapped += " " + word
            space_left -= 1 + len(word)
    return wrapped


def offset(input: str, fixed: int) -> int:
    """Return the length of ``input`` plus ``fixed``."""
    return len(input) + fixed


def offset_names(name_groups: Iterable[Sequence[str]], fixed: int) -> int:
    """Width of the widest comma-joined group of names, plus ``fixed``."""
    widest = max((len(", ".join(names)) for names in name_groups), default=0)
    return widest + fixed


def cli_arg_contains(flag_name: str, args: Sequence[str]) -> bool:
    """Tell whether any of the comma-separated flag names appears in ``args`` as a flag."""
    for name in flag_name.split(","):
        name = name.strip()
        dashes = "-" * min(len(name), 2)
        if dashes + name in args:
            return True
    return False


def _is_hidden_bool(flag: Any) -> bool:
    if not getattr(flag, "hidden", False):
        return False
    takes_value = getattr(flag, "takes_value", None)
    return callable(takes_value) and not takes_value()


def print_flag_suggestions(
    last_arg: str,
    flags: Iterable[Any],
    writer: TextIO,
    shell: str | None = None,
) -> None:
    """Write completion candidates for the flags matching ``last_arg``."""
    if shell is None:
        shell = os.environ.get("SHELL", "")
    zsh = shell.endswith("zsh")
    cur = last_arg.lstrip("-")

    for flag in flags:
        if _is_hidden_bool(flag):
            continue

        usage = getattr(flag, "usage", "") or ""
        name = list(flag.names())[0].strip()
        count = min(len(name), 2)
        if last_arg.startswith("--") and count == 1:
            continue
        if name.startswith(cur) and cur != name:
            completion = "-" * count + name
            if usage and zsh:
                completion = f"{completion}:{usage}"
            writer.write(completion + "\n")