"""Tokenizer — split one input line into words.

The shell's word splitting is deliberately simple: no quoting, no
escapes, no globbing.  Words are separated by runs of spaces and tabs.
The one expansion is ``$$``, which becomes the shell's own process id
wherever it appears, including in the middle of a longer word
(``log.$$`` → ``log.4242``).
"""

import re
from collections.abc import Iterator

PID_MARKER = "$$"

_WORD = re.compile(r"[^ \t]+")


def expand_pid(line: str, pid: int) -> str:
    """Replace every ``$$`` in *line* with *pid*, left to right."""
    return line.replace(PID_MARKER, str(pid))


def tokenize(line: str, pid: int) -> Iterator[str]:
    """Yield the words of *line*, after ``$$`` expansion.

    A line with nothing but whitespace yields one empty token so the
    dispatcher can recognise it as "no command".

    Args:
        line: One line of input without its line terminator.
        pid: The process id substituted for ``$$``.

    Yields:
        Each word in order.

    """
    expanded = expand_pid(line, pid)
    if not expanded.strip(" \t"):
        yield ""
        return
    for match in _WORD.finditer(expanded):
        yield match.group()
