"""Directive parser — pull redirections and ``&`` out of a word list.

The parser walks the tokens once, left to right, looking one token
ahead.  Three words are operators:

    - ``<`` *file* — read standard input from *file*.
    - ``>`` *file* — write standard output to *file*.
    - ``&`` as the very last word — run the command in the background.

Everything else is an argument and keeps its relative order.

Malformed directives are never an error.  An operator that is not
followed by a usable filename (end of line, another operator) is just
an ordinary argument, and an ``&`` anywhere but last is too.  A trailing
``&`` is always consumed; it only *takes effect* while background
execution is allowed, otherwise it is silently ignored.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

INPUT_OPERATOR = "<"
OUTPUT_OPERATOR = ">"
BACKGROUND_OPERATOR = "&"

RESERVED = frozenset({INPUT_OPERATOR, OUTPUT_OPERATOR, BACKGROUND_OPERATOR})


@dataclass(frozen=True)
class RedirectionSpec:
    """Files to attach to a command's standard streams."""

    stdin: str | None = None  # < file
    stdout: str | None = None  # > file


@dataclass(frozen=True)
class CommandSpec:
    """A parsed command line, ready for dispatch.

    Attributes:
        argv: Program name followed by its arguments.
        redirects: Where standard input and output should come from/go.
        background: True when the command should not be waited for.

    """

    argv: tuple[str, ...]
    redirects: RedirectionSpec = field(default_factory=RedirectionSpec)
    background: bool = False

    @property
    def program(self) -> str | None:
        """Return the first word, or None if nothing is left to run."""
        return self.argv[0] if self.argv else None

    @property
    def is_empty(self) -> bool:
        """Return True for blank lines and lines that were all directives."""
        return not self.program


def is_word(token: str | None) -> bool:
    """Return True if *token* can serve as a redirection filename."""
    return bool(token) and token not in RESERVED


def parse_directives(tokens: Iterable[str], *, background_allowed: bool) -> CommandSpec:
    """Build a ``CommandSpec`` from a stream of tokens.

    Args:
        tokens: Words from the tokenizer.  Consumed exactly once.
        background_allowed: Whether a trailing ``&`` may take effect.

    Returns:
        The reduced argument vector with its directives.

    """
    stream = iter(tokens)
    argv: list[str] = []
    stdin: str | None = None
    stdout: str | None = None
    background = False

    current = next(stream, None)
    while current is not None:
        lookahead = next(stream, None)

        if current == INPUT_OPERATOR and is_word(lookahead):
            stdin = lookahead
            current = next(stream, None)
            continue
        if current == OUTPUT_OPERATOR and is_word(lookahead):
            stdout = lookahead
            current = next(stream, None)
            continue

        if current == BACKGROUND_OPERATOR and lookahead is None:
            background = background_allowed
        else:
            argv.append(current)
        current = lookahead

    return CommandSpec(
        argv=tuple(argv),
        redirects=RedirectionSpec(stdin=stdin, stdout=stdout),
        background=background,
    )
