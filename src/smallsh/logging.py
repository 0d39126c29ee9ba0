"""Job history — what happened to every command the shell ran.

Each job leaves a trail: it was started (with its argument vector), it
finished in the foreground or was reaped in the background (with its
``TerminationResult``), or it was still around at ``exit`` and had to
be terminated.  Around those sit the shell's own events: a mode flip,
a fork that failed, a terminal read that failed.

Nothing here is printed.  User-visible messages go to stdout from the
components themselves.  When ``SMALLSH_LOG`` names a file, ``repl.run()``
writes the history there as the shell leaves, keeping only entries at
or above ``SMALLSH_LOG_LEVEL``.  A dumped line reads::

    INFO spawner[4242]: started `sleep 5`
    INFO reaper[4242]: reaped -> exit value 0

Signal handlers never log; appending to a list is not something a
handler should do to the code it interrupted.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

    from smallsh.status import TerminationResult


class LogLevel(IntEnum):
    """Severity of a history entry; compares with ``<``."""

    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3


@dataclass(frozen=True)
class LogEntry:
    """One event in the shell's history.

    Attributes:
        level: The severity of this event.
        message: What happened ("started", "reaped", ...).
        source: The component that saw it ("spawner", "reaper", ...).
        pid: The job the event is about (0 = the shell itself).
        command: The job's argument vector, when known.
        result: How the job ended, once it has.

    """

    level: LogLevel
    message: str
    source: str
    pid: int = 0
    command: tuple[str, ...] = ()
    result: TerminationResult | None = None

    def __str__(self) -> str:
        """Format as ``LEVEL source[pid]: message `argv` -> result``."""
        who = f"{self.source}[{self.pid}]" if self.pid else self.source
        text = f"{self.level.name} {who}: {self.message}"
        if self.command:
            text += f" `{' '.join(self.command)}`"
        if self.result is not None:
            text += f" -> {self.result}"
        return text


class Logger:
    """Append-only history of one shell session."""

    def __init__(self) -> None:
        """Create an empty history."""
        self._entries: list[LogEntry] = []

    @property
    def entries(self) -> list[LogEntry]:
        """Return all entries in the order they were recorded."""
        return list(self._entries)

    def log(
        self,
        level: LogLevel,
        message: str,
        *,
        source: str,
        pid: int = 0,
        command: tuple[str, ...] = (),
        result: TerminationResult | None = None,
    ) -> None:
        """Record one event.

        Args:
            level: Severity of the event.
            message: What happened.
            source: Component that saw it.
            pid: Job the event is about.
            command: The job's argument vector.
            result: How the job ended.

        """
        self._entries.append(
            LogEntry(
                level=level,
                message=message,
                source=source,
                pid=pid,
                command=command,
                result=result,
            )
        )

    def dump(self, path: Path, *, min_level: LogLevel = LogLevel.DEBUG) -> None:
        """Write entries at or above *min_level* to *path*, one per line."""
        lines = [f"{entry}\n" for entry in self._entries if entry.level >= min_level]
        path.write_text("".join(lines), encoding="utf-8")
