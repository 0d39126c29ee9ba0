"""Mode controller — the SIGTSTP toggle and the SIGINT shield.

The shell gives two terminal signals its own meaning:

    - **SIGTSTP** (Ctrl-Z) does not stop the shell.  It flips between
      *normal* mode, where a trailing ``&`` runs a command in the
      background, and *foreground-only* mode, where ``&`` is ignored.
    - **SIGINT** (Ctrl-C) does nothing to the shell.  The terminal
      delivers it to the whole foreground process group, so a running
      foreground child still gets it and dies the usual way.

Every flip is announced to the user exactly once.  When the shell is
sitting at the prompt the handler writes the message straight away.
When a foreground job is running the handler stays quiet; the message
is picked up by ``pending_notification()`` the next time a prompt is
about to be shown, so it never interleaves with the child's output.

Design choices:
    - **Handlers only flip state and write.**  They may interrupt the
      main loop anywhere, so they touch nothing but the mode, the
      announced marker and an unbuffered ``os.write``.
    - **Data-driven messages** — ``MODE_MESSAGES`` maps each mode to its
      announcement instead of an if/else in the handler.
    - **Two markers, not a "pending" flag.**  ``_mode`` is what the
      handler set; ``_announced`` is what the user was last told.  A
      notification is due exactly when they differ, so two quick flips
      during one foreground job correctly announce nothing.
"""

from __future__ import annotations

import signal
from collections.abc import Iterator
from contextlib import contextmanager
from enum import StrEnum
from types import FrameType

from smallsh.config import DEFAULT_PROMPT
from smallsh.system import STDOUT_FILENO, PosixSystem, System

SUSPEND_SIGNAL = signal.SIGTSTP
INTERRUPT_SIGNAL = signal.SIGINT
RESUME_SIGNAL = signal.SIGCONT

CHILD_DEFAULT_SIGNALS: tuple[signal.Signals, ...] = (
    SUSPEND_SIGNAL,
    signal.SIGPIPE,
    signal.SIGXFSZ,
)
"""Signals a launched program gets back at their default disposition.

The shell handles SIGTSTP itself.  The interpreter ignores SIGPIPE and
SIGXFSZ from startup, and an ignored signal stays ignored across
``execvp``.
"""


class BackgroundMode(StrEnum):
    """Whether a trailing ``&`` takes effect."""

    NORMAL = "normal"
    FOREGROUND_ONLY = "foreground-only"

    def toggled(self) -> BackgroundMode:
        """Return the other mode."""
        if self is BackgroundMode.NORMAL:
            return BackgroundMode.FOREGROUND_ONLY
        return BackgroundMode.NORMAL


MODE_MESSAGES: dict[BackgroundMode, str] = {
    BackgroundMode.FOREGROUND_ONLY: "Entering foreground-only mode (& is now ignored)",
    BackgroundMode.NORMAL: "Exiting foreground-only mode",
}
"""Announcement shown when the shell switches *into* each mode."""


class ModeController:
    """Owns the background mode and the foreground-running indicator."""

    def __init__(
        self,
        *,
        system: System | None = None,
        fd: int = STDOUT_FILENO,
        prompt: str = DEFAULT_PROMPT,
    ) -> None:
        """Create a controller in normal mode.

        Args:
            system: OS binding used for the handler's unbuffered write.
            fd: File descriptor immediate notifications are written to.
            prompt: Re-printed after an immediate notification, since the
                user was sitting at one when the signal arrived.

        """
        self._system = system or PosixSystem()
        self._fd = fd
        self._prompt = prompt
        self._mode = BackgroundMode.NORMAL
        self._announced = BackgroundMode.NORMAL
        self._foreground_running = False

    @property
    def mode(self) -> BackgroundMode:
        """Return the current mode."""
        return self._mode

    @property
    def background_allowed(self) -> bool:
        """Return True if a trailing ``&`` should take effect."""
        return self._mode is BackgroundMode.NORMAL

    @property
    def foreground_running(self) -> bool:
        """Return True while the spawner is blocked on a foreground job."""
        return self._foreground_running

    def install(self) -> None:
        """Register the SIGTSTP and SIGINT handlers for this process."""
        signal.signal(SUSPEND_SIGNAL, self.on_suspend)
        signal.signal(INTERRUPT_SIGNAL, self.on_interrupt)

    def on_suspend(self, _signum: int, _frame: FrameType | None) -> None:
        """Flip the mode; announce now unless a foreground job is running."""
        self._mode = self._mode.toggled()
        if self._foreground_running:
            return
        self._system.write(self._fd, f"\n{MODE_MESSAGES[self._mode]}\n{self._prompt}")
        self._announced = self._mode

    def on_interrupt(self, _signum: int, _frame: FrameType | None) -> None:
        """Ignore the interrupt; the foreground child receives its own copy."""

    def pending_notification(self) -> str | None:
        """Return the deferred announcement, once, or None if nothing changed."""
        if self._mode is self._announced:
            return None
        self._announced = self._mode
        return MODE_MESSAGES[self._mode]

    @contextmanager
    def foreground_job(self) -> Iterator[None]:
        """Mark a foreground job as running for the duration of the block."""
        self._foreground_running = True
        try:
            yield
        finally:
            self._foreground_running = False
