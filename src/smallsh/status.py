"""Termination results — how a child process ended.

A process ends one of two ways: it exits with a code (0-255), or a
signal kills it.  ``waitpid`` packs both cases into one integer; this
module unpacks it once so the rest of the shell never touches the
``WIF*`` macros.
"""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class TerminationResult:
    """Exit code or terminating signal of one process.

    Attributes:
        code: The exit code, or the signal number when ``signaled``.
        signaled: True if a signal terminated the process.

    """

    code: int = 0
    signaled: bool = False

    @classmethod
    def from_wait_status(cls, status: int) -> TerminationResult:
        """Decode a raw ``waitpid`` status.

        Args:
            status: The second element returned by ``os.waitpid``.

        Returns:
            The decoded result.

        Raises:
            ValueError: If *status* describes a process that has not
                terminated (stopped or continued).

        """
        if os.WIFEXITED(status):
            return cls(code=os.WEXITSTATUS(status))
        if os.WIFSIGNALED(status):
            return cls(code=os.WTERMSIG(status), signaled=True)
        msg = f"wait status {status:#x} is not a termination"
        raise ValueError(msg)

    def __str__(self) -> str:
        """Format as ``exit value N`` or ``terminated by signal N``."""
        if self.signaled:
            return f"terminated by signal {self.code}"
        return f"exit value {self.code}"
