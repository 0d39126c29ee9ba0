"""Operating-system binding layer.

Every call the shell makes into the kernel to create, rewire, replace
or collect a process goes through a ``System`` object.  Production code
uses ``PosixSystem``, a thin pass-through to ``os`` and ``signal``;
tests hand the spawner and reaper a fake that scripts ``fork`` failures
or ``waitpid`` answers without touching real processes.

Why a Protocol instead of an ABC?
    Structural typing: a test fake only needs the right methods, not
    a base class.
"""

import os
import signal
from typing import NoReturn, Protocol

WRITE_TRUNCATE = os.O_WRONLY | os.O_CREAT | os.O_TRUNC
FILE_MODE = 0o666

STDIN_FILENO = 0
STDOUT_FILENO = 1


class System(Protocol):
    """Process primitives the shell depends on."""

    def getpid(self) -> int:
        """Return the calling process's id."""
        ...  # pragma: no cover

    def fork(self) -> int:
        """Create a child; return 0 in the child and its pid in the parent."""
        ...  # pragma: no cover

    def execvp(self, program: str, argv: list[str]) -> NoReturn:
        """Replace the process image, searching ``PATH`` for *program*."""
        ...  # pragma: no cover

    def waitpid(self, pid: int, options: int) -> tuple[int, int]:
        """Collect *pid*; return ``(pid, status)`` or ``(0, 0)`` if still running."""
        ...  # pragma: no cover

    def kill(self, pid: int, signum: int) -> None:
        """Send *signum* to *pid*."""
        ...  # pragma: no cover

    def redirect(self, path: str, flags: int, target_fd: int) -> None:
        """Open *path* with *flags* and make it *target_fd*."""
        ...  # pragma: no cover

    def restore_default(self, signum: int) -> None:
        """Reset *signum* to its default disposition."""
        ...  # pragma: no cover

    def write(self, fd: int, text: str) -> None:
        """Write *text* to *fd*, unbuffered."""
        ...  # pragma: no cover

    def exit(self, code: int) -> NoReturn:
        """Terminate immediately, skipping interpreter cleanup."""
        ...  # pragma: no cover


class PosixSystem:
    """``System`` backed by the real POSIX calls."""

    def getpid(self) -> int:
        """Return ``os.getpid()``."""
        return os.getpid()

    def fork(self) -> int:
        """Return ``os.fork()``."""
        return os.fork()

    def execvp(self, program: str, argv: list[str]) -> NoReturn:
        """Call ``os.execvp``; raises ``OSError`` if the program cannot run."""
        os.execvp(program, argv)  # noqa: S606

    def waitpid(self, pid: int, options: int) -> tuple[int, int]:
        """Return ``os.waitpid(pid, options)``."""
        return os.waitpid(pid, options)

    def kill(self, pid: int, signum: int) -> None:
        """Call ``os.kill``."""
        os.kill(pid, signum)

    def redirect(self, path: str, flags: int, target_fd: int) -> None:
        """Open *path* and ``dup2`` it over *target_fd*.

        Raises:
            OSError: If *path* cannot be opened.

        """
        fd = os.open(path, flags, FILE_MODE)
        if fd != target_fd:
            os.dup2(fd, target_fd)
            os.close(fd)

    def restore_default(self, signum: int) -> None:
        """Call ``signal.signal(signum, SIG_DFL)``."""
        signal.signal(signum, signal.SIG_DFL)

    def write(self, fd: int, text: str) -> None:
        """Write all of *text* to *fd* with ``os.write``."""
        data = text.encode()
        while data:
            written = os.write(fd, data)
            data = data[written:]

    def exit(self, code: int) -> NoReturn:
        """Call ``os._exit``."""
        os._exit(code)
