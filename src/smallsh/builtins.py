"""Builtin commands — the three things the shell does itself.

    - ``cd [dir]`` — change the shell's working directory (``$HOME`` by
      default).  It has to be a builtin: a child's ``chdir`` would not
      affect the shell.
    - ``status`` — show how the last foreground command ended.
    - ``exit`` — terminate background jobs and leave the shell.

Each builtin returns the text to show, or ``""`` for nothing.
"""

import os
import signal
import time

from smallsh.config import DEFAULT_TERMINATE_GRACE
from smallsh.jobs import JobRegistry
from smallsh.spawner import describe_error
from smallsh.status import TerminationResult
from smallsh.system import System

CD = "cd"
STATUS = "status"
EXIT = "exit"

COMMENT_PREFIX = "#"

_POLL_INTERVAL = 0.02


def is_comment(word: str | None) -> bool:
    """Return True for blank lines and ``#`` comments."""
    return not word or word.startswith(COMMENT_PREFIX)


def change_directory(path: str | None) -> str:
    """Change to *path*, or to ``$HOME`` when no path is given.

    Returns:
        An error message, or ``""`` on success.

    """
    target = path if path is not None else os.environ.get("HOME", os.path.expanduser("~"))
    try:
        os.chdir(target)
    except OSError as e:
        return f"cd: {target}: {describe_error(e)}"
    return ""


def report_status(result: TerminationResult) -> str:
    """Return ``exit value N`` or ``terminated by signal N``."""
    return str(result)


def terminate_jobs(
    jobs: JobRegistry,
    system: System,
    *,
    grace: float = DEFAULT_TERMINATE_GRACE,
) -> list[tuple[int, TerminationResult]]:
    """Stop every background job, collect it, and clear *jobs*.

    Every job gets SIGTERM.  Jobs still running after *grace* seconds
    get SIGKILL, which cannot be caught or ignored, so ``exit`` never
    waits on a job that traps SIGTERM.

    Returns:
        ``(pid, result)`` for each job collected, in the order they
        were collected.

    """
    waiting: list[int] = []
    for job in jobs:
        try:
            system.kill(job.pid, signal.SIGTERM)
        except ProcessLookupError:
            continue
        waiting.append(job.pid)
    jobs.clear()

    collected: list[tuple[int, TerminationResult]] = []

    def _collect(pid: int, options: int) -> bool:
        """Wait on *pid*; return True once it is gone."""
        try:
            done, status = system.waitpid(pid, options)
        except ChildProcessError:
            return True
        if done == 0:
            return False
        collected.append((pid, TerminationResult.from_wait_status(status)))
        return True

    deadline = time.monotonic() + grace
    while waiting:
        waiting = [pid for pid in waiting if not _collect(pid, os.WNOHANG)]
        if not waiting or time.monotonic() >= deadline:
            break
        time.sleep(_POLL_INTERVAL)

    for pid in waiting:
        try:
            system.kill(pid, signal.SIGKILL)
        except ProcessLookupError:
            continue
        _collect(pid, 0)
    return collected
