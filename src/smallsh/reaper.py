"""Reaper — collect background jobs that have finished.

A finished child stays a zombie until its parent waits for it.  The
shell never blocks on background jobs; instead, once per loop
iteration and before the next prompt, it asks the kernel about each
registered job with ``waitpid(pid, WNOHANG)``.  Jobs that have ended
are reported and dropped from the registry; the rest are left alone and
asked about again next time.

This is the only place a background job's outcome reaches the user.
A job that finishes while another command is running is reported at
the start of the following iteration, never in the middle of it.
"""

import os
from typing import TextIO

from smallsh.jobs import Job, JobRegistry
from smallsh.logging import Logger, LogLevel
from smallsh.status import TerminationResult
from smallsh.system import System

_SOURCE = "reaper"


def reap_jobs(
    jobs: JobRegistry,
    system: System,
    out: TextIO,
    logger: Logger,
) -> list[tuple[int, TerminationResult]]:
    """Report and unregister every background job that has terminated.

    Args:
        jobs: The registry to sweep.
        system: OS binding used for the non-blocking wait.
        out: Stream the completion messages are written to.
        logger: Event log.

    Returns:
        ``(pid, result)`` for each job reaped, in registry order.

    """
    reaped: list[tuple[int, TerminationResult]] = []

    def _check(job: Job) -> None:
        try:
            pid, status = system.waitpid(job.pid, os.WNOHANG)
        except ChildProcessError:
            logger.log(LogLevel.WARNING, "job vanished before it was reaped", source=_SOURCE, pid=job.pid)
            jobs.remove(job.pid)
            return
        if pid == 0:
            return
        result = TerminationResult.from_wait_status(status)
        out.write(f"background pid {job.pid} is done: {result}\n")
        out.flush()
        logger.log(LogLevel.INFO, "reaped", source=_SOURCE, pid=job.pid, result=result)
        jobs.remove(job.pid)
        reaped.append((job.pid, result))

    jobs.for_each(_check)
    return reaped
