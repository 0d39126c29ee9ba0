"""Tests for the reaper.

The reaper polls each registered background job without blocking,
reports the ones that finished, and removes them from the registry.
"""

import io
import os
import signal
import time

from smallsh.jobs import JobRegistry
from smallsh.logging import Logger, LogLevel
from smallsh.reaper import reap_jobs
from smallsh.status import TerminationResult
from smallsh.system import PosixSystem


class _ScriptedSystem:
    """Answers ``waitpid`` from a table: pid -> raw status, None = running."""

    def __init__(self, statuses: dict[int, int | None]) -> None:
        self.statuses = statuses
        self.calls: list[tuple[int, int]] = []

    def waitpid(self, pid: int, options: int) -> tuple[int, int]:
        self.calls.append((pid, options))
        if pid not in self.statuses:
            raise ChildProcessError(10, "No child processes")
        status = self.statuses[pid]
        if status is None:
            return 0, 0
        return pid, status


def _registry(*pids: int) -> JobRegistry:
    jobs = JobRegistry()
    for pid in pids:
        jobs.add(pid)
    return jobs


class TestReapJobs:
    """Verify polling, reporting and removal."""

    def test_empty_registry(self) -> None:
        """Nothing registered means nothing reported."""
        out = io.StringIO()
        assert reap_jobs(JobRegistry(), _ScriptedSystem({}), out, Logger()) == []  # type: ignore[arg-type]
        assert out.getvalue() == ""

    def test_polls_without_blocking(self) -> None:
        """Every job is checked with WNOHANG."""
        system = _ScriptedSystem({1: None, 2: None})
        reap_jobs(_registry(1, 2), system, io.StringIO(), Logger())  # type: ignore[arg-type]
        assert system.calls == [(1, os.WNOHANG), (2, os.WNOHANG)]

    def test_running_jobs_left_alone(self) -> None:
        """A job still running stays registered and is not reported."""
        jobs = _registry(1)
        out = io.StringIO()
        assert reap_jobs(jobs, _ScriptedSystem({1: None}), out, Logger()) == []  # type: ignore[arg-type]
        assert jobs.pids() == [1]
        assert out.getvalue() == ""

    def test_finished_jobs_reported_and_removed(self) -> None:
        """Exit codes and signals are reported in registry order."""
        jobs = _registry(10, 20, 30)
        system = _ScriptedSystem({10: 0, 20: None, 30: int(signal.SIGKILL)})
        out = io.StringIO()
        reaped = reap_jobs(jobs, system, out, Logger())  # type: ignore[arg-type]
        assert reaped == [
            (10, TerminationResult(code=0)),
            (30, TerminationResult(code=int(signal.SIGKILL), signaled=True)),
        ]
        assert out.getvalue() == (
            "background pid 10 is done: exit value 0\n"
            f"background pid 30 is done: terminated by signal {int(signal.SIGKILL)}\n"
        )
        assert jobs.pids() == [20]

    def test_nonzero_exit(self) -> None:
        """A non-zero exit value is reported as such."""
        out = io.StringIO()
        reap_jobs(_registry(5), _ScriptedSystem({5: 2 << 8}), out, Logger())  # type: ignore[arg-type]
        assert out.getvalue() == "background pid 5 is done: exit value 2\n"

    def test_vanished_job_dropped_with_warning(self) -> None:
        """A pid the OS no longer knows is removed and logged."""
        jobs = _registry(99)
        logger = Logger()
        out = io.StringIO()
        assert reap_jobs(jobs, _ScriptedSystem({}), out, logger) == []  # type: ignore[arg-type]
        assert len(jobs) == 0
        assert out.getvalue() == ""
        (entry,) = [e for e in logger.entries if e.level >= LogLevel.WARNING]
        expected_pid = 99
        assert entry.pid == expected_pid


class TestReapRealProcess:
    """Verify reaping a real background child."""

    def test_eventually_reported(self) -> None:
        """A finished child is reported on a later poll."""
        pid = os.fork()
        if pid == 0:
            os._exit(4)
        jobs = _registry(pid)
        out = io.StringIO()
        deadline = time.monotonic() + 5
        reaped: list[tuple[int, TerminationResult]] = []
        while not reaped and time.monotonic() < deadline:
            reaped = reap_jobs(jobs, PosixSystem(), out, Logger())
            time.sleep(0.02)
        assert reaped == [(pid, TerminationResult(code=4))]
        assert out.getvalue() == f"background pid {pid} is done: exit value 4\n"
        assert len(jobs) == 0
