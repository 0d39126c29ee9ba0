"""Tests for the builtin helpers."""

import os
import signal
import time

import pytest

from smallsh.builtins import is_comment, report_status, terminate_jobs
from smallsh.jobs import JobRegistry
from smallsh.status import TerminationResult
from smallsh.system import PosixSystem


class _KillRecorder:
    """Fake system recording kills; pid 2 has already gone."""

    def __init__(self) -> None:
        self.killed: list[tuple[int, int]] = []
        self.waited: list[int] = []

    def kill(self, pid: int, signum: int) -> None:
        if pid == 2:  # noqa: PLR2004
            raise ProcessLookupError
        self.killed.append((pid, signum))

    def waitpid(self, pid: int, _options: int) -> tuple[int, int]:
        self.waited.append(pid)
        return pid, int(signal.SIGTERM)


class TestIsComment:
    """Verify comment and blank-line detection."""

    @pytest.mark.parametrize("word", ["", None, "#", "#echo"])
    def test_comments(self, word: str | None) -> None:
        """Blank words and ``#`` prefixes are comments."""
        assert is_comment(word)

    def test_command(self) -> None:
        """A ``#`` later in the word does not count."""
        assert not is_comment("echo#")


class TestReportStatus:
    """Verify status text."""

    def test_formats(self) -> None:
        """Both result kinds format as the shell prints them."""
        assert report_status(TerminationResult(code=2)) == "exit value 2"
        assert report_status(TerminationResult(code=9, signaled=True)) == "terminated by signal 9"


class TestTerminateJobs:
    """Verify exit-time cleanup."""

    def test_signals_waits_and_clears(self) -> None:
        """Live jobs get SIGTERM and are collected; gone ones are skipped."""
        jobs = JobRegistry()
        for pid in (1, 2, 3):
            jobs.add(pid)
        system = _KillRecorder()
        collected = terminate_jobs(jobs, system)  # type: ignore[arg-type]
        assert [pid for pid, _result in collected] == [1, 3]
        assert system.killed == [(1, signal.SIGTERM), (3, signal.SIGTERM)]
        assert system.waited == [1, 3]
        assert len(jobs) == 0

    def test_real_child(self) -> None:
        """A real sleeping child is terminated and reaped."""
        pid = os.fork()
        if pid == 0:
            signal.pause()
            os._exit(0)
        jobs = JobRegistry()
        jobs.add(pid)
        assert terminate_jobs(jobs, PosixSystem()) == [(pid, TerminationResult(code=int(signal.SIGTERM), signaled=True))]
        with pytest.raises(ChildProcessError):
            os.waitpid(pid, os.WNOHANG)

    def test_job_ignoring_sigterm_is_killed(self) -> None:
        """A job that ignores SIGTERM gets SIGKILL once the grace period ends."""
        ready_r, ready_w = os.pipe()
        pid = os.fork()
        if pid == 0:
            signal.signal(signal.SIGTERM, signal.SIG_IGN)
            os.write(ready_w, b"x")
            os.execvp("sleep", ["sleep", "30"])  # noqa: S606
        os.close(ready_w)
        os.read(ready_r, 1)
        os.close(ready_r)
        jobs = JobRegistry()
        jobs.add(pid)
        started = time.monotonic()
        collected = terminate_jobs(jobs, PosixSystem(), grace=0.2)
        assert time.monotonic() - started < 5  # noqa: PLR2004
        assert collected == [(pid, TerminationResult(code=int(signal.SIGKILL), signaled=True))]
        assert len(jobs) == 0

    def test_zero_grace_still_collects(self) -> None:
        """With no grace period every survivor is killed and reaped."""
        pid = os.fork()
        if pid == 0:
            signal.signal(signal.SIGTERM, signal.SIG_IGN)
            signal.pause()
            os._exit(0)
        jobs = JobRegistry()
        jobs.add(pid)
        ((collected_pid, result),) = terminate_jobs(jobs, PosixSystem(), grace=0)
        assert collected_pid == pid
        assert result.signaled
        with pytest.raises(ChildProcessError):
            os.waitpid(pid, os.WNOHANG)
