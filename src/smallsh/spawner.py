"""Process spawner — fork, redirect, exec, and maybe wait.

Running an external command is the classic Unix three-step:

    1. **fork** — duplicate the shell.  The parent gets the child's pid,
       the child gets 0.
    2. **redirect + exec** — in the child, point fd 0 / fd 1 at the
       requested files (or at the null device for a background job that
       asked for nothing), then replace the program image with
       ``execvp``, which searches ``PATH``.
    3. **wait or detach** — a foreground parent blocks in ``waitpid``
       until that child terminates and records how it ended.  A
       background parent announces the pid and hands it to the job
       registry for the reaper to collect later.

Failures stay inside the command that caused them.  A file that will
not open or a program that will not exec is reported by the child,
which then exits with ``EXIT_FAILURE``.  A failed fork is reported by
the parent and leaves the last foreground result untouched.

The child never returns into the interpreter: whatever happens between
fork and exec, it leaves through ``System.exit``.

A foreground child keeps the default SIGTSTP action, so a Ctrl-Z typed
at the terminal stops it along with the rest of the process group.
The shell has no job control for stopped jobs; the foreground wait
notices the stop and resumes the child with SIGCONT instead of waiting
forever for a termination that will not come.
"""

import os
from typing import NoReturn, TextIO

from smallsh.config import ShellConfig
from smallsh.directives import CommandSpec
from smallsh.jobs import JobRegistry
from smallsh.logging import Logger, LogLevel
from smallsh.signals import CHILD_DEFAULT_SIGNALS, RESUME_SIGNAL, ModeController
from smallsh.status import TerminationResult
from smallsh.system import STDIN_FILENO, STDOUT_FILENO, WRITE_TRUNCATE, System

EXIT_FAILURE = 1

_SOURCE = "spawner"


def describe_error(error: OSError) -> str:
    """Return the OS reason for *error* with its first letter lower-cased."""
    reason = error.strerror or str(error)
    return reason[:1].lower() + reason[1:]


class ProcessSpawner:
    """Launch external programs for the shell."""

    def __init__(
        self,
        *,
        system: System,
        jobs: JobRegistry,
        mode: ModeController,
        out: TextIO,
        logger: Logger,
        config: ShellConfig | None = None,
    ) -> None:
        """Create a spawner.

        Args:
            system: OS binding for fork/exec/wait.
            jobs: Registry that receives background pids.
            mode: Controller told when a foreground wait is in progress.
            out: Stream for the parent's messages; flushed after each write.
            logger: Event log.
            config: Shell settings (null device path).

        """
        self._system = system
        self._jobs = jobs
        self._mode = mode
        self._out = out
        self._logger = logger
        self._config = config or ShellConfig()

    def spawn(self, command: CommandSpec) -> TerminationResult | None:
        """Run *command* in a new process.

        Args:
            command: A non-empty parsed command.

        Returns:
            The foreground child's result, or None for a background job
            or a failed fork.

        """
        try:
            pid = self._system.fork()
        except OSError as e:
            self._say(f"fork() failed: {describe_error(e)}")
            self._logger.log(
                LogLevel.ERROR,
                f"fork failed: {describe_error(e)}",
                source=_SOURCE,
                command=command.argv,
            )
            return None

        if pid == 0:
            self._run_child(command)

        if command.background:
            self._logger.log(LogLevel.INFO, "started in background", source=_SOURCE, pid=pid, command=command.argv)
            self._say(f"background pid is {pid}")
            self._jobs.add(pid)
            return None
        self._logger.log(LogLevel.INFO, "started", source=_SOURCE, pid=pid, command=command.argv)
        return self._wait_foreground(pid, command)

    def _wait_foreground(self, pid: int, command: CommandSpec) -> TerminationResult:
        """Block until *pid* terminates and decode how it ended.

        A stop (Ctrl-Z reaching the whole process group) is answered
        with SIGCONT, and the wait goes on.
        """
        with self._mode.foreground_job():
            while True:
                _, status = self._system.waitpid(pid, os.WUNTRACED)
                if not os.WIFSTOPPED(status):
                    break
                self._logger.log(
                    LogLevel.WARNING,
                    f"stopped by signal {os.WSTOPSIG(status)}, resuming",
                    source=_SOURCE,
                    pid=pid,
                )
                self._system.kill(pid, RESUME_SIGNAL)
        result = TerminationResult.from_wait_status(status)
        self._logger.log(LogLevel.INFO, "finished", source=_SOURCE, pid=pid, command=command.argv, result=result)
        if result.signaled:
            self._say(str(result))
        return result

    def _run_child(self, command: CommandSpec) -> NoReturn:
        """Set up the child's streams and exec; never returns."""
        system = self._system
        try:
            for signum in CHILD_DEFAULT_SIGNALS:
                system.restore_default(signum)
            if not self._attach_streams(command):
                system.exit(EXIT_FAILURE)
            argv = list(command.argv)
            try:
                system.execvp(argv[0], argv)
            except OSError as e:
                system.write(STDOUT_FILENO, f"{argv[0]}: {describe_error(e)}\n")
        finally:
            system.exit(EXIT_FAILURE)

    def _attach_streams(self, command: CommandSpec) -> bool:
        """Wire fd 0 and fd 1 for *command*; return False after reporting a failure."""
        redirects = command.redirects
        null_device = self._config.null_device

        stdin = redirects.stdin or (null_device if command.background else None)
        if stdin is not None:
            try:
                self._system.redirect(stdin, os.O_RDONLY, STDIN_FILENO)
            except OSError:
                self._system.write(STDOUT_FILENO, f"cannot open {stdin} for input\n")
                return False

        if redirects.stdout is not None:
            flags, stdout = WRITE_TRUNCATE, redirects.stdout
        elif command.background:
            flags, stdout = os.O_WRONLY, null_device
        else:
            return True
        try:
            self._system.redirect(stdout, flags, STDOUT_FILENO)
        except OSError:
            self._system.write(STDOUT_FILENO, f"cannot open {stdout} for output\n")
            return False
        return True

    def _say(self, message: str) -> None:
        """Write one line from the parent and flush it."""
        self._out.write(f"{message}\n")
        self._out.flush()
