"""The shell — per-line command dispatch.

``Shell`` owns the state that lives across lines: the job registry,
the result of the last foreground command, and the mode controller.
The REPL drives it with two calls per iteration:

    1. ``reap()`` — report background jobs that finished since last time.
    2. ``execute(line)`` — tokenize, parse directives, then run a
       builtin or hand the command to the spawner.

Design choices:
    - **Command dispatch via a dict.**  Adding a builtin means one
      method and one entry.
    - **No per-line flags to reset.**  Redirections and the background
      bit travel in an immutable ``CommandSpec`` built fresh for every
      line, so nothing from one line can leak into the next.
    - **Output goes to a stream, flushed immediately.**  Messages must
      appear in order with the output of child processes that share the
      same terminal.
"""

import sys
from collections.abc import Callable
from typing import TextIO

from smallsh.builtins import (
    CD,
    EXIT,
    STATUS,
    change_directory,
    is_comment,
    report_status,
    terminate_jobs,
)
from smallsh.config import ShellConfig
from smallsh.directives import CommandSpec, parse_directives
from smallsh.jobs import JobRegistry
from smallsh.logging import Logger, LogLevel
from smallsh.reaper import reap_jobs
from smallsh.signals import ModeController
from smallsh.spawner import ProcessSpawner
from smallsh.status import TerminationResult
from smallsh.system import PosixSystem, System
from smallsh.tokenizer import tokenize

# Type alias for a builtin handler: takes the parsed command, returns output.
_Handler = Callable[[CommandSpec], str]

_SOURCE = "shell"


class Shell:
    """Command interpreter for one interactive session."""

    def __init__(
        self,
        *,
        config: ShellConfig | None = None,
        system: System | None = None,
        mode: ModeController | None = None,
        out: TextIO | None = None,
        logger: Logger | None = None,
    ) -> None:
        """Create a shell with an empty job registry.

        Args:
            config: Startup settings.
            system: OS binding (``PosixSystem`` by default).
            mode: Background mode controller; one is created if omitted.
            out: Stream for user-visible messages (``sys.stdout`` by default).
            logger: Event log; one is created if omitted.

        """
        self._config = config or ShellConfig()
        self._system = system or PosixSystem()
        self._mode = mode or ModeController(system=self._system, prompt=self._config.prompt)
        self._out = out or sys.stdout
        self._logger = logger or Logger()
        self._pid = self._system.getpid()
        self._jobs = JobRegistry(self._config.initial_job_capacity)
        self._last_result = TerminationResult()
        self._running = True
        self._spawner = ProcessSpawner(
            system=self._system,
            jobs=self._jobs,
            mode=self._mode,
            out=self._out,
            logger=self._logger,
            config=self._config,
        )

        self._commands: dict[str, _Handler] = {
            CD: self._cmd_cd,
            STATUS: self._cmd_status,
            EXIT: self._cmd_exit,
        }

    @property
    def pid(self) -> int:
        """Return the shell's own process id (the value of ``$$``)."""
        return self._pid

    @property
    def config(self) -> ShellConfig:
        """Return the shell's settings."""
        return self._config

    @property
    def mode(self) -> ModeController:
        """Return the background mode controller."""
        return self._mode

    @property
    def jobs(self) -> JobRegistry:
        """Return the background job registry."""
        return self._jobs

    @property
    def logger(self) -> Logger:
        """Return the event log."""
        return self._logger

    @property
    def last_result(self) -> TerminationResult:
        """Return how the last foreground command ended."""
        return self._last_result

    @property
    def running(self) -> bool:
        """Return False once ``exit`` has run."""
        return self._running

    def parse(self, line: str) -> CommandSpec:
        """Turn one raw line into a ``CommandSpec`` under the current mode."""
        return parse_directives(
            tokenize(line, self._pid),
            background_allowed=self._mode.background_allowed,
        )

    def reap(self) -> list[tuple[int, TerminationResult]]:
        """Report and unregister finished background jobs."""
        return reap_jobs(self._jobs, self._system, self._out, self._logger)

    def announce_mode_change(self) -> None:
        """Print a mode change the signal handler had to hold back."""
        message = self._mode.pending_notification()
        if message is None:
            return
        self._logger.log(LogLevel.INFO, f"mode is now {self._mode.mode}", source="mode")
        self._write(message)

    def execute(self, line: str) -> bool:
        """Run one line of input.

        Args:
            line: The raw line, without its terminator.

        Returns:
            False if the line was ``exit`` and the session is over.

        """
        command = self.parse(line)
        if is_comment(command.program):
            return self._running

        handler = self._commands.get(command.program or "")
        if handler is not None:
            self._logger.log(LogLevel.DEBUG, "builtin", source=_SOURCE, command=command.argv)
            output = handler(command)
            if output:
                self._write(output)
            return self._running

        result = self._spawner.spawn(command)
        if result is not None:
            self._last_result = result
        return self._running

    def shutdown(self) -> list[tuple[int, TerminationResult]]:
        """Terminate background jobs and mark the session finished.

        Returns:
            ``(pid, result)`` for each job collected on the way out.

        """
        collected = terminate_jobs(self._jobs, self._system, grace=self._config.terminate_grace)
        for pid, result in collected:
            self._logger.log(LogLevel.INFO, "terminated at exit", source=_SOURCE, pid=pid, result=result)
        self._running = False
        return collected

    def _write(self, message: str) -> None:
        self._out.write(f"{message}\n")
        self._out.flush()

    # -- Builtins -------------------------------------------------------------

    def _cmd_cd(self, command: CommandSpec) -> str:
        """Change directory to the first argument, or $HOME."""
        path = command.argv[1] if len(command.argv) > 1 else None
        return change_directory(path)

    def _cmd_status(self, _command: CommandSpec) -> str:
        """Show how the last foreground command ended."""
        return report_status(self._last_result)

    def _cmd_exit(self, _command: CommandSpec) -> str:
        """Terminate background jobs and end the session."""
        self.shutdown()
        return ""
