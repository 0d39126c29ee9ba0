"""Shell configuration.

Everything tunable about the shell lives in one frozen dataclass that
is built once at startup and handed to the components that need it.
There are no configuration files; the only outside influence is a
few environment variables read by ``ShellConfig.from_environ``:

- ``SMALLSH_PROMPT`` — the prompt string (default ``:``).
- ``SMALLSH_LOG`` — a path the job history is written to at shutdown.
- ``SMALLSH_LOG_LEVEL`` — the lowest level written there (default
  ``INFO``).  Unknown names fall back to the default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from smallsh.logging import LogLevel

if TYPE_CHECKING:
    from collections.abc import Mapping

DEFAULT_PROMPT = ":"
DEFAULT_JOB_CAPACITY = 10
DEFAULT_LOG_LEVEL = LogLevel.INFO
DEFAULT_TERMINATE_GRACE = 1.0

PROMPT_VARIABLE = "SMALLSH_PROMPT"
LOG_VARIABLE = "SMALLSH_LOG"
LOG_LEVEL_VARIABLE = "SMALLSH_LOG_LEVEL"


@dataclass(frozen=True)
class ShellConfig:
    """Startup settings for a shell.

    Attributes:
        prompt: Text shown before each line of input.
        null_device: Source/sink for unredirected background jobs.
        initial_job_capacity: Starting capacity of the job registry.
        log_path: Where to dump the job history at shutdown, if anywhere.
        log_level: Lowest level included in the dump.
        terminate_grace: Seconds ``exit`` gives background jobs to obey
            SIGTERM before it sends SIGKILL.

    """

    prompt: str = DEFAULT_PROMPT
    null_device: str = os.devnull
    initial_job_capacity: int = DEFAULT_JOB_CAPACITY
    log_path: Path | None = None
    log_level: LogLevel = DEFAULT_LOG_LEVEL
    terminate_grace: float = DEFAULT_TERMINATE_GRACE

    def __post_init__(self) -> None:
        """Reject settings the shell cannot work with."""
        if not self.prompt:
            msg = "prompt must not be empty"
            raise ValueError(msg)
        if self.initial_job_capacity < 1:
            msg = f"initial_job_capacity must be positive, got {self.initial_job_capacity}"
            raise ValueError(msg)
        if self.terminate_grace < 0:
            msg = f"terminate_grace must not be negative, got {self.terminate_grace}"
            raise ValueError(msg)

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] | None = None) -> ShellConfig:
        """Build a config, applying overrides from the environment.

        Args:
            environ: Variables to read (defaults to ``os.environ``).

        Returns:
            A config with defaults for anything not overridden.

        """
        env = os.environ if environ is None else environ
        log = env.get(LOG_VARIABLE)
        level = env.get(LOG_LEVEL_VARIABLE, "").strip().upper()
        return cls(
            prompt=env.get(PROMPT_VARIABLE) or DEFAULT_PROMPT,
            log_path=Path(log) if log else None,
            log_level=LogLevel.__members__.get(level, DEFAULT_LOG_LEVEL),
        )
