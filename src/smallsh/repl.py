"""Interactive REPL (Read-Eval-Print Loop) for smallsh.

The REPL is the thin I/O wrapper around ``Shell``.  It installs the
signal handlers, prints the banner, and runs the loop:

    1. **Reap** — report background jobs that finished.
    2. **Read** — show any held-back mode notification, show the
       prompt, read one line.
    3. **Eval** — pass the line to ``shell.execute()``.
    4. **Loop** — until ``exit`` (or end of input).

The helper functions (``format_banner``, ``read_line``) are small and
testable; ``run()`` is the entrypoint.
"""

import readline  # noqa: F401  (gives input() line editing)
from collections.abc import Callable

from smallsh.config import ShellConfig
from smallsh.logging import LogLevel
from smallsh.shell import Shell


def format_banner(pid: int) -> str:
    """Return the startup line showing the shell's pid."""
    return f"smallsh pid: {pid}"


def read_line(shell: Shell, reader: Callable[[str], str] = input) -> str | None:
    """Read one line of input, retrying on read errors.

    Any mode change the signal handler could not announce is printed
    before the prompt.

    Args:
        shell: The shell whose prompt and mode are used.
        reader: Function that shows a prompt and returns a line.

    Returns:
        The line without its terminator, or None at end of input.

    """
    while True:
        shell.announce_mode_change()
        try:
            line = reader(shell.config.prompt)
        except EOFError:
            return None
        except OSError as e:
            shell.logger.log(LogLevel.WARNING, f"read failed, retrying: {e}", source="repl")
            continue
        return line.rstrip("\n")


def run() -> None:
    """Start an interactive session and run it until ``exit``.

    End of input (Ctrl-D, or the end of a piped script) is treated like
    ``exit``.
    """
    config = ShellConfig.from_environ()
    shell = Shell(config=config)
    shell.mode.install()

    print(format_banner(shell.pid), flush=True)  # noqa: T201

    try:
        while shell.running:
            shell.reap()
            line = read_line(shell)
            if line is None:
                print(flush=True)  # noqa: T201
                shell.shutdown()
                break
            shell.execute(line)
    finally:
        if config.log_path is not None:
            shell.logger.dump(config.log_path, min_level=config.log_level)
