"""smallsh — a small interactive shell with background job control.

The package is organised leaves-first:

    - ``tokenizer`` / ``directives`` — one line of text to a ``CommandSpec``.
    - ``jobs`` — the registry of background pids.
    - ``system`` — the fork/exec/wait binding to the operating system.
    - ``spawner`` / ``reaper`` — start processes and collect them.
    - ``signals`` — the SIGTSTP foreground-only toggle.
    - ``shell`` / ``repl`` — dispatch and the interactive loop.
"""

__version__ = "0.1.0"
