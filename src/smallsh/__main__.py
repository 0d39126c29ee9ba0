"""Allow ``python -m smallsh``."""

from smallsh.repl import run

run()
