"""Tests for shell configuration."""

import os
from pathlib import Path

import pytest

from smallsh.config import DEFAULT_PROMPT, ShellConfig
from smallsh.logging import LogLevel


class TestShellConfig:
    """Verify defaults, validation and environment overrides."""

    def test_defaults(self) -> None:
        """The default prompt is a colon and background jobs use the null device."""
        config = ShellConfig()
        assert config.prompt == ":"
        assert config.null_device == os.devnull
        expected_capacity = 10
        assert config.initial_job_capacity == expected_capacity
        assert config.log_path is None
        assert config.log_level is LogLevel.INFO
        assert config.terminate_grace > 0

    def test_empty_prompt_rejected(self) -> None:
        """An empty prompt is not allowed."""
        with pytest.raises(ValueError, match="prompt"):
            ShellConfig(prompt="")

    def test_bad_capacity_rejected(self) -> None:
        """The job capacity must be positive."""
        with pytest.raises(ValueError, match="initial_job_capacity"):
            ShellConfig(initial_job_capacity=0)

    def test_negative_grace_rejected(self) -> None:
        """The exit grace period cannot be negative."""
        with pytest.raises(ValueError, match="terminate_grace"):
            ShellConfig(terminate_grace=-1)

    def test_from_empty_environ(self) -> None:
        """No variables means defaults."""
        assert ShellConfig.from_environ({}) == ShellConfig()

    def test_from_environ_overrides(self) -> None:
        """SMALLSH_PROMPT and SMALLSH_LOG are honoured."""
        config = ShellConfig.from_environ({"SMALLSH_PROMPT": "$ ", "SMALLSH_LOG": "/tmp/sh.log"})
        assert config.prompt == "$ "
        assert config.log_path == Path("/tmp/sh.log")

    def test_blank_prompt_variable_falls_back(self) -> None:
        """An empty SMALLSH_PROMPT keeps the default."""
        assert ShellConfig.from_environ({"SMALLSH_PROMPT": ""}).prompt == DEFAULT_PROMPT

    @pytest.mark.parametrize(("value", "expected"), [("debug", LogLevel.DEBUG), (" Warning ", LogLevel.WARNING)])
    def test_log_level_variable(self, value: str, expected: LogLevel) -> None:
        """SMALLSH_LOG_LEVEL is matched by name, ignoring case and spaces."""
        assert ShellConfig.from_environ({"SMALLSH_LOG_LEVEL": value}).log_level is expected

    def test_unknown_log_level_falls_back(self) -> None:
        """An unrecognised level name keeps the default."""
        assert ShellConfig.from_environ({"SMALLSH_LOG_LEVEL": "loud"}).log_level is LogLevel.INFO
