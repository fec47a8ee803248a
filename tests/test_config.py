"""Tests for environment snapshots and shell configuration."""

import pytest

from py_shell.config import DEFAULT_FILE_MODE, ShellConfig
from py_shell.env import Environment
from py_shell.errors import ConfigError
from py_shell.logging import LogLevel


class TestEnvironment:
    """Verify the environment snapshot."""

    def test_get_and_default(self) -> None:
        """get returns the value, or the default when unset."""
        env = Environment({"HOME": "/root"})
        assert env.get("HOME") == "/root"
        assert env.get("MISSING") is None
        assert env.get("MISSING", "x") == "x"

    def test_initial_is_copied(self) -> None:
        """Changing the source mapping does not change the snapshot."""
        source = {"A": "1"}
        env = Environment(source)
        source["A"] = "2"
        assert env.get("A") == "1"

    def test_as_dict_is_fresh(self) -> None:
        """as_dict returns an independent dict."""
        env = Environment({"A": "1"})
        exported = env.as_dict()
        exported["B"] = "2"
        assert len(env) == 1

    def test_from_os(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """from_os snapshots the process environment."""
        monkeypatch.setenv("PYSHELL_TEST_VAR", "hello")
        env = Environment.from_os()
        monkeypatch.setenv("PYSHELL_TEST_VAR", "changed")
        assert env.get("PYSHELL_TEST_VAR") == "hello"


class TestShellConfig:
    """Verify defaults and environment overrides."""

    def test_defaults(self) -> None:
        """Defaults match the classic shell."""
        config = ShellConfig()
        assert config.prompt == "$ "
        assert config.max_line_length == 512
        assert config.file_mode == DEFAULT_FILE_MODE == 0o666
        assert config.echo_level is LogLevel.WARNING

    def test_empty_environment_gives_defaults(self) -> None:
        """An empty environment changes nothing."""
        assert ShellConfig.from_environment(Environment()) == ShellConfig()

    def test_overrides(self) -> None:
        """PS1, PYSHELL_MAX_LINE and PYSHELL_LOG_LEVEL are honoured."""
        env = Environment(
            {"PS1": "> ", "PYSHELL_MAX_LINE": "80", "PYSHELL_LOG_LEVEL": "debug"},
        )
        config = ShellConfig.from_environment(env)
        assert config.prompt == "> "
        assert config.max_line_length == 80
        assert config.echo_level is LogLevel.DEBUG

    def test_empty_prompt_allowed(self) -> None:
        """An empty PS1 disables the prompt."""
        config = ShellConfig.from_environment(Environment({"PS1": ""}))
        assert config.prompt == ""

    def test_non_integer_max_line(self) -> None:
        """A non-numeric line limit is rejected."""
        with pytest.raises(ConfigError, match="PYSHELL_MAX_LINE"):
            ShellConfig.from_environment(Environment({"PYSHELL_MAX_LINE": "lots"}))

    def test_non_positive_max_line(self) -> None:
        """A zero line limit is rejected."""
        with pytest.raises(ConfigError, match="positive"):
            ShellConfig.from_environment(Environment({"PYSHELL_MAX_LINE": "0"}))

    def test_unknown_log_level(self) -> None:
        """An unknown level name is rejected."""
        with pytest.raises(ConfigError, match="PYSHELL_LOG_LEVEL"):
            ShellConfig.from_environment(Environment({"PYSHELL_LOG_LEVEL": "loud"}))
