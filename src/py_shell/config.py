"""Shell configuration.

All tunables live in one frozen dataclass.  The defaults reproduce the
classic behaviour (``$ `` prompt, 512-character lines, ``rw-rw-rw-``
files before the umask); ``from_environment`` lets a user override
them through environment variables:

    ============================  ==================================
    Variable                      Setting
    ============================  ==================================
    ``PS1``                       prompt string
    ``PYSHELL_MAX_LINE``          maximum accepted line length
    ``PYSHELL_LOG_LEVEL``         minimum level echoed to stderr
    ============================  ==================================
"""

from dataclasses import dataclass

from py_shell.env import Environment
from py_shell.errors import ConfigError
from py_shell.logging import LogLevel

DEFAULT_PROMPT = "$ "
DEFAULT_MAX_LINE_LENGTH = 512
DEFAULT_FILE_MODE = 0o666


@dataclass(frozen=True)
class ShellConfig:
    """Immutable shell settings.

    Attributes:
        prompt: Written before each read and after async notifications.
        max_line_length: Longest accepted line, excluding the newline.
        file_mode: Permission bits for files created by ``>``.
        echo_level: Minimum log level echoed to the error stream.

    """

    prompt: str = DEFAULT_PROMPT
    max_line_length: int = DEFAULT_MAX_LINE_LENGTH
    file_mode: int = DEFAULT_FILE_MODE
    echo_level: LogLevel = LogLevel.WARNING

    def __post_init__(self) -> None:
        """Reject settings the shell cannot honour."""
        if self.max_line_length <= 0:
            msg = f"max_line_length must be positive, got {self.max_line_length}"
            raise ConfigError(msg)

    @classmethod
    def from_environment(cls, env: Environment) -> "ShellConfig":
        """Build a config from environment overrides.

        Args:
            env: The environment snapshot to read.

        Returns:
            A config with every unset variable left at its default.

        Raises:
            ConfigError: If a variable holds an unusable value.

        """
        prompt = env.get("PS1")
        if prompt is None:
            prompt = DEFAULT_PROMPT

        raw_max = env.get("PYSHELL_MAX_LINE")
        max_line_length = DEFAULT_MAX_LINE_LENGTH
        if raw_max is not None:
            try:
                max_line_length = int(raw_max)
            except ValueError:
                msg = f"PYSHELL_MAX_LINE must be an integer, got {raw_max!r}"
                raise ConfigError(msg) from None

        raw_level = env.get("PYSHELL_LOG_LEVEL")
        echo_level = LogLevel.WARNING
        if raw_level is not None:
            try:
                echo_level = LogLevel[raw_level.upper()]
            except KeyError:
                names = ", ".join(level.name for level in LogLevel)
                msg = f"PYSHELL_LOG_LEVEL must be one of {names}, got {raw_level!r}"
                raise ConfigError(msg) from None

        return cls(prompt=prompt, max_line_length=max_line_length, echo_level=echo_level)
