"""Exception hierarchy for the shell.

Every failure the shell knows how to recover from derives from
``ShellError``, so the loop boundaries that own recovery (the executor
and the supervisor) can catch one base class and keep going.

Errors are raised at the failing primitive and handled where the
decision to continue is made:

    - ``RedirectionError`` — raised when a ``<`` or ``>`` file cannot be
      opened; handled inside the child, which carries on with the
      inherited stream.
    - ``SpawnError`` — raised when ``fork`` fails; handled by the
      executor, which ends the cycle with no job.
    - ``SlotStateError`` — raised when a task uses the command slot out
      of turn.  This is a programming error, never user input.
    - ``ConfigError`` — raised for invalid environment configuration.
    - ``StartupError`` — raised when a task thread cannot be started.
      The only fatal error.
"""


class ShellError(Exception):
    """Base class for all shell errors."""


class ConfigError(ShellError):
    """Raised when configuration values are invalid."""


class SlotStateError(ShellError):
    """Raised when the command slot is used outside its state machine."""


class RedirectionError(ShellError):
    """Raised when a redirection file cannot be opened."""

    def __init__(self, path: str, reason: str) -> None:
        """Record the file that could not be opened and why."""
        super().__init__(f"Cannot open '{path}': {reason}")
        self.path = path
        self.reason = reason


class SpawnError(ShellError):
    """Raised when no child process could be created."""


class StartupError(ShellError):
    """Raised when the reader or executor task cannot be started."""
