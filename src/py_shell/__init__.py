"""py-shell — an interactive shell with a two-task job-control engine.

Re-exports the pieces most callers need::

    from py_shell import ShellConfig, build_shell, parse_command
"""

from py_shell.config import ShellConfig
from py_shell.parser import ParsedCommand, parse_command
from py_shell.repl import build_shell, run
from py_shell.shell import Shell

__all__ = [
    "ParsedCommand",
    "Shell",
    "ShellConfig",
    "build_shell",
    "parse_command",
    "run",
]
