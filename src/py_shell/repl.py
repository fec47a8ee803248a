"""Entry point — wire the shell to the real terminal.

``build_shell`` assembles the collaborators (console, line reader,
signal coordinator, launcher, logger) around a set of file
descriptors, so tests can build the exact same shell over pipes.
``run`` reads the configuration from the environment and runs the shell
on stdin/stdout/stderr; ``main`` is the ``py-shell`` console script.
"""

import sys

from py_shell.config import ShellConfig
from py_shell.env import Environment
from py_shell.errors import ConfigError
from py_shell.launcher import JobLauncher
from py_shell.logging import Logger
from py_shell.shell import EXIT_FAILURE, Shell
from py_shell.signals import SignalCoordinator
from py_shell.terminal import Console, LineReader


def build_shell(
    *,
    config: ShellConfig,
    environment: Environment,
    in_fd: int = 0,
    out_fd: int = 1,
    err_fd: int = 2,
) -> Shell:
    """Assemble a shell over the given file descriptors.

    Args:
        config: Shell settings.
        environment: Passed to every launched program.
        in_fd: Where command lines are read from.
        out_fd: Where prompts and notices are written.
        err_fd: Where echoed log entries are written.

    Returns:
        A shell ready to ``run``.

    """
    console = Console(out_fd=out_fd, err_fd=err_fd)
    logger = Logger(sink=console.echo, echo_level=config.echo_level)
    coordinator = SignalCoordinator(console=console, prompt=config.prompt, logger=logger)
    launcher = JobLauncher(
        coordinator=coordinator,
        logger=logger,
        environment=environment,
        file_mode=config.file_mode,
    )
    return Shell(
        config=config,
        console=console,
        line_reader=LineReader(in_fd, max_length=config.max_line_length),
        launcher=launcher,
        coordinator=coordinator,
        logger=logger,
    )


def run() -> int:
    """Configure from the environment and run the interactive shell.

    Returns:
        The exit status: 0 after a clean exit, 1 on a configuration or
        startup failure.

    """
    environment = Environment.from_os()
    try:
        config = ShellConfig.from_environment(environment)
    except ConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)  # noqa: T201
        return EXIT_FAILURE

    shell = build_shell(config=config, environment=environment)
    return shell.run()


def main() -> None:
    """Run the shell and exit with its status (``py-shell`` entry point)."""
    sys.exit(run())
