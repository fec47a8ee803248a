"""Redirection resolver — attach ``<`` and ``>`` files to a child.

Runs only inside a freshly forked child, before ``exec``.  The shell's
own standard streams are never touched.

    - ``> file`` opens *file* write-only, creating it and truncating it,
      with ``rw-rw-rw-`` permissions (before the umask), then moves it
      onto standard output.
    - ``< file`` opens *file* read-only and moves it onto standard input.

A file that cannot be opened is reported and skipped: the program still
runs, with whatever stream it inherited.  Output is resolved before
input, matching the order the parser extracts them in.
"""

import os
from collections.abc import Callable
from typing import TypeAlias

from py_shell.config import DEFAULT_FILE_MODE
from py_shell.errors import RedirectionError
from py_shell.parser import ParsedCommand

_OUTPUT_FLAGS = os.O_WRONLY | os.O_CREAT | os.O_TRUNC
_INPUT_FLAGS = os.O_RDONLY

Reporter: TypeAlias = Callable[[str], None]


def open_redirect(path: str, flags: int, mode: int = DEFAULT_FILE_MODE) -> int:
    """Open *path* for a redirection.

    Returns:
        The new file descriptor.

    Raises:
        RedirectionError: If the file cannot be opened.

    """
    try:
        return os.open(path, flags, mode)
    except OSError as exc:
        raise RedirectionError(path, exc.strerror or str(exc)) from exc


def replace_stream(fd: int, target_fd: int) -> None:
    """Make *target_fd* refer to the file behind *fd* and close *fd*."""
    if fd == target_fd:
        return
    os.dup2(fd, target_fd)
    os.close(fd)


def apply_redirections(
    command: ParsedCommand,
    *,
    report: Reporter,
    file_mode: int = DEFAULT_FILE_MODE,
    stdin_fd: int = 0,
    stdout_fd: int = 1,
) -> None:
    """Attach the command's redirection files to the standard streams.

    Args:
        command: The parsed command whose files to open.
        report: Called with a message for each file that fails to open.
        file_mode: Permission bits for a created output file.
        stdin_fd: Descriptor replaced by the input file.
        stdout_fd: Descriptor replaced by the output file.

    """
    if command.output_file is not None:
        try:
            fd = open_redirect(command.output_file, _OUTPUT_FLAGS, file_mode)
        except RedirectionError as exc:
            report(str(exc))
        else:
            replace_stream(fd, stdout_fd)

    if command.input_file is not None:
        try:
            fd = open_redirect(command.input_file, _INPUT_FLAGS)
        except RedirectionError as exc:
            report(str(exc))
        else:
            replace_stream(fd, stdin_fd)
