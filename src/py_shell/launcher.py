"""Job launcher — fork, redirect, exec, and wait (or not).

``launch`` is the one place the shell creates processes:

    1. ``os.fork()``.  Failure raises ``SpawnError`` and no job exists.
       A foreground fork is announced to the signal coordinator first,
       so the reaper cannot mistake the new child for a background job.
    2. **Child** — attach redirection files, detach from the terminal if
       the job is a background job, then ``os.execvpe`` the program.
       If anything fails the child reports it on stderr and exits with
       status 1.  It never returns into shell code.
    3. **Parent, background** — arm the child reaper and return at once.
       The executor releases the command slot right away, so the prompt
       comes back while the job runs.
    4. **Parent, foreground** — switch signals to foreground-wait, block
       in ``waitpid`` until that child ends, then switch back.
"""

import os
from typing import NoReturn

from py_shell.config import DEFAULT_FILE_MODE
from py_shell.env import Environment
from py_shell.errors import SpawnError
from py_shell.jobs import Job, JobStatus
from py_shell.logging import Logger, LogLevel
from py_shell.parser import ParsedCommand
from py_shell.redirection import apply_redirections
from py_shell.signals import SignalCoordinator
from py_shell.terminal import write_all

_CHILD_FAILURE = 1
_STDERR_FD = 2


def _report_child_error(message: str) -> None:
    """Write an error straight to stderr from inside a forked child.

    The console lock may have been held by another thread at fork time,
    so the child bypasses it.
    """
    write_all(_STDERR_FD, f"Error: {message}\n".encode())


class JobLauncher:
    """Start programs as child processes."""

    def __init__(
        self,
        *,
        coordinator: SignalCoordinator,
        logger: Logger,
        environment: Environment,
        file_mode: int = DEFAULT_FILE_MODE,
    ) -> None:
        """Create a launcher.

        Args:
            coordinator: Switches signal dispositions around each job.
            logger: The shell's log.
            environment: Passed to every launched program.
            file_mode: Permission bits for files created by ``>``.

        """
        self._coordinator = coordinator
        self._logger = logger
        self._environment = environment
        self._file_mode = file_mode
        self._active_job: Job | None = None

    @property
    def active_job(self) -> Job | None:
        """Return the most recently launched job, or None."""
        return self._active_job

    def launch(self, command: ParsedCommand | None) -> Job | None:
        """Run *command* in a new process.

        Args:
            command: The parsed command; None is a no-op.

        Returns:
            The launched job (finished if foreground), or None.

        Raises:
            SpawnError: If no child process could be created.

        """
        if command is None:
            return None

        if not command.background:
            self._coordinator.begin_foreground()
        try:
            pid = os.fork()
        except OSError as exc:
            self._coordinator.enter_interactive()
            msg = f"Could not fork '{command.program}': {exc.strerror}"
            raise SpawnError(msg) from exc

        if pid == 0:
            self._exec_child(command)

        job = Job(pid=pid, name=command.program, background=command.background)
        self._active_job = job
        if command.background:
            self._coordinator.arm_reaper()
            self._logger.log(LogLevel.INFO, f"Started {job}", source="launcher")
            return job

        self._logger.log(LogLevel.DEBUG, f"Started {job}", source="launcher")
        self._wait_foreground(job)
        return job

    def _wait_foreground(self, job: Job) -> None:
        """Block until the foreground *job* exits or is killed."""
        self._coordinator.enter_foreground_wait(job.pid)
        try:
            _pid, status = os.waitpid(job.pid, 0)
        except ChildProcessError:
            self._logger.log(
                LogLevel.DEBUG,
                f"Child {job.pid} was already reaped",
                source="launcher",
            )
            collected = self._coordinator.take_foreground_status(job.pid)
            if collected is not None:
                job.exit_code = os.waitstatus_to_exitcode(collected)
        else:
            job.exit_code = os.waitstatus_to_exitcode(status)
        finally:
            self._coordinator.enter_interactive()
        job.status = JobStatus.DONE
        self._logger.log(LogLevel.DEBUG, f"Finished {job} exit={job.exit_code}", source="launcher")

    def _exec_child(self, command: ParsedCommand) -> NoReturn:
        """Turn the forked child into *command*; never returns."""
        try:
            apply_redirections(command, report=_report_child_error, file_mode=self._file_mode)
            if command.background:
                self._coordinator.detach_background()
            os.execvpe(command.program, list(command.args), self._environment.as_dict())
        except OSError as exc:
            _report_child_error(f"{command.program}: {exc.strerror or exc}")
        finally:
            os._exit(_CHILD_FAILURE)
