"""The shell loop — a reader and an executor handing lines back and forth.

The shell runs as two tasks that share nothing but the command slot:

    - **Reader** — clear the slot, show the prompt, read one line, publish
      it, then *wait* until the executor is finished with it.
    - **Executor** — take the line, decide what it is (overlong, empty,
      ``exit``, or a command), launch it, and release the slot.

Because the reader waits for every release, a second line typed while
a foreground job runs is not read until that job has ended.  A
background job does not hold the slot, so the prompt returns at once.

The main thread supervises.  It installs the signal handlers (only the
main thread may), starts both tasks, prints job notices as the child
reaper produces them, and joins both tasks once the executor closes
the notice channel.

Shutdown happens at exactly two points: the executor sees ``exit``
between jobs, or the reader hits end of input.  Either way the slot's
shutdown flag wakes whichever task is waiting.
"""

import threading

from py_shell.config import ShellConfig
from py_shell.errors import SpawnError, StartupError
from py_shell.jobs import Job
from py_shell.launcher import JobLauncher
from py_shell.logging import Logger, LogLevel
from py_shell.parser import is_exit_command, parse_command
from py_shell.signals import SignalCoordinator
from py_shell.slot import CommandSlot, SlotContents
from py_shell.terminal import Console, LineReader

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


class Shell:
    """Interactive job-control shell built from its collaborators."""

    def __init__(
        self,
        *,
        config: ShellConfig,
        console: Console,
        line_reader: LineReader,
        launcher: JobLauncher,
        coordinator: SignalCoordinator,
        logger: Logger,
    ) -> None:
        """Create a shell; nothing runs until ``run``."""
        self._config = config
        self._console = console
        self._line_reader = line_reader
        self._launcher = launcher
        self._coordinator = coordinator
        self._logger = logger
        self._slot = CommandSlot()
        self._tasks: list[threading.Thread] = []

    @property
    def slot(self) -> CommandSlot:
        """Return the command slot shared by the two tasks."""
        return self._slot

    @property
    def logger(self) -> Logger:
        """Return the shell's log."""
        return self._logger

    def run(self, *, install_signals: bool = True) -> int:
        """Run the shell until ``exit`` or end of input.

        Must be called from the main thread when *install_signals* is
        true.

        Args:
            install_signals: Install the SIGINT/SIGCHLD handlers for the
                duration of the run.

        Returns:
            The process exit status.

        """
        if install_signals:
            self._coordinator.install()
        try:
            try:
                self._start_tasks()
            except StartupError as exc:
                self._logger.log(LogLevel.CRITICAL, str(exc), source="shell")
                self._slot.request_shutdown()
                self._join_tasks()
                return EXIT_FAILURE

            while (notice := self._coordinator.next_notice()) is not None:
                self._console.write(f"{notice}\n{self._config.prompt}")
            self._join_tasks()
        finally:
            if install_signals:
                self._coordinator.uninstall()
        self._logger.log(LogLevel.INFO, "Shell exited", source="shell")
        return EXIT_SUCCESS

    def execute(self, contents: SlotContents) -> Job | None:
        """Act on one line taken from the slot.

        Args:
            contents: The line the reader published.

        Returns:
            The launched job, or None if nothing was launched.

        """
        if contents.overlong:
            self._logger.log(
                LogLevel.ERROR,
                f"Input command exceeds {self._config.max_line_length} characters.",
                source="executor",
            )
            return None

        line = contents.text
        if not line:
            return None

        if is_exit_command(line):
            self._logger.log(LogLevel.INFO, "Exit requested", source="executor")
            self._slot.request_shutdown()
            return None

        command = parse_command(line)
        if command is None:
            self._logger.log(LogLevel.DEBUG, f"Nothing to run in {line!r}", source="executor")
            return None

        try:
            return self._launcher.launch(command)
        except SpawnError as exc:
            self._logger.log(LogLevel.ERROR, str(exc), source="executor")
            return None

    # -- Tasks --------------------------------------------------------------

    def _start_tasks(self) -> None:
        """Start the executor, then the reader.

        The executor starts first so that, if the reader cannot start,
        nothing is left blocked on terminal input.

        Raises:
            StartupError: If a thread cannot be started.

        """
        for name, target in (("executor", self._execute_loop), ("reader", self._read_loop)):
            task = threading.Thread(target=target, name=f"py-shell-{name}")
            try:
                task.start()
            except RuntimeError as exc:
                msg = f"Could not start {name} task: {exc}"
                raise StartupError(msg) from exc
            self._tasks.append(task)

    def _join_tasks(self) -> None:
        """Wait for every started task to finish."""
        for task in self._tasks:
            task.join()
        self._tasks.clear()

    def _read_loop(self) -> None:
        """Reader task: produce one line per cycle."""
        try:
            while not self._slot.shutdown_requested:
                self._slot.clear()
                self._console.write(self._config.prompt)
                try:
                    contents = self._line_reader.read_line()
                except OSError as exc:
                    self._logger.log(LogLevel.ERROR, f"Input failed: {exc}", source="reader")
                    contents = None
                if contents is None:
                    self._console.write("\n")
                    self._logger.log(LogLevel.INFO, "End of input", source="reader")
                    break
                self._slot.publish(contents)
                self._slot.wait_until_consumed()
        finally:
            self._slot.request_shutdown()

    def _execute_loop(self) -> None:
        """Executor task: consume one line per cycle."""
        try:
            while (contents := self._slot.take()) is not None:
                try:
                    self.execute(contents)
                finally:
                    self._slot.release()
        finally:
            self._slot.request_shutdown()
            self._coordinator.close_notices()
