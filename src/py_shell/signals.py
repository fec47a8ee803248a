"""Signal coordinator — who handles Ctrl-C, and who reaps children.

The shell moves through three signal dispositions:

    - **INTERACTIVE** — the reader owns the terminal.  ``SIGINT`` just
      redraws the prompt on a fresh line; the shell keeps running.
    - **FOREGROUND_WAIT** — the executor is blocked on a foreground
      child.  ``SIGINT`` is forwarded to that child.  If delivery
      succeeds a bare newline is written (the child's own output
      settles the screen); if it fails the prompt is redrawn.
    - **BACKGROUND_DETACHED** — applied inside a background child just
      before ``exec``.  The child gets its own session, so it has no
      controlling terminal, and terminal-driven signals (``SIGINT``,
      ``SIGTSTP``, ``SIGTTIN``, ``SIGTTOU``, ``SIGHUP``) are ignored.

Separately, once the first background job exists the **child reaper**
is armed: every ``SIGCHLD`` drains *all* exited children with a
non-blocking ``waitpid`` loop, because several children finishing
close together may deliver a single coalesced signal.  Each reaped pid
becomes a ``JobNotice`` on a notification channel that the shell's
main thread drains and prints.

Design choices:
    - **Install once, switch by state.**  Python only lets the main
      thread call ``signal.signal``, but dispositions change on the
      executor thread.  So the handlers are installed once at startup
      and dispatch on the coordinator's current disposition.
    - **Handlers never print job notices directly** — they enqueue onto
      a ``queue.SimpleQueue``, which is safe to call re-entrantly.
    - **Hold reaped pids while a foreground pid is unknown.**  Between
      ``fork`` and ``enter_foreground_wait`` the reaper cannot tell the
      new foreground child from a background one.  ``begin_foreground``
      opens that window; pids reaped inside it are set aside and only
      announced once the foreground pid is known and they differ from
      it.  A foreground child the reaper collects keeps its wait status
      for the launcher.
"""

import os
import queue
import signal
import threading
from collections.abc import Callable
from enum import StrEnum
from types import FrameType
from typing import TypeAlias

from py_shell.jobs import JobNotice
from py_shell.logging import Logger, LogLevel
from py_shell.terminal import Console

DETACHED_DEFAULT_SIGNALS: tuple[signal.Signals, ...] = (signal.SIGCHLD, signal.SIGTERM)
"""Signals reset to their default action in a background child."""

DETACHED_IGNORED_SIGNALS: tuple[signal.Signals, ...] = (
    signal.SIGINT,
    signal.SIGTTIN,
    signal.SIGTSTP,
    signal.SIGTTOU,
    signal.SIGHUP,
)
"""Terminal-driven signals a background child must not react to."""

_Handler: TypeAlias = Callable[[int, FrameType | None], object] | int | signal.Handlers | None


class Disposition(StrEnum):
    """Named signal configurations."""

    INTERACTIVE = "interactive"
    FOREGROUND_WAIT = "foreground-wait"
    BACKGROUND_DETACHED = "background-detached"


class SignalCoordinator:
    """Own the shell's signal handlers and the job notice channel."""

    def __init__(self, *, console: Console, prompt: str, logger: Logger) -> None:
        """Create a coordinator in the interactive disposition.

        Args:
            console: Where prompt redraws are written.
            prompt: The prompt string to redraw.
            logger: The shell's log.

        """
        self._console = console
        self._prompt = prompt
        self._logger = logger
        self._disposition = Disposition.INTERACTIVE
        self._foreground_pid: int | None = None
        self._foreground_pending = False
        self._held: dict[int, int] = {}
        self._foreground_status: dict[int, int] = {}
        self._lock = threading.RLock()
        self._reaper_armed = False
        self._notices: queue.SimpleQueue[JobNotice | None] = queue.SimpleQueue()
        self._previous: dict[signal.Signals, _Handler] = {}

    @property
    def disposition(self) -> Disposition:
        """Return the current disposition."""
        return self._disposition

    @property
    def foreground_pid(self) -> int | None:
        """Return the pid of the foreground child being waited on."""
        return self._foreground_pid

    @property
    def reaper_armed(self) -> bool:
        """Return whether SIGCHLD notifications are being reaped."""
        return self._reaper_armed

    # -- Installation (main thread only) ------------------------------------

    def install(self) -> None:
        """Install the SIGINT and SIGCHLD handlers, remembering the old ones."""
        handlers = {
            signal.SIGINT: self.handle_interrupt,
            signal.SIGCHLD: self.handle_child_exit,
        }
        for signum, handler in handlers.items():
            self._previous[signum] = signal.signal(signum, handler)
        self._logger.log(LogLevel.DEBUG, "Signal handlers installed", source="signals")

    def uninstall(self) -> None:
        """Restore the handlers that were active before ``install``."""
        for signum, previous in self._previous.items():
            signal.signal(signum, signal.SIG_DFL if previous is None else previous)
        self._previous.clear()

    # -- Disposition transitions --------------------------------------------

    def begin_foreground(self) -> None:
        """Hold reaped pids back until the next foreground pid is known.

        Called just before forking a foreground job.
        """
        with self._lock:
            self._foreground_pending = True

    def enter_interactive(self) -> None:
        """Switch back to the reader's disposition."""
        with self._lock:
            self._foreground_pid = None
            self._disposition = Disposition.INTERACTIVE
            self._release_held(foreground_pid=None)

    def enter_foreground_wait(self, pid: int) -> None:
        """Forward interrupts to *pid* until ``enter_interactive``."""
        with self._lock:
            self._foreground_pid = pid
            self._disposition = Disposition.FOREGROUND_WAIT
            self._release_held(foreground_pid=pid)

    def take_foreground_status(self, pid: int) -> int | None:
        """Return the wait status the reaper collected for foreground *pid*.

        Returns:
            The raw ``waitpid`` status, or None if the reaper never
            collected *pid* as a foreground child.

        """
        with self._lock:
            return self._foreground_status.pop(pid, None)

    def detach_background(self) -> None:
        """Detach the calling process from terminal job control.

        Only ever called in a forked background child, before ``exec``.
        """
        os.setsid()
        for signum in DETACHED_DEFAULT_SIGNALS:
            signal.signal(signum, signal.SIG_DFL)
        for signum in DETACHED_IGNORED_SIGNALS:
            signal.signal(signum, signal.SIG_IGN)
        self._foreground_pid = None
        self._disposition = Disposition.BACKGROUND_DETACHED

    def arm_reaper(self) -> None:
        """Start reaping children on SIGCHLD (idempotent)."""
        if not self._reaper_armed:
            self._reaper_armed = True
            self._logger.log(LogLevel.DEBUG, "Child reaper armed", source="signals")

    # -- Handlers -----------------------------------------------------------

    def handle_interrupt(self, _signum: int, _frame: FrameType | None) -> None:
        """React to SIGINT according to the current disposition."""
        pid = self._foreground_pid
        if self._disposition is Disposition.FOREGROUND_WAIT and pid is not None:
            try:
                os.kill(pid, signal.SIGINT)
            except OSError as exc:
                self._logger.log(
                    LogLevel.DEBUG,
                    f"Could not interrupt {pid}: {exc.strerror}",
                    source="signals",
                )
            else:
                self._console.write("\n")
                return
        self._console.write(f"\n{self._prompt}")

    def handle_child_exit(self, _signum: int, _frame: FrameType | None) -> None:
        """React to SIGCHLD by reaping, once the reaper is armed."""
        if self._reaper_armed:
            self.reap_children()

    def reap_children(self) -> list[JobNotice]:
        """Collect every exited child without blocking.

        A child reaped while it is the foreground job is not announced;
        its status is kept for ``take_foreground_status``.  Children
        reaped while a foreground spawn is pending are held until
        ``enter_foreground_wait`` names the foreground pid.

        Returns:
            The notices enqueued by this call.

        """
        notices: list[JobNotice] = []
        while True:
            try:
                pid, status = os.waitpid(-1, os.WNOHANG)
            except ChildProcessError:
                break
            if pid == 0:
                break
            with self._lock:
                if pid == self._foreground_pid:
                    self._foreground_status[pid] = status
                    self._logger.log(LogLevel.DEBUG, f"Reaped foreground child {pid}", source="signals")
                    continue
                if self._foreground_pending:
                    self._held[pid] = status
                    self._logger.log(LogLevel.DEBUG, f"Holding reaped child {pid}", source="signals")
                    continue
            notices.append(self._announce(pid))
        return notices

    def _release_held(self, *, foreground_pid: int | None) -> None:
        """Close the pending window and announce held pids but *foreground_pid*."""
        self._foreground_pending = False
        held, self._held = self._held, {}
        for pid, status in held.items():
            if pid == foreground_pid:
                self._foreground_status[pid] = status
            else:
                self._announce(pid)

    def _announce(self, pid: int) -> JobNotice:
        """Put a notice for *pid* on the notice channel."""
        notice = JobNotice(pid=pid)
        self._logger.log(LogLevel.INFO, str(notice), source="signals")
        self._notices.put(notice)
        return notice

    # -- Notice channel -----------------------------------------------------

    def next_notice(self) -> JobNotice | None:
        """Block until a notice arrives; None means the channel is closed."""
        return self._notices.get()

    def close_notices(self) -> None:
        """Close the notice channel, waking whoever waits in ``next_notice``."""
        self._notices.put(None)
