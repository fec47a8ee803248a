"""The command slot — a capacity-one rendezvous between two tasks.

The reader and the executor never share anything except this slot.
It holds at most one line and moves through an explicit state machine:

    EMPTY ──publish()──▶ FILLED ──take()──▶ CONSUMING ──release()──▶ EMPTY

Strict alternation falls out of the states: the reader can only
``publish`` into an EMPTY slot, and it then blocks in
``wait_until_consumed`` until the executor ``release``\\ s it.  There is
no queue — the reader cannot read line *n + 1* until the executor is
finished with line *n*.

Shutdown is a separate flag, not a state.  ``request_shutdown`` wakes
every waiter on both sides so neither can be left blocked.

One ``threading.Condition`` guards everything; every wait uses
``wait_for`` with a predicate, so spurious wake-ups are harmless.
"""

import threading
from dataclasses import dataclass
from enum import StrEnum

from py_shell.errors import SlotStateError


class SlotState(StrEnum):
    """Ownership state of the command slot."""

    EMPTY = "empty"
    FILLED = "filled"
    CONSUMING = "consuming"


@dataclass(frozen=True)
class SlotContents:
    """One raw line as produced by the reader.

    Attributes:
        text: The line without its trailing newline (empty if overlong).
        overlong: True if the line exceeded the maximum length.

    """

    text: str
    overlong: bool = False


class CommandSlot:
    """Single-producer, single-consumer hand-off of one command line."""

    def __init__(self) -> None:
        """Create an empty slot."""
        self._cond = threading.Condition()
        self._state = SlotState.EMPTY
        self._contents: SlotContents | None = None
        self._shutdown = False

    @property
    def state(self) -> SlotState:
        """Return the current slot state."""
        with self._cond:
            return self._state

    @property
    def shutdown_requested(self) -> bool:
        """Return whether the shell is shutting down."""
        with self._cond:
            return self._shutdown

    def clear(self) -> None:
        """Drop any leftover contents at the start of a read cycle.

        Raises:
            SlotStateError: If the executor still owns the slot.

        """
        with self._cond:
            if self._state is not SlotState.EMPTY:
                msg = f"Cannot clear slot while {self._state}"
                raise SlotStateError(msg)
            self._contents = None

    def publish(self, contents: SlotContents) -> None:
        """Hand a line to the executor (reader side).

        Raises:
            SlotStateError: If the slot is not EMPTY.

        """
        with self._cond:
            if self._state is not SlotState.EMPTY:
                msg = f"Cannot publish into slot while {self._state}"
                raise SlotStateError(msg)
            self._contents = contents
            self._state = SlotState.FILLED
            self._cond.notify_all()

    def wait_until_consumed(self) -> None:
        """Block until the executor releases the slot or shutdown begins."""
        with self._cond:
            self._cond.wait_for(lambda: self._state is SlotState.EMPTY or self._shutdown)

    def take(self) -> SlotContents | None:
        """Block until a line is available and claim it (executor side).

        Returns:
            The published contents, or None once shutdown is requested.

        """
        with self._cond:
            self._cond.wait_for(lambda: self._state is SlotState.FILLED or self._shutdown)
            if self._shutdown:
                return None
            self._state = SlotState.CONSUMING
            return self._contents

    def release(self) -> None:
        """Return the slot to the reader (executor side).

        Raises:
            SlotStateError: If the slot was not taken.

        """
        with self._cond:
            if self._state is not SlotState.CONSUMING:
                msg = f"Cannot release slot while {self._state}"
                raise SlotStateError(msg)
            self._contents = None
            self._state = SlotState.EMPTY
            self._cond.notify_all()

    def request_shutdown(self) -> None:
        """Ask both tasks to stop and wake whichever one is waiting."""
        with self._cond:
            self._shutdown = True
            self._cond.notify_all()

    def __repr__(self) -> str:
        """Return a developer-friendly representation."""
        suffix = ", shutdown" if self._shutdown else ""
        return f"CommandSlot({self._state}{suffix})"
