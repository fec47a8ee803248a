"""Terminal plumbing — raw line input and serialized output.

Two small classes sit between the shell and its file descriptors:

    - **LineReader** accumulates raw ``os.read`` chunks until a newline
      arrives.  Lines longer than the limit are flagged, not truncated,
      and everything up to their newline is discarded so the next line
      starts clean.  Several lines arriving in one read are served one
      per call.
    - **Console** writes prompts, notices and echoed log entries.  The
      reader, the executor and the signal handlers all write here, so
      every write goes through one lock and one ``os.write`` loop.
"""

import os
import threading

from py_shell.logging import LogEntry
from py_shell.slot import SlotContents

_NEWLINE = b"\n"


def write_all(fd: int, data: bytes) -> None:
    """Write *data* to *fd*, retrying on short writes."""
    view = memoryview(data)
    while view:
        written = os.write(fd, view)
        view = view[written:]


class LineReader:
    """Read newline-terminated lines from a raw file descriptor."""

    def __init__(self, fd: int, *, max_length: int, chunk_size: int | None = None) -> None:
        """Create a reader for *fd*.

        Args:
            fd: The input file descriptor (usually 0).
            max_length: Longest accepted line, excluding the newline.
            chunk_size: Bytes requested per ``os.read``; defaults to one
                more than *max_length*.

        """
        self._fd = fd
        self._max_length = max_length
        self._chunk_size = chunk_size or max_length + 1
        self._pending = bytearray()

    def read_line(self) -> SlotContents | None:
        """Block until a full line is available.

        Returns:
            The line without its newline, an ``overlong`` marker if the
            line exceeded the limit, or None at end of input.

        """
        overlong = False
        while True:
            newline = self._pending.find(_NEWLINE)
            if newline >= 0:
                raw = bytes(self._pending[:newline])
                del self._pending[: newline + 1]
                break
            if len(self._pending) > self._max_length:
                # Keep reading up to the newline, but never hold more than one chunk.
                overlong = True
                self._pending.clear()

            chunk = os.read(self._fd, self._chunk_size)
            if not chunk:
                if not self._pending and not overlong:
                    return None
                raw = bytes(self._pending)
                self._pending.clear()
                break
            self._pending += chunk

        if overlong or len(raw) > self._max_length:
            return SlotContents(text="", overlong=True)
        return SlotContents(text=raw.decode(errors="replace"))


class Console:
    """Serialized writer for the shell's output and error streams."""

    def __init__(self, *, out_fd: int = 1, err_fd: int = 2) -> None:
        """Create a console over the given descriptors."""
        self._out_fd = out_fd
        self._err_fd = err_fd
        # Re-entrant: signal handlers run on the main thread, which may
        # already be inside write() when the signal arrives.
        self._lock = threading.RLock()

    def write(self, text: str) -> None:
        """Write *text* to the output stream."""
        with self._lock:
            write_all(self._out_fd, text.encode())

    def error(self, text: str) -> None:
        """Write *text* and a newline to the error stream."""
        with self._lock:
            write_all(self._err_fd, f"{text}\n".encode())

    def echo(self, entry: LogEntry) -> None:
        """Log sink: write a log entry to the error stream."""
        self.error(str(entry))
