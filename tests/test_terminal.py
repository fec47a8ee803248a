"""Tests for raw line input and serialized console output."""

import os

from py_shell.logging import LogEntry, LogLevel
from py_shell.slot import SlotContents
from py_shell.terminal import Console, LineReader, write_all


def _reader_for(data: bytes, *, max_length: int = 512, chunk_size: int | None = None) -> LineReader:
    """Return a LineReader over a pipe pre-filled with *data* and closed."""
    read_fd, write_fd = os.pipe()
    write_all(write_fd, data)
    os.close(write_fd)
    return LineReader(read_fd, max_length=max_length, chunk_size=chunk_size)


def _drain(fd: int) -> bytes:
    """Read everything currently available on *fd* after its writer closed."""
    chunks: list[bytes] = []
    while chunk := os.read(fd, 4096):
        chunks.append(chunk)
    os.close(fd)
    return b"".join(chunks)


class TestLineReader:
    """Verify line accumulation, overlong detection and EOF."""

    def test_single_line(self) -> None:
        """The trailing newline is stripped."""
        reader = _reader_for(b"ls -la\n")
        assert reader.read_line() == SlotContents(text="ls -la")

    def test_lines_in_one_read_served_one_per_call(self) -> None:
        """Two lines arriving together come back one at a time."""
        reader = _reader_for(b"first\nsecond\n")
        assert reader.read_line() == SlotContents(text="first")
        assert reader.read_line() == SlotContents(text="second")
        assert reader.read_line() is None

    def test_accumulates_partial_reads(self) -> None:
        """A line split over many small reads is reassembled."""
        reader = _reader_for(b"echo hello world\n", chunk_size=3)
        assert reader.read_line() == SlotContents(text="echo hello world")

    def test_empty_line(self) -> None:
        """A bare newline is an empty line, not end of input."""
        reader = _reader_for(b"\n")
        assert reader.read_line() == SlotContents(text="")

    def test_eof(self) -> None:
        """End of input with nothing pending returns None."""
        assert _reader_for(b"").read_line() is None

    def test_eof_flushes_unterminated_line(self) -> None:
        """A final line without a newline is still delivered."""
        reader = _reader_for(b"exit")
        assert reader.read_line() == SlotContents(text="exit")
        assert reader.read_line() is None

    def test_max_length_line_accepted(self) -> None:
        """A line of exactly the limit is accepted."""
        reader = _reader_for(b"a" * 512 + b"\n")
        contents = reader.read_line()
        assert contents is not None
        assert contents.overlong is False
        assert len(contents.text) == 512

    def test_overlong_line_flagged(self) -> None:
        """A line over the limit is flagged, not truncated."""
        reader = _reader_for(b"a" * 513 + b"\n")
        assert reader.read_line() == SlotContents(text="", overlong=True)

    def test_line_after_overlong_is_clean(self) -> None:
        """The next line parses normally after an overlong one."""
        reader = _reader_for(b"b" * 2000 + b"\nls\n", chunk_size=64)
        assert reader.read_line() == SlotContents(text="", overlong=True)
        assert reader.read_line() == SlotContents(text="ls")

    def test_invalid_utf8_replaced(self) -> None:
        """Undecodable bytes do not raise."""
        reader = _reader_for(b"echo \xff\n")
        contents = reader.read_line()
        assert contents is not None
        assert contents.text.startswith("echo ")


class TestConsole:
    """Verify the output and error streams."""

    def test_write_and_error(self) -> None:
        """write goes to out; error goes to err with a newline."""
        out_r, out_w = os.pipe()
        err_r, err_w = os.pipe()
        console = Console(out_fd=out_w, err_fd=err_w)
        console.write("$ ")
        console.error("oops")
        os.close(out_w)
        os.close(err_w)
        assert _drain(out_r) == b"$ "
        assert _drain(err_r) == b"oops\n"

    def test_echo_formats_entry(self) -> None:
        """echo writes the formatted log entry to the error stream."""
        err_r, err_w = os.pipe()
        console = Console(out_fd=err_w, err_fd=err_w)
        console.echo(LogEntry(level=LogLevel.ERROR, message="bad", source="executor"))
        os.close(err_w)
        assert _drain(err_r) == b"[ERROR] executor: bad\n"
