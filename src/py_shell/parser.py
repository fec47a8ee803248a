"""Command parser — turn one raw line into a structured command.

The accepted grammar is deliberately tiny::

    program [args...] [< input-file] [> output-file] [&]

There is no quoting, no pipes and no expansion.  Parsing is a fixed
sequence of passes over a mutable character buffer, and the order
matters because the redirection and background markers must be gone
before the line is split into arguments:

    1. **Output file** — find ``>``; the next whitespace-delimited token
       is the file name.  Marker and name are blanked out.
    2. **Input file** — the same for ``<`` on the already-modified buffer.
    3. **Background** — ``&`` anywhere in what is left marks a
       background job; argument collection stops at it.
    4. **Normalise** — collapse whitespace runs and trim both ends.
    5. **Validate** — an empty line, or one starting with whitespace or
       ``&``, is "no command" (``None``), never an error.
    6. **Tokenize** — split on whitespace up to ``&``.  The first token
       is the program name and also ``args[0]``.

A marker with nothing after it simply yields no file name.
"""

from dataclasses import dataclass

OUTPUT_MARKER = ">"
INPUT_MARKER = "<"
BACKGROUND_MARKER = "&"
EXIT_COMMAND = "exit"


@dataclass(frozen=True)
class ParsedCommand:
    """A command ready to launch.

    Attributes:
        program: The program to execute (looked up on ``PATH``).
        args: The full argument vector; ``args[0] == program``.
        input_file: File to attach to stdin, if any.
        output_file: File to attach to stdout, if any.
        background: True if the command ended with ``&``.

    """

    program: str
    args: tuple[str, ...]
    input_file: str | None = None
    output_file: str | None = None
    background: bool = False


def is_exit_command(line: str) -> bool:
    """Return True if the first word of *line* is exactly ``exit``."""
    words = line.split(maxsplit=1)
    return bool(words) and words[0] == EXIT_COMMAND


def extract_filename(buffer: list[str], marker: str) -> str | None:
    """Remove the first *marker* and the file name after it from *buffer*.

    The marker and every character of the name are overwritten with
    spaces in place, so they cannot reappear in the argument vector.

    Args:
        buffer: The line as a list of characters (modified in place).
        marker: ``INPUT_MARKER`` or ``OUTPUT_MARKER``.

    Returns:
        The file name, or None if the marker is absent or nothing
        follows it.

    """
    try:
        index = buffer.index(marker)
    except ValueError:
        return None

    buffer[index] = " "
    index += 1
    while index < len(buffer) and buffer[index].isspace():
        index += 1

    name: list[str] = []
    while index < len(buffer) and not buffer[index].isspace():
        name.append(buffer[index])
        buffer[index] = " "
        index += 1
    return "".join(name) or None


def collapse_whitespace(text: str) -> str:
    """Collapse whitespace runs to one space and trim both ends."""
    return " ".join(text.split())


def is_valid(text: str) -> bool:
    """Return True if a normalised line can hold a command."""
    if not text:
        return False
    if text[0].isspace():
        return False
    return not text.startswith(BACKGROUND_MARKER)


def tokenize(text: str) -> list[str]:
    """Split *text* on whitespace, stopping at the background marker.

    Non-printable characters are dropped.
    """
    args: list[str] = []
    current: list[str] = []
    for char in text:
        if char == BACKGROUND_MARKER:
            break
        if char.isspace():
            if current:
                args.append("".join(current))
                current = []
            continue
        if char.isprintable():
            current.append(char)
    if current:
        args.append("".join(current))
    return args


def parse_command(line: str) -> ParsedCommand | None:
    """Parse a newline-stripped line.

    Args:
        line: The raw command line.

    Returns:
        The parsed command, or None if the line holds nothing to run.

    """
    buffer = list(line)
    output_file = extract_filename(buffer, OUTPUT_MARKER)
    input_file = extract_filename(buffer, INPUT_MARKER)
    background = BACKGROUND_MARKER in buffer

    text = collapse_whitespace("".join(buffer))
    if not is_valid(text):
        return None

    args = tokenize(text)
    if not args:
        return None

    return ParsedCommand(
        program=args[0],
        args=tuple(args),
        input_file=input_file,
        output_file=output_file,
        background=background,
    )
