"""Job identity — what the shell remembers about the programs it runs.

In Unix, a "job" is a shell concept layered on top of kernel processes.
This shell keeps the smallest possible version of it:

    - **One active job at a time** — ``Job`` records the pid of the most
      recently launched program, whether it went to the background, and
      (for foreground jobs) how it ended.
    - **No job table** — background jobs are independent processes.  The
      shell only hears about them again when the child reaper collects
      them and emits a ``JobNotice``.
"""

from dataclasses import dataclass
from enum import StrEnum


class JobStatus(StrEnum):
    """Status of a shell job."""

    RUNNING = "running"
    DONE = "done"


@dataclass
class Job:
    """A launched program.

    Attributes:
        pid: The child's process id.
        name: The program name (``argv[0]``).
        background: True if the job was started with ``&``.
        status: Current job status.
        exit_code: For finished foreground jobs, the value
            ``os.waitstatus_to_exitcode`` reported (negative for a
            signal).  None while running, for background jobs, and when
            the reaper collected the child first.

    """

    pid: int
    name: str
    background: bool = False
    status: JobStatus = JobStatus.RUNNING
    exit_code: int | None = None

    def __str__(self) -> str:
        """Format as ``name (pid=N) status``."""
        mode = " &" if self.background else ""
        return f"{self.name}{mode} (pid={self.pid}) {self.status}"


@dataclass(frozen=True)
class JobNotice:
    """Completion record produced when the reaper collects a child."""

    pid: int

    def __str__(self) -> str:
        """Format as ``Process (N): Finished.``."""
        return f"Process ({self.pid}): Finished."
