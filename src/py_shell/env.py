"""Environment variables — the key-value block handed to every program.

In Unix, every process has an environment: a set of ``KEY=VALUE`` string
pairs inherited from its parent.  The shell reads its own settings
(``PS1`` and the ``PYSHELL_*`` variables) from it and passes it on to
every program it launches, so ``PATH`` lookup in ``execvpe`` sees the
same ``PATH`` the shell was started with.

Key design properties:
    - **Snapshot at startup** — ``Environment.from_os()`` copies
      ``os.environ`` once.  Later changes to the shell's own process
      environment do not leak into children.
    - **Strings only** — both keys and values are strings (no types).
"""

import os
from collections.abc import Mapping


class Environment:
    """A key-value store for environment variables.

    Each instance is an independent copy — modifying the source mapping
    does not affect it.
    """

    def __init__(self, initial: Mapping[str, str] | None = None) -> None:
        """Create an environment, optionally pre-populated.

        Args:
            initial: Starting variables (copied, not referenced).

        """
        self._vars: dict[str, str] = dict(initial) if initial else {}

    @classmethod
    def from_os(cls) -> "Environment":
        """Return a snapshot of the current process environment."""
        return cls(os.environ)

    def get(self, key: str, default: str | None = None) -> str | None:
        """Return the value for *key*, or *default* if not set."""
        return self._vars.get(key, default)

    def as_dict(self) -> dict[str, str]:
        """Return a fresh dict suitable for ``os.execvpe``."""
        return dict(self._vars)

    def __len__(self) -> int:
        """Return the number of variables."""
        return len(self._vars)
