"""Abstract interface for running arbitrary commands in package directories."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from pathlib import Path


class CommandRunner(ABC):
    """Runs external programs such as the package installer or user commands."""

    @abstractmethod
    def run(self, cmd: str, args: Sequence[str], cwd: Path) -> str:
        """Run `cmd` with `args` in `cwd` and return its standard output.

        Raises:
            RuntimeError: If the command is missing or exits non-zero
        """
        ...
