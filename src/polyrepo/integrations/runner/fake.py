"""In-memory fake implementation of CommandRunner for testing."""

from collections.abc import Sequence
from pathlib import Path

from polyrepo.integrations.runner.abc import CommandRunner


class FakeCommandRunner(CommandRunner):
    """Records every invocation and returns canned output.

    All state is provided via constructor using keyword arguments.
    This class has NO public setup methods.
    """

    def __init__(
        self,
        *,
        outputs: dict[str, str] | None = None,
        failing_dirs: dict[Path, str] | None = None,
    ) -> None:
        """Create FakeCommandRunner.

        Args:
            outputs: Output per command name; unknown commands print nothing
            failing_dirs: Working directories in which every command fails,
                mapped to the error message raised
        """
        self._outputs = outputs or {}
        self._failing_dirs = failing_dirs or {}
        self._calls: list[tuple[str, list[str], Path]] = []

    @property
    def calls(self) -> list[tuple[str, list[str], Path]]:
        """Read-only access to (cmd, args, cwd) of every run() call."""
        return self._calls.copy()

    def run(self, cmd: str, args: Sequence[str], cwd: Path) -> str:
        self._calls.append((cmd, list(args), cwd))
        if cwd in self._failing_dirs:
            raise RuntimeError(self._failing_dirs[cwd])
        return self._outputs.get(cmd, "")
