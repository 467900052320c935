"""In-memory fake implementation of FileWatcher for testing."""

from collections.abc import AsyncIterator, Sequence
from pathlib import Path

from polyrepo.integrations.watcher.abc import FileWatcher


class FakeFileWatcher(FileWatcher):
    """Replays pre-configured change batches, then stops.

    All state is provided via constructor using keyword arguments.
    This class has NO public setup methods.
    """

    def __init__(self, *, batches: list[set[Path]] | None = None) -> None:
        """Create FakeFileWatcher.

        Args:
            batches: Change batches replayed to every watch() call, filtered
                to the watched paths
        """
        self._batches = batches or []
        self._watched: list[list[Path]] = []

    @property
    def watched(self) -> list[list[Path]]:
        """Read-only access to the paths of every watch() call."""
        return [list(paths) for paths in self._watched]

    async def watch(self, paths: Sequence[Path]) -> AsyncIterator[set[Path]]:
        self._watched.append(list(paths))
        for batch in self._batches:
            relevant = {p for p in batch if any(p.is_relative_to(root) for root in paths)}
            if relevant:
                yield relevant
