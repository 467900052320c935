"""Abstract interface for filesystem change notification."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Sequence
from pathlib import Path


class FileWatcher(ABC):
    """Streams batches of changed files beneath a set of directories."""

    @abstractmethod
    def watch(self, paths: Sequence[Path]) -> AsyncIterator[set[Path]]:
        """Yield each non-empty batch of changed files under `paths`.

        Changes arriving in quick succession are coalesced into one batch.
        """
        ...
