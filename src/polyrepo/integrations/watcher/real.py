"""Production file watcher backed by watchfiles."""

import logging
from collections.abc import AsyncIterator, Sequence
from pathlib import Path

from watchfiles import awatch

from polyrepo.integrations.watcher.abc import FileWatcher

logger = logging.getLogger(__name__)


class RealFileWatcher(FileWatcher):
    def __init__(self, debounce_ms: int = 200) -> None:
        self._debounce_ms = debounce_ms

    async def watch(self, paths: Sequence[Path]) -> AsyncIterator[set[Path]]:
        async for changes in awatch(*paths, debounce=self._debounce_ms):
            batch = {Path(path) for _, path in changes}
            logger.debug("Changed: %s", sorted(str(p) for p in batch))
            yield batch
