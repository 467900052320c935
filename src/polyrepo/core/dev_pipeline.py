"""Incremental dev pipeline: per-package bundle lanes beside the compiler watch.

Every lane, the compiler watch consumer and the HTTP server run as tasks of
one asyncio event loop. Lanes share only the read-only registry and report
progress through their observer; a failure in one lane never reaches the
others.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from polyrepo.core.bundle_stage import (
    code_bundle_descriptor,
    declaration_bundle_descriptor,
    write_bundle_result,
)
from polyrepo.core.bundle_types import (
    BundleDescriptor,
    BundleKind,
    ExternalityPredicate,
    PluginReference,
)
from polyrepo.core.errors import BundleError
from polyrepo.core.registry import PackageRegistry
from polyrepo.integrations.rollup.abc import Bundler
from polyrepo.integrations.typescript.types import CompilerEvent
from polyrepo.integrations.watcher.abc import FileWatcher

logger = logging.getLogger(__name__)


class LaneEventKind(str, Enum):
    STARTING = "starting"
    BUNDLING = "bundling"
    ENDED = "ended"
    ERRORED = "errored"


@dataclass(frozen=True)
class LaneEvent:
    lane: str
    package_name: str
    kind: LaneEventKind
    outputs: tuple[Path, ...] = ()
    error: str | None = None


LaneObserver = Callable[[LaneEvent], None]


class BundleLane:
    """Watch-and-rebuild loop for one package/artifact-kind pair.

    Each cycle emits STARTING, then BUNDLING, then ENDED or ERRORED, in that
    order. The cycle's bundle result is closed before the next cycle starts.
    """

    def __init__(
        self,
        descriptor: BundleDescriptor,
        bundler: Bundler,
        watcher: FileWatcher,
        observer: LaneObserver,
        source_dir: Path,
    ) -> None:
        self.descriptor = descriptor
        self._bundler = bundler
        self._watcher = watcher
        self._observer = observer
        self._source_dir = source_dir

    @property
    def name(self) -> str:
        return self.descriptor.lane

    def is_relevant(self, path: Path) -> bool:
        """Whether a change to `path` should trigger a rebuild of this lane."""
        if not path.is_relative_to(self._source_dir):
            return False
        if self.descriptor.kind == BundleKind.DECLARATION:
            return path.name.endswith(".d.ts")
        return path.suffix == ".js"

    async def run(self) -> None:
        await self.run_cycle()
        async for batch in self._watcher.watch([self._source_dir]):
            if any(self.is_relevant(path) for path in batch):
                await self.run_cycle()

    async def run_cycle(self) -> LaneEvent:
        """Rebuild once and return the terminal event of the cycle."""
        self._emit(LaneEventKind.STARTING)
        self._emit(LaneEventKind.BUNDLING)
        try:
            results = await self._bundler.generate([self.descriptor])
        except Exception as e:
            return self._fail(e)

        outputs: list[Path] = []
        try:
            for result in results:
                outputs.extend(write_bundle_result(result))
                for warning in result.warnings:
                    logger.warning("%s: %s", self.name, warning)
        except Exception as e:
            return self._fail(e)
        finally:
            for result in results:
                result.close()
        return self._emit(LaneEventKind.ENDED, outputs=tuple(outputs))

    def _fail(self, error: Exception) -> LaneEvent:
        # A failure ends this lane's cycle only
        if isinstance(error, BundleError):
            message = str(error)
        else:
            logger.debug("Unexpected failure in lane %s", self.name, exc_info=True)
            message = f"{type(error).__name__}: {error}"
        return self._emit(LaneEventKind.ERRORED, error=message)

    def _emit(
        self, kind: LaneEventKind, *, outputs: tuple[Path, ...] = (), error: str | None = None
    ) -> LaneEvent:
        event = LaneEvent(
            lane=self.name,
            package_name=self.descriptor.package_name,
            kind=kind,
            outputs=outputs,
            error=error,
        )
        self._observer(event)
        return event


def create_lanes(
    registry: PackageRegistry,
    external: ExternalityPredicate,
    bundler: Bundler,
    watcher: FileWatcher,
    observer: LaneObserver,
    code_plugins: Sequence[PluginReference] = (),
) -> list[BundleLane]:
    """A code lane and a declaration lane for every buildable package."""
    lanes: list[BundleLane] = []
    for package in registry.buildable_packages:
        for descriptor in (
            code_bundle_descriptor(package, external, code_plugins),
            declaration_bundle_descriptor(package, external),
        ):
            lanes.append(BundleLane(descriptor, bundler, watcher, observer, package.source_dir))
    return lanes


async def _consume_compiler_events(
    events: AsyncIterator[CompilerEvent], on_event: Callable[[CompilerEvent], None]
) -> None:
    async for event in events:
        on_event(event)


async def run_dev_pipeline(
    lanes: Sequence[BundleLane],
    compiler_events: AsyncIterator[CompilerEvent],
    on_compiler_event: Callable[[CompilerEvent], None],
    serve: Callable[[], Awaitable[None]] | None = None,
) -> None:
    """Run every lane, the compiler watch and the server until all finish.

    Lanes report their own failures. A failure of the compiler watch or the
    server cancels the rest and is re-raised unwrapped from its
    ExceptionGroup.
    """
    try:
        async with asyncio.TaskGroup() as group:
            group.create_task(_consume_compiler_events(compiler_events, on_compiler_event))
            for lane in lanes:
                group.create_task(lane.run(), name=lane.name)
            if serve is not None:
                group.create_task(serve(), name="devserver")
    except ExceptionGroup as group:
        raise _first_leaf(group) from group


def _first_leaf(group: BaseExceptionGroup) -> BaseException:
    first = group.exceptions[0]
    if isinstance(first, BaseExceptionGroup):
        return _first_leaf(first)
    return first
