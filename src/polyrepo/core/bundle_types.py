"""Bundle descriptors and results shared by the bundle stage and bundlers."""

import shutil
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from polyrepo.core.resolution.types import PATH_SPECIFIER_PATTERN, is_path_specifier


class BundleKind(str, Enum):
    CODE = "code"
    DECLARATION = "declaration"


@dataclass(frozen=True)
class ExternalityPredicate:
    """Decides per import specifier whether a bundle leaves it to the consumer.

    Path specifiers are always bundled. Runtime-support helpers are bundled
    too. Every other (bare) specifier is external.
    """

    runtime_helpers: frozenset[str] = frozenset({"tslib"})

    def __call__(self, specifier: str) -> bool:
        if specifier in self.runtime_helpers:
            return False
        return not is_path_specifier(specifier)

    def to_config(self) -> dict[str, Any]:
        """Serialise for a generated bundler configuration."""
        return {"inline": sorted(self.runtime_helpers), "pathPattern": PATH_SPECIFIER_PATTERN}


@dataclass(frozen=True)
class PluginReference:
    """A bundler plugin imported by module name and called with options."""

    module: str
    export: str = "default"
    options: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class BundleDescriptor:
    """Everything needed to produce one bundle for one package."""

    package_name: str
    kind: BundleKind
    input: Path
    output_file: Path
    external: ExternalityPredicate
    source_map: bool = False
    plugins: tuple[PluginReference, ...] = ()
    suppressed_warnings: frozenset[str] = frozenset()

    @property
    def output_dir(self) -> Path:
        return self.output_file.parent

    @property
    def lane(self) -> str:
        return f"{self.package_name}:{self.kind.value}"


@dataclass(frozen=True)
class OutputChunk:
    """One generated file, with its source map when one was produced."""

    file_name: str
    code: str
    source_map: str | None = None


class BundleResult:
    """A generated bundle awaiting writing.

    Holds the bundler's scratch workspace until close() is called.
    """

    def __init__(
        self,
        descriptor: BundleDescriptor,
        chunks: list[OutputChunk],
        *,
        warnings: list[str] | None = None,
        workspace: Path | None = None,
    ) -> None:
        self.descriptor = descriptor
        self.chunks = chunks
        self.warnings = warnings or []
        self._workspace = workspace
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if self._closed:
            return
        if self._workspace is not None:
            shutil.rmtree(self._workspace, ignore_errors=True)
        self._closed = True

    def __enter__(self) -> "BundleResult":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
