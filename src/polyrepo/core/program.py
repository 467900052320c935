"""Compilation units and the resolved Program graph."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from polyrepo.core.imports import ImportScanner
from polyrepo.core.resolution.types import (
    ModuleResolver,
    ResolutionContext,
    ResolvedModule,
    is_path_specifier,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompilationUnit:
    """The files and options of one canonical compiler configuration."""

    config_path: Path
    files: tuple[Path, ...]
    options: dict[str, Any]


@dataclass(frozen=True)
class Program:
    """The unit's files with every import specifier resolved.

    Built fresh for each compile and discarded afterwards.
    """

    unit: CompilationUnit
    resolutions: dict[Path, dict[str, ResolvedModule | None]]

    def internal_redirects(self) -> dict[str, Path]:
        """Map each bare specifier that resolved to an internal module to its file."""
        redirects: dict[str, Path] = {}
        for modules in self.resolutions.values():
            for specifier, resolved in modules.items():
                if resolved is None or resolved.is_external_library_import:
                    continue
                if is_path_specifier(specifier):
                    continue
                redirects[specifier] = resolved.resolved_file_name
        return redirects

    def unresolved(self) -> list[tuple[Path, str]]:
        return [
            (file, specifier)
            for file, modules in self.resolutions.items()
            for specifier, resolved in modules.items()
            if resolved is None
        ]


def build_program(
    unit: CompilationUnit, resolver: ModuleResolver, scanner: ImportScanner
) -> Program:
    """Resolve the imports of exactly the unit's files through the given strategy.

    Files listed in the configuration but absent on disk are left out of the
    graph; the compiler reports them itself.
    """
    resolutions: dict[Path, dict[str, ResolvedModule | None]] = {}
    for file in unit.files:
        if not file.is_file():
            logger.debug("Skipping missing file %s", file)
            continue
        specifiers = scanner.specifiers(file)
        results = resolver.resolve(specifiers, ResolutionContext(containing_file=file))
        resolutions[file] = dict(zip(specifiers, results, strict=True))

    program = Program(unit=unit, resolutions=resolutions)
    logger.debug(
        "Program over %d files, %d unresolved imports",
        len(resolutions),
        len(program.unresolved()),
    )
    return program
