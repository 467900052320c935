"""Type-check/compile stage.

Compiles the whole multi-package project as a single program. Diagnostics
are reported in discovery order and never fail the stage on their own; only
a skipped emit does.
"""

import logging
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass
from pathlib import Path

from polyrepo.core.errors import ConfigurationError
from polyrepo.core.imports import ImportScanner
from polyrepo.core.program import CompilationUnit, build_program
from polyrepo.core.resolution.types import ModuleResolver
from polyrepo.integrations.typescript.abc import TypeScriptCompiler
from polyrepo.integrations.typescript.types import CompilerEvent, Diagnostic

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompileResult:
    """Verdict of a batch compile.

    A result can carry diagnostics and still have emitted; callers must halt
    only when emit_skipped is set.
    """

    emit_skipped: bool
    diagnostics: tuple[Diagnostic, ...]

    @property
    def succeeded(self) -> bool:
        return not self.emit_skipped


def load_compilation_unit(compiler: TypeScriptCompiler, config_path: Path) -> CompilationUnit:
    """Load the canonical compiler configuration.

    Raises:
        ConfigurationError: If the configuration file does not exist
    """
    if not config_path.is_file():
        raise ConfigurationError(f"Compiler configuration not found: {config_path}")
    return compiler.load_config(config_path)


def compile_project(
    compiler: TypeScriptCompiler,
    config_path: Path,
    resolver: ModuleResolver,
    scanner: ImportScanner,
    report: Callable[[Diagnostic], None],
) -> CompileResult:
    """Compile and emit the project, resolving imports through `resolver`.

    Args:
        compiler: Compiler used to parse the configuration and emit
        config_path: Canonical compiler configuration file
        resolver: Resolution strategy applied to every file of the program
        scanner: Import scanner used to build the program graph
        report: Called once per diagnostic, in discovery order

    Returns:
        CompileResult; emit_skipped means the build must halt
    """
    unit = load_compilation_unit(compiler, config_path)
    program = build_program(unit, resolver, scanner)
    redirects = program.internal_redirects()
    logger.debug("Compiling %d files with %d redirects", len(unit.files), len(redirects))

    emitted = compiler.emit(unit, redirects)
    for diagnostic in emitted.diagnostics:
        report(diagnostic)
    return CompileResult(emit_skipped=emitted.emit_skipped, diagnostics=emitted.diagnostics)


async def watch_project(
    compiler: TypeScriptCompiler,
    config_path: Path,
    resolver: ModuleResolver,
    scanner: ImportScanner,
    unit: CompilationUnit | None = None,
) -> AsyncIterator[CompilerEvent]:
    """Keep the program warm and stream compiler events as files change.

    The redirect table is computed once from the program at startup. Pass
    `unit` when the configuration was already loaded.
    """
    if unit is None:
        unit = load_compilation_unit(compiler, config_path)
    program = build_program(unit, resolver, scanner)
    async for event in compiler.watch(unit, program.internal_redirects()):
        yield event
