"""Abstract interface for the TypeScript compiler."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Mapping
from pathlib import Path

from polyrepo.core.program import CompilationUnit
from polyrepo.integrations.typescript.types import CompilerEvent, EmitResult


class TypeScriptCompiler(ABC):
    """Abstract interface for loading, compiling and watching a TypeScript project.

    `redirects` maps module specifiers to the source files they must resolve
    to, overriding the compiler's default resolution for those specifiers.
    """

    @abstractmethod
    def load_config(self, config_path: Path) -> CompilationUnit:
        """Parse a compiler configuration file with the compiler's own rules."""
        ...

    @abstractmethod
    def emit(self, unit: CompilationUnit, redirects: Mapping[str, Path]) -> EmitResult:
        """Type-check the unit and write its compiled output."""
        ...

    @abstractmethod
    def watch(
        self, unit: CompilationUnit, redirects: Mapping[str, Path]
    ) -> AsyncIterator[CompilerEvent]:
        """Compile incrementally on every change, streaming events as they occur.

        Yields:
            CompilerEvent objects as the compiler reports them, not batched
        """
        ...
