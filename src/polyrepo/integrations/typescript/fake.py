"""In-memory fake implementation of TypeScriptCompiler for testing."""

from collections.abc import AsyncIterator, Mapping
from pathlib import Path

from polyrepo.core.program import CompilationUnit
from polyrepo.integrations.typescript.abc import TypeScriptCompiler
from polyrepo.integrations.typescript.types import CompilerEvent, EmitResult


class FakeTypeScriptCompiler(TypeScriptCompiler):
    """In-memory fake that returns pre-configured results.

    All state is provided via constructor using keyword arguments.
    This class has NO public setup methods.
    """

    def __init__(
        self,
        *,
        files: list[Path] | None = None,
        options: dict[str, object] | None = None,
        emit_result: EmitResult | None = None,
        watch_events: list[CompilerEvent] | None = None,
    ) -> None:
        """Create FakeTypeScriptCompiler.

        Args:
            files: File list returned by load_config for any configuration
            options: Compiler options returned by load_config
            emit_result: Result of emit(); defaults to a clean emit
            watch_events: Events yielded by watch() before it returns
        """
        self._files = files or []
        self._options = options or {}
        self._emit_result = emit_result or EmitResult(emit_skipped=False, diagnostics=())
        self._watch_events = watch_events or []
        self._emit_calls: list[tuple[CompilationUnit, dict[str, Path]]] = []
        self._watch_calls: list[tuple[CompilationUnit, dict[str, Path]]] = []

    @property
    def emit_calls(self) -> list[tuple[CompilationUnit, dict[str, Path]]]:
        """Read-only access to (unit, redirects) pairs passed to emit()."""
        return self._emit_calls.copy()

    @property
    def watch_calls(self) -> list[tuple[CompilationUnit, dict[str, Path]]]:
        """Read-only access to (unit, redirects) pairs passed to watch()."""
        return self._watch_calls.copy()

    def load_config(self, config_path: Path) -> CompilationUnit:
        return CompilationUnit(
            config_path=config_path, files=tuple(self._files), options=dict(self._options)
        )

    def emit(self, unit: CompilationUnit, redirects: Mapping[str, Path]) -> EmitResult:
        self._emit_calls.append((unit, dict(redirects)))
        return self._emit_result

    async def watch(
        self, unit: CompilationUnit, redirects: Mapping[str, Path]
    ) -> AsyncIterator[CompilerEvent]:
        self._watch_calls.append((unit, dict(redirects)))
        for event in self._watch_events:
            yield event
