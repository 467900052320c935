"""Production TypeScript compiler driving `tsc` as a subprocess.

Resolution redirects are applied through a derived configuration that extends
the canonical one and maps each redirected specifier in
`compilerOptions.paths`. The compiler then resolves those specifiers to the
given source files and treats them as part of the program rather than as
external libraries.
"""

import asyncio
import json
import logging
import os
import re
from collections.abc import AsyncIterator, Mapping
from pathlib import Path

from polyrepo.core.program import CompilationUnit
from polyrepo.core.subprocess import run_subprocess_with_context
from polyrepo.integrations.typescript.abc import TypeScriptCompiler
from polyrepo.integrations.typescript.types import (
    CompilerEvent,
    CompilerEventKind,
    Diagnostic,
    EmitResult,
    parse_diagnostic_line,
    parse_diagnostics,
)

logger = logging.getLogger(__name__)

DERIVED_CONFIG_NAME = ".polyrepo-tsconfig.json"

# tsc exit statuses: 0 Success, 2 DiagnosticsPresent_OutputsGenerated
EMITTED_EXIT_CODES = frozenset({0, 2})

# "12:00:01 PM - Found 0 errors. Watching for file changes."
_WATCH_STATUS = re.compile(r"^\[?[\d:.]+(?:\s*[AP]M)?\]?\s+-\s+(?P<message>.+)$")


class RealTypeScriptCompiler(TypeScriptCompiler):
    """Production implementation using the project's installed `tsc`."""

    def __init__(self, tsc: Path) -> None:
        self._tsc = tsc

    def load_config(self, config_path: Path) -> CompilationUnit:
        result = run_subprocess_with_context(
            [str(self._tsc), "--showConfig", "-p", str(config_path)],
            operation_context=f"parse compiler configuration {config_path}",
            cwd=config_path.parent,
        )
        data = json.loads(result.stdout)
        files = tuple(
            Path(os.path.normpath(config_path.parent / name)) for name in data.get("files", [])
        )
        return CompilationUnit(
            config_path=config_path, files=files, options=data.get("compilerOptions", {})
        )

    def emit(self, unit: CompilationUnit, redirects: Mapping[str, Path]) -> EmitResult:
        derived = write_derived_config(unit, redirects)
        try:
            result = run_subprocess_with_context(
                [str(self._tsc), "-p", str(derived), "--pretty", "false"],
                operation_context="run the TypeScript compiler",
                cwd=unit.config_path.parent,
                check=False,
            )
        finally:
            derived.unlink(missing_ok=True)

        diagnostics = parse_diagnostics(result.stdout, unit.config_path.parent)
        logger.debug("tsc exited with %d (%d diagnostics)", result.returncode, len(diagnostics))
        return EmitResult(
            emit_skipped=result.returncode not in EMITTED_EXIT_CODES,
            diagnostics=tuple(diagnostics),
        )

    async def watch(
        self, unit: CompilationUnit, redirects: Mapping[str, Path]
    ) -> AsyncIterator[CompilerEvent]:
        derived = write_derived_config(unit, redirects)
        base_dir = unit.config_path.parent
        try:
            process = await asyncio.create_subprocess_exec(
                str(self._tsc),
                "-p",
                str(derived),
                "--watch",
                "--preserveWatchOutput",
                "--pretty",
                "false",
                cwd=base_dir,
                stdout=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            derived.unlink(missing_ok=True)
            msg = f"Command not found while trying to watch the project: {self._tsc}"
            raise RuntimeError(msg) from e
        if process.stdout is None:
            derived.unlink(missing_ok=True)
            msg = "Failed to start the TypeScript compiler in watch mode"
            raise RuntimeError(msg)

        pending: Diagnostic | None = None
        try:
            async for raw in process.stdout:
                line = raw.decode("utf-8").rstrip()
                if not line:
                    continue
                if line[0].isspace() and pending is not None:
                    pending = pending.continued(line)
                    continue
                if pending is not None:
                    yield CompilerEvent(
                        kind=CompilerEventKind.DIAGNOSTIC,
                        message=pending.format(),
                        diagnostic=pending,
                    )
                    pending = None

                diagnostic = parse_diagnostic_line(line, base_dir)
                if diagnostic is not None:
                    pending = diagnostic
                    continue

                status = _WATCH_STATUS.match(line)
                message = status.group("message") if status is not None else line
                yield CompilerEvent(kind=CompilerEventKind.STATUS, message=message)
            if pending is not None:
                yield CompilerEvent(
                    kind=CompilerEventKind.DIAGNOSTIC, message=pending.format(), diagnostic=pending
                )
        finally:
            if process.returncode is None:
                process.terminate()
                await process.wait()
            derived.unlink(missing_ok=True)


def write_derived_config(unit: CompilationUnit, redirects: Mapping[str, Path]) -> Path:
    """Write a configuration extending the canonical one with resolution redirects.

    The derived file lives next to the canonical configuration so that every
    relative path in the canonical file keeps its meaning.
    """
    paths: dict[str, list[str]] = dict(unit.options.get("paths", {}))
    for specifier, target in sorted(redirects.items()):
        paths[specifier] = [str(target)]

    derived = unit.config_path.parent / DERIVED_CONFIG_NAME
    document = {
        "extends": f"./{unit.config_path.name}",
        "compilerOptions": {"paths": paths},
        "files": [str(file) for file in unit.files],
    }
    derived.write_text(json.dumps(document, indent=2) + "\n", encoding="utf-8")
    return derived

