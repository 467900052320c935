"""Compiler diagnostics and events."""

import re
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path


class DiagnosticCategory(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    SUGGESTION = "suggestion"
    MESSAGE = "message"


@dataclass(frozen=True)
class Diagnostic:
    """A compiler diagnostic, optionally anchored to a source location."""

    category: DiagnosticCategory
    code: int
    message: str
    file: Path | None = None
    line: int | None = None
    column: int | None = None

    def format(self) -> str:
        """Render in the compiler's own `file(line,col): error TSxxxx: message` form."""
        prefix = f"{self.category.value} TS{self.code}: {self.message}"
        if self.file is None:
            return prefix
        return f"{self.file}({self.line},{self.column}): {prefix}"

    def continued(self, line: str) -> "Diagnostic":
        """Append a continuation line of a chained message."""
        return replace(self, message=f"{self.message}\n{line.rstrip()}")


@dataclass(frozen=True)
class EmitResult:
    """Outcome of one full compile-and-emit run."""

    emit_skipped: bool
    diagnostics: tuple[Diagnostic, ...]


class CompilerEventKind(str, Enum):
    DIAGNOSTIC = "diagnostic"
    STATUS = "status"


@dataclass(frozen=True)
class CompilerEvent:
    """One event streamed from a watching compiler."""

    kind: CompilerEventKind
    message: str
    diagnostic: Diagnostic | None = None


_LOCATED = re.compile(
    r"^(?P<file>.+?)\((?P<line>\d+),(?P<column>\d+)\): "
    r"(?P<category>error|warning|suggestion|message) TS(?P<code>\d+): (?P<message>.*)$"
)
_GLOBAL = re.compile(
    r"^(?P<category>error|warning|suggestion|message) TS(?P<code>\d+): (?P<message>.*)$"
)


def parse_diagnostic_line(line: str, base_dir: Path) -> Diagnostic | None:
    """Parse one `--pretty false` diagnostic header line.

    Relative file names are resolved against base_dir, the compiler's working
    directory. Returns None for lines that are not diagnostic headers.
    """
    located = _LOCATED.match(line)
    if located is not None:
        return Diagnostic(
            category=DiagnosticCategory(located.group("category")),
            code=int(located.group("code")),
            message=located.group("message"),
            file=base_dir / located.group("file"),
            line=int(located.group("line")),
            column=int(located.group("column")),
        )
    unlocated = _GLOBAL.match(line)
    if unlocated is not None:
        return Diagnostic(
            category=DiagnosticCategory(unlocated.group("category")),
            code=int(unlocated.group("code")),
            message=unlocated.group("message"),
        )
    return None


def parse_diagnostics(output: str, base_dir: Path) -> list[Diagnostic]:
    """Parse compiler output into diagnostics, in the order they were printed.

    Indented lines continue the previous diagnostic's message chain.
    """
    diagnostics: list[Diagnostic] = []
    for line in output.splitlines():
        if not line.strip():
            continue
        if line[0].isspace() and diagnostics:
            diagnostics[-1] = diagnostics[-1].continued(line)
            continue
        diagnostic = parse_diagnostic_line(line, base_dir)
        if diagnostic is not None:
            diagnostics.append(diagnostic)
    return diagnostics
