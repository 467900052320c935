"""TypeScript compiler integration."""

from polyrepo.integrations.typescript.abc import TypeScriptCompiler
from polyrepo.integrations.typescript.fake import FakeTypeScriptCompiler
from polyrepo.integrations.typescript.types import (
    CompilerEvent,
    CompilerEventKind,
    Diagnostic,
    DiagnosticCategory,
    EmitResult,
)

__all__ = [
    "CompilerEvent",
    "CompilerEventKind",
    "Diagnostic",
    "DiagnosticCategory",
    "EmitResult",
    "FakeTypeScriptCompiler",
    "TypeScriptCompiler",
]
