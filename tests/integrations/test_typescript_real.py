"""Tests for tsc output parsing and the derived configuration."""

import json
from pathlib import Path

import pytest

from polyrepo.core.program import CompilationUnit
from polyrepo.integrations.typescript.real import (
    DERIVED_CONFIG_NAME,
    RealTypeScriptCompiler,
    write_derived_config,
)
from polyrepo.integrations.typescript.types import (
    Diagnostic,
    DiagnosticCategory,
    parse_diagnostic_line,
    parse_diagnostics,
)

OUTPUT = """\
view/src/index.ts(3,7): error TS2322: Type 'string' is not assignable to type 'number'.
state/src/index.ts(10,1): error TS2345: Argument of type 'A' is not assignable to parameter of type 'B'.
  Property 'x' is missing in type 'A' but required in type 'B'.
error TS5023: Unknown compiler option 'bogus'.

Found 3 errors.
"""


def test_parse_diagnostics_in_discovery_order(tmp_path: Path) -> None:
    diagnostics = parse_diagnostics(OUTPUT, tmp_path)

    assert [d.code for d in diagnostics] == [2322, 2345, 5023]
    first, second, third = diagnostics
    assert first.file == tmp_path / "view/src/index.ts"
    assert (first.line, first.column) == (3, 7)
    assert first.category == DiagnosticCategory.ERROR
    assert second.message.endswith("\n  Property 'x' is missing in type 'A' but required in type 'B'.")
    assert third.file is None


def test_format_round_trips_compiler_layout(tmp_path: Path) -> None:
    line = "view/src/index.ts(3,7): error TS2322: Type 'string' is not assignable."

    diagnostic = parse_diagnostic_line(line, Path("."))

    assert diagnostic is not None
    assert diagnostic.format() == line


def test_non_diagnostic_lines_are_ignored(tmp_path: Path) -> None:
    assert parse_diagnostic_line("Found 3 errors.", tmp_path) is None


def test_global_diagnostic_format() -> None:
    diagnostic = Diagnostic(DiagnosticCategory.WARNING, 6133, "unused")

    assert diagnostic.format() == "warning TS6133: unused"


def test_derived_config_extends_canonical_and_adds_redirects(tmp_path: Path) -> None:
    config_path = tmp_path / "tsconfig.json"
    entry = tmp_path / "state" / "src" / "index.ts"
    unit = CompilationUnit(
        config_path=config_path,
        files=(entry,),
        options={"paths": {"legacy/*": ["./legacy/*"]}, "strict": True},
    )

    derived = write_derived_config(unit, {"@test/state": entry})

    assert derived == tmp_path / DERIVED_CONFIG_NAME
    document = json.loads(derived.read_text(encoding="utf-8"))
    assert document == {
        "extends": "./tsconfig.json",
        "compilerOptions": {
            "paths": {"legacy/*": ["./legacy/*"], "@test/state": [str(entry)]},
        },
        "files": [str(entry)],
    }


async def test_watch_without_compiler_binary_fails_with_context(tmp_path: Path) -> None:
    unit = CompilationUnit(config_path=tmp_path / "tsconfig.json", files=(), options={})
    compiler = RealTypeScriptCompiler(tmp_path / "node_modules" / ".bin" / "tsc")

    with pytest.raises(RuntimeError, match="Command not found while trying to watch the project"):
        async for _ in compiler.watch(unit, {}):
            pass

    assert not (tmp_path / DERIVED_CONFIG_NAME).exists()
