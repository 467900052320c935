"""Tests for default and sibling-package module resolution."""

import json
from collections.abc import Sequence
from pathlib import Path

from polyrepo.core.registry import Package, PackageRegistry
from polyrepo.core.resolution import (
    ModuleResolver,
    NodeModuleResolver,
    ResolutionContext,
    ResolutionMode,
    ResolvedModule,
    SiblingPackageResolver,
    is_path_specifier,
)


class RecordingResolver(ModuleResolver):
    """Resolves every specifier to an external file and records each batch."""

    def __init__(self) -> None:
        self.batches: list[list[str]] = []

    def resolve(
        self, specifiers: Sequence[str], context: ResolutionContext
    ) -> list[ResolvedModule | None]:
        self.batches.append(list(specifiers))
        return [
            None if specifier == "missing" else ResolvedModule(Path(f"/lib/{specifier}.d.ts"), True)
            for specifier in specifiers
        ]


def _write(path: Path, text: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_path_specifiers() -> None:
    assert is_path_specifier("./x")
    assert is_path_specifier("../x")
    assert is_path_specifier("/abs/x")
    assert is_path_specifier("C:/x")
    assert not is_path_specifier("tslib")
    assert not is_path_specifier("@codemirror/state")


def test_sibling_specifier_resolves_to_main_entry(two_package_registry: PackageRegistry) -> None:
    fallback = RecordingResolver()
    resolver = SiblingPackageResolver(two_package_registry, "@test", fallback)

    [result] = resolver.resolve(["@test/view"], ResolutionContext(Path("/x/a.ts")))

    assert result == ResolvedModule(
        resolved_file_name=two_package_registry.resolve("view").main_entry,
        is_external_library_import=False,
    )
    assert fallback.batches == []


def test_other_specifiers_delegate_in_one_batch_preserving_order(
    two_package_registry: PackageRegistry,
) -> None:
    fallback = RecordingResolver()
    resolver = SiblingPackageResolver(two_package_registry, "@test", fallback)
    specifiers = ["lezer", "@test/state", "@test/unknown", "missing", "@test/state/sub"]

    results = resolver.resolve(specifiers, ResolutionContext(Path("/x/a.ts")))

    assert fallback.batches == [["lezer", "@test/unknown", "missing", "@test/state/sub"]]
    assert results[0] == ResolvedModule(Path("/lib/lezer.d.ts"), True)
    assert results[1] is not None
    assert results[1].is_external_library_import is False
    assert results[2] == ResolvedModule(Path("/lib/@test/unknown.d.ts"), True)
    assert results[3] is None
    assert results[4] == ResolvedModule(Path("/lib/@test/state/sub.d.ts"), True)


def test_hyphenated_sibling_names_are_recognized(tmp_path: Path) -> None:
    main = tmp_path / "lang-python" / "src" / "python.ts"
    registry = PackageRegistry(packages=(Package("lang-python", tmp_path / "lang-python", main),))
    resolver = SiblingPackageResolver(registry, "@test", RecordingResolver())

    assert resolver.resolve_sibling("@test/lang-python") == ResolvedModule(main, False)


def test_data_packages_are_not_redirected(tmp_path: Path) -> None:
    registry = PackageRegistry(packages=(Package("legacy", tmp_path / "legacy", None),))
    fallback = RecordingResolver()
    resolver = SiblingPackageResolver(registry, "@test", fallback)

    resolver.resolve(["@test/legacy"], ResolutionContext(Path("/x/a.ts")))

    assert fallback.batches == [["@test/legacy"]]


def test_relative_js_specifier_finds_typescript_source(tmp_path: Path) -> None:
    importer = _write(tmp_path / "src" / "index.ts")
    helper = _write(tmp_path / "src" / "helper.ts")

    [result] = NodeModuleResolver().resolve(["./helper.js"], ResolutionContext(importer))

    assert result == ResolvedModule(helper, False)


def test_relative_specifier_probes_extensions_and_index(tmp_path: Path) -> None:
    importer = _write(tmp_path / "src" / "index.ts")
    helper = _write(tmp_path / "src" / "helper.ts")
    nested = _write(tmp_path / "src" / "util" / "index.ts")

    results = NodeModuleResolver().resolve(
        ["./helper", "./util", "./absent"], ResolutionContext(importer)
    )

    assert results == [ResolvedModule(helper, False), ResolvedModule(nested, False), None]


def test_parent_relative_specifier(tmp_path: Path) -> None:
    importer = _write(tmp_path / "view" / "src" / "index.ts")
    target = _write(tmp_path / "shared" / "text.ts")

    [result] = NodeModuleResolver().resolve(["../../shared/text"], ResolutionContext(importer))

    assert result == ResolvedModule(target, False)


def test_bare_specifier_uses_types_field_and_is_external(tmp_path: Path) -> None:
    importer = _write(tmp_path / "state" / "src" / "index.ts")
    package_dir = tmp_path / "node_modules" / "lezer"
    _write(package_dir / "package.json", json.dumps({"types": "dist/index.d.ts"}))
    declarations = _write(package_dir / "dist" / "index.d.ts")

    [result] = NodeModuleResolver().resolve(["lezer"], ResolutionContext(importer))

    assert result == ResolvedModule(declarations, True)


def test_types_mode_falls_back_to_definitely_typed(tmp_path: Path) -> None:
    importer = _write(tmp_path / "src" / "index.ts")
    _write(tmp_path / "node_modules" / "plain" / "package.json", json.dumps({"main": "lib.cjs"}))
    typed = _write(tmp_path / "node_modules" / "@types" / "plain" / "index.d.ts")

    [result] = NodeModuleResolver().resolve(["plain"], ResolutionContext(importer))

    assert result == ResolvedModule(typed, True)


def test_module_mode_prefers_module_field(tmp_path: Path) -> None:
    importer = _write(tmp_path / "demo" / "demo.js")
    package_dir = tmp_path / "node_modules" / "@scope" / "pkg"
    manifest = {"types": "dist/index.d.ts", "module": "dist/index.mjs", "main": "dist/index.cjs"}
    _write(package_dir / "package.json", json.dumps(manifest))
    module = _write(package_dir / "dist" / "index.mjs")
    _write(package_dir / "dist" / "index.d.ts")

    [result] = NodeModuleResolver().resolve(
        ["@scope/pkg"], ResolutionContext(importer, ResolutionMode.MODULE)
    )

    assert result == ResolvedModule(module, True)


def test_package_subpath(tmp_path: Path) -> None:
    importer = _write(tmp_path / "src" / "index.ts")
    target = _write(tmp_path / "node_modules" / "lib" / "extra" / "thing.d.ts")

    [result] = NodeModuleResolver().resolve(["lib/extra/thing"], ResolutionContext(importer))

    assert result == ResolvedModule(target, True)


def test_unknown_package_is_unresolved(tmp_path: Path) -> None:
    importer = _write(tmp_path / "src" / "index.ts")

    assert NodeModuleResolver().resolve(["nowhere"], ResolutionContext(importer)) == [None]
