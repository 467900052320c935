"""Tests for bundle descriptors, the externality predicate and bundle writing."""

from pathlib import Path

import pytest

from polyrepo.core.bundle_stage import (
    DECLARATION_SUPPRESSED_WARNINGS,
    DTS_PLUGIN,
    bundle_descriptors,
    bundle_packages,
    write_bundle_result,
)
from polyrepo.core.bundle_types import (
    BundleKind,
    BundleResult,
    ExternalityPredicate,
    OutputChunk,
    PluginReference,
)
from polyrepo.core.errors import BundleError
from polyrepo.core.registry import Package, PackageRegistry
from polyrepo.integrations.rollup.fake import FakeBundler


@pytest.mark.parametrize("specifier", ["./a.js", "../b.js", "/abs/c.js", "C:/d.js", "tslib"])
def test_predicate_bundles_paths_and_runtime_helpers(specifier: str) -> None:
    assert ExternalityPredicate()(specifier) is False


@pytest.mark.parametrize("specifier", ["@codemirror/state", "lezer", "style-mod", "tslib/x"])
def test_predicate_leaves_bare_specifiers_external(specifier: str) -> None:
    assert ExternalityPredicate()(specifier) is True


def test_predicate_serialises_for_bundler_configuration() -> None:
    predicate = ExternalityPredicate(runtime_helpers=frozenset({"tslib", "helpers"}))

    assert predicate.to_config() == {"inline": ["helpers", "tslib"], "pathPattern": r"^(\.{0,2}/|\w:)"}


def test_descriptors_list_code_bundles_before_declarations(tmp_path: Path) -> None:
    registry = PackageRegistry(
        packages=(
            Package("state", tmp_path / "state", tmp_path / "state/src/index.ts"),
            Package("legacy", tmp_path / "legacy", None),
            Package("lang-python", tmp_path / "lang-python", tmp_path / "lang-python/src/python.ts"),
        )
    )
    plugin = PluginReference(module="lezer-generator/rollup", export="lezer")

    descriptors = bundle_descriptors(registry, ExternalityPredicate(), [plugin])

    assert [d.lane for d in descriptors] == [
        "state:code",
        "lang-python:code",
        "state:declaration",
        "lang-python:declaration",
    ]
    code, declaration = descriptors[1], descriptors[3]
    assert code.input == tmp_path / "lang-python/src/python.js"
    assert code.output_file == tmp_path / "lang-python/dist/index.js"
    assert code.source_map is True
    assert code.plugins == (plugin,)
    assert code.suppressed_warnings == frozenset()
    assert declaration.kind == BundleKind.DECLARATION
    assert declaration.input == tmp_path / "lang-python/src/python.d.ts"
    assert declaration.output_file == tmp_path / "lang-python/dist/index.d.ts"
    assert declaration.source_map is False
    assert declaration.plugins == (DTS_PLUGIN,)
    assert declaration.suppressed_warnings == DECLARATION_SUPPRESSED_WARNINGS


def test_write_creates_output_dir_and_maps(tmp_path: Path, two_package_registry) -> None:
    [descriptor, _, _, _] = bundle_descriptors(two_package_registry, ExternalityPredicate())
    result = BundleResult(
        descriptor,
        [OutputChunk("index.js", "export {}\n", source_map='{"version":3}')],
    )

    written = write_bundle_result(result)

    dist = tmp_path / "state" / "dist"
    assert written == [dist / "index.js", dist / "index.js.map"]
    assert (dist / "index.js").read_text(encoding="utf-8") == "export {}\n"
    assert (dist / "index.js.map").read_text(encoding="utf-8") == '{"version":3}'


def test_write_rejects_chunks_escaping_output_dir(tmp_path: Path, two_package_registry) -> None:
    [descriptor, *_] = bundle_descriptors(two_package_registry, ExternalityPredicate())
    result = BundleResult(descriptor, [OutputChunk("../evil.js", "")])

    with pytest.raises(BundleError, match="escapes"):
        write_bundle_result(result)
    assert not (tmp_path / "state" / "evil.js").exists()


async def test_bundle_packages_writes_every_artifact_and_closes_results(
    tmp_path: Path, two_package_registry
) -> None:
    bundler = FakeBundler()
    descriptors = bundle_descriptors(two_package_registry, ExternalityPredicate())

    await bundle_packages(bundler, descriptors)

    assert bundler.batches == [descriptors]
    for name in ("state", "view"):
        dist = tmp_path / name / "dist"
        assert (dist / "index.js").is_file()
        assert (dist / "index.js.map").is_file()
        assert (dist / "index.d.ts").is_file()
        assert not (dist / "index.d.ts.map").exists()
    assert all(result.closed for result in bundler.results)


async def test_bundler_failure_aborts_the_batch(tmp_path: Path, two_package_registry) -> None:
    bundler = FakeBundler(failing_packages={"view"})
    descriptors = bundle_descriptors(two_package_registry, ExternalityPredicate())

    with pytest.raises(BundleError, match="view"):
        await bundle_packages(bundler, descriptors)

    assert not (tmp_path / "state" / "dist").exists()


def test_closing_a_result_removes_its_workspace(tmp_path: Path, two_package_registry) -> None:
    [descriptor, *_] = bundle_descriptors(two_package_registry, ExternalityPredicate())
    workspace = tmp_path / "workspace"
    workspace.mkdir()

    with BundleResult(descriptor, [], workspace=workspace) as result:
        assert not result.closed

    assert result.closed
    assert not workspace.exists()
