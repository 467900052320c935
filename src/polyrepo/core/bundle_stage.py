"""Bundle stage: code and declaration bundles for every buildable package.

Bundles consume the compile stage's emitted output, so the batch pipeline
only runs this stage after a compile that did not skip emit.
"""

import logging
from collections.abc import Sequence
from pathlib import Path

from polyrepo.core.bundle_types import (
    BundleDescriptor,
    BundleKind,
    BundleResult,
    ExternalityPredicate,
    PluginReference,
)
from polyrepo.core.errors import BundleError
from polyrepo.core.registry import Package, PackageRegistry
from polyrepo.integrations.rollup.abc import Bundler

logger = logging.getLogger(__name__)

DTS_PLUGIN = PluginReference(module="rollup-plugin-dts")

# Expected when merging declarations; every other warning is surfaced
DECLARATION_SUPPRESSED_WARNINGS = frozenset({"CIRCULAR_DEPENDENCY", "UNUSED_EXTERNAL_IMPORT"})


def code_bundle_descriptor(
    package: Package,
    external: ExternalityPredicate,
    plugins: Sequence[PluginReference] = (),
) -> BundleDescriptor:
    return BundleDescriptor(
        package_name=package.name,
        kind=BundleKind.CODE,
        input=package.compiled_entry,
        output_file=package.dist_dir / "index.js",
        external=external,
        source_map=True,
        plugins=tuple(plugins),
    )


def declaration_bundle_descriptor(
    package: Package, external: ExternalityPredicate
) -> BundleDescriptor:
    return BundleDescriptor(
        package_name=package.name,
        kind=BundleKind.DECLARATION,
        input=package.declaration_entry,
        output_file=package.dist_dir / "index.d.ts",
        external=external,
        plugins=(DTS_PLUGIN,),
        suppressed_warnings=DECLARATION_SUPPRESSED_WARNINGS,
    )


def bundle_descriptors(
    registry: PackageRegistry,
    external: ExternalityPredicate,
    code_plugins: Sequence[PluginReference] = (),
) -> list[BundleDescriptor]:
    """All code descriptors followed by all declaration descriptors."""
    packages = registry.buildable_packages
    return [code_bundle_descriptor(p, external, code_plugins) for p in packages] + [
        declaration_bundle_descriptor(p, external) for p in packages
    ]


def write_bundle_result(result: BundleResult) -> list[Path]:
    """Write a result's chunks and maps into its descriptor's output directory.

    Returns:
        Paths written, maps included

    Raises:
        BundleError: If a chunk name would land outside the output directory
    """
    output_dir = result.descriptor.output_dir
    output_dir.mkdir(parents=True, exist_ok=True)

    written: list[Path] = []
    for chunk in result.chunks:
        target = output_dir / chunk.file_name
        if target.resolve().parent != output_dir.resolve():
            msg = f"Bundle chunk {chunk.file_name!r} escapes {output_dir}"
            raise BundleError(msg)
        target.write_text(chunk.code, encoding="utf-8")
        written.append(target)
        if chunk.source_map is not None:
            map_path = target.with_name(target.name + ".map")
            map_path.write_text(chunk.source_map, encoding="utf-8")
            written.append(map_path)
    return written


async def bundle_packages(
    bundler: Bundler, descriptors: Sequence[BundleDescriptor]
) -> list[BundleResult]:
    """Generate every bundle in one batch, write them, then release the results.

    A bundler failure propagates and aborts the whole batch.

    Returns:
        The closed results, for their warnings and descriptors
    """
    results = await bundler.generate(descriptors)
    try:
        for result in results:
            written = write_bundle_result(result)
            logger.debug("Wrote %s: %s", result.descriptor.lane, [str(p) for p in written])
    finally:
        for result in results:
            result.close()
    return results
