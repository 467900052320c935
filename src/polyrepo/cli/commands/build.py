"""Batch build: one compile of the whole project, then every bundle."""

import asyncio
import time

import click

from polyrepo.cli.output import format_duration, user_output, warning_output
from polyrepo.core.bundle_stage import bundle_descriptors, bundle_packages
from polyrepo.core.compile_stage import compile_project
from polyrepo.core.context import PolyrepoContext
from polyrepo.core.errors import BuildError
from polyrepo.core.imports import ImportScanner
from polyrepo.core.registry import PackageRegistry
from polyrepo.core.resolution import NodeModuleResolver, SiblingPackageResolver
from polyrepo.integrations.typescript.types import Diagnostic


def _report_diagnostic(diagnostic: Diagnostic) -> None:
    user_output(diagnostic.format())


def sibling_resolver(ctx: PolyrepoContext, registry: PackageRegistry) -> SiblingPackageResolver:
    return SiblingPackageResolver(registry, ctx.config.scope, NodeModuleResolver())


def run_build(ctx: PolyrepoContext) -> None:
    """Compile, halt on a skipped emit, then bundle every buildable package.

    Raises:
        ConfigurationError: If the registry or compiler configuration is unusable
        BuildError: If the compiler skipped emit; no bundle is produced
        BundleError: If any bundle fails; the whole batch is aborted
    """
    registry = ctx.load_registry()

    user_output("Running TypeScript compiler...")
    start = time.perf_counter()
    result = compile_project(
        ctx.compiler,
        ctx.compiler_config_path,
        sibling_resolver(ctx, registry),
        ImportScanner(),
        report=_report_diagnostic,
    )
    if result.emit_skipped:
        raise BuildError("TS build failed")
    user_output(f"Done in {format_duration(time.perf_counter() - start)}")

    user_output("Building bundles...")
    start = time.perf_counter()
    descriptors = bundle_descriptors(registry, ctx.externality, ctx.config.code_plugins)
    results = asyncio.run(bundle_packages(ctx.bundler, descriptors))
    for bundle in results:
        for warning in bundle.warnings:
            warning_output(f"{bundle.descriptor.lane}: {warning}")
    user_output(f"Done in {format_duration(time.perf_counter() - start)}")


@click.command("build")
@click.pass_obj
def build_cmd(ctx: PolyrepoContext) -> None:
    """Build the bundle files."""
    run_build(ctx)
