"""Watch-mode compile, per-package bundle lanes and the module dev server."""

import asyncio

import click
from rich.console import Console

from polyrepo.cli.commands.build import sibling_resolver
from polyrepo.cli.output import user_output
from polyrepo.core.bundle_types import BundleKind
from polyrepo.core.compile_stage import load_compilation_unit, watch_project
from polyrepo.core.context import PolyrepoContext
from polyrepo.core.dev_pipeline import LaneEvent, LaneEventKind, create_lanes, run_dev_pipeline
from polyrepo.core.imports import ImportScanner
from polyrepo.core.resolution import NodeModuleResolver
from polyrepo.integrations.typescript.types import CompilerEvent, CompilerEventKind
from polyrepo.server.app import create_app, serve
from polyrepo.server.config import DevServerConfig
from polyrepo.server.module_server import ModuleServer


class EventRenderer:
    """Prints lane and compiler events as they arrive."""

    def __init__(self, console: Console) -> None:
        self._console = console

    def lane_event(self, event: LaneEvent) -> None:
        declaration = event.lane.endswith(BundleKind.DECLARATION.value)
        if event.kind == LaneEventKind.ERRORED:
            label = "Decl bundling error" if declaration else "Bundling error"
            self._print(f"{label} ({event.package_name}): {event.error}", "bold red")
        elif declaration:
            # Declaration lanes only speak up when they fail
            return
        elif event.kind == LaneEventKind.STARTING:
            self._print(f"Start bundling {event.package_name}...", "cyan")
        elif event.kind == LaneEventKind.ENDED:
            self._print(f"Finished bundling {event.package_name}", "green")

    def compiler_event(self, event: CompilerEvent) -> None:
        if event.kind == CompilerEventKind.DIAGNOSTIC:
            self._print(event.message, "red")
        else:
            self._print(event.message, "dim")

    def _print(self, message: str, style: str) -> None:
        self._console.print(message, style=style, markup=False, highlight=False)


@click.command("devserver")
@click.pass_obj
def devserver_cmd(ctx: PolyrepoContext) -> None:
    """Start a dev server and rebuild bundles as sources change."""
    registry = ctx.load_registry()
    # Configuration errors stop the command before any task starts
    unit = load_compilation_unit(ctx.compiler, ctx.compiler_config_path)
    renderer = EventRenderer(Console(stderr=True))
    scanner = ImportScanner()

    lanes = create_lanes(
        registry,
        ctx.externality,
        ctx.bundler,
        ctx.watcher,
        renderer.lane_event,
        ctx.config.code_plugins,
    )
    compiler_events = watch_project(
        ctx.compiler,
        ctx.compiler_config_path,
        sibling_resolver(ctx, registry),
        scanner,
        unit=unit,
    )

    server_config = DevServerConfig.from_env(
        ctx.demo_dir, port=ctx.config.devserver.port, max_depth=ctx.config.devserver.max_depth
    )
    module_server = ModuleServer(
        server_config.root, NodeModuleResolver(), scanner, max_depth=server_config.max_depth
    )
    app = create_app(server_config, module_server)

    user_output("Watching...")
    user_output(f"Dev server listening on {server_config.host}:{server_config.port}")
    asyncio.run(
        run_dev_pipeline(
            lanes,
            compiler_events,
            renderer.compiler_event,
            serve=lambda: serve(app, server_config),
        )
    )
