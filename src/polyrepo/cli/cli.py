import logging
import os
from pathlib import Path

import click

from polyrepo.cli.commands.build import build_cmd
from polyrepo.cli.commands.commit import commit_cmd
from polyrepo.cli.commands.devserver import devserver_cmd
from polyrepo.cli.commands.install import install_cmd
from polyrepo.cli.commands.packages import packages_cmd
from polyrepo.cli.commands.push import push_cmd
from polyrepo.cli.commands.release import release_cmd
from polyrepo.cli.commands.run import run_cmd
from polyrepo.cli.ensure import Ensure
from polyrepo.cli.group import HELP_REQUESTED_KEY, PolyrepoGroup
from polyrepo.core.context import create_context

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags

DEBUG_ENV_VAR = "POLYREPO_DEBUG"

# Commands that may run before the package checkouts exist
COMMANDS_WITHOUT_PACKAGES = frozenset({"install"})


@click.group(cls=PolyrepoGroup, context_settings=CONTEXT_SETTINGS, no_args_is_help=False)
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Build and release a multi-package TypeScript project."""
    # Subcommand help needs neither a project nor its checkouts
    if ctx.meta.get(HELP_REQUESTED_KEY):
        return
    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        ctx.obj = create_context(Path.cwd())
    if ctx.invoked_subcommand not in COMMANDS_WITHOUT_PACKAGES:
        Ensure.packages_installed(ctx.obj)


cli.add_command(build_cmd)
cli.add_command(commit_cmd)
cli.add_command(devserver_cmd)
cli.add_command(install_cmd)
cli.add_command(packages_cmd)
cli.add_command(push_cmd)
cli.add_command(release_cmd)
cli.add_command(run_cmd)


def main() -> None:
    """CLI entry point used by the `polyrepo` console script."""
    if os.environ.get(DEBUG_ENV_VAR):
        logging.basicConfig(
            level=logging.DEBUG, format="[DEBUG %(name)s:%(lineno)d] %(message)s"
        )
    cli()
