import click

from polyrepo.cli.output import machine_output
from polyrepo.core.context import PolyrepoContext


@click.command("packages")
@click.pass_obj
def packages_cmd(ctx: PolyrepoContext) -> None:
    """Emit a list of all package names."""
    for name in ctx.config.packages:
        machine_output(name)
