import click

from polyrepo.cli.output import machine_output
from polyrepo.core.context import PolyrepoContext


@click.command("commit", context_settings={"ignore_unknown_options": True})
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_obj
def commit_cmd(ctx: PolyrepoContext, args: tuple[str, ...]) -> None:
    """Run git commit in all packages that have changes."""
    for name in ctx.config.packages:
        directory = ctx.package_dir(name)
        if ctx.git.has_changes(directory):
            machine_output(f"{name}:\n{ctx.git.commit(directory, args)}")
