import click

from polyrepo.cli.output import user_output
from polyrepo.core.context import PolyrepoContext


@click.command("push")
@click.pass_obj
def push_cmd(ctx: PolyrepoContext) -> None:
    """Run git push in packages that have new commits."""
    for name in ctx.config.packages:
        directory = ctx.package_dir(name)
        if ctx.git.is_ahead(directory):
            user_output(f"Pushing {name}")
            ctx.git.push(directory)
