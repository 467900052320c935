import click

from polyrepo.cli.output import machine_output
from polyrepo.core.context import PolyrepoContext


@click.command("run", context_settings={"ignore_unknown_options": True})
@click.argument("command")
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_obj
def run_cmd(ctx: PolyrepoContext, command: str, args: tuple[str, ...]) -> None:
    """Run the given command in each of the package dirs.

    Stops at the first package where the command fails.
    """
    for name in ctx.config.packages:
        machine_output(f"{name}:")
        try:
            machine_output(ctx.runner.run(command, args, ctx.package_dir(name)))
        except RuntimeError as e:
            machine_output(str(e))
            raise SystemExit(1) from e
