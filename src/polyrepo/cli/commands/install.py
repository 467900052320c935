import click

from polyrepo.cli.commands.build import run_build
from polyrepo.cli.ensure import Ensure
from polyrepo.cli.output import user_output
from polyrepo.core.context import PolyrepoContext


@click.command("install")
@click.option("--ssh", is_flag=True, help="Clone over SSH instead of HTTPS.")
@click.pass_obj
def install_cmd(ctx: PolyrepoContext, ssh: bool) -> None:
    """Clone the packages, install dependencies, build."""
    base = ctx.config.ssh_repository_base if ssh else ctx.config.repository_base
    for name in ctx.config.packages:
        directory = ctx.package_dir(name)
        if directory.exists():
            user_output(f"Skipping cloning of {name} (directory exists)")
            continue
        key = "ssh_repository_base" if ssh else "repository_base"
        Ensure.invariant(bool(base), f"Cannot clone {name}: {key} is not configured")
        ctx.git.clone(f"{base}{name}.git", directory)

    user_output("Running yarn install")
    ctx.runner.run(ctx.config.tools.yarn, ["install"], ctx.root)
    user_output("Building modules")
    run_build(ctx)
