"""Click group that maps failures to polyrepo's exit codes."""

import logging
from typing import Any

import click

from polyrepo.cli.output import error_output
from polyrepo.core.errors import PolyrepoError

logger = logging.getLogger(__name__)

USAGE_ERROR_EXIT_CODE = 1
INTERRUPTED_EXIT_CODE = 130

# Set in ctx.meta when a help flag will make click print help and exit
HELP_REQUESTED_KEY = "polyrepo.help_requested"


class PolyrepoGroup(click.Group):
    """Command group whose usage errors exit with status 1.

    PolyrepoError and failed external commands become a red error line and
    exit status 1; an interrupt exits with 130.
    """

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        options = args[: args.index("--")] if "--" in args else args
        ctx.meta[HELP_REQUESTED_KEY] = any(arg in ctx.help_option_names for arg in options)
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as e:
            e.exit_code = USAGE_ERROR_EXIT_CODE
            raise

    def resolve_command(
        self, ctx: click.Context, args: list[str]
    ) -> tuple[str | None, click.Command | None, list[str]]:
        try:
            return super().resolve_command(ctx, args)
        except click.UsageError as e:
            e.exit_code = USAGE_ERROR_EXIT_CODE
            raise

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except click.UsageError as e:
            e.exit_code = USAGE_ERROR_EXIT_CODE
            raise
        except PolyrepoError as e:
            error_output(str(e))
            raise SystemExit(1) from e
        except RuntimeError as e:
            # Raised by integrations when an external command fails
            logger.debug("External command failed", exc_info=True)
            error_output(str(e))
            raise SystemExit(1) from e
        except KeyboardInterrupt:
            raise SystemExit(INTERRUPTED_EXIT_CODE) from None
