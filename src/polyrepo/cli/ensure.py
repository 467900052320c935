"""CLI error handling utilities with styled output.

This module provides the Ensure class for asserting invariants in CLI commands
with consistent, user-friendly error messages. All errors use red "Error:" prefix
for visual consistency.
"""

from pathlib import Path
from typing import TYPE_CHECKING, TypeVar

from polyrepo.cli.output import error_output, user_output

if TYPE_CHECKING:
    from polyrepo.core.context import PolyrepoContext

T = TypeVar("T")


class Ensure:
    """Helper class for asserting invariants with consistent error handling."""

    @staticmethod
    def invariant(condition: bool, error_message: str) -> None:
        """Ensure condition is true, otherwise output styled error and exit.

        Raises:
            SystemExit: If condition is false (with exit code 1)
        """
        if not condition:
            error_output(error_message)
            raise SystemExit(1)

    @staticmethod
    def not_none(value: T | None, error_message: str) -> T:
        """Ensure value is not None, otherwise output styled error and exit.

        Returns:
            The value unchanged if not None (with narrowed type T)

        Raises:
            SystemExit: If value is None (with exit code 1)
        """
        if value is None:
            error_output(error_message)
            raise SystemExit(1)
        return value

    @staticmethod
    def path_is_file(path: Path, error_message: str | None = None) -> None:
        if not path.is_file():
            error_output(error_message or f"File not found: {path}")
            raise SystemExit(1)

    @staticmethod
    def packages_installed(ctx: "PolyrepoContext") -> None:
        """Ensure every configured package is checked out under the project root.

        Raises:
            SystemExit: On the first missing package directory (with exit code 1)
        """
        for name in ctx.config.packages:
            if not ctx.package_dir(name).exists():
                user_output(f"module {name} is missing. Did you forget to run 'polyrepo install'?")
                raise SystemExit(1)
