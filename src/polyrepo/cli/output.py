"""Output utilities for CLI commands with clear intent.

user_output() is for progress and diagnostics meant for a person and goes
to stderr. machine_output() is for results other tools may consume and
goes to stdout.
"""

import click


def user_output(message: str = "", nl: bool = True) -> None:
    click.echo(message, err=True, nl=nl)


def machine_output(message: str = "", nl: bool = True) -> None:
    click.echo(message, nl=nl)


def error_output(message: str) -> None:
    """Print a message with the red `Error: ` prefix."""
    user_output(click.style("Error: ", fg="red") + message)


def warning_output(message: str) -> None:
    user_output(click.style("Warning: ", fg="yellow") + message)


def format_duration(seconds: float) -> str:
    return f"{seconds:.2f}s"
