"""Production command runner backed by subprocess."""

from collections.abc import Sequence
from pathlib import Path

from polyrepo.core.subprocess import run_subprocess_with_context
from polyrepo.integrations.runner.abc import CommandRunner


class RealCommandRunner(CommandRunner):
    def run(self, cmd: str, args: Sequence[str], cwd: Path) -> str:
        result = run_subprocess_with_context(
            [cmd, *args],
            operation_context=f"run {cmd} in {cwd}",
            cwd=cwd,
        )
        return result.stdout
