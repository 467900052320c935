"""Production implementation of git operations."""

import re
import subprocess
from collections.abc import Sequence
from pathlib import Path

from polyrepo.core.subprocess import run_subprocess_with_context
from polyrepo.integrations.git.abc import Git

_AHEAD = re.compile(r"\bahead\b")


class RealGit(Git):
    """Production implementation using subprocess.

    All git operations execute actual git commands via subprocess.
    """

    def clone(self, origin: str, target: Path) -> None:
        run_subprocess_with_context(
            ["git", "clone", origin, str(target)],
            operation_context=f"clone {origin}",
        )

    def has_changes(self, repo: Path) -> bool:
        for cmd in (["git", "diff"], ["git", "diff", "--cached"]):
            result = run_subprocess_with_context(
                cmd, operation_context=f"check for changes in {repo.name}", cwd=repo
            )
            if result.stdout:
                return True
        return False

    def commit(self, repo: Path, args: Sequence[str]) -> str:
        result = run_subprocess_with_context(
            ["git", "commit", *args],
            operation_context=f"commit in {repo.name}",
            cwd=repo,
        )
        return result.stdout

    def is_ahead(self, repo: Path) -> bool:
        result = run_subprocess_with_context(
            ["git", "status", "-sb"],
            operation_context=f"get status of {repo.name}",
            cwd=repo,
        )
        return _AHEAD.search(result.stdout) is not None

    def push(self, repo: Path) -> None:
        # Inherit stdout/stderr so push progress and prompts reach the user
        try:
            subprocess.run(["git", "push"], cwd=repo, check=True)
        except subprocess.CalledProcessError as e:
            msg = f"Failed to push {repo.name}\nCommand: git push\nExit code: {e.returncode}"
            raise RuntimeError(msg) from e
        except FileNotFoundError as e:
            msg = f"Command not found while trying to push {repo.name}: git"
            raise RuntimeError(msg) from e

    def log_messages(self, repo: Path, since: str, until: str) -> str:
        result = run_subprocess_with_context(
            ["git", "log", "--format=%B", "--reverse", f"{since}..{until}"],
            operation_context=f"read commit messages since {since}",
            cwd=repo,
        )
        return result.stdout

    def add(self, repo: Path, paths: Sequence[str]) -> None:
        run_subprocess_with_context(
            ["git", "add", *paths],
            operation_context="stage release files",
            cwd=repo,
        )

    def tag(self, repo: Path, name: str, message: str) -> None:
        run_subprocess_with_context(
            ["git", "tag", name, "-m", message, "--cleanup=verbatim"],
            operation_context=f"create tag {name}",
            cwd=repo,
        )
