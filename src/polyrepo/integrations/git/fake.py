"""In-memory fake implementation of Git for testing."""

from collections.abc import Sequence
from pathlib import Path

from polyrepo.integrations.git.abc import Git


class FakeGit(Git):
    """In-memory fake implementation of git operations.

    All state is provided via constructor using keyword arguments.
    This class has NO public setup methods. Mutations are recorded and
    exposed through read-only properties for assertions.
    """

    def __init__(
        self,
        *,
        changed_repos: set[Path] | None = None,
        ahead_repos: set[Path] | None = None,
        commit_output: str = "",
        log_output: str = "",
        create_cloned_dirs: bool = True,
    ) -> None:
        """Create FakeGit.

        Args:
            changed_repos: Checkouts reported as having changes
            ahead_repos: Checkouts reported as ahead of their upstream
            commit_output: Output returned by every commit()
            log_output: Commit messages returned by log_messages()
            create_cloned_dirs: Whether clone() creates the target directory
        """
        self._changed_repos = changed_repos or set()
        self._ahead_repos = ahead_repos or set()
        self._commit_output = commit_output
        self._log_output = log_output
        self._create_cloned_dirs = create_cloned_dirs

        self._clones: list[tuple[str, Path]] = []
        self._commits: list[tuple[Path, list[str]]] = []
        self._pushes: list[Path] = []
        self._log_queries: list[tuple[Path, str, str]] = []
        self._added: list[tuple[Path, list[str]]] = []
        self._tags: list[tuple[Path, str, str]] = []

    @property
    def clones(self) -> list[tuple[str, Path]]:
        return self._clones.copy()

    @property
    def commits(self) -> list[tuple[Path, list[str]]]:
        return self._commits.copy()

    @property
    def pushes(self) -> list[Path]:
        return self._pushes.copy()

    @property
    def log_queries(self) -> list[tuple[Path, str, str]]:
        return self._log_queries.copy()

    @property
    def added(self) -> list[tuple[Path, list[str]]]:
        return self._added.copy()

    @property
    def tags(self) -> list[tuple[Path, str, str]]:
        return self._tags.copy()

    def clone(self, origin: str, target: Path) -> None:
        self._clones.append((origin, target))
        if self._create_cloned_dirs:
            target.mkdir(parents=True, exist_ok=True)

    def has_changes(self, repo: Path) -> bool:
        return repo in self._changed_repos

    def commit(self, repo: Path, args: Sequence[str]) -> str:
        self._commits.append((repo, list(args)))
        return self._commit_output

    def is_ahead(self, repo: Path) -> bool:
        return repo in self._ahead_repos

    def push(self, repo: Path) -> None:
        self._pushes.append(repo)

    def log_messages(self, repo: Path, since: str, until: str) -> str:
        self._log_queries.append((repo, since, until))
        return self._log_output

    def add(self, repo: Path, paths: Sequence[str]) -> None:
        self._added.append((repo, list(paths)))

    def tag(self, repo: Path, name: str, message: str) -> None:
        self._tags.append((repo, name, message))
