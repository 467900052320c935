"""High-level git operations interface.

Architecture:
- Git: Abstract base class defining the interface
- RealGit: Production implementation using subprocess
- FakeGit: In-memory implementation for tests
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from pathlib import Path


class Git(ABC):
    """Abstract interface for git operations across package checkouts.

    This interface contains ONLY runtime operations - no test setup methods.
    """

    @abstractmethod
    def clone(self, origin: str, target: Path) -> None:
        """Clone `origin` into `target`."""
        ...

    @abstractmethod
    def has_changes(self, repo: Path) -> bool:
        """Check whether the checkout has unstaged or staged changes."""
        ...

    @abstractmethod
    def commit(self, repo: Path, args: Sequence[str]) -> str:
        """Run `git commit` with extra arguments and return its output."""
        ...

    @abstractmethod
    def is_ahead(self, repo: Path) -> bool:
        """Check whether the current branch has commits its upstream lacks."""
        ...

    @abstractmethod
    def push(self, repo: Path) -> None:
        ...

    @abstractmethod
    def log_messages(self, repo: Path, since: str, until: str) -> str:
        """Return the full commit messages in `since..until`, oldest first."""
        ...

    @abstractmethod
    def add(self, repo: Path, paths: Sequence[str]) -> None:
        ...

    @abstractmethod
    def tag(self, repo: Path, name: str, message: str) -> None:
        """Create an annotated tag whose message is kept verbatim."""
        ...
