"""Resolution strategy interface.

A resolver maps the module specifiers found in one file to the files they
refer to. Strategies compose: the sibling-package override wraps a default
resolver and delegates everything it does not recognize.
"""

import re
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

# Relative, absolute and drive-letter paths, as opposed to bare package names
PATH_SPECIFIER_PATTERN = r"^(\.{0,2}/|\w:)"
_PATH_SPECIFIER = re.compile(PATH_SPECIFIER_PATTERN)


def is_path_specifier(specifier: str) -> bool:
    """Return True if the specifier names a file path rather than a package."""
    return _PATH_SPECIFIER.match(specifier) is not None


class ResolutionMode(str, Enum):
    """Which package entry point a bare specifier should resolve to."""

    TYPES = "types"  # type-checking: prefer declarations
    MODULE = "module"  # browser loading: prefer ES module builds


@dataclass(frozen=True)
class ResolutionContext:
    """Where a batch of specifiers is being resolved from."""

    containing_file: Path
    mode: ResolutionMode = ResolutionMode.TYPES


@dataclass(frozen=True)
class ResolvedModule:
    """A successfully resolved specifier."""

    resolved_file_name: Path
    is_external_library_import: bool


class ModuleResolver(ABC):
    """Abstract resolution strategy.

    Implementations must return exactly one entry per input specifier, in
    input order. None marks a specifier that could not be resolved.
    """

    @abstractmethod
    def resolve(
        self, specifiers: Sequence[str], context: ResolutionContext
    ) -> list[ResolvedModule | None]:
        """Resolve each specifier as imported from context.containing_file."""
        ...
