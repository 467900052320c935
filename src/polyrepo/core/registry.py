"""Package registry: the static description of every package in the project.

The registry is built once, before any build step, from the configured list
of package names. Building it reads each package's source directory to find
its single public entry point. Failing to find one is a configuration error,
because a partially registered graph would produce silently wrong bundles.
"""

import logging
import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from polyrepo.core.errors import ConfigurationError

logger = logging.getLogger(__name__)

# Top-level sources only: no dotfiles, no multi-dot names like x.d.ts or x.test.ts
SOURCE_FILE_PATTERN = re.compile(r"^[^.]+\.ts$")
NAME_PREFIX_PATTERN = re.compile(r"^(theme-|lang-)")


@dataclass(frozen=True)
class Package:
    """One independently versioned package checked out under the project root."""

    name: str
    directory: Path
    main_entry: Path | None

    @property
    def source_dir(self) -> Path:
        return self.directory / "src"

    @property
    def dist_dir(self) -> Path:
        return self.directory / "dist"

    @property
    def is_buildable(self) -> bool:
        return self.main_entry is not None

    @property
    def compiled_entry(self) -> Path:
        """The JavaScript file the compiler emits next to the main entry."""
        return self._require_main().with_suffix(".js")

    @property
    def declaration_entry(self) -> Path:
        """The declaration file the compiler emits next to the main entry."""
        main = self._require_main()
        return main.with_name(f"{main.stem}.d.ts")

    def _require_main(self) -> Path:
        if self.main_entry is None:
            msg = f"Package {self.name} has no main entry"
            raise ValueError(msg)
        return self.main_entry


def list_source_files(source_dir: Path) -> list[str]:
    """List the recognized top-level source file names in a source directory."""
    return sorted(
        entry.name
        for entry in source_dir.iterdir()
        if entry.is_file() and SOURCE_FILE_PATTERN.match(entry.name)
    )


def select_main_entry(package_name: str, file_names: Sequence[str]) -> str | None:
    """Pick a package's main entry file name among its source files.

    A lone file wins regardless of its name. Otherwise `index.ts` wins, then a
    file named after the package with any `theme-`/`lang-` prefix stripped.
    Returns None when none of these apply.
    """
    if len(file_names) == 1:
        return file_names[0]
    if "index.ts" in file_names:
        return "index.ts"
    named = NAME_PREFIX_PATTERN.sub("", package_name) + ".ts"
    if named in file_names:
        return named
    return None


def load_package(root: Path, name: str, *, data_only: bool) -> Package:
    """Describe one package, resolving its main entry unless it is data-only.

    Raises:
        ConfigurationError: If the package's main entry cannot be determined
    """
    directory = root / name
    if data_only:
        return Package(name=name, directory=directory, main_entry=None)

    source_dir = directory / "src"
    if not source_dir.is_dir():
        msg = f"Couldn't find a main script for {name} (no source directory at {source_dir})"
        raise ConfigurationError(msg)

    main = select_main_entry(name, list_source_files(source_dir))
    if main is None:
        raise ConfigurationError(f"Couldn't find a main script for {name}")

    logger.debug("Registered package %s with main entry %s", name, main)
    return Package(name=name, directory=directory, main_entry=source_dir / main)


@dataclass(frozen=True)
class PackageRegistry:
    """Immutable mapping from package name to Package.

    Passed explicitly to every component that needs package lookup. Tests
    construct one directly from synthetic packages.
    """

    packages: tuple[Package, ...]
    _by_name: Mapping[str, Package] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        by_name: dict[str, Package] = {}
        for package in self.packages:
            if package.name in by_name:
                raise ConfigurationError(f"Package {package.name} is declared twice")
            by_name[package.name] = package
        object.__setattr__(self, "_by_name", MappingProxyType(by_name))

    @staticmethod
    def load(
        root: Path, names: Iterable[str], data_packages: Iterable[str] = ()
    ) -> "PackageRegistry":
        """Build the registry from the project's declared package names.

        Raises:
            ConfigurationError: If any non-data package lacks a resolvable main entry
        """
        data_only = set(data_packages)
        return PackageRegistry(
            packages=tuple(load_package(root, name, data_only=name in data_only) for name in names)
        )

    def resolve(self, name: str) -> Package | None:
        return self._by_name.get(name)

    @property
    def names(self) -> list[str]:
        return [package.name for package in self.packages]

    @property
    def buildable_packages(self) -> list[Package]:
        return [package for package in self.packages if package.is_buildable]
