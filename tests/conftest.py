"""Shared fixtures for building synthetic project trees."""

from collections.abc import Callable
from pathlib import Path

import pytest

from polyrepo.core.config import ProjectConfig
from polyrepo.core.registry import Package, PackageRegistry

PackageFactory = Callable[..., Path]


@pytest.fixture
def make_package(tmp_path: Path) -> PackageFactory:
    """Create `<tmp_path>/<name>/src/<file>` for each given source file.

    Returns the package directory.
    """

    def _make(name: str, *files: str, contents: dict[str, str] | None = None) -> Path:
        source_dir = tmp_path / name / "src"
        source_dir.mkdir(parents=True, exist_ok=True)
        for file_name in files:
            text = (contents or {}).get(file_name, f"export const {name.replace('-', '_')} = 1\n")
            (source_dir / file_name).write_text(text, encoding="utf-8")
        return tmp_path / name

    return _make


@pytest.fixture
def two_package_registry(tmp_path: Path) -> PackageRegistry:
    """A registry of `state` and `view`, built without touching the disk."""
    return PackageRegistry(
        packages=(
            Package("state", tmp_path / "state", tmp_path / "state" / "src" / "index.ts"),
            Package("view", tmp_path / "view", tmp_path / "view" / "src" / "index.ts"),
        )
    )


@pytest.fixture
def two_package_config() -> ProjectConfig:
    return ProjectConfig(scope="@test", packages=("state", "view"))
