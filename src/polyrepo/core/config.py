"""Project configuration loaded from `polyrepo.toml`.

The file sits at the project root, next to the package checkouts and the
canonical compiler configuration. Example:

    scope = "@codemirror"
    packages = ["state", "view", "lang-python", "legacy-modes"]
    data_packages = ["legacy-modes"]
    repository_base = "https://github.com/codemirror/"
    ssh_repository_base = "git@github.com:codemirror/"

    [bundle]
    code_plugins = [{ module = "lezer-generator/rollup", export = "lezer" }]
"""

import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from polyrepo.core.bundle_types import PluginReference
from polyrepo.core.errors import ConfigurationError

CONFIG_FILE_NAME = "polyrepo.toml"


class ToolsConfig(BaseModel):
    """Executables of the external Node tools, relative to the project root."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    tsc: str = "node_modules/.bin/tsc"
    rollup: str = "node_modules/.bin/rollup"
    yarn: str = "yarn"


class DevServerSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    port: int = Field(default=8090, ge=1, le=65535)
    max_depth: int = Field(default=2, ge=0)


class PluginSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    module: str
    export: str = "default"
    options: dict[str, Any] = Field(default_factory=dict)

    def to_reference(self) -> PluginReference:
        return PluginReference(module=self.module, export=self.export, options=dict(self.options))


class BundleSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    code_plugins: tuple[PluginSettings, ...] = ()


class ReleaseSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    trunk_branch: str = "main"
    reference_url: str | None = None


class ProjectConfig(BaseModel):
    """Immutable project configuration.

    Loaded once at the CLI entry point and stored in PolyrepoContext.

    Attributes:
        scope: Import scope of sibling packages, e.g. "@codemirror"
        packages: Package directory names, in build and listing order
        data_packages: Packages that hold data only and produce no bundle
        runtime_helpers: Specifiers inlined into bundles although they are bare
        compiler_config: Canonical compiler configuration, relative to the root
        demo_dir: Directory served by the dev server, relative to the root
        repository_base: Clone URL prefix used by `install`
        ssh_repository_base: Clone URL prefix used by `install --ssh`
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    scope: str = Field(pattern=r"^@[\w-]+$")
    packages: tuple[str, ...]
    data_packages: tuple[str, ...] = ()
    runtime_helpers: tuple[str, ...] = ("tslib",)
    compiler_config: str = "tsconfig.json"
    demo_dir: str = "demo"
    repository_base: str = ""
    ssh_repository_base: str = ""
    tools: ToolsConfig = Field(default_factory=ToolsConfig)
    devserver: DevServerSettings = Field(default_factory=DevServerSettings)
    bundle: BundleSettings = Field(default_factory=BundleSettings)
    release: ReleaseSettings = Field(default_factory=ReleaseSettings)

    @model_validator(mode="after")
    def _check_packages(self) -> "ProjectConfig":
        if len(set(self.packages)) != len(self.packages):
            raise ValueError("packages contains duplicate names")
        unknown = sorted(set(self.data_packages) - set(self.packages))
        if unknown:
            raise ValueError(f"data_packages not listed in packages: {', '.join(unknown)}")
        return self

    @property
    def code_plugins(self) -> list[PluginReference]:
        return [plugin.to_reference() for plugin in self.bundle.code_plugins]


def discover_project_root(start: Path) -> Path:
    """Find the nearest directory at or above `start` holding polyrepo.toml.

    Raises:
        ConfigurationError: If no ancestor holds a configuration file
    """
    for candidate in (start, *start.parents):
        if (candidate / CONFIG_FILE_NAME).is_file():
            return candidate
    raise ConfigurationError(f"No {CONFIG_FILE_NAME} found in {start} or any parent directory")


def load_project_config(root: Path) -> ProjectConfig:
    """Read and validate `<root>/polyrepo.toml`.

    Raises:
        ConfigurationError: If the file is missing, is not TOML, or fails validation
    """
    config_path = root / CONFIG_FILE_NAME
    if not config_path.is_file():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        data = tomllib.loads(config_path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML in {config_path}: {e}") from e

    try:
        return ProjectConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {config_path}:\n{e}") from e
