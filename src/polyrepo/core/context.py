"""Application context with dependency injection."""

from dataclasses import dataclass
from pathlib import Path

from polyrepo.core.bundle_types import ExternalityPredicate
from polyrepo.core.config import ProjectConfig, discover_project_root, load_project_config
from polyrepo.core.registry import PackageRegistry
from polyrepo.integrations.git.abc import Git
from polyrepo.integrations.git.real import RealGit
from polyrepo.integrations.rollup.abc import Bundler
from polyrepo.integrations.rollup.real import RealRollupBundler
from polyrepo.integrations.runner.abc import CommandRunner
from polyrepo.integrations.runner.real import RealCommandRunner
from polyrepo.integrations.time.abc import Time
from polyrepo.integrations.time.real import RealTime
from polyrepo.integrations.typescript.abc import TypeScriptCompiler
from polyrepo.integrations.typescript.real import RealTypeScriptCompiler
from polyrepo.integrations.watcher.abc import FileWatcher
from polyrepo.integrations.watcher.real import RealFileWatcher


@dataclass(frozen=True)
class PolyrepoContext:
    """Immutable context holding all dependencies for polyrepo operations.

    Created at CLI entry point and threaded through the application.
    Frozen to prevent accidental modification at runtime.

    `registry` is only set by tests; commands call load_registry(), which
    scans the package checkouts when no registry was injected. The scan
    cannot happen at startup because `install` runs before checkouts exist.
    """

    root: Path
    config: ProjectConfig
    git: Git
    compiler: TypeScriptCompiler
    bundler: Bundler
    watcher: FileWatcher
    runner: CommandRunner
    time: Time
    registry: PackageRegistry | None = None

    def package_dir(self, name: str) -> Path:
        return self.root / name

    @property
    def compiler_config_path(self) -> Path:
        return self.root / self.config.compiler_config

    @property
    def demo_dir(self) -> Path:
        return self.root / self.config.demo_dir

    @property
    def externality(self) -> ExternalityPredicate:
        return ExternalityPredicate(runtime_helpers=frozenset(self.config.runtime_helpers))

    def load_registry(self) -> PackageRegistry:
        """Return the package registry.

        Raises:
            ConfigurationError: If a package's main entry cannot be determined
        """
        if self.registry is not None:
            return self.registry
        return PackageRegistry.load(self.root, self.config.packages, self.config.data_packages)

    @staticmethod
    def for_test(
        root: Path,
        config: ProjectConfig | None = None,
        git: Git | None = None,
        compiler: TypeScriptCompiler | None = None,
        bundler: Bundler | None = None,
        watcher: FileWatcher | None = None,
        runner: CommandRunner | None = None,
        time: Time | None = None,
        registry: PackageRegistry | None = None,
    ) -> "PolyrepoContext":
        """Create test context with optional pre-configured integration classes.

        Args:
            root: Project root, usually a pytest tmp_path
            config: Optional ProjectConfig. If None, one scoped to "@test" with
                no packages.
            git: Optional Git implementation. If None, creates empty FakeGit.
            compiler: Optional TypeScriptCompiler. If None, creates a
                FakeTypeScriptCompiler that emits cleanly.
            bundler: Optional Bundler. If None, creates FakeBundler.
            watcher: Optional FileWatcher. If None, one with no changes.
            runner: Optional CommandRunner. If None, creates FakeCommandRunner.
            time: Optional Time. If None, creates FakeTime.
            registry: Optional PackageRegistry. If None, scanned from `root`.

        Returns:
            PolyrepoContext configured with provided values and test defaults
        """
        from polyrepo.integrations.git.fake import FakeGit
        from polyrepo.integrations.rollup.fake import FakeBundler
        from polyrepo.integrations.runner.fake import FakeCommandRunner
        from polyrepo.integrations.time.fake import FakeTime
        from polyrepo.integrations.typescript.fake import FakeTypeScriptCompiler
        from polyrepo.integrations.watcher.fake import FakeFileWatcher

        return PolyrepoContext(
            root=root,
            config=config or ProjectConfig(scope="@test", packages=()),
            git=git or FakeGit(),
            compiler=compiler or FakeTypeScriptCompiler(),
            bundler=bundler or FakeBundler(),
            watcher=watcher or FakeFileWatcher(),
            runner=runner or FakeCommandRunner(),
            time=time or FakeTime(),
            registry=registry,
        )


def create_context(cwd: Path) -> PolyrepoContext:
    """Create production context with real implementations.

    Called at CLI entry point to create the context for the entire
    command execution.

    Raises:
        ConfigurationError: If no valid polyrepo.toml is found above `cwd`
    """
    root = discover_project_root(cwd)
    config = load_project_config(root)
    return PolyrepoContext(
        root=root,
        config=config,
        git=RealGit(),
        compiler=RealTypeScriptCompiler(root / config.tools.tsc),
        bundler=RealRollupBundler(root / config.tools.rollup, root),
        watcher=RealFileWatcher(),
        runner=RealCommandRunner(),
        time=RealTime(),
    )
