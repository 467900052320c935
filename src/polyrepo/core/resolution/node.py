"""Default Node-style module resolution.

Path specifiers are probed on disk relative to the importing file. Bare
specifiers are looked up in `node_modules` directories walking upward, using
the package.json fields appropriate to the resolution mode.
"""

import json
import os
from collections.abc import Iterator, Sequence
from pathlib import Path

from polyrepo.core.resolution.types import (
    ModuleResolver,
    ResolutionContext,
    ResolutionMode,
    ResolvedModule,
    is_path_specifier,
)

EXTENSIONS: dict[ResolutionMode, tuple[str, ...]] = {
    ResolutionMode.TYPES: (".ts", ".tsx", ".d.ts", ".js"),
    ResolutionMode.MODULE: (".js", ".mjs"),
}

ENTRY_FIELDS: dict[ResolutionMode, tuple[str, ...]] = {
    ResolutionMode.TYPES: ("types", "typings"),
    ResolutionMode.MODULE: ("module", "main"),
}


def split_package_specifier(specifier: str) -> tuple[str, str]:
    """Split a bare specifier into its package name and subpath.

    Examples:
        "@codemirror/view" -> ("@codemirror/view", "")
        "@lezer/lr/dist/index.js" -> ("@lezer/lr", "dist/index.js")
        "tslib" -> ("tslib", "")
    """
    parts = specifier.split("/")
    count = 2 if specifier.startswith("@") else 1
    return "/".join(parts[:count]), "/".join(parts[count:])


class NodeModuleResolver(ModuleResolver):
    """Resolves specifiers the way Node and the TypeScript compiler do by default."""

    def resolve(
        self, specifiers: Sequence[str], context: ResolutionContext
    ) -> list[ResolvedModule | None]:
        return [self._resolve_one(specifier, context) for specifier in specifiers]

    def _resolve_one(self, specifier: str, context: ResolutionContext) -> ResolvedModule | None:
        if is_path_specifier(specifier):
            base = Path(os.path.normpath(context.containing_file.parent / specifier))
            found = self._find_file(base, context.mode)
            if found is None:
                return None
            return ResolvedModule(resolved_file_name=found, is_external_library_import=False)

        name, subpath = split_package_specifier(specifier)
        for package_dir in self._package_dirs(name, context):
            found = self._find_in_package(package_dir, subpath, context.mode)
            if found is not None:
                return ResolvedModule(resolved_file_name=found, is_external_library_import=True)
        return None

    def _package_dirs(self, name: str, context: ResolutionContext) -> Iterator[Path]:
        for directory in context.containing_file.parents:
            candidate = directory / "node_modules" / name
            if candidate.is_dir():
                yield candidate
            if context.mode is ResolutionMode.TYPES and not name.startswith("@types/"):
                types_candidate = directory / "node_modules" / "@types" / _types_name(name)
                if types_candidate.is_dir():
                    yield types_candidate

    def _find_in_package(self, package_dir: Path, subpath: str, mode: ResolutionMode) -> Path | None:
        if subpath:
            return self._find_file(package_dir / subpath, mode)

        manifest_path = package_dir / "package.json"
        if manifest_path.is_file():
            manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
            for field_name in ENTRY_FIELDS[mode]:
                entry = manifest.get(field_name)
                if isinstance(entry, str):
                    found = self._find_file(Path(os.path.normpath(package_dir / entry)), mode)
                    if found is not None:
                        return found
            main = manifest.get("main")
            if mode is ResolutionMode.TYPES and isinstance(main, str):
                # Declarations sit next to the main script under the same stem
                stripped = Path(os.path.normpath(package_dir / main)).with_suffix("")
                found = self._find_file(stripped, mode)
                if found is not None:
                    return found

        return self._find_file(package_dir / "index", mode)

    def _find_file(self, base: Path, mode: ResolutionMode) -> Path | None:
        for candidate in _file_candidates(base, mode):
            if candidate.is_file():
                return candidate
        return None


def _types_name(name: str) -> str:
    # @scope/pkg is published to DefinitelyTyped as @types/scope__pkg
    if name.startswith("@"):
        return name[1:].replace("/", "__")
    return name


def _file_candidates(base: Path, mode: ResolutionMode) -> Iterator[Path]:
    yield base
    if mode is ResolutionMode.TYPES and base.suffix == ".js":
        yield base.with_suffix(".ts")
        yield base.with_name(f"{base.stem}.d.ts")
    for extension in EXTENSIONS[mode]:
        yield base.with_name(base.name + extension)
    for extension in EXTENSIONS[mode]:
        yield base / f"index{extension}"
