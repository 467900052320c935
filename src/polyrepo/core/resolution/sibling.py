"""Sibling-package resolution override.

Left alone, the compiler treats sibling packages as published libraries and
reads their separately generated declarations, duplicating type information
and letting it drift from the source being compiled. This resolver maps
`<scope>/<identifier>` imports of buildable packages straight to their main
source entry, so the whole project type-checks as one program.
"""

import logging
import re
from collections.abc import Sequence

from polyrepo.core.registry import PackageRegistry
from polyrepo.core.resolution.types import ModuleResolver, ResolutionContext, ResolvedModule

logger = logging.getLogger(__name__)


class SiblingPackageResolver(ModuleResolver):
    """Redirects sibling-package imports to source, delegating everything else."""

    def __init__(self, registry: PackageRegistry, scope: str, fallback: ModuleResolver) -> None:
        """Create the override.

        Args:
            registry: Packages eligible for redirection
            scope: Import scope shared by sibling packages, e.g. "@codemirror"
            fallback: Default resolution used for every other specifier
        """
        self._registry = registry
        self._fallback = fallback
        self._pattern = re.compile(rf"^{re.escape(scope)}/([\w-]+)$")

    def resolve_sibling(self, specifier: str) -> ResolvedModule | None:
        """Resolve a specifier only if it names a buildable sibling package."""
        match = self._pattern.match(specifier)
        if match is None:
            return None
        package = self._registry.resolve(match.group(1))
        if package is None or package.main_entry is None:
            return None
        return ResolvedModule(resolved_file_name=package.main_entry, is_external_library_import=False)

    def resolve(
        self, specifiers: Sequence[str], context: ResolutionContext
    ) -> list[ResolvedModule | None]:
        results: list[ResolvedModule | None] = [None] * len(specifiers)
        pending: list[int] = []
        for index, specifier in enumerate(specifiers):
            sibling = self.resolve_sibling(specifier)
            if sibling is None:
                pending.append(index)
            else:
                logger.debug("Redirected %s to %s", specifier, sibling.resolved_file_name)
                results[index] = sibling

        if pending:
            delegated = self._fallback.resolve([specifiers[i] for i in pending], context)
            for index, resolved in zip(pending, delegated, strict=True):
                results[index] = resolved
        return results
