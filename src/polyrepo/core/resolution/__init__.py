"""Module resolution strategies used by the compile stage and module server."""

from polyrepo.core.resolution.node import NodeModuleResolver
from polyrepo.core.resolution.sibling import SiblingPackageResolver
from polyrepo.core.resolution.types import (
    ModuleResolver,
    ResolutionContext,
    ResolutionMode,
    ResolvedModule,
    is_path_specifier,
)

__all__ = [
    "ModuleResolver",
    "NodeModuleResolver",
    "ResolutionContext",
    "ResolutionMode",
    "ResolvedModule",
    "SiblingPackageResolver",
    "is_path_specifier",
]
