"""On-demand ES module serving for the demo page.

Requests under `/_m/` name a file relative to the demo root. A `__` path
segment stands for `..`, so modules in sibling packages and in the project's
`node_modules` are reachable, but only up to `max_depth` levels above the
root. Import specifiers in served scripts are rewritten to `/_m/` URLs so
the browser can load bare package imports without a bundle.
"""

import logging
import mimetypes
import os
from dataclasses import dataclass, field
from pathlib import Path

from polyrepo.core.imports import ImportScanner
from polyrepo.core.resolution.types import (
    ModuleResolver,
    ResolutionContext,
    ResolutionMode,
)

logger = logging.getLogger(__name__)

MODULE_PREFIX = "/_m/"
PARENT_SEGMENT = "__"
SCRIPT_SUFFIXES = frozenset({".js", ".mjs"})


@dataclass(frozen=True)
class ModuleResponse:
    status: int
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)


class ModuleServer:
    """Maps module request paths to files and rewrites their imports."""

    def __init__(
        self,
        root: Path,
        resolver: ModuleResolver,
        scanner: ImportScanner,
        max_depth: int = 2,
    ) -> None:
        self._root = Path(os.path.normpath(root.absolute()))
        self._resolver = resolver
        self._scanner = scanner
        self._max_depth = max_depth

    def locate(self, module_path: str) -> Path | None:
        """Translate a request path to a file path.

        Returns:
            None if the path climbs above the allowed depth
        """
        level = 0
        parts: list[str] = []
        for segment in module_path.split("/"):
            if segment in ("", "."):
                continue
            if segment in (PARENT_SEGMENT, ".."):
                level -= 1
                if level < -self._max_depth:
                    return None
                parts.append("..")
            else:
                level += 1
                parts.append(segment)
        return Path(os.path.normpath(self._root.joinpath(*parts)))

    def url_for(self, path: Path) -> str:
        relative = Path(os.path.relpath(path, self._root))
        segments = [PARENT_SEGMENT if part == ".." else part for part in relative.parts]
        return MODULE_PREFIX + "/".join(segments)

    def handle(self, module_path: str, if_none_match: str | None = None) -> ModuleResponse:
        path = self.locate(module_path)
        if path is None:
            return ModuleResponse(status=403, body=b"Access denied")
        if not path.is_file():
            return ModuleResponse(status=404, body=b"Not found")

        stat = path.stat()
        etag = f'"{stat.st_mtime_ns:x}-{stat.st_size:x}"'
        if if_none_match == etag:
            return ModuleResponse(status=304, headers={"etag": etag})

        body = path.read_bytes()
        if path.suffix in SCRIPT_SUFFIXES:
            body = self.rewrite_imports(path, body)
            content_type = "application/javascript; charset=utf-8"
        else:
            content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        return ModuleResponse(
            status=200,
            body=body,
            headers={"etag": etag, "content-type": content_type},
        )

    def rewrite_imports(self, path: Path, source: bytes) -> bytes:
        """Replace every resolvable import specifier with its module URL."""
        references = self._scanner.scan(source)
        if not references:
            return source

        specifiers = [reference.specifier for reference in references]
        context = ResolutionContext(containing_file=path, mode=ResolutionMode.MODULE)
        resolved = self._resolver.resolve(specifiers, context)

        rewritten = source
        for reference, module in sorted(
            zip(references, resolved, strict=True),
            key=lambda pair: pair[0].start_byte,
            reverse=True,
        ):
            if module is None:
                logger.debug("Leaving unresolved import %r in %s", reference.specifier, path)
                continue
            url = self.url_for(module.resolved_file_name).encode("utf-8")
            rewritten = rewritten[: reference.start_byte] + url + rewritten[reference.end_byte :]
        return rewritten
