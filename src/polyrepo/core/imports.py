"""Import specifier extraction using tree-sitter.

Finds the module specifiers of static imports, re-exports and dynamic
`import()` calls in TypeScript and JavaScript sources, with the byte range of
each specifier so callers can rewrite them in place.
"""

from dataclasses import dataclass
from pathlib import Path

import tree_sitter_typescript
from tree_sitter import Language, Node, Parser


@dataclass(frozen=True)
class ImportReference:
    """One module specifier occurrence in a source file.

    start_byte/end_byte delimit the specifier text, excluding its quotes.
    """

    specifier: str
    start_byte: int
    end_byte: int
    dynamic: bool = False


class ImportScanner:
    """Extracts import references from source text."""

    def __init__(self) -> None:
        self._typescript = Parser(Language(tree_sitter_typescript.language_typescript()))
        self._tsx = Parser(Language(tree_sitter_typescript.language_tsx()))

    def scan(self, source: bytes, *, tsx: bool = False) -> list[ImportReference]:
        """Return the import references in source, ordered by position."""
        parser = self._tsx if tsx else self._typescript
        tree = parser.parse(source)

        references: list[ImportReference] = []
        stack: list[Node] = [tree.root_node]
        while stack:
            node = stack.pop()
            reference = _reference_for(node, source)
            if reference is not None:
                references.append(reference)
            stack.extend(node.children)

        references.sort(key=lambda ref: ref.start_byte)
        return references

    def scan_file(self, path: Path) -> list[ImportReference]:
        return self.scan(path.read_bytes(), tsx=path.suffix in (".tsx", ".jsx"))

    def specifiers(self, path: Path) -> list[str]:
        """Return the distinct specifiers imported by a file, in first-seen order."""
        return list(dict.fromkeys(ref.specifier for ref in self.scan_file(path)))


def _reference_for(node: Node, source: bytes) -> ImportReference | None:
    if node.type in ("import_statement", "export_statement"):
        return _string_reference(node.child_by_field_name("source"), source, dynamic=False)

    if node.type == "call_expression":
        function = node.child_by_field_name("function")
        arguments = node.child_by_field_name("arguments")
        if function is None or function.type != "import" or arguments is None:
            return None
        first = next(iter(arguments.named_children), None)
        return _string_reference(first, source, dynamic=True)

    return None


def _string_reference(node: Node | None, source: bytes, *, dynamic: bool) -> ImportReference | None:
    # Template literals and computed dynamic imports are not statically known
    if node is None or node.type != "string":
        return None
    start = node.start_byte + 1
    end = node.end_byte - 1
    return ImportReference(
        specifier=source[start:end].decode("utf-8"),
        start_byte=start,
        end_byte=end,
        dynamic=dynamic,
    )
