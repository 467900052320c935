"""Tests for tree-sitter based import scanning."""

from pathlib import Path

import pytest

from polyrepo.core.imports import ImportScanner

SOURCE = b"""\
import {EditorState} from "@codemirror/state"
import type {Extension} from './extension.js'
import "./side-effect"
export {Text} from "@codemirror/text"
export * from '../shared/index.js'
export const local = 1
const lazy = () => import("./lazy.js")
const computed = (name: string) => import(name)
"""


@pytest.fixture(scope="module")
def scanner() -> ImportScanner:
    return ImportScanner()


def test_scan_finds_static_imports_reexports_and_dynamic_imports(scanner: ImportScanner) -> None:
    references = scanner.scan(SOURCE)

    assert [ref.specifier for ref in references] == [
        "@codemirror/state",
        "./extension.js",
        "./side-effect",
        "@codemirror/text",
        "../shared/index.js",
        "./lazy.js",
    ]
    assert [ref.dynamic for ref in references] == [False, False, False, False, False, True]


def test_byte_ranges_exclude_quotes(scanner: ImportScanner) -> None:
    for reference in scanner.scan(SOURCE):
        assert SOURCE[reference.start_byte : reference.end_byte].decode() == reference.specifier
        assert SOURCE[reference.start_byte - 1 : reference.start_byte] in (b'"', b"'")


def test_plain_javascript_is_scanned(scanner: ImportScanner) -> None:
    source = b'import {a} from "./a.js";\nexport default function f() { return a }\n'

    assert [ref.specifier for ref in scanner.scan(source)] == ["./a.js"]


def test_specifiers_are_unique_in_first_seen_order(scanner: ImportScanner, tmp_path: Path) -> None:
    path = tmp_path / "index.ts"
    path.write_text(
        'import {a} from "./a.js"\nimport {b} from "lezer"\nimport {c} from "./a.js"\n',
        encoding="utf-8",
    )

    assert scanner.specifiers(path) == ["./a.js", "lezer"]
