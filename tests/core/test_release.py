"""Tests for release note parsing, version bumping and rendering."""

from datetime import datetime

import pytest

from polyrepo.core.errors import ReleaseError
from polyrepo.core.release import (
    Changes,
    bump_version,
    parse_changes,
    release_notes,
    set_version_in_package_json,
    split_edited_notes,
)

LOG = """\
Fix the widget

FIX: Fix a crash when the
widget is empty.

Add folding

FEATURE: New [`foldAll`](##fold.foldAll) command.

Unrelated paragraph.

Rework the API

BREAKING: `EditorView.update` now
takes an array.
"""


def test_parse_changes_collects_marked_paragraphs() -> None:
    changes = parse_changes(LOG)

    assert changes.fix == ["Fix a crash when the widget is empty."]
    assert changes.feature == ["New [`foldAll`](##fold.foldAll) command."]
    assert changes.breaking == ["`EditorView.update` now takes an array."]


def test_parse_changes_ignores_unmarked_history() -> None:
    assert parse_changes("Just a commit\n\nWith a body\n").empty


@pytest.mark.parametrize(
    ("version", "changes", "expected"),
    [
        ("1.2.3", Changes(breaking=["x"]), "2.0.0"),
        ("0.5.3", Changes(breaking=["x"]), "0.6.0"),
        ("1.2.3", Changes(feature=["x"], fix=["y"]), "1.3.0"),
        ("1.2.3", Changes(fix=["y"]), "1.2.4"),
    ],
)
def test_bump_version(version: str, changes: Changes, expected: str) -> None:
    assert bump_version(version, changes) == expected


def test_bump_version_without_notes_fails() -> None:
    with pytest.raises(ReleaseError, match="No new release notes!"):
        bump_version("1.2.3", Changes())


def test_bump_version_rejects_non_semver() -> None:
    with pytest.raises(ReleaseError, match="Unsupported version"):
        bump_version("1.2", Changes(fix=["y"]))


def test_release_notes_render_sections_in_order() -> None:
    notes = release_notes(
        parse_changes(LOG),
        "0.6.0",
        datetime(2024, 3, 5),
        reference_url="https://example.com/docs/ref/",
    )

    assert notes.head == "## 0.6.0 (2024-03-05)\n\n"
    assert notes.body == (
        "### Breaking changes\n\n"
        "`EditorView.update` now takes an array.\n\n"
        "### Bug fixes\n\n"
        "Fix a crash when the widget is empty.\n\n"
        "### New features\n\n"
        "New [`foldAll`](https://example.com/docs/ref/#fold.foldAll) command.\n\n"
    )


def test_release_notes_keep_links_without_reference_url() -> None:
    notes = release_notes(Changes(feature=["See [x](##x)."]), "1.0.0", datetime(2024, 1, 1))

    assert "See [x](##x)." in notes.body
    assert "Bug fixes" not in notes.body


def test_split_edited_notes() -> None:
    notes = split_edited_notes("## 1.0.0 (2024-01-01)\n\n\nBody line\n")

    assert notes is not None
    assert notes.head == "## 1.0.0 (2024-01-01)\n\n"
    assert notes.body == "Body line\n"


def test_split_blank_edit_aborts() -> None:
    assert split_edited_notes("  \n\n") is None


def test_set_version_in_package_json_keeps_formatting() -> None:
    content = '{\n  "name": "demo",\n  "version": "0.5.3",\n  "private": true\n}\n'

    updated = set_version_in_package_json(content, "0.6.0")

    assert updated == '{\n  "name": "demo",\n  "version": "0.6.0",\n  "private": true\n}\n'


def test_set_version_requires_a_version_field() -> None:
    with pytest.raises(ReleaseError):
        set_version_in_package_json('{"name": "demo"}', "1.0.0")
