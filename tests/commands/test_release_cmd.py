"""Tests for the release command."""

import json
from datetime import datetime
from pathlib import Path

import pytest
from click.testing import CliRunner

from polyrepo.cli.cli import cli
from polyrepo.core.config import ProjectConfig, ReleaseSettings
from polyrepo.core.context import PolyrepoContext
from polyrepo.integrations.git.fake import FakeGit
from polyrepo.integrations.time.fake import FakeTime

CONFIG = ProjectConfig(
    scope="@test",
    packages=(),
    release=ReleaseSettings(trunk_branch="master", reference_url="https://example.com/ref/"),
)

LOG = "Fix it\n\nFIX: Don't crash on [empty](##empty) docs.\n"

PACKAGE_JSON = '{\n  "name": "@test/next",\n  "version": "0.5.3"\n}\n'


@pytest.fixture
def root(tmp_path: Path) -> Path:
    (tmp_path / "package.json").write_text(PACKAGE_JSON, encoding="utf-8")
    (tmp_path / "CHANGELOG.md").write_text("## 0.5.3 (2024-01-01)\n\nOlder.\n", encoding="utf-8")
    return tmp_path


def _context(root: Path, git: FakeGit) -> PolyrepoContext:
    return PolyrepoContext.for_test(
        root, config=CONFIG, git=git, time=FakeTime(current=datetime(2024, 2, 29, 9, 30))
    )


def test_release_bumps_version_writes_changelog_commits_and_tags(root: Path) -> None:
    git = FakeGit(log_output=LOG)

    result = CliRunner().invoke(cli, ["release"], obj=_context(root, git))

    assert result.exit_code == 0, result.output
    assert "Creating @test/next 0.5.4" in result.output
    assert git.log_queries == [(root, "0.5.3", "master")]
    assert json.loads((root / "package.json").read_text(encoding="utf-8"))["version"] == "0.5.4"
    body = "### Bug fixes\n\nDon't crash on [empty](https://example.com/ref/#empty) docs.\n\n"
    assert (root / "CHANGELOG.md").read_text(encoding="utf-8") == (
        "## 0.5.4 (2024-02-29)\n\n" + body + "## 0.5.3 (2024-01-01)\n\nOlder.\n"
    )
    assert git.added == [(root, ["package.json", "CHANGELOG.md"])]
    assert git.commits == [(root, ["-m", "Mark version 0.5.4"])]
    assert git.tags == [(root, "0.5.4", "Version 0.5.4\n\n" + body)]


def test_release_without_notes_fails(root: Path) -> None:
    git = FakeGit(log_output="Just a commit\n")

    result = CliRunner().invoke(cli, ["release"], obj=_context(root, git))

    assert result.exit_code == 1
    assert "No new release notes!" in result.output
    assert (root / "package.json").read_text(encoding="utf-8") == PACKAGE_JSON
    assert git.tags == []


def test_edit_uses_edited_notes(root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("click.edit", lambda text, extension: "## 0.5.4 Leap day\n\nHand written.\n")
    git = FakeGit(log_output=LOG)

    result = CliRunner().invoke(cli, ["release", "--edit"], obj=_context(root, git))

    assert result.exit_code == 0, result.output
    changelog = (root / "CHANGELOG.md").read_text(encoding="utf-8")
    assert changelog.startswith("## 0.5.4 Leap day\n\nHand written.\n## 0.5.3")
    assert git.tags == [(root, "0.5.4", "Version 0.5.4\n\nHand written.\n")]


def test_edit_to_empty_aborts_cleanly(root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("click.edit", lambda text, extension: "\n")
    git = FakeGit(log_output=LOG)

    result = CliRunner().invoke(cli, ["release", "--edit"], obj=_context(root, git))

    assert result.exit_code == 0
    assert (root / "package.json").read_text(encoding="utf-8") == PACKAGE_JSON
    assert git.commits == []
    assert git.tags == []


def test_release_requires_package_json(tmp_path: Path) -> None:
    result = CliRunner().invoke(cli, ["release"], obj=_context(tmp_path, FakeGit()))

    assert result.exit_code == 1
    assert "No package.json" in result.output
