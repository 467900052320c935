"""Release notes and version bumping from commit messages.

A commit contributes to the release notes through paragraphs that start
with `BREAKING:`, `FIX:` or `FEATURE:`. Each such paragraph becomes one
entry, with its line breaks joined into spaces.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime

from polyrepo.core.errors import ReleaseError

CHANGE_PATTERN = re.compile(
    r"\n\r?\n(BREAKING|FIX|FEATURE):\s*(.*?)(?=\r?\n\r?\n|\r?\n?\Z)", re.DOTALL
)

SECTION_TITLES = (
    ("breaking", "Breaking changes"),
    ("fix", "Bug fixes"),
    ("feature", "New features"),
)

_VERSION_FIELD = re.compile(r'"version":\s*".*?"')
_LINE_BREAK = re.compile(r"\r?\n")


@dataclass(frozen=True)
class Changes:
    breaking: list[str] = field(default_factory=list)
    fix: list[str] = field(default_factory=list)
    feature: list[str] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not (self.breaking or self.fix or self.feature)


@dataclass(frozen=True)
class ReleaseNotes:
    head: str
    body: str

    @property
    def text(self) -> str:
        return self.head + self.body


def parse_changes(log: str) -> Changes:
    """Collect release-note paragraphs from `git log --format=%B` output."""
    changes = Changes()
    for match in CHANGE_PATTERN.finditer(log):
        entries: list[str] = getattr(changes, match.group(1).lower())
        entries.append(_LINE_BREAK.sub(" ", match.group(2)))
    return changes


def bump_version(version: str, changes: Changes) -> str:
    """Compute the next semantic version.

    Breaking changes bump the major version, except on 0.x where they bump
    the minor version like features do. Fixes alone bump the patch version.

    Raises:
        ReleaseError: If there are no changes to release
    """
    parts = version.split(".")
    if len(parts) != 3 or not all(part.isdigit() for part in parts):
        raise ReleaseError(f"Unsupported version: {version!r}")
    major, minor, patch = (int(part) for part in parts)

    if changes.breaking and major != 0:
        return f"{major + 1}.0.0"
    if changes.feature or changes.breaking:
        return f"{major}.{minor + 1}.0"
    if changes.fix:
        return f"{major}.{minor}.{patch + 1}"
    raise ReleaseError("No new release notes!")


def release_notes(
    changes: Changes, version: str, date: datetime, reference_url: str | None = None
) -> ReleaseNotes:
    """Render the changelog entry for a release.

    When `reference_url` is set, `](##` links pointing into the reference
    docs are rewritten to absolute links.
    """
    head = f"## {version} ({date:%Y-%m-%d})\n\n"
    body = ""
    for attribute, title in SECTION_TITLES:
        messages: list[str] = getattr(changes, attribute)
        if messages:
            body += f"### {title}\n\n"
        for message in messages:
            if reference_url is not None:
                message = message.replace("](##", f"]({reference_url}#")
            body += message + "\n\n"
    return ReleaseNotes(head=head, body=body)


def split_edited_notes(text: str) -> ReleaseNotes | None:
    """Split editor output into head and body.

    Returns:
        None when the text is blank, which aborts the release
    """
    if not text.strip():
        return None
    head, _, rest = text.partition("\n")
    return ReleaseNotes(head=head + "\n\n", body=rest.lstrip("\n"))


def set_version_in_package_json(content: str, version: str) -> str:
    """Replace the first `"version"` field of a package.json document.

    Raises:
        ReleaseError: If the document has no version field
    """
    updated, count = _VERSION_FIELD.subn(f'"version": "{version}"', content, count=1)
    if count == 0:
        raise ReleaseError("package.json has no version field")
    return updated
