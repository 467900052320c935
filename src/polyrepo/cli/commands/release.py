"""Version bump, changelog entry and release tag for the root package."""

import json

import click

from polyrepo.cli.ensure import Ensure
from polyrepo.cli.output import user_output
from polyrepo.core.context import PolyrepoContext
from polyrepo.core.release import (
    bump_version,
    parse_changes,
    release_notes,
    set_version_in_package_json,
    split_edited_notes,
)

PACKAGE_FILE = "package.json"
CHANGELOG_FILE = "CHANGELOG.md"


@click.command("release")
@click.option("--edit", is_flag=True, help="Edit the release notes before committing.")
@click.pass_obj
def release_cmd(ctx: PolyrepoContext, edit: bool) -> None:
    """Create commits to tag a release."""
    package_file = ctx.root / PACKAGE_FILE
    Ensure.path_is_file(package_file, f"No {PACKAGE_FILE} at {ctx.root}")
    package_json = package_file.read_text(encoding="utf-8")
    manifest = json.loads(package_json)
    current_version = Ensure.not_none(
        manifest.get("version"), f"{PACKAGE_FILE} has no version field"
    )

    log = ctx.git.log_messages(ctx.root, current_version, ctx.config.release.trunk_branch)
    changes = parse_changes(log)
    new_version = bump_version(current_version, changes)
    user_output(f"Creating {manifest.get('name', ctx.root.name)} {new_version}")

    notes = release_notes(changes, new_version, ctx.time.now(), ctx.config.release.reference_url)
    if edit:
        edited = click.edit(notes.text, extension=".md")
        # None means the editor closed without saving; keep the generated notes
        if edited is not None:
            split = split_edited_notes(edited)
            if split is None:
                user_output("Empty release notes, aborting")
                raise SystemExit(0)
            notes = split

    package_file.write_text(
        set_version_in_package_json(package_json, new_version), encoding="utf-8"
    )
    changelog = ctx.root / CHANGELOG_FILE
    previous = changelog.read_text(encoding="utf-8") if changelog.exists() else ""
    changelog.write_text(notes.text + previous, encoding="utf-8")

    ctx.git.add(ctx.root, [PACKAGE_FILE, CHANGELOG_FILE])
    ctx.git.commit(ctx.root, ["-m", f"Mark version {new_version}"])
    ctx.git.tag(ctx.root, new_version, f"Version {new_version}\n\n{notes.body}")
