"""CLI for refreshing a skill from its source URLs.

Usage:
    minion skill refresh SLUG [--output draft.json] [--commit] [--json]
    minion skill apply SLUG --draft draft.json [--commit]

`refresh` never changes skill content: a proposed revision is printed (or
written to --output) for review, and `apply` writes the reviewed draft.
"""

from __future__ import annotations

import json
from pathlib import Path

import typer

from minion.errors import MinionError
from minion.io import read_json, write_file
from minion.logging import get_logger
from minion.scripts.skill.save import save_skill
from minion.skills.refresh import apply_refresh, refresh_skill
from minion.skills.store import read_skill_file

_logger = get_logger("scripts.skill.refresh")


def main(
    slug: str,
    output: Path | None = None,
    commit: bool = False,
    user: str | None = None,
    json_output: bool = False,
) -> None:
    """Re-fetch a skill's sources and propose an update.

    Args:
        slug: Skill slug (filename without .md).
        output: Write the refresh result JSON here for `minion skill apply`.
        commit: Commit the no-change refresh stamp to git.
        user: Recorded in the skill history.
        json_output: Print the result as JSON.
    """
    try:
        skill = read_skill_file(slug)
        outcome = refresh_skill(skill, user=user)
        if not outcome.has_changes:
            save_skill(
                skill,
                slug,
                operation="refresh",
                commit_message=f"Refresh skill: {skill.title} (no changes)",
                commit=commit,
                synced_by=user,
            )
    except (MinionError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    result = outcome.to_dict()
    if output is not None and outcome.has_changes:
        write_file(output, json.dumps(result, indent=2) + "\n")

    if json_output:
        typer.echo(json.dumps(result, indent=2))
        return

    if not outcome.has_changes:
        typer.echo(outcome.message)
        return

    draft = outcome.draft
    typer.echo(f"Proposed update for {slug}: {draft.summary}")
    for highlight in draft.change_highlights:
        typer.echo(f"  - {highlight}")
    if output is not None:
        typer.echo(f"Draft written to {output}; apply with: minion skill apply {slug} --draft {output}")


def apply_main(
    slug: str,
    draft_path: Path,
    commit: bool = False,
    user: str | None = None,
) -> None:
    """Apply a reviewed refresh draft to a skill.

    Args:
        slug: Skill slug (filename without .md).
        draft_path: JSON file with title, content and changeHighlights
            (either top-level or under "draft", as written by `refresh --output`).
        commit: Commit the change to git.
        user: Recorded in the skill history and sync log.
    """
    data = read_json(draft_path)
    if not isinstance(data, dict):
        typer.echo(f"Error: could not read draft JSON from {draft_path}", err=True)
        raise typer.Exit(1)
    draft = data.get("draft") if isinstance(data.get("draft"), dict) else data

    try:
        skill = read_skill_file(slug)
        apply_refresh(
            skill,
            str(draft.get("title") or ""),
            str(draft.get("content") or ""),
            draft.get("changeHighlights") or [],
            user=user,
        )
        new_slug, sha = save_skill(
            skill,
            slug,
            operation="refresh",
            commit_message=f"Refresh skill: {skill.title}",
            commit=commit,
            synced_by=user,
        )
    except (MinionError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    typer.echo(f"Applied refresh to {new_slug}" + (f" (commit {sha[:8]})" if sha else ""))
