"""CLI for merging skills.

Usage:
    minion skill merge TARGET OTHER [OTHER ...] [--json]
    minion skill merge TARGET OTHER [OTHER ...] --save [--commit] [--user NAME]

Without --save the merged draft is only printed.
"""

from __future__ import annotations

import json

import typer

from minion.errors import MinionError
from minion.scripts.skill.save import save_skill
from minion.skills.merge import apply_merge, merge_skills
from minion.skills.store import read_skill_file


def main(
    target_slug: str,
    other_slugs: list[str],
    save: bool = False,
    commit: bool = False,
    user: str | None = None,
    json_output: bool = False,
) -> None:
    """Merge skills into the target skill.

    Args:
        target_slug: Skill that receives the merged content.
        other_slugs: Skills folded into the target and then deactivated.
        save: Write the merged target and the deactivated skills.
        commit: With --save, commit each write through git sync.
        user: Recorded in the skill history and sync log.
        json_output: Print the draft as JSON.
    """
    if target_slug in other_slugs:
        typer.echo("Error: the target skill cannot also be merged into itself", err=True)
        raise typer.Exit(1)

    try:
        target = read_skill_file(target_slug)
        others = [read_skill_file(slug) for slug in other_slugs]
        draft = merge_skills(target, others)
    except (MinionError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    if json_output:
        typer.echo(json.dumps(draft.to_dict(), indent=2))
    else:
        typer.echo(f"# {draft.title}\n\n{draft.content}")

    if not save:
        return

    try:
        apply_merge(target, others, draft, user=user)
        new_slug, sha = save_skill(
            target,
            target_slug,
            operation="update",
            commit_message=f"Merge {len(others)} skill(s) into: {target.title}",
            commit=commit,
            synced_by=user,
        )
        for slug, skill in zip(other_slugs, others):
            save_skill(
                skill,
                slug,
                operation="update",
                commit_message=f"Deactivate skill merged into {target.title}: {skill.title}",
                commit=commit,
                synced_by=user,
            )
    except (MinionError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    typer.echo(
        f"Merged {len(others)} skill(s) into {new_slug}" + (f" (commit {sha[:8]})" if sha else ""),
        err=json_output,
    )
