"""CLI for listing stored skills.

Usage:
    minion skill list [--all] [--json]
"""

from __future__ import annotations

import json

import typer

from minion.skills.store import load_all_skills


def main(include_inactive: bool = False, json_output: bool = False) -> None:
    """List skills in the content repository.

    Args:
        include_inactive: Also list skills marked inactive.
        json_output: Output as JSON.
    """
    skills = [s for s in load_all_skills() if include_inactive or s.active]

    if json_output:
        output = [
            {
                "slug": s.slug,
                "id": s.id,
                "title": s.title,
                "categories": s.categories,
                "sourceUrls": s.source_urls,
                "active": s.active,
                "updated": s.updated,
                "lastRefreshedAt": s.last_refreshed_at,
            }
            for s in skills
        ]
        typer.echo(json.dumps(output, indent=2))
        return

    if not skills:
        typer.echo("No skills found.")
        return

    for s in skills:
        flag = "" if s.active else " (inactive)"
        typer.echo(f"{s.slug}: {s.title}{flag} [{len(s.source_urls)} source(s)]")
