"""CLI for library-wide redundancy analysis.

Usage:
    minion skill analyze-library [--all] [--json]
"""

from __future__ import annotations

import json

import typer

from minion.errors import MinionError
from minion.skills.library import analyze_library
from minion.skills.store import load_all_skills


def main(include_inactive: bool = False, json_output: bool = False) -> None:
    """Recommend merges, splits, renames and retags across the library."""
    skills = [s for s in load_all_skills() if include_inactive or s.active]
    try:
        analysis = analyze_library(skills)
    except MinionError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    if json_output:
        typer.echo(json.dumps(analysis.to_dict(), indent=2))
        return

    typer.echo(f"Health score: {analysis.health_score:g}/100 ({analysis.skill_count} skill(s))")
    typer.echo(analysis.summary)
    for rec in analysis.recommendations:
        typer.echo(f"  - [{rec.priority}] {rec.type}: {rec.title}")
        if rec.affected_skill_titles:
            typer.echo(f"      skills: {', '.join(rec.affected_skill_titles)}")
        if rec.suggested_action:
            typer.echo(f"      action: {rec.suggested_action}")
