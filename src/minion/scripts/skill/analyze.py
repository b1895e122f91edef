"""CLI for skill analyses that never modify content.

Usage:
    minion skill analyze-source SLUG URL [--json]
    minion skill place URL [URL ...] [--json]
    minion skill volume SLUG [--json]
"""

from __future__ import annotations

import json

import typer

from minion.errors import MinionError
from minion.skills.placement import suggest_placement
from minion.skills.refresh import analyze_source_url
from minion.skills.store import load_all_skills, read_skill_file
from minion.skills.volume import analyze_volume


def _fail(e: Exception) -> None:
    typer.echo(f"Error: {e}", err=True)
    raise typer.Exit(1) from None


def analyze_source_main(slug: str, url: str, json_output: bool = False) -> None:
    """Compare a candidate source URL with an existing skill."""
    try:
        analysis = analyze_source_url(read_skill_file(slug), url)
    except (MinionError, ValueError) as e:
        _fail(e)

    if json_output:
        typer.echo(json.dumps(analysis.to_dict(), indent=2))
        return

    if not analysis.accessible:
        typer.echo(f"{url} is not accessible: {analysis.error}")
        return

    typer.echo(f"Change level: {analysis.change_level} (~{analysis.change_percentage}%)")
    summary = analysis.change_summary
    for label, items in (
        ("New topics", summary.new_topics),
        ("Updated", summary.updated_content),
        ("Removed", summary.removed_content),
    ):
        if items:
            typer.echo(f"{label}:")
            for item in items:
                typer.echo(f"  - {item}")
    typer.echo(f"Recommendation: {analysis.recommendation}")


def place_main(urls: list[str], json_output: bool = False) -> None:
    """Suggest where new source URLs belong in the skill library."""
    try:
        result = suggest_placement(urls, load_all_skills())
    except (MinionError, ValueError) as e:
        _fail(e)

    if json_output:
        typer.echo(json.dumps(result.to_dict(), indent=2))
        return

    suggestion = result.suggestion
    typer.echo(f"Action: {suggestion.action}")
    if suggestion.existing_skill_title:
        typer.echo(f"Skill: {suggestion.existing_skill_title} ({suggestion.existing_skill_id})")
    if suggestion.suggested_title:
        typer.echo(f"Suggested title: {suggestion.suggested_title}")
    for split in suggestion.split_suggestions:
        typer.echo(f"  - {split.title}: {split.description}")
    typer.echo(f"Reason: {suggestion.reason}")
    if result.url_already_used:
        used = result.url_already_used
        typer.echo(f"Already used by {used.skill_title}: {', '.join(used.matched_urls)}")


def volume_main(slug: str, json_output: bool = False) -> None:
    """Judge whether a skill should be split into focused skills."""
    try:
        skill = read_skill_file(slug)
        analysis = analyze_volume(skill.title, skill.content, skill.source_urls)
    except MinionError as e:
        _fail(e)

    if json_output:
        typer.echo(json.dumps(analysis.to_dict(), indent=2))
        return

    typer.echo(f"Split: {'yes' if analysis.should_split else 'no'} - {analysis.reason}")
    for split in analysis.suggested_splits:
        typer.echo(f"  - {split.title}: {split.description}")
        for url in split.relevant_urls:
            typer.echo(f"      {url}")
