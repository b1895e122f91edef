"""CLI for checking a group of sources for contradictions.

Usage:
    minion group coherence group.json [--json]

group.json:
    {"groupTitle": "Data Encryption",
     "sources": [{"type": "url", "url": "https://..."},
                 {"type": "document", "id": "d1", "filename": "policy.md", "content": "..."}]}
"""

from __future__ import annotations

import json
from pathlib import Path

import typer

from minion.errors import MinionError
from minion.io import read_json
from minion.skills.coherence import analyze_group_coherence
from minion.sources.material import source_from_dict


def main(group_path: Path, json_output: bool = False) -> None:
    """Analyze a source group before turning it into one skill."""
    data = read_json(group_path)
    if not isinstance(data, dict):
        typer.echo(f"Error: could not read group JSON from {group_path}", err=True)
        raise typer.Exit(1)

    try:
        sources = [source_from_dict(s) for s in data.get("sources") or []]
        result = analyze_group_coherence(sources, data.get("groupTitle") or "")
    except (MinionError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    if json_output:
        typer.echo(json.dumps(result.to_dict(), indent=2))
        return

    verdict = "coherent" if result.coherent else "CONFLICTS FOUND"
    typer.echo(f"{verdict}: {result.coherence_level} ({result.coherence_percentage}%) [{result.strategy}]")
    for conflict in result.conflicts:
        sources_label = ", ".join(str(i + 1) for i in conflict.affected_sources)
        typer.echo(f"  - [{conflict.severity}] {conflict.type}: {conflict.description} (sources {sources_label})")
    if result.summary:
        typer.echo(result.summary)
    if result.recommendation:
        typer.echo(f"Recommendation: {result.recommendation}")
