"""CLI for summarizing LLM usage.

Usage:
    minion usage summary [--json]
"""

from __future__ import annotations

import json

import typer

from minion.usage import summarize_usage


def main(json_output: bool = False) -> None:
    """Print per-feature call counts and token totals from the usage log."""
    totals = summarize_usage()

    if json_output:
        typer.echo(json.dumps(totals, indent=2, sort_keys=True))
        return
    if not totals:
        typer.echo("No usage recorded.")
        return
    for feature in sorted(totals):
        t = totals[feature]
        typer.echo(f"{feature}: {t['calls']} call(s), {t['input_tokens']} in / {t['output_tokens']} out")
