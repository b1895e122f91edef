"""Unified CLI for minion.

Provides a single entry point with subcommands organized by domain:

    minion fetch URL                      # Fetch a URL as text
    minion skill suggest ...              # Draft a skill
    minion skill refresh SLUG             # Propose a refresh from source URLs
    minion skill apply SLUG --draft F     # Apply a reviewed refresh
    minion skill analyze-source SLUG URL  # Diff a candidate source
    minion skill place URL...             # Where do new URLs belong?
    minion skill volume SLUG              # Should a skill be split?
    minion skill merge TARGET OTHER...    # Merge skills into one
    minion skill analyze-library          # Library-wide redundancy review
    minion skill list                     # List skills
    minion group coherence GROUP.json     # Check sources for contradictions
    minion sync status|history|diff|push|logs|health
    minion usage summary                  # LLM usage totals

Global flags: -v/--verbose (INFO logs), --debug (DEBUG logs), both on stderr.
"""

import logging
from typing import Annotated

import typer

from minion.cli import fetch, group, skill, sync, usage
from minion.logging import set_log_level

app = typer.Typer(
    name="minion",
    help="GRC Minion: knowledge skill pipeline",
    no_args_is_help=True,
)


@app.callback()
def configure(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log progress to stderr")] = False,
    debug: Annotated[bool, typer.Option("--debug", help="Log everything to stderr")] = False,
) -> None:
    """GRC Minion: knowledge skill pipeline."""
    if debug:
        set_log_level(logging.DEBUG)
    elif verbose:
        set_log_level(logging.INFO)


app.command("fetch")(fetch.fetch)
app.add_typer(group.app)
app.add_typer(skill.app)
app.add_typer(sync.app)
app.add_typer(usage.app)


def main() -> None:
    """Main entry point for the minion CLI."""
    app()


if __name__ == "__main__":
    main()
